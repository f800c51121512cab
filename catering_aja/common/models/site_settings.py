from sqlalchemy import Boolean, Column, Integer, String, Text
from .base import Base


SITE_SETTINGS_ID = 1


class SiteSettings(Base):
    """Singleton row (id=1) with storefront branding and contact info."""

    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True)
    site_name = Column(String(255), nullable=False, default="Catering Aja")
    title = Column(String(255), nullable=False, default="Catering Aja - Solusi Katering Anda")
    logo_url = Column(String(1024), nullable=True)
    favicon_url = Column(String(1024), nullable=True)
    promo_banner_enabled = Column(Boolean, nullable=False, default=False)
    promo_banner_text = Column(Text, nullable=True)
    promo_banner_background_color = Column(String(32), nullable=True, default="#dc2626")
    promo_banner_text_color = Column(String(32), nullable=True, default="#ffffff")
    company_name = Column(String(255), nullable=True)
    company_phone = Column(String(64), nullable=True)
    company_address = Column(Text, nullable=True)
