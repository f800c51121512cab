from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, func
from .base import Base


class Area(Base):
    """Delivery zone with its own fee schedule."""

    __tablename__ = "areas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    service_fee = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
