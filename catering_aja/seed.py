"""Demo data for an empty database."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from .common.db.session import get_session
from .common.models import SITE_SETTINGS_ID, Area, Category, Product, Promo, SiteSettings, User
from .common.services.logging import log_event


AREAS = [
    ("Jakarta", "jakarta", "10000", "2000"),
    ("Depok", "depok", "12000", "2000"),
    ("Bogor", "bogor", "15000", "2500"),
    ("Tangerang", "tangerang", "12000", "2000"),
    ("Bekasi", "bekasi", "12000", "2000"),
]

CATEGORIES = [
    ("Catering Box", "catering-box"),
    ("Nasi Kotak", "nasi-kotak"),
    ("Paket Keluarga", "paket-keluarga"),
    ("Menu Spesial", "menu-spesial"),
]

RICE_AND_EXTRAS = [
    {
        "type": "Nasi",
        "selectionMode": "single",
        "required": True,
        "options": [{"name": "Nasi Putih", "harga": "0"}, {"name": "Nasi Merah", "harga": "3000"}],
    },
    {
        "type": "Lauk Utama",
        "selectionMode": "single",
        "required": True,
        "options": [
            {"name": "Ayam Bakar", "harga": "0"},
            {"name": "Rendang", "harga": "5000"},
            {"name": "Ikan Goreng", "harga": "2000"},
        ],
    },
    {
        "type": "Ekstra",
        "selectionMode": "multi",
        "required": False,
        "options": [
            {"name": "Kerupuk", "harga": "2000"},
            {"name": "Sambal", "harga": "1000"},
            {"name": "Telur", "harga": "4000"},
        ],
    },
]

PRODUCTS = [
    {
        "name": "Catering Gen-Z",
        "slug": "catering-gen-z",
        "description": "Paket catering modern untuk generasi Z.",
        "price": "25000",
        "original_price": "30000",
        "category": "catering-box",
        "area": "jakarta",
        "min_order_qty": 1,
        "is_featured": True,
        "badge": "POPULER",
        "customization_options": RICE_AND_EXTRAS,
    },
    {
        "name": "Nasi Box Ekonomis",
        "slug": "nasi-box-ekonomis",
        "description": "Nasi kotak lengkap dengan lauk pauk pilihan, harga terjangkau.",
        "price": "15000",
        "category": "nasi-kotak",
        "area": "bekasi",
        "min_order_qty": 22,
        "customization_options": RICE_AND_EXTRAS[:1],
    },
    {
        "name": "Paket Keluarga Besar",
        "slug": "paket-keluarga-besar",
        "description": "Porsi besar untuk dinikmati bersama keluarga di rumah.",
        "price": "180000",
        "original_price": "200000",
        "category": "paket-keluarga",
        "area": "bogor",
        "min_order_qty": 1,
        "badge": "PROMO",
    },
    {
        "name": "Menu Spesial Tradisional",
        "slug": "menu-spesial-tradisional",
        "description": "Cita rasa masakan tradisional yang otentik dan menggugah selera.",
        "price": "35000",
        "category": "menu-spesial",
        "area": "depok",
        "min_order_qty": 1,
        "badge": "BARU",
    },
]


def seed_database(session_factory=get_session, *, today: Optional[date] = None, admin_password: str = "admin") -> bool:
    """Insert demo rows. Returns False (and does nothing) when users already exist."""
    today = today or date.today()
    with session_factory() as session:
        if session.query(User.id).first() is not None:
            return False

        session.add(
            SiteSettings(
                id=SITE_SETTINGS_ID,
                site_name="CateringAja",
                title="CateringAja - Pesan Katering Online",
                promo_banner_enabled=True,
                promo_banner_text="Promo spesial hari ini! Gratis ongkir untuk pemesanan di atas Rp 100.000",
                company_name="PT Katering Nusantara",
                company_phone="0812-3456-7890",
                company_address="Jl. Jenderal Sudirman No. 123, Jakarta",
            )
        )

        admin = User(username="admin", name="Admin User", role="admin")
        admin.set_password(admin_password)
        session.add(admin)

        categories = {slug: Category(name=name, slug=slug) for name, slug in CATEGORIES}
        areas = {
            slug: Area(name=name, slug=slug, delivery_fee=Decimal(fee), service_fee=Decimal(service))
            for name, slug, fee, service in AREAS
        }
        session.add_all(list(categories.values()) + list(areas.values()))
        session.flush()

        for entry in PRODUCTS:
            values = dict(entry)
            category = categories[values.pop("category")]
            area = areas[values.pop("area")]
            session.add(
                Product(
                    category_id=category.id,
                    area_id=area.id,
                    price=Decimal(values.pop("price")),
                    original_price=Decimal(values.pop("original_price")) if "original_price" in values else None,
                    customization_options=values.pop("customization_options", []),
                    **values,
                )
            )

        session.add_all(
            [
                Promo(
                    title="Diskon Kilat Hari Ini!",
                    description="Dapatkan diskon 15% untuk semua produk, hanya berlaku hari ini.",
                    code="FLASH15",
                    discount_type="percent",
                    discount_value=Decimal("15"),
                    start_date=today,
                    end_date=today,
                ),
                Promo(
                    title="Promo Gajian",
                    description="Potongan Rp 25.000, berlaku seminggu.",
                    code="GAJIAN25K",
                    discount_type="amount",
                    discount_value=Decimal("25000"),
                    start_date=today - timedelta(days=3),
                    end_date=today + timedelta(days=4),
                ),
                Promo(
                    title="Promo Akhir Bulan",
                    description="Promo spesial akhir bulan akan segera hadir!",
                    code="AKHIRBULAN",
                    discount_type="percent",
                    discount_value=Decimal("10"),
                    start_date=today + timedelta(days=2),
                    end_date=today + timedelta(days=7),
                ),
            ]
        )
        session.flush()

    log_event("info", "seed.completed", products=len(PRODUCTS), areas=len(AREAS))
    return True


def main() -> None:
    from .config import CateringConfig
    from .common.db import session as db

    config = CateringConfig.load()
    db.init_engine(config.database_url)
    db.create_all()
    seed_database(db.get_session)


if __name__ == "__main__":
    main()
