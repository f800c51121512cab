from .base import Base
from .user import User
from .category import Category
from .area import Area
from .product import Product
from .order import Order, OrderItem
from .promo import Promo
from .site_settings import SITE_SETTINGS_ID, SiteSettings

__all__ = [
    "Base",
    "User",
    "Category",
    "Area",
    "Product",
    "Order",
    "OrderItem",
    "Promo",
    "SITE_SETTINGS_ID",
    "SiteSettings",
]
