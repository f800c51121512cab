"""Customer-side storefront: cart, session state, API client and checkout."""

from .api_client import ApiError, StorefrontApiClient
from .app_state import AreaDateState, AuthState, SettingsState
from .cart_store import CartLine, CartStore
from .checkout import CheckoutError, CheckoutSession, CustomerDetails
from .storage import JsonFileStorage, MemoryStorage

__all__ = [
    "ApiError",
    "AreaDateState",
    "AuthState",
    "CartLine",
    "CartStore",
    "CheckoutError",
    "CheckoutSession",
    "CustomerDetails",
    "JsonFileStorage",
    "MemoryStorage",
    "SettingsState",
    "StorefrontApiClient",
]
