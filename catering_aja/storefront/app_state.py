"""Storefront session state: selected area/date, logged-in user, site settings."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from ..common.services.logging import log_event
from ..common.utils.validators import to_date
from .api_client import ApiError


AREA_KEY = "selectedArea"
DATE_KEY = "selectedDate"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "siteName": "Catering Aja",
    "title": "Catering Aja - Solusi Katering Anda",
    "logoUrl": None,
    "faviconUrl": None,
    "promoBannerEnabled": False,
    "promoBannerText": None,
    "companyName": None,
    "companyPhone": None,
    "companyAddress": None,
}


class AreaDateState:
    """Delivery area slug and delivery date the customer is browsing for."""

    def __init__(self, storage, today: Optional[date] = None) -> None:
        self._storage = storage
        self.selected_area: str = storage.get_item(AREA_KEY) or ""
        self.selected_date: date = self._load_date() or today or date.today()

    def set_area(self, slug: Optional[str]) -> None:
        self.selected_area = slug or ""
        if self.selected_area:
            self._storage.set_item(AREA_KEY, self.selected_area)
        else:
            self._storage.remove_item(AREA_KEY)

    def set_date(self, value) -> None:
        day = to_date(value)
        if day is None:
            return
        self.selected_date = day
        self._storage.set_item(DATE_KEY, day.isoformat())

    def _load_date(self) -> Optional[date]:
        raw = self._storage.get_item(DATE_KEY)
        try:
            return to_date(raw)
        except ValueError:
            self._storage.remove_item(DATE_KEY)
            return None


class AuthState:
    """Current user as reported by the API session."""

    def __init__(self, api, cart) -> None:
        self._api = api
        self._cart = cart
        self.user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.get("role") == "admin")

    def check_auth(self) -> Optional[Dict[str, Any]]:
        try:
            self.user = self._api.me()
        except ApiError:
            self.user = None
        return self.user

    def login(self, username: str, password: str) -> Dict[str, Any]:
        self.user = self._api.login(username, password)
        return self.user

    def register(self, username: str, password: str, name: str, **extra) -> Dict[str, Any]:
        return self._api.register(username, password, name, **extra)

    def logout(self) -> None:
        try:
            self._api.logout()
        except ApiError as exc:
            log_event("warning", "auth.logout_failed", status=exc.status_code, error=exc.message)
        finally:
            # the cart never outlives the session
            self.user = None
            self._cart.clear_cart()


class SettingsState:
    def __init__(self, api) -> None:
        self._api = api
        self.settings: Dict[str, Any] = dict(DEFAULT_SETTINGS)

    def load(self) -> Dict[str, Any]:
        try:
            loaded = self._api.get_settings()
        except ApiError as exc:
            log_event("warning", "settings.load_failed", status=exc.status_code, error=exc.message)
            self.settings = dict(DEFAULT_SETTINGS)
        else:
            self.settings = {**DEFAULT_SETTINGS, **loaded}
        return self.settings
