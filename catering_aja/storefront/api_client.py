"""HTTP client the storefront uses to talk to the catering API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from ..common.schemas import AreaOut, ProductOut, PromoOut


class ApiError(Exception):
    """Non-2xx response (``status_code`` 0 when the server was unreachable)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class StorefrontApiClient:
    """Thin wrapper over ``requests.Session`` keeping the login cookie."""

    def __init__(self, base_url: str, session=None, timeout: float = 10):
        self._base_url = base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    # --- auth ------------------------------------------------------------

    def login(self, username: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/login", json={"username": username, "password": password})["user"]

    def register(self, username: str, password: str, name: str, email: Optional[str] = None, phone: Optional[str] = None) -> Dict[str, Any]:
        payload = {"username": username, "password": password, "name": name, "email": email, "phone": phone}
        return self._request("POST", "/auth/register", json=payload)["user"]

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")["user"]

    def logout(self) -> None:
        self._request("POST", "/auth/logout")

    # --- catalog ---------------------------------------------------------

    def list_areas(self) -> List[AreaOut]:
        return [AreaOut.model_validate(a) for a in self._request("GET", "/areas")["areas"]]

    def list_products(self, category: Optional[int] = None, area_id: Optional[int] = None) -> List[ProductOut]:
        params = {}
        if category is not None:
            params["category"] = category
        if area_id is not None:
            params["areaId"] = area_id
        return [ProductOut.model_validate(p) for p in self._request("GET", "/products", params=params or None)["products"]]

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._request("GET", f"/products/{product_id}")["product"])

    def list_promos(self) -> List[PromoOut]:
        return [PromoOut.model_validate(p) for p in self._request("GET", "/promos")["promos"]]

    def validate_promo(self, code: str) -> PromoOut:
        return PromoOut.model_validate(self._request("POST", "/promos/validate", json={"code": code})["promo"])

    def get_settings(self) -> Dict[str, Any]:
        return self._request("GET", "/pengaturan")["settings"]

    # --- orders ----------------------------------------------------------

    def create_batch_orders(self, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self._request("POST", "/orders/batch", json={"orders": orders})["orders"]

    def my_orders(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/orders/my-orders")["orders"]

    def order_items(self, order_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/orders/{order_id}/items")

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self._base_url}/api{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise ApiError(0, str(exc)) from exc
        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response))
        if not response.content:
            return {}
        return response.json()


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"
