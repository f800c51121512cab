"""Checkout: turns the cart into one order per delivery date and submits the batch."""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import Field, field_validator

from ..common.schemas import ApiModel, PaymentMethod
from ..common.services.logging import log_event
from ..common.services.pricing import PriceBreakdown, compute_breakdown, find_applicable_promo, format_money
from ..common.services.promo_service import INVALID_PROMO_MESSAGE
from .api_client import ApiError
from .cart_store import CartLine, CartStore


SUBMIT_FAILED_MESSAGE = "Gagal membuat pesanan. Silakan coba lagi."


class CheckoutError(Exception):
    """Checkout could not go ahead; ``message`` is safe to show the customer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CustomerDetails(ApiModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1)
    customer_address: str = Field(..., min_length=1)
    payment_method: PaymentMethod = "cod"

    @field_validator("customer_name", "customer_phone", "customer_address", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class CheckoutSession:
    """Checkout state for one cart.

    ``areas`` and ``promos`` are the catalog as loaded from the API
    (``AreaOut`` / ``PromoOut``). The selected area and the applied promo
    apply to every order in the batch.
    """

    def __init__(
        self,
        cart: CartStore,
        areas: Iterable[Any] = (),
        promos: Iterable[Any] = (),
        selected_area: Optional[str] = None,
        now: Optional[datetime] = None,
    ):
        self.cart = cart
        self.areas = list(areas)
        self.promos = list(promos)
        self.selected_area = selected_area or None
        self.applied_promo = None
        self._now = now

    @property
    def area(self):
        if not self.selected_area:
            return None
        for area in self.areas:
            if area.slug == self.selected_area:
                return area
        return None

    def apply_promo(self, code: str) -> Tuple[Optional[Any], Optional[str]]:
        promo = find_applicable_promo(self.promos, code, self._now or datetime.now())
        if promo is None:
            self.applied_promo = None
            return None, INVALID_PROMO_MESSAGE
        self.applied_promo = promo
        return promo, None

    def remove_promo(self) -> None:
        self.applied_promo = None

    def group_by_delivery_date(self) -> "OrderedDict[str, List[CartLine]]":
        groups: "OrderedDict[str, List[CartLine]]" = OrderedDict()
        for line in self.cart.items:
            key = line.delivery_date.isoformat() if line.delivery_date else ""
            groups.setdefault(key, []).append(line)
        return groups

    def validate(self) -> None:
        lines = self.cart.items
        if not lines:
            raise CheckoutError("Keranjang belanja kosong.")
        for line in lines:
            if line.delivery_date is None or not (line.delivery_time or "").strip():
                raise CheckoutError(f"Tanggal dan waktu pengiriman untuk {line.name} belum dipilih.")

    def summary(self) -> PriceBreakdown:
        return compute_breakdown(self.cart.items, self.area, self.applied_promo)

    def build_batch(self, customer: CustomerDetails) -> List[Dict[str, Any]]:
        self.validate()
        area = self.area
        promo = self.applied_promo
        batch = []
        for day, lines in self.group_by_delivery_date().items():
            breakdown = compute_breakdown(lines, area, promo)
            order = customer.model_dump(by_alias=True)
            order.update(breakdown.to_dict())
            order.update(
                {
                    "deliveryDate": day,
                    "areaSlug": area.slug if area is not None else None,
                    "promoCode": promo.code if promo is not None else None,
                    "items": [self._item_payload(line) for line in lines],
                }
            )
            batch.append(order)
        return batch

    def submit(self, customer: CustomerDetails, api) -> int:
        batch = self.build_batch(customer)
        try:
            created = api.create_batch_orders(batch)
        except ApiError as exc:
            # server detail goes to the log, the customer gets the generic message
            log_event("error", "checkout.failed", status=exc.status_code, error=exc.message, orders=len(batch))
            raise CheckoutError(SUBMIT_FAILED_MESSAGE) from exc
        self.cart.clear_cart()
        self.applied_promo = None
        log_event("info", "checkout.completed", orders=len(created))
        return len(created)

    @staticmethod
    def _item_payload(line: CartLine) -> Dict[str, Any]:
        return {
            "productId": line.product_id,
            "productName": line.name,
            "productImage": line.image,
            "quantity": line.quantity,
            "price": format_money(line.price),
            "customization": line.customization,
            "total": format_money(line.total),
            "deliveryDate": line.delivery_date.isoformat(),
            "deliveryTime": line.delivery_time,
        }
