"""Cart kept on the customer's side until checkout."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..common.services.logging import log_event
from ..common.services.pricing import format_money, line_total
from ..common.utils.validators import to_date, to_decimal


CART_STORAGE_KEY = "cateringku_cart"


@dataclass
class CartLine:
    """One buyable configuration: product + customization + quantity + delivery slot."""

    id: str
    product_id: int
    name: str
    price: Decimal  # unit price, customization surcharges included
    quantity: int
    image: Optional[str] = None
    customization: Dict[str, Any] = field(default_factory=dict)
    delivery_date: Optional[date] = None
    delivery_time: Optional[str] = None
    total: Decimal = Decimal("0")

    def merge_key(self) -> tuple:
        return (
            self.product_id,
            json.dumps(self.customization, sort_keys=True, ensure_ascii=False),
            self.delivery_date,
            self.delivery_time,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "name": self.name,
            "image": self.image,
            "price": format_money(self.price),
            "quantity": self.quantity,
            "customization": self.customization,
            "deliveryDate": self.delivery_date.isoformat() if self.delivery_date else None,
            "deliveryTime": self.delivery_time,
            "total": format_money(self.total),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartLine":
        price = to_decimal(data["price"], "price")
        quantity = int(data["quantity"])
        return cls(
            id=str(data["id"]),
            product_id=int(data["productId"]),
            name=str(data["name"]),
            image=data.get("image"),
            price=price,
            quantity=quantity,
            customization=dict(data.get("customization") or {}),
            delivery_date=to_date(data.get("deliveryDate")),
            delivery_time=data.get("deliveryTime") or None,
            total=line_total(price, quantity),
        )


class CartStore:
    """Cart lines persisted to ``storage`` after every mutation.

    Adding a line that matches an existing one on product, customization
    and delivery slot bumps that line's quantity instead of appending.
    """

    def __init__(self, storage, key: str = CART_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._lines: List[CartLine] = self._hydrate()

    @property
    def items(self) -> List[CartLine]:
        return list(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def add_item(
        self,
        *,
        product_id: int,
        name: str,
        price,
        quantity: int,
        image: Optional[str] = None,
        customization: Optional[Dict[str, Any]] = None,
        delivery_date=None,
        delivery_time: Optional[str] = None,
    ) -> CartLine:
        quantity = int(quantity)
        if quantity <= 0:
            raise ValueError("quantity must be > 0")
        candidate = CartLine(
            id=uuid4().hex,
            product_id=int(product_id),
            name=name,
            image=image,
            price=to_decimal(price, "price"),
            quantity=quantity,
            customization=dict(customization or {}),
            delivery_date=to_date(delivery_date),
            delivery_time=delivery_time or None,
        )
        key = candidate.merge_key()
        for line in self._lines:
            if line.merge_key() == key:
                line.quantity += quantity
                line.total = line_total(line.price, line.quantity)
                self._persist()
                return line
        candidate.total = line_total(candidate.price, candidate.quantity)
        self._lines.append(candidate)
        self._persist()
        return candidate

    def update_quantity(self, line_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(line_id)
            return
        for line in self._lines:
            if line.id == line_id:
                line.quantity = int(quantity)
                line.total = line_total(line.price, line.quantity)
        self._persist()

    def remove_item(self, line_id: str) -> None:
        self._lines = [line for line in self._lines if line.id != line_id]
        self._persist()

    def clear_cart(self) -> None:
        self._lines = []
        self._persist()

    def get_total_price(self) -> Decimal:
        return sum((line.total for line in self._lines), Decimal("0"))

    def get_item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def _persist(self) -> None:
        payload = json.dumps([line.to_dict() for line in self._lines], ensure_ascii=False)
        self._storage.set_item(self._key, payload)

    def _hydrate(self) -> List[CartLine]:
        raw = self._storage.get_item(self._key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("cart state is not a list")
            return [CartLine.from_dict(item) for item in data]
        except (ValueError, TypeError, KeyError, AttributeError, ArithmeticError) as exc:
            # unreadable state means an empty cart, never an error
            log_event("warning", "cart.state_discarded", key=self._key, error=str(exc))
            self._storage.remove_item(self._key)
            return []
