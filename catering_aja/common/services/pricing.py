"""Order pricing: line totals, customization surcharges, promo discounts.

Everything here is a pure function of its inputs so the storefront (for
display) and the order service (for persistence) compute identical numbers.
Lines, areas and promos are read by attribute, which lets ORM rows, API
schemas and cart lines all flow through the same code.
"""

from dataclasses import dataclass
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..errors import ValidationFailed
from ..schemas import CustomizationGroup
from ..utils.validators import to_date, to_decimal


MONEY_QUANTUM = Decimal("1")
ZERO = Decimal("0")


def round_money(value) -> Decimal:
    """Round half-up to whole currency units."""
    return to_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    return f"{to_decimal(value):.2f}"


def line_total(price, quantity: int) -> Decimal:
    return round_money(to_decimal(price, "price") * int(quantity))


def _selected_names(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v not in (None, "")]
    return [str(value)]


def customization_surcharge(groups: Sequence[CustomizationGroup], selection: Optional[Mapping[str, Any]]) -> Decimal:
    """Sum of the surcharges picked in ``selection`` (option-type -> name or names)."""
    selection = dict(selection or {})
    by_type = {g.type: g for g in groups}
    unknown = [key for key in selection if key not in by_type]
    if unknown:
        raise ValidationFailed(f"Unknown customization: {', '.join(sorted(unknown))}")

    surcharge = ZERO
    for group in groups:
        names = _selected_names(selection.get(group.type))
        if not names:
            if group.required:
                raise ValidationFailed(f"{group.type} must be chosen")
            continue
        if group.selection_mode == "single" and len(names) > 1:
            raise ValidationFailed(f"Only one {group.type} can be chosen")
        prices = {o.name: o.harga for o in group.options}
        for name in names:
            if name not in prices:
                raise ValidationFailed(f"Unknown option '{name}' for {group.type}")
            surcharge += to_decimal(prices[name])
    return surcharge


def customized_unit_price(base_price, groups: Sequence[CustomizationGroup], selection: Optional[Mapping[str, Any]]) -> Decimal:
    return to_decimal(base_price, "price") + customization_surcharge(groups, selection)


def compute_discount(subtotal, promo=None) -> Decimal:
    if promo is None:
        return ZERO
    value = to_decimal(promo.discount_value, "discountValue")
    if promo.discount_type == "percent":
        return round_money(to_decimal(subtotal) * value / Decimal(100))
    if promo.discount_type == "amount":
        # not capped at the subtotal; totals may go negative
        return value
    raise ValidationFailed(f"Unsupported discount type: {promo.discount_type}")


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    delivery_fee: Decimal
    service_fee: Decimal
    discount: Decimal
    total: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "subtotal": format_money(self.subtotal),
            "deliveryFee": format_money(self.delivery_fee),
            "serviceFee": format_money(self.service_fee),
            "discount": format_money(self.discount),
            "total": format_money(self.total),
        }

    def mismatches(self, submitted: Mapping[str, Any]) -> List[str]:
        """Field names whose submitted value differs; ``None`` values are skipped."""
        diffs = []
        for field in ("subtotal", "delivery_fee", "service_fee", "discount", "total"):
            value = submitted.get(field)
            if value is None:
                continue
            if to_decimal(value, field) != getattr(self, field):
                diffs.append(field)
        return diffs


def compute_breakdown(lines: Iterable[Any], area=None, promo=None) -> PriceBreakdown:
    """Price a set of lines that ship together.

    Each line needs ``price`` (unit price with surcharges) and ``quantity``.
    Without an area both fees are 0.
    """
    lines = list(lines)
    if not lines:
        raise ValidationFailed("At least one item is required")
    subtotal = sum((line_total(l.price, l.quantity) for l in lines), ZERO)
    delivery_fee = to_decimal(area.delivery_fee) if area is not None else ZERO
    service_fee = to_decimal(area.service_fee) if area is not None else ZERO
    discount = compute_discount(subtotal, promo)
    return PriceBreakdown(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        service_fee=service_fee,
        discount=discount,
        total=subtotal + delivery_fee + service_fee - discount,
    )


def is_promo_currently_valid(promo, now: Optional[datetime] = None) -> bool:
    """Active, started, and not past the end of its end date (inclusive)."""
    now = now or datetime.now()
    if not promo.is_active:
        return False
    start = to_date(promo.start_date)
    end = to_date(promo.end_date)
    if start is not None and datetime.combine(start, time.min) > now:
        return False
    if end is not None and now > datetime.combine(end, time.max):
        return False
    return True


def find_applicable_promo(promos: Iterable[Any], code: Optional[str], now: Optional[datetime] = None):
    """Promo matching ``code`` case-insensitively that is valid right now, else None."""
    wanted = (code or "").strip().lower()
    if not wanted:
        return None
    for promo in promos:
        if (promo.code or "").strip().lower() != wanted:
            continue
        if is_promo_currently_valid(promo, now):
            return promo
    return None
