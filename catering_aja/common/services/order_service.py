import secrets
import string
import time
from collections import namedtuple
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set

from sqlalchemy.orm import selectinload

from ..db.session import get_session
from ..errors import NotFoundError, ServiceError, ValidationFailed
from ..models import Area, Order, OrderItem, Product
from ..schemas import OrderInput, parse_customization_groups
from ..utils.dto import to_order_dto, to_order_item_dto
from .logging import log_event
from .pricing import compute_breakdown, customized_unit_price, line_total
from .promo_service import INVALID_PROMO_MESSAGE, PromoService


_CODE_ALPHABET = string.ascii_uppercase + string.digits

PricedLine = namedtuple("PricedLine", ["price", "quantity"])


def generate_order_code() -> str:
    suffix = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def _check_delivery_slots(orders: List[OrderInput]) -> None:
    for order in orders:
        for item in order.items:
            if item.delivery_date is None or not (item.delivery_time or "").strip():
                raise ValidationFailed("Every item needs a delivery date and delivery time")


class OrderService:
    """Order creation and retrieval backed by DB.

    Prices submitted by the storefront are never trusted: every order is
    re-priced from the catalog, the area fee schedule and the promo table,
    and a batch whose numbers disagree is rejected as a whole.
    """

    def __init__(
        self,
        session_factory=get_session,
        promo_service: Optional[PromoService] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._session_factory = session_factory
        self._promos = promo_service or PromoService(session_factory, clock=clock)
        self._clock = clock

    def create_order(self, order: OrderInput, *, user_id: Optional[int] = None) -> Dict:
        return self.create_batch([order], user_id=user_id)[0]

    def create_batch(self, orders: List[OrderInput], *, user_id: Optional[int] = None) -> List[Dict]:
        """Persist one order per payload inside a single transaction."""
        if not orders:
            raise ValidationFailed("Invalid batch order data")
        try:
            # fail fast: one bad line rejects the whole batch before any insert
            _check_delivery_slots(orders)
            now = self._clock()
            with self._session_factory() as session:
                used_codes: Set[str] = set()
                created = []
                for payload in orders:
                    order = self._build_order(session, payload, user_id=user_id, now=now, used_codes=used_codes)
                    session.add(order)
                    session.flush()
                    created.append(order)
                result = [to_order_dto(o) for o in created]
        except ServiceError as exc:
            log_event("warning", "order.batch_rejected", reason=exc.message, orders=len(orders))
            raise
        for dto in result:
            log_event("info", "order.created", order_id=dto["id"], code=dto["code"], items=len(dto["items"]), total=dto["total"])
        if len(result) > 1:
            log_event("info", "order.batch_created", count=len(result), user_id=user_id)
        return result

    def _build_order(self, session, payload: OrderInput, *, user_id, now, used_codes: Set[str]) -> Order:
        bucket_date = payload.delivery_date or payload.items[0].delivery_date
        if any(item.delivery_date != bucket_date for item in payload.items):
            raise ValidationFailed("All items of an order must share its delivery date")

        area = self._resolve_area(session, payload)
        promo = None
        if payload.promo_code:
            promo = self._promos.find_valid(session, payload.promo_code, now)
            if promo is None:
                raise ValidationFailed(INVALID_PROMO_MESSAGE)

        items = []
        priced = []
        for line in payload.items:
            product = session.get(Product, line.product_id)
            if product is None:
                raise ValidationFailed(f"Product {line.product_id} not found")
            if not product.is_active:
                raise ValidationFailed(f"{product.name} is not available")
            if line.quantity < (product.min_order_qty or 1):
                raise ValidationFailed(f"Minimum order for {product.name} is {product.min_order_qty}")
            groups = parse_customization_groups(product.customization_options)
            unit_price = customized_unit_price(product.price, groups, line.customization)
            if line.price != unit_price:
                raise ValidationFailed(f"Price mismatch for {product.name}")
            total = line_total(unit_price, line.quantity)
            if line.total is not None and line.total != total:
                raise ValidationFailed(f"Total mismatch for {product.name}")
            priced.append(PricedLine(unit_price, line.quantity))
            items.append(
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    product_image=product.image,
                    delivery_date=line.delivery_date,
                    delivery_time=line.delivery_time.strip(),
                    quantity=line.quantity,
                    price=unit_price,
                    customization=dict(line.customization),
                    total=total,
                )
            )

        breakdown = compute_breakdown(priced, area, promo)
        diffs = breakdown.mismatches(payload.model_dump(include={"subtotal", "delivery_fee", "service_fee", "discount", "total"}))
        if diffs:
            raise ValidationFailed(f"Submitted totals do not match: {', '.join(diffs)}")

        code = generate_order_code()
        while code in used_codes:
            code = generate_order_code()
        used_codes.add(code)

        return Order(
            code=code,
            user_id=user_id,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            customer_address=payload.customer_address,
            delivery_date=bucket_date,
            subtotal=breakdown.subtotal,
            delivery_fee=breakdown.delivery_fee,
            service_fee=breakdown.service_fee,
            discount=breakdown.discount,
            total=breakdown.total,
            payment_method=payload.payment_method,
            status="pending",
            promo_code=promo.code if promo else None,
            items=items,
        )

    @staticmethod
    def _resolve_area(session, payload: OrderInput) -> Optional[Area]:
        # no area selected: fees resolve to 0
        if payload.area_id is not None:
            area = session.get(Area, payload.area_id)
        elif payload.area_slug:
            area = session.query(Area).filter(Area.slug == payload.area_slug).first()
        else:
            return None
        if area is None:
            raise ValidationFailed("Area not found")
        return area

    def update_status(self, order_id: int, status: str) -> Dict:
        with self._session_factory() as session:
            order = session.get(Order, order_id)
            if order is None:
                raise NotFoundError("Order not found")
            previous = order.status
            order.status = status
            session.flush()
            dto = to_order_dto(order)
        log_event("info", "order.status_changed", order_id=order_id, previous=previous, status=status)
        return dto

    def list_orders(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = self._query(session).all()
            return [to_order_dto(o) for o in rows]

    def list_orders_for_user(self, user_id: int) -> List[Dict]:
        with self._session_factory() as session:
            rows = self._query(session).filter(Order.user_id == user_id).all()
            return [to_order_dto(o) for o in rows]

    def get_order(self, order_id: int) -> Dict:
        with self._session_factory() as session:
            order = self._query(session).filter(Order.id == order_id).first()
            if order is None:
                raise NotFoundError("Order not found")
            return to_order_dto(order)

    def list_items(self, order_id: int) -> List[Dict]:
        with self._session_factory() as session:
            if session.get(Order, order_id) is None:
                raise NotFoundError("Order not found")
            rows = session.query(OrderItem).filter(OrderItem.order_id == order_id).order_by(OrderItem.id).all()
            return [to_order_item_dto(r) for r in rows]

    @staticmethod
    def _query(session):
        return (
            session.query(Order)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
