"""Checkout and order administration endpoints."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify

from ..common.errors import NotFoundError
from ..common.schemas import BatchOrderRequest, OrderStatusUpdate, SingleOrderRequest
from .guards import admin_required, current_user, is_admin, parse, require_login, service


orders_bp = Blueprint("catering_orders", __name__, url_prefix="/api/orders")


def _readable_order(order_id: int) -> Dict[str, Any]:
    user = require_login()
    order = service("order_service").get_order(order_id)
    if not is_admin() and order.get("userId") != user["id"]:
        # other customers' orders are reported as missing
        raise NotFoundError("Order not found")
    return order


@orders_bp.get("")
@admin_required
def list_orders():
    return jsonify({"orders": service("order_service").list_orders()})


@orders_bp.get("/my-orders")
def my_orders():
    user = require_login()
    return jsonify({"orders": service("order_service").list_orders_for_user(user["id"])})


@orders_bp.get("/<int:order_id>")
def get_order(order_id: int):
    return jsonify({"order": _readable_order(order_id)})


@orders_bp.get("/<int:order_id>/items")
def get_order_items(order_id: int):
    _readable_order(order_id)
    return jsonify(service("order_service").list_items(order_id))


@orders_bp.post("")
def create_order():
    data = parse(SingleOrderRequest)
    user = current_user()
    order = service("order_service").create_order(data.as_order_input(), user_id=user["id"] if user else None)
    return jsonify({"order": order}), 201


@orders_bp.post("/batch")
def create_batch_orders():
    data = parse(BatchOrderRequest)
    # guests may check out; the session user (if any) owns the orders
    user = current_user()
    orders = service("order_service").create_batch(data.orders, user_id=user["id"] if user else None)
    return jsonify({"orders": orders}), 201


@orders_bp.put("/<int:order_id>/status")
@admin_required
def update_order_status(order_id: int):
    data = parse(OrderStatusUpdate)
    return jsonify({"order": service("order_service").update_status(order_id, data.status)})
