"""Promo code administration and the apply-code check."""

from __future__ import annotations

from flask import Blueprint, jsonify

from ..common.schemas import PromoCodeRequest, PromoCreate, PromoUpdate
from .guards import admin_required, parse, service


promos_bp = Blueprint("catering_promos", __name__, url_prefix="/api/promos")


@promos_bp.get("")
def list_promos():
    return jsonify({"promos": service("promo_service").list_promos()})


@promos_bp.post("")
@admin_required
def create_promo():
    return jsonify({"promo": service("promo_service").create_promo(parse(PromoCreate))}), 201


@promos_bp.put("/<int:promo_id>")
@admin_required
def update_promo(promo_id: int):
    return jsonify({"promo": service("promo_service").update_promo(promo_id, parse(PromoUpdate))})


@promos_bp.delete("/<int:promo_id>")
@admin_required
def delete_promo(promo_id: int):
    service("promo_service").delete_promo(promo_id)
    return jsonify({"message": "Promo deleted"})


@promos_bp.post("/validate")
def validate_promo():
    data = parse(PromoCodeRequest)
    return jsonify({"promo": service("promo_service").validate_code(data.code)})
