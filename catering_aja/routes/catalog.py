"""Categories, areas and products."""

from __future__ import annotations

from typing import Optional

from flask import Blueprint, jsonify, request

from ..common.schemas import AreaCreate, AreaUpdate, CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from .guards import admin_required, parse, service


catalog_bp = Blueprint("catering_catalog", __name__, url_prefix="/api")


def _int_arg(name: str) -> Optional[int]:
    # non-numeric filters are ignored rather than rejected
    value = (request.args.get(name) or "").strip()
    return int(value) if value.isdigit() else None


def _bool_arg(name: str) -> Optional[bool]:
    value = (request.args.get(name) or "").strip().lower()
    if value in {"1", "true", "yes"}:
        return True
    if value in {"0", "false", "no"}:
        return False
    return None


# --- categories -----------------------------------------------------------


@catalog_bp.get("/categories")
def list_categories():
    return jsonify({"categories": service("catalog_service").list_categories()})


@catalog_bp.get("/categories/<int:category_id>")
def get_category(category_id: int):
    return jsonify({"category": service("catalog_service").get_category(category_id)})


@catalog_bp.post("/categories")
@admin_required
def create_category():
    category = service("catalog_service").create_category(parse(CategoryCreate))
    return jsonify({"category": category}), 201


@catalog_bp.put("/categories/<int:category_id>")
@admin_required
def update_category(category_id: int):
    category = service("catalog_service").update_category(category_id, parse(CategoryUpdate))
    return jsonify({"category": category})


@catalog_bp.delete("/categories/<int:category_id>")
@admin_required
def delete_category(category_id: int):
    service("catalog_service").delete_category(category_id)
    return jsonify({"message": "Category deleted successfully"})


# --- areas ----------------------------------------------------------------


@catalog_bp.get("/areas")
def list_areas():
    return jsonify({"areas": service("area_service").list_areas(active_only=bool(_bool_arg("active")))})


@catalog_bp.post("/areas")
@admin_required
def create_area():
    area = service("area_service").create_area(parse(AreaCreate))
    return jsonify({"area": area}), 201


@catalog_bp.put("/areas/<int:area_id>")
@admin_required
def update_area(area_id: int):
    area = service("area_service").update_area(area_id, parse(AreaUpdate))
    return jsonify({"area": area})


@catalog_bp.delete("/areas/<int:area_id>")
@admin_required
def delete_area(area_id: int):
    service("area_service").delete_area(area_id)
    return jsonify({"message": "Area deleted"})


# --- products -------------------------------------------------------------


@catalog_bp.get("/products")
def list_products():
    products = service("catalog_service").list_products(
        category=_int_arg("category"),
        area_id=_int_arg("areaId"),
        featured=_bool_arg("featured"),
        active_only=bool(_bool_arg("active")),
    )
    return jsonify({"products": products})


@catalog_bp.get("/products/<int:product_id>")
def get_product(product_id: int):
    return jsonify({"product": service("catalog_service").get_product(product_id)})


@catalog_bp.post("/products")
@admin_required
def create_product():
    product = service("catalog_service").create_product(parse(ProductCreate))
    return jsonify({"product": product}), 201


@catalog_bp.put("/products/<int:product_id>")
@admin_required
def update_product(product_id: int):
    product = service("catalog_service").update_product(product_id, parse(ProductUpdate))
    return jsonify({"product": product})


@catalog_bp.delete("/products/<int:product_id>")
@admin_required
def delete_product(product_id: int):
    service("catalog_service").delete_product(product_id)
    return jsonify({"message": "Product deleted successfully"})
