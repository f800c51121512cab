"""User administration; customers may also edit their own profile here."""

from __future__ import annotations

from flask import Blueprint, jsonify

from ..common.errors import PermissionDenied
from ..common.schemas import UserCreate, UserUpdate
from .guards import admin_required, is_admin, parse, require_login, service


users_bp = Blueprint("catering_users", __name__, url_prefix="/api/users")


@users_bp.get("")
@admin_required
def list_users():
    return jsonify({"users": service("user_service").list_users()})


@users_bp.post("")
@admin_required
def create_user():
    return jsonify({"user": service("user_service").create_user(parse(UserCreate))}), 201


@users_bp.put("/<int:user_id>")
def update_user(user_id: int):
    user = require_login()
    admin = is_admin()
    if not admin and user["id"] != user_id:
        raise PermissionDenied("Forbidden")
    data = parse(UserUpdate)
    if data.role is not None and not admin:
        raise PermissionDenied("Only admins can change roles")
    return jsonify({"user": service("user_service").update_user(user_id, data)})


@users_bp.delete("/<int:user_id>")
@admin_required
def delete_user(user_id: int):
    service("user_service").delete_user(user_id)
    return jsonify({"message": "User deleted"})
