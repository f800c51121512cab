"""Login, registration and session endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify, session

from ..common.errors import AuthenticationRequired
from ..common.schemas import LoginRequest, RegisterRequest
from ..common.services.logging import log_event
from .guards import current_user, parse, service


auth_bp = Blueprint("catering_auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login():
    data = parse(LoginRequest)
    user = service("user_service").authenticate(data.username, data.password)
    session.clear()
    session.permanent = True
    session["user_id"] = user["id"]
    log_event("info", "auth.login", user_id=user["id"])
    return jsonify({"user": user})


@auth_bp.post("/register")
def register():
    user = service("user_service").register(parse(RegisterRequest))
    return jsonify({"user": user}), 201


@auth_bp.get("/me")
def me():
    user = current_user()
    if user is None:
        raise AuthenticationRequired("Not authenticated")
    return jsonify({"user": user})


@auth_bp.post("/logout")
def logout():
    user_id = session.pop("user_id", None)
    if user_id is not None:
        log_event("info", "auth.logout", user_id=user_id)
    return jsonify({"message": "Logged out successfully"})
