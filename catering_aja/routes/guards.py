"""Request helpers shared by the API blueprints."""

from __future__ import annotations

from functools import wraps
from typing import Any, Dict, Optional, Type, TypeVar

from flask import current_app, g, request, session

from ..common.errors import AuthenticationRequired, PermissionDenied, ValidationFailed
from ..common.schemas import ApiModel


M = TypeVar("M", bound=ApiModel)


def service(name: str):
    return current_app.extensions["catering_components"][name]


def json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return payload


def parse(schema: Type[M], payload: Optional[Dict[str, Any]] = None) -> M:
    return schema.model_validate(json_body() if payload is None else payload)


def current_user() -> Optional[Dict[str, Any]]:
    if "current_user" not in g:
        g.current_user = service("user_service").get_user(session.get("user_id"))
    return g.current_user


def require_login() -> Dict[str, Any]:
    user = current_user()
    if user is None:
        raise AuthenticationRequired("Not authenticated")
    return user


def require_admin() -> Dict[str, Any]:
    user = require_login()
    if user.get("role") != "admin":
        raise PermissionDenied("Forbidden")
    return user


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        require_admin()
        return view(*args, **kwargs)

    return wrapper


def is_admin() -> bool:
    user = current_user()
    return bool(user and user.get("role") == "admin")
