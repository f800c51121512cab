"""Site settings (branding, promo banner, company contact)."""

from __future__ import annotations

from flask import Blueprint, jsonify

from ..common.schemas import SiteSettingsUpdate
from .guards import admin_required, parse, service


settings_bp = Blueprint("catering_settings", __name__, url_prefix="/api")


@settings_bp.get("/pengaturan")
def get_settings():
    return jsonify({"settings": service("settings_service").get_settings()})


@settings_bp.put("/site-settings")
@admin_required
def update_settings():
    settings = service("settings_service").update_settings(parse(SiteSettingsUpdate))
    return jsonify({"settings": settings})
