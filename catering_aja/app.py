"""Catering Aja storefront API."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Optional

from flask import Flask, g, request
from flask_cors import CORS

from .common.db import session as db
from .common.services.area_service import AreaService
from .common.services.catalog_service import CatalogService
from .common.services.logging import log_event, set_log_level
from .common.services.order_service import OrderService
from .common.services.promo_service import PromoService
from .common.services.settings_service import SiteSettingsService
from .common.services.user_service import UserService
from .config import CateringConfig
from .routes import auth, catalog, orders, promos, settings, users
from .routes.errors import register_error_handlers


def create_app(config: Optional[CateringConfig] = None) -> Flask:
    config = config or CateringConfig.load()
    set_log_level(config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["CATERING_CONFIG"] = config
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=config.session_lifetime_hours)
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.json.sort_keys = False

    db.init_engine(config.database_url)
    db.create_all()

    promo_service = PromoService(db.get_session)
    components = {
        "user_service": UserService(db.get_session),
        "catalog_service": CatalogService(db.get_session),
        "area_service": AreaService(db.get_session),
        "promo_service": promo_service,
        "order_service": OrderService(db.get_session, promo_service=promo_service),
        "settings_service": SiteSettingsService(db.get_session),
    }
    app.extensions["catering_components"] = components

    if config.seed_on_start:
        from .seed import seed_database

        seed_database(db.get_session)

    CORS(app, resources={r"/api/*": {"origins": "*"}}, supports_credentials=True)
    app.register_blueprint(auth.auth_bp)
    app.register_blueprint(catalog.catalog_bp)
    app.register_blueprint(orders.orders_bp)
    app.register_blueprint(promos.promos_bp)
    app.register_blueprint(settings.settings_bp)
    app.register_blueprint(users.users_bp)
    register_error_handlers(app)
    _install_request_logging(app)

    return app


def _install_request_logging(app: Flask) -> None:
    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if request.path.startswith("/api"):
            started = g.get("request_started")
            duration_ms = round((time.perf_counter() - started) * 1000, 1) if started else None
            log_event(
                "info",
                "api.request",
                method=request.method,
                path=request.path,
                status=response.status_code,
                duration_ms=duration_ms,
            )
        return response


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=3003, debug=False)


if __name__ == "__main__":
    main()
