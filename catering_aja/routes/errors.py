"""Maps exceptions raised below the API to JSON error responses."""

from __future__ import annotations

from flask import Flask, jsonify, request
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from ..common.errors import ServiceError
from ..common.services.logging import log_event


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ServiceError)
    def _service_error(exc: ServiceError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(ValidationError)
    def _validation_error(exc: ValidationError):
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        return jsonify({"message": "Invalid data", "errors": errors}), 400

    @app.errorhandler(IntegrityError)
    def _integrity_error(exc: IntegrityError):
        log_event("warning", "api.integrity_error", path=request.path, error=str(exc.orig))
        return jsonify({"message": "Value must be unique."}), 409

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        if not request.path.startswith("/api"):
            return exc
        return jsonify({"message": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def _unhandled(exc: Exception):
        # the raw error stays in the log, never in the response
        log_event("error", "api.unhandled_error", path=request.path, method=request.method, error=repr(exc))
        return jsonify({"message": "Internal server error"}), 500
