"""Service-layer errors; each maps to one HTTP status in the API blueprint."""

from typing import Any, List, Optional


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, errors: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationFailed(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class AuthenticationRequired(ServiceError):
    status_code = 401


class PermissionDenied(ServiceError):
    status_code = 403
