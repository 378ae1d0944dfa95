"""
Application error taxonomy.

Every error the API reports on purpose derives from AppError; the handler
registered in create_app renders it as {"error", "message", "hint"?} with the
class's status code.
"""
from __future__ import annotations

import logging
from typing import Optional

from flask import jsonify

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    error = "internal_error"

    def __init__(self, message: str, *, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_dict(self) -> dict:
        body = {"error": self.error, "message": self.message}
        if self.hint:
            body["hint"] = self.hint
        return body


class ConfigurationError(AppError):
    """A required credential or setting is missing."""

    status_code = 500
    error = "configuration_error"


class InvalidRequestError(AppError):
    status_code = 400
    error = "invalid_request"


class ForbiddenError(AppError):
    status_code = 403
    error = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"


class PersistenceError(AppError):
    """The data store rejected a read or a write."""

    status_code = 500
    error = "persistence_error"


def register_error_handlers(app) -> None:
    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.error, exc.message)
        return jsonify(exc.to_dict()), exc.status_code


def validation_error_response(exc, message: str = "Request body is invalid"):
    """400 response for a pydantic ValidationError."""
    return (
        jsonify(
            {
                "error": InvalidRequestError.error,
                "message": message,
                "details": exc.errors(include_url=False, include_context=False),
            }
        ),
        400,
    )
