"""Error taxonomy and the JSON envelope every failure is rendered as."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(ApiError):
    status_code = 401
    default_message = "Missing authorization token."


class NotFound(ApiError):
    status_code = 404
    default_message = "No PDF file found"


class StorageError(ApiError):
    status_code = 500
    default_message = "Storage operation failed"


class StreamError(ApiError):
    """Raised while transmitting bytes; may surface after headers are sent."""

    status_code = 500
    default_message = "Failed to stream PDF"


def error_response(message: str, status_code: int):
    return jsonify(success=False, message=message), status_code


def register_error_handlers(app: Flask) -> None:
    """Render ApiError and Werkzeug HTTP errors as ``{success, message}``."""

    @app.errorhandler(ApiError)
    def _handle_api_error(exc: ApiError):
        if exc.status_code >= 500:
            app.logger.error("%s: %s", type(exc).__name__, exc.message)
        return error_response(exc.message, exc.status_code)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        return error_response(exc.description or exc.name, exc.code or 500)
