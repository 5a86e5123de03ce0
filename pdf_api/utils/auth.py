"""Authentication helpers for session and token management."""

from __future__ import annotations

import secrets
import time
from typing import Any, Dict, Optional, Tuple

from flask import current_app, request

from pdf_api.database import current_handle
from pdf_api.errors import StorageError, error_response
from pdf_api.services import auth_service

SESSION_PREFIX = "sess"


def now_seconds() -> int:
    """Return the current UNIX timestamp in seconds."""
    return int(time.time())


def generate_token(prefix: str = SESSION_PREFIX) -> str:
    """Return a random token with the given prefix."""
    return f"{prefix}_{secrets.token_urlsafe(24)}"


def bearer_token() -> Optional[str]:
    """Return the Bearer token from the Authorization header, if any."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def require_session() -> Tuple[Optional[Dict[str, Any]], Optional[Any]]:
    """Validate the Bearer token from the request and return the associated session."""
    if not current_app.config["REQUIRE_AUTH"]:
        return {}, None

    token = bearer_token()
    if token is None:
        return None, error_response("Missing authorization token.", 401)

    try:
        db = current_handle().require_db()
    except StorageError as exc:
        return None, error_response(exc.message, exc.status_code)

    session = auth_service.get_session(db, token)
    if not session:
        return None, error_response("Invalid or expired session.", 401)

    if session["expires_at"] <= now_seconds():
        auth_service.delete_session(db, token)
        return None, error_response("Session expired.", 401)

    return session, None
