"""/api/auth routes handling login, logout and session checks."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from pdf_api.database import current_handle
from pdf_api.errors import AuthError, ValidationError
from pdf_api.services import auth_service
from pdf_api.utils.auth import SESSION_PREFIX, bearer_token, generate_token, now_seconds

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/login")
def login():
    """Check email/password credentials and issue a bearer token."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    # Accept either the bare credentials or a {"credentials": {...}} wrapper.
    credentials = payload.get("credentials") if isinstance(payload.get("credentials"), dict) else payload

    email = str(credentials.get("email", "")).strip()
    password = str(credentials.get("password", ""))
    if not email or not password:
        raise ValidationError("Email and password are required.")

    db = current_handle().require_db()
    user = auth_service.verify_credentials(db, email, password)
    if user is None:
        raise AuthError("Invalid email or password.")

    auth_service.cleanup_expired_sessions(db)

    expires_at = now_seconds() + current_app.config["SESSION_TTL_SECONDS"]
    token = generate_token(SESSION_PREFIX)
    auth_service.save_session(db, token, user["email"], expires_at)
    current_app.logger.info("Issued session for %s", user["email"])

    return (
        jsonify(
            accessToken=token,
            expiresAt=expires_at * 1000,
        ),
        200,
    )


@bp.post("/logout")
def logout():
    """Revoke the bearer token presented with the request."""
    token = bearer_token()
    if token is None:
        raise AuthError()

    auth_service.delete_session(current_handle().require_db(), token)
    return jsonify(success=True, message="Logged out"), 200


@bp.get("/session")
def get_session_info():
    """Return information about the current session token if it is valid."""
    token = bearer_token()
    if token is None:
        raise AuthError()

    session = auth_service.get_session(current_handle().require_db(), token)
    if not session or session["expires_at"] <= now_seconds():
        raise AuthError("Invalid or expired session.")

    return (
        jsonify(
            email=session["email"],
            expiresAt=session["expires_at"] * 1000,
        ),
        200,
    )
