"""Tests for users, login sessions and token checks on the PDF routes."""

from __future__ import annotations

import base64

import pytest

from pdf_api.errors import ValidationError
from pdf_api.services import auth_service
from pdf_api.utils.auth import SESSION_PREFIX, generate_token, now_seconds

EMAIL = "reader@example.com"
PASSWORD = "correct horse battery staple"


@pytest.fixture
def secured_client(make_app, mongo_db):
    app = make_app(require_auth=True)
    auth_service.create_user(mongo_db, EMAIL, PASSWORD)
    return app.test_client()


def login(client, email=EMAIL, password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def bearer(token: str):
    return {"Authorization": f"Bearer {token}"}


def test_user_credentials(mongo_db):
    auth_service.create_indexes(mongo_db)
    auth_service.create_user(mongo_db, "  Reader@Example.com ", PASSWORD)

    user = auth_service.verify_credentials(mongo_db, EMAIL, PASSWORD)
    assert user is not None
    assert user["email"] == EMAIL
    assert "password_hash" in user and user["password_hash"] != PASSWORD

    assert auth_service.verify_credentials(mongo_db, EMAIL, "wrong") is None
    assert auth_service.verify_credentials(mongo_db, "nobody@example.com", PASSWORD) is None


def test_duplicate_user_is_rejected(mongo_db):
    auth_service.create_indexes(mongo_db)
    auth_service.create_user(mongo_db, EMAIL, PASSWORD)

    with pytest.raises(ValidationError):
        auth_service.create_user(mongo_db, EMAIL.upper(), "other")


def test_session_lifecycle(mongo_db):
    token = generate_token(SESSION_PREFIX)
    expires_at = now_seconds() + 60

    auth_service.save_session(mongo_db, token, EMAIL, expires_at)

    session = auth_service.get_session(mongo_db, token)
    assert session is not None
    assert session["email"] == EMAIL
    assert session["expires_at"] == expires_at

    assert auth_service.delete_session(mongo_db, token) is True
    assert auth_service.get_session(mongo_db, token) is None


def test_cleanup_expired_sessions(mongo_db):
    now_ts = now_seconds()
    auth_service.save_session(mongo_db, "expired-token", EMAIL, now_ts - 10)
    auth_service.save_session(mongo_db, "active-token", EMAIL, now_ts + 600)

    assert auth_service.cleanup_expired_sessions(mongo_db) == 1
    assert mongo_db.sessions.count_documents({"token": "expired-token"}) == 0
    assert mongo_db.sessions.count_documents({"token": "active-token"}) == 1


def test_login_issues_token(secured_client):
    response = login(secured_client)

    assert response.status_code == 200
    body = response.get_json()
    assert body["accessToken"].startswith(f"{SESSION_PREFIX}_")
    assert body["expiresAt"] > now_seconds() * 1000

    session = secured_client.get("/api/auth/session", headers=bearer(body["accessToken"]))
    assert session.status_code == 200
    assert session.get_json()["email"] == EMAIL


def test_login_accepts_wrapped_credentials(secured_client):
    response = secured_client.post(
        "/api/auth/login",
        json={"credentials": {"email": EMAIL, "password": PASSWORD}},
    )
    assert response.status_code == 200


def test_login_rejects_bad_credentials(secured_client):
    assert login(secured_client, password="nope").status_code == 401
    assert secured_client.post("/api/auth/login", json={}).status_code == 400


def test_pdf_routes_require_token(secured_client):
    payload = {"pdf": base64.b64encode(b"%PDF-1.4").decode("ascii")}

    missing = secured_client.post("/api/send-pdf", json=payload)
    assert missing.status_code == 401
    assert missing.get_json() == {"success": False, "message": "Missing authorization token."}

    invalid = secured_client.get("/api/pdf", headers=bearer("sess_unknown"))
    assert invalid.status_code == 401

    token = login(secured_client).get_json()["accessToken"]
    assert secured_client.post("/api/send-pdf", json=payload, headers=bearer(token)).status_code == 200
    assert secured_client.get("/api/pdf", headers=bearer(token)).data == b"%PDF-1.4"


def test_expired_session_is_rejected(secured_client, mongo_db):
    auth_service.save_session(mongo_db, "sess_old", EMAIL, now_seconds() - 1)

    response = secured_client.get("/api/pdf", headers=bearer("sess_old"))

    assert response.status_code == 401
    assert response.get_json()["message"] == "Session expired."
    assert auth_service.get_session(mongo_db, "sess_old") is None


def test_logout_revokes_token(secured_client):
    token = login(secured_client).get_json()["accessToken"]

    assert secured_client.post("/api/auth/logout", headers=bearer(token)).status_code == 200
    assert secured_client.get("/api/pdf", headers=bearer(token)).status_code == 401
    assert secured_client.get("/api/auth/session", headers=bearer(token)).status_code == 401
