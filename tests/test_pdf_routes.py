"""Tests for the /api PDF routes."""

from __future__ import annotations

import base64
import logging

import pytest

from pdf_api.database import StoreState
from pdf_api.errors import StorageError, StreamError
from pdf_api.models import DOCUMENT_NAME

PDF_BYTES = b"%PDF-1.4\nroute test\n%%EOF"
OTHER_PDF_BYTES = b"%PDF-1.5\nreplacement\n%%EOF"


def encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.get_json()


@pytest.mark.parametrize("path", ["/api/send-pdf", "/api/pdf"])
def test_upload_and_download(client, path):
    response = client.post(path, json={"pdf": encode(PDF_BYTES)})

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["message"] == "PDF saved successfully"
    assert body["fileId"]

    download = client.get("/api/pdf")
    assert download.status_code == 200
    assert download.mimetype == "application/pdf"
    assert download.headers["Content-Disposition"] == f'inline; filename="{DOCUMENT_NAME}"'
    assert download.data == PDF_BYTES


def test_second_upload_wins(client):
    client.post("/api/send-pdf", json={"pdf": encode(PDF_BYTES)})
    second = client.post("/api/send-pdf", json={"pdf": encode(OTHER_PDF_BYTES)})

    info = client.get("/api/pdf/info").get_json()
    assert info["document"]["id"] == second.get_json()["fileId"]
    assert info["document"]["length"] == len(OTHER_PDF_BYTES)
    assert client.get("/api/pdf").data == OTHER_PDF_BYTES


def test_download_without_upload_is_404(client):
    response = client.get("/api/pdf")

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "message": "No PDF file found"}


@pytest.mark.parametrize("body", [{}, {"pdf": ""}, {"pdf": None}, {"pdf": "%%%"}])
def test_upload_rejects_missing_or_invalid_payload(client, body):
    response = client.post("/api/send-pdf", json=body)

    assert response.status_code == 400
    assert response.get_json()["success"] is False
    assert client.get("/api/pdf").status_code == 404


def test_upload_without_json_body_is_400(client):
    response = client.post("/api/send-pdf", data="pdf=abc", content_type="application/x-www-form-urlencoded")
    assert response.status_code == 400


def test_delete_flow(client):
    empty = client.delete("/api/pdf")
    assert empty.status_code == 404
    assert empty.get_json()["success"] is False

    client.post("/api/send-pdf", json={"pdf": encode(PDF_BYTES)})
    deleted = client.delete("/api/pdf")

    assert deleted.status_code == 200
    assert deleted.get_json() == {"success": True, "message": "PDF deleted successfully", "deleted": 1}
    assert client.get("/api/pdf").status_code == 404


def test_info_without_upload_is_404(client):
    assert client.get("/api/pdf/info").status_code == 404


def test_unavailable_storage_is_500(app, client):
    app.extensions["pdf_store"].state = StoreState.ERRORED

    response = client.get("/api/pdf")

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "message": "Storage unavailable"}


def test_oversized_upload_is_413(make_app):
    client = make_app(max_upload_bytes=64).test_client()

    response = client.post("/api/send-pdf", json={"pdf": encode(PDF_BYTES * 10)})

    assert response.status_code == 413
    assert response.get_json()["success"] is False


def test_storage_failure_is_500(app, client, monkeypatch):
    def failing_create(name, content_type, data):
        raise StorageError("Failed to save PDF")

    monkeypatch.setattr(app.extensions["pdf_store"].store, "create", failing_create)

    response = client.post("/api/send-pdf", json={"pdf": encode(PDF_BYTES)})

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "message": "Failed to save PDF"}


def test_stream_error_truncates_body_and_is_logged(app, client, monkeypatch, caplog):
    client.post("/api/send-pdf", json={"pdf": encode(PDF_BYTES)})

    def broken_open(document):
        def chunks():
            yield PDF_BYTES[:8]
            raise StreamError()

        return chunks()

    monkeypatch.setattr(app.extensions["pdf_store"].store, "open", broken_open)

    with caplog.at_level(logging.ERROR):
        response = client.get("/api/pdf")
        body = response.get_data()

    assert response.status_code == 200
    assert body == PDF_BYTES[:8]
    assert "Error streaming PDF" in caplog.text


def test_document_vanishing_before_open_is_404(app, client, monkeypatch):
    client.post("/api/send-pdf", json={"pdf": encode(PDF_BYTES)})
    store = app.extensions["pdf_store"].store
    stale = store.find(DOCUMENT_NAME)
    store.delete(stale[0].id)
    monkeypatch.setattr(store, "find", lambda name: stale)

    response = client.get("/api/pdf")

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "message": "No PDF file found"}
