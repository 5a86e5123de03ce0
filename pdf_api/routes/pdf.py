"""/api PDF routes: upload, inline download, metadata and deletion."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context

from pdf_api.database import current_handle
from pdf_api.errors import StreamError
from pdf_api.services.document_service import DocumentService
from pdf_api.utils.auth import require_session

bp = Blueprint("pdf", __name__, url_prefix="/api")


def _document_service() -> DocumentService:
    return DocumentService(current_handle().require_store())


@bp.post("/send-pdf")
@bp.post("/pdf")
def upload_pdf():
    """Replace the stored PDF with the base64 payload in ``{"pdf": ...}``."""
    _, error_response = require_session()
    if error_response is not None:
        return error_response

    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    file_id = _document_service().store(payload.get("pdf"))

    return (
        jsonify(
            success=True,
            message="PDF saved successfully",
            fileId=str(file_id),
        ),
        200,
    )


@bp.get("/pdf")
def get_pdf():
    """Stream the current PDF for inline display."""
    _, error_response = require_session()
    if error_response is not None:
        return error_response

    document, chunks = _document_service().retrieve()

    def generate():
        try:
            for chunk in chunks:
                yield chunk
        except StreamError as exc:
            # Headers are already flushed; all we can do is cut the body short.
            current_app.logger.error("Error streaming PDF %s: %s", document.id, exc.message)

    return Response(
        stream_with_context(generate()),
        mimetype=document.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{document.filename}"',
            "Content-Length": str(document.length),
        },
    )


@bp.get("/pdf/info")
def get_pdf_info():
    """Return metadata for the current PDF without its bytes."""
    _, error_response = require_session()
    if error_response is not None:
        return error_response

    document = _document_service().describe()
    return jsonify(success=True, document=document.to_json()), 200


@bp.delete("/pdf")
def delete_pdf():
    """Remove every stored version of the PDF."""
    _, error_response = require_session()
    if error_response is not None:
        return error_response

    deleted = _document_service().remove()
    return (
        jsonify(
            success=True,
            message="PDF deleted successfully",
            deleted=deleted,
        ),
        200,
    )
