"""Service layer modules for the PDF API."""

from . import auth_service, document_service

__all__ = [
    "auth_service",
    "document_service",
]
