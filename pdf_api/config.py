"""Environment-driven settings for the PDF API."""

from __future__ import annotations

import os
from dataclasses import dataclass

STORAGE_BACKENDS = ("gridfs", "records")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """Runtime settings read once at application start."""

    mongodb_uri: str = "mongodb://localhost:27017/"
    mongodb_database: str = "pdf_store"
    storage_backend: str = "gridfs"
    pdf_collection: str = "pdfs"
    require_auth: bool = True
    session_ttl_seconds: int = 24 * 60 * 60
    max_upload_bytes: int = 20 * 1024 * 1024
    cors_origins: str = "*"

    @classmethod
    def from_env(cls) -> "Config":
        backend = os.getenv("PDF_STORAGE_BACKEND", "gridfs").lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"PDF_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
            )

        return cls(
            mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017/"),
            mongodb_database=os.getenv("MONGODB_DATABASE", "pdf_store"),
            storage_backend=backend,
            pdf_collection=os.getenv("PDF_COLLECTION", "pdfs"),
            require_auth=_env_flag("REQUIRE_AUTH", "true"),
            session_ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60))),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024))),
            cors_origins=os.getenv("CORS_ORIGINS", "*"),
        )
