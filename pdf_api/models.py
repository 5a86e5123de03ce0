"""Value types shared by the storage and service layers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

DOCUMENT_NAME = "document.pdf"
PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class StoredDocument:
    """Metadata for one stored object; the bytes are streamed separately."""

    id: Any
    filename: str
    content_type: str
    length: int
    created_at: datetime

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "filename": self.filename,
            "contentType": self.content_type,
            "length": self.length,
            "createdAt": self.created_at.isoformat(),
        }
