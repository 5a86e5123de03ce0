"""Service for storing and serving the single current PDF."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Iterator, List, Tuple

from pdf_api.errors import NotFound, ValidationError
from pdf_api.models import DOCUMENT_NAME, PDF_CONTENT_TYPE, StoredDocument
from pdf_api.storage import BlobStore

logger = logging.getLogger(__name__)


def decode_payload(payload: Any) -> bytes:
    """
    Decode a base64 transport string into raw bytes.

    Accepts a bare base64 string or a ``data:`` URL as produced by browser
    file readers.

    Raises:
        ValidationError: If the payload is missing, empty or not base64
    """
    if payload is None or payload == "":
        raise ValidationError("PDF data is required")
    if not isinstance(payload, str):
        raise ValidationError("PDF data must be a base64 string")

    encoded = payload.strip()
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]

    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("PDF data is not valid base64") from exc

    if not data:
        raise ValidationError("PDF data is required")
    return data


class DocumentService:
    """Keeps exactly one current document under a fixed logical name."""

    def __init__(self, blob_store: BlobStore, name: str = DOCUMENT_NAME):
        self.blob_store = blob_store
        self.name = name

    def store(self, payload: Any) -> Any:
        """
        Persist a base64 payload as the current document.

        The new object is written before older versions are removed, so a
        failed write keeps the previous document and readers never observe
        an empty store because of an upload. Only versions older than the
        new one are removed; a newer concurrent upload is left alone.

        Returns:
            The identifier of the newly stored object
        """
        data = decode_payload(payload)

        new_id = self.blob_store.create(self.name, PDF_CONTENT_TYPE, data)
        removed = self._delete_older_than(new_id)
        logger.info("Stored %s (%d bytes), superseded %d version(s)", self.name, len(data), removed)
        return new_id

    def describe(self) -> StoredDocument:
        """Return metadata for the current document."""
        return self._current()

    def retrieve(self) -> Tuple[StoredDocument, Iterator[bytes]]:
        """Return the current document and an iterator over its bytes."""
        document = self._current()
        return document, self.blob_store.open(document)

    def remove(self) -> int:
        """Delete every stored version and return how many were removed."""
        removed = self._delete_all()
        if removed == 0:
            raise NotFound("No PDF file found to delete")
        logger.info("Deleted %d stored version(s) of %s", removed, self.name)
        return removed

    def prune(self) -> int:
        """Remove superseded versions, keeping only the newest one."""
        versions = self.blob_store.find(self.name)
        if not versions:
            return 0
        return self._delete_older_than(versions[0].id)

    def _current(self) -> StoredDocument:
        versions: List[StoredDocument] = self.blob_store.find(self.name)
        if not versions:
            raise NotFound()
        if len(versions) > 1:
            logger.warning("Found %d versions of %s, serving the newest", len(versions), self.name)
        return versions[0]

    def _delete_older_than(self, object_id: Any) -> int:
        versions = self.blob_store.find(self.name)
        ids = [version.id for version in versions]
        if object_id not in ids:
            return 0

        removed = 0
        for version in versions[ids.index(object_id) + 1:]:
            if self.blob_store.delete(version.id):
                removed += 1
        return removed

    def _delete_all(self) -> int:
        removed = 0
        for version in self.blob_store.find(self.name):
            if self.blob_store.delete(version.id):
                removed += 1
        return removed
