"""Blob store backings for persisted PDFs.

Two interchangeable stores are provided. ``RecordStore`` keeps each object
as a single MongoDB document with a binary field, ``GridFSStore`` keeps it in
a chunked GridFS bucket. Only one is active for a given application.
"""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List

from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from pdf_api.errors import NotFound, StorageError, StreamError
from pdf_api.models import StoredDocument

logger = logging.getLogger(__name__)

# Slice size used when streaming bytes back out of a store.
STREAM_CHUNK_BYTES = 255 * 1024


@contextmanager
def _storage_errors(action: str):
    """Re-raise driver failures as StorageError."""
    try:
        yield
    except NoFile:
        raise
    except PyMongoError as exc:
        logger.exception("Storage failure while trying to %s", action)
        raise StorageError(f"Failed to {action}") from exc


class BlobStore:
    """Content store addressed by a logical name."""

    def ensure_indexes(self) -> None:
        """Create any indexes the store relies on."""

    def create(self, name: str, content_type: str, data: bytes) -> Any:
        """Persist ``data`` under ``name`` and return the new object id."""
        raise NotImplementedError

    def find(self, name: str) -> List[StoredDocument]:
        """Return every object stored under ``name``, newest first."""
        raise NotImplementedError

    def open(self, document: StoredDocument) -> Iterator[bytes]:
        """Return an iterator over the object's bytes.

        Lookup happens eagerly so a missing object raises before any byte
        is produced.
        """
        raise NotImplementedError

    def delete(self, object_id: Any) -> bool:
        """Delete one object; return False when it did not exist."""
        raise NotImplementedError


class RecordStore(BlobStore):
    """One MongoDB document per stored object, bytes in a binary field."""

    def __init__(self, db: Database, collection_name: str = "pdfs"):
        self._collection = db[collection_name]

    def ensure_indexes(self) -> None:
        with _storage_errors("create PDF indexes"):
            self._collection.create_index([("filename", ASCENDING), ("created_at", DESCENDING)])

    def create(self, name: str, content_type: str, data: bytes) -> Any:
        record = {
            "filename": name,
            "content_type": content_type,
            "length": len(data),
            "data": data,
            "created_at": datetime.utcnow(),
        }
        with _storage_errors("save PDF"):
            result = self._collection.insert_one(record)
        return result.inserted_id

    def find(self, name: str) -> List[StoredDocument]:
        with _storage_errors("look up PDF"):
            records = list(
                self._collection.find({"filename": name}, {"data": 0}).sort(
                    [("created_at", DESCENDING), ("_id", DESCENDING)]
                )
            )
        return [_record_to_document(record) for record in records]

    def open(self, document: StoredDocument) -> Iterator[bytes]:
        with _storage_errors("read PDF"):
            record = self._collection.find_one({"_id": document.id}, {"data": 1})
        if record is None:
            raise NotFound()

        payload = bytes(record["data"])

        def _slices() -> Iterator[bytes]:
            for offset in range(0, len(payload), STREAM_CHUNK_BYTES):
                yield payload[offset:offset + STREAM_CHUNK_BYTES]

        return _slices()

    def delete(self, object_id: Any) -> bool:
        with _storage_errors("delete PDF"):
            result = self._collection.delete_one({"_id": object_id})
        return result.deleted_count > 0


class GridFSStore(BlobStore):
    """Chunked GridFS bucket with the content type kept in file metadata."""

    def __init__(self, db: Database, bucket_name: str = "pdfs"):
        self._bucket = GridFSBucket(db, bucket_name=bucket_name)
        self._files = db[f"{bucket_name}.files"]

    def create(self, name: str, content_type: str, data: bytes) -> Any:
        with _storage_errors("save PDF"):
            return self._bucket.upload_from_stream(
                name,
                io.BytesIO(data),
                metadata={"contentType": content_type},
            )

    def find(self, name: str) -> List[StoredDocument]:
        # Query the files collection directly; GridOut objects are only
        # needed once the bytes are read.
        with _storage_errors("look up PDF"):
            files = list(
                self._files.find({"filename": name}).sort(
                    [("uploadDate", DESCENDING), ("_id", DESCENDING)]
                )
            )
        return [_grid_file_to_document(grid_file) for grid_file in files]

    def open(self, document: StoredDocument) -> Iterator[bytes]:
        try:
            with _storage_errors("read PDF"):
                grid_out = self._bucket.open_download_stream(document.id)
        except NoFile as exc:
            raise NotFound() from exc

        def _chunks() -> Iterator[bytes]:
            try:
                while True:
                    chunk = grid_out.read(STREAM_CHUNK_BYTES)
                    if not chunk:
                        break
                    yield chunk
            except PyMongoError as exc:
                logger.exception("Failed reading GridFS file %s", document.id)
                raise StreamError() from exc
            finally:
                grid_out.close()

        return _chunks()

    def delete(self, object_id: Any) -> bool:
        try:
            with _storage_errors("delete PDF"):
                self._bucket.delete(object_id)
        except NoFile:
            return False
        return True


def _record_to_document(record: Dict[str, Any]) -> StoredDocument:
    return StoredDocument(
        id=record["_id"],
        filename=record["filename"],
        content_type=record.get("content_type", "application/octet-stream"),
        length=record.get("length", 0),
        created_at=record["created_at"],
    )


def _grid_file_to_document(grid_file: Dict[str, Any]) -> StoredDocument:
    metadata = grid_file.get("metadata") or {}
    return StoredDocument(
        id=grid_file["_id"],
        filename=grid_file["filename"],
        content_type=metadata.get("contentType", "application/octet-stream"),
        length=grid_file.get("length", 0),
        created_at=grid_file["uploadDate"],
    )
