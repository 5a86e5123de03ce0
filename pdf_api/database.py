"""MongoDB connection and blob store construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from flask import current_app
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from pdf_api.config import Config
from pdf_api.errors import StorageError
from pdf_api.services import auth_service
from pdf_api.storage import BlobStore, GridFSStore, RecordStore

logger = logging.getLogger(__name__)


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    ERRORED = "errored"


@dataclass
class StoreHandle:
    """Owns the database, the active blob store and their lifecycle state."""

    state: StoreState = StoreState.UNINITIALIZED
    client: Optional[MongoClient] = None
    db: Optional[Database] = None
    store: Optional[BlobStore] = None
    error: Optional[str] = None

    def require_store(self) -> BlobStore:
        if self.state is not StoreState.READY or self.store is None:
            raise StorageError("Storage unavailable")
        return self.store

    def require_db(self) -> Database:
        if self.state is not StoreState.READY or self.db is None:
            raise StorageError("Storage unavailable")
        return self.db

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
        self.client = None
        self.db = None
        self.store = None
        self.state = StoreState.UNINITIALIZED


def current_handle() -> StoreHandle:
    """Return the store handle attached to the running application."""
    return current_app.extensions["pdf_store"]


def get_mongo_client(uri: str) -> MongoClient:
    """Create a MongoDB client for the configured URI."""
    return MongoClient(uri)


def create_store(db: Database, config: Config) -> BlobStore:
    """Build the blob store selected by ``PDF_STORAGE_BACKEND``."""
    if config.storage_backend == "records":
        return RecordStore(db, collection_name=config.pdf_collection)
    return GridFSStore(db, bucket_name=config.pdf_collection)


def open_store(config: Config, db: Optional[Database] = None) -> StoreHandle:
    """Connect (unless a database is supplied) and prepare the blob store.

    Failures leave the handle in the ``errored`` state instead of raising so
    the application can still start and report the outage per request.
    """
    handle = StoreHandle()
    try:
        if db is None:
            handle.client = get_mongo_client(config.mongodb_uri)
            handle.client.admin.command("ping")
            db = handle.client[config.mongodb_database]

        store = create_store(db, config)
        store.ensure_indexes()
        auth_service.create_indexes(db)
    except (PyMongoError, StorageError) as exc:
        logger.error("Failed to initialise PDF storage: %s", exc)
        handle.state = StoreState.ERRORED
        handle.error = str(exc)
        return handle

    handle.db = db
    handle.store = store
    handle.state = StoreState.READY
    return handle
