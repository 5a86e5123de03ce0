"""Flask application setup and blueprint wiring."""

from __future__ import annotations

from typing import Optional

from flask import Flask
from flask_cors import CORS
from pymongo.database import Database

from pdf_api.commands import register_commands
from pdf_api.config import Config
from pdf_api.database import StoreState, open_store
from pdf_api.errors import register_error_handlers
from pdf_api.routes import register_routes


def create_app(config: Optional[Config] = None, db: Optional[Database] = None) -> Flask:
    """Configure and return the Flask application instance.

    ``db`` lets callers hand in an already connected database (tests use a
    mongomock one); otherwise a client is built from ``config``.
    """
    config = config or Config.from_env()

    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": config.cors_origins}})

    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes
    app.config["REQUIRE_AUTH"] = config.require_auth
    app.config["SESSION_TTL_SECONDS"] = config.session_ttl_seconds
    app.config["PDF_STORAGE_BACKEND"] = config.storage_backend

    handle = open_store(config, db=db)
    app.extensions["pdf_store"] = handle
    if handle.state is StoreState.READY:
        app.logger.info("PDF storage ready (%s backend)", config.storage_backend)
    else:
        app.logger.warning(f"PDF storage unavailable: {handle.error}")

    register_error_handlers(app)
    register_routes(app)
    register_commands(app)

    return app
