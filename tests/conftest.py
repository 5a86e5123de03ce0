"""Shared pytest fixtures for the PDF API and client."""

from __future__ import annotations

import sys
from pathlib import Path
from urllib.parse import urlsplit

import mongomock
import pytest
import requests
from mongomock.gridfs import enable_gridfs_integration

# Ensure the application packages are importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdf_api.config import Config  # noqa: E402
from pdf_api.main import create_app  # noqa: E402

# Let gridfs accept mongomock databases.
enable_gridfs_integration()


@pytest.fixture(autouse=True)
def mongo_db():
    """Provide an isolated in-memory MongoDB database for each test."""
    test_db_name = "test_pdf_store"
    client = mongomock.MongoClient()
    db = client[test_db_name]

    yield db

    client.drop_database(test_db_name)


@pytest.fixture(params=["records", "gridfs"])
def backend(request) -> str:
    return request.param


@pytest.fixture
def make_app(mongo_db, backend):
    """Build an app on the test database; keyword args override Config."""

    def _make(**overrides):
        settings = {"storage_backend": backend, "require_auth": False}
        settings.update(overrides)
        app = create_app(Config(**settings), db=mongo_db)
        app.config["TESTING"] = True
        return app

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


class FlaskHttp:
    """Stand-in for ``requests.Session`` that calls a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, headers=None, json=None, **kwargs):
        path = urlsplit(url).path
        self.calls.append((method, path, dict(headers or {}), json))
        result = self.test_client.open(path, method=method, headers=headers, json=json)

        response = requests.Response()
        response.status_code = result.status_code
        response._content = result.get_data()
        response.headers.update(result.headers)
        response.url = url
        return response


@pytest.fixture
def flask_http(client) -> FlaskHttp:
    return FlaskHttp(client)
