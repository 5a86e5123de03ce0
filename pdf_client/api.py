"""HTTP client for the PDF API."""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from pdf_client.local_storage import LocalStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "accessToken"
DEFAULT_API_URL = "http://localhost:5050/api"

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


def default_api_url() -> str:
    return os.getenv("PDF_API_URL", DEFAULT_API_URL).rstrip("/")


class ApiClient:
    """Thin wrapper over ``requests.Session`` that attaches the stored token.

    Every request carries ``Authorization: Bearer <token>`` when a token is
    present in local storage. ``on_unauthorized`` is called whenever a
    request made with a token comes back 401.
    """

    def __init__(
        self,
        storage: LocalStorage,
        base_url: Optional[str] = None,
        http: Optional[requests.Session] = None,
    ):
        self.storage = storage
        self.base_url = (base_url or default_api_url()).rstrip("/")
        self.http = http or requests.Session()
        self.on_unauthorized: Optional[Callable[[], None]] = None

    def request(
        self,
        method: str,
        path: str,
        notify_unauthorized: bool = True,
        **kwargs: Any,
    ) -> requests.Response:
        headers: Dict[str, str] = dict(kwargs.pop("headers", None) or {})
        token = self.storage.get_item(TOKEN_KEY)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = self.http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)

        if response.status_code == 401 and token and notify_unauthorized and self.on_unauthorized is not None:
            logger.info("Server rejected stored token; treating as logout")
            self.on_unauthorized()
        return response

    def login(self, credentials: Dict[str, Any]) -> str:
        # A 401 here means bad credentials, not a rejected session.
        response = self.request("POST", "/auth/login", notify_unauthorized=False, json=credentials)
        response.raise_for_status()
        return response.json()["accessToken"]

    def logout(self, token: str) -> requests.Response:
        return self.request("POST", "/auth/logout", headers={"Authorization": f"Bearer {token}"})

    def send_pdf(self, encoded: str) -> requests.Response:
        return self.request("POST", "/send-pdf", json={"pdf": encoded})

    def fetch_pdf(self) -> Tuple[bytes, str]:
        """Download the current PDF; returns its bytes and filename."""
        response = self.request("GET", "/pdf")
        response.raise_for_status()
        disposition = response.headers.get("Content-Disposition", "")
        match = _FILENAME_RE.search(disposition)
        return response.content, match.group(1) if match else "document.pdf"

    def delete_pdf(self) -> Dict[str, Any]:
        response = self.request("DELETE", "/pdf")
        response.raise_for_status()
        return response.json()
