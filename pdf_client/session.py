"""Client-side authentication state backed by local storage."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import requests

from pdf_client.api import TOKEN_KEY, ApiClient
from pdf_client.local_storage import LocalStorage

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"


class SessionContext:
    """Holds ``authenticated`` and ``token`` for the rest of the client.

    State is initialised from local storage. A 401 from the server on any
    authenticated request logs the session out.
    """

    def __init__(
        self,
        api: ApiClient,
        storage: Optional[LocalStorage] = None,
        navigate: Optional[Callable[[str], None]] = None,
    ):
        self.api = api
        self.storage = storage or api.storage
        self.navigate = navigate
        self.authenticated = False
        self.token: Optional[str] = None

        self.api.on_unauthorized = self._handle_rejected_token
        self.check_auth()

    def login(self, credentials: Dict[str, Any]) -> str:
        """Exchange credentials for a token; errors propagate unchanged."""
        token = self.api.login(credentials)

        self.storage.set_item(TOKEN_KEY, token)
        self.authenticated = True
        self.token = token
        return token

    def logout(self) -> None:
        """Clear the token locally, go to login and revoke it on the server."""
        token = self.storage.get_item(TOKEN_KEY)
        self._clear()
        if token:
            try:
                self.api.logout(token)
            except requests.RequestException as exc:
                logger.warning("Could not revoke session on the server: %s", exc)

    def check_auth(self) -> bool:
        """Reflect whether a token is stored; the token itself is not checked."""
        token = self.storage.get_item(TOKEN_KEY)
        self.authenticated = bool(token)
        self.token = token or None
        return self.authenticated

    def _handle_rejected_token(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.authenticated = False
        self.token = None
        if self.navigate is not None:
            self.navigate(LOGIN_ROUTE)
