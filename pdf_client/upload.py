"""Headless model of the PDF upload view."""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

import requests

from pdf_client.api import ApiClient

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

INVALID_TYPE_MESSAGE = "Please select a valid PDF file"
UPLOAD_FAILED_MESSAGE = "Failed to upload file. Please try again."


class UploadState(str, Enum):
    EMPTY = "empty"
    FILE_SELECTED = "file_selected"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class FileHandle:
    """A file chosen by the user, as a browser File object would describe it."""

    name: str
    mime_type: str
    data: bytes
    path: Optional[Path] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileHandle":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            mime_type=mime_type or "application/octet-stream",
            data=path.read_bytes(),
            path=path,
        )

    def object_url(self) -> str:
        """Return a URL the file can be previewed from."""
        if self.path is not None:
            return self.path.resolve().as_uri()
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class UploadController:
    """Selection, validation and upload of a single PDF.

    States: empty -> file_selected -> uploading -> success | error. A file
    that is not ``application/pdf`` is rejected with a message and leaves
    the state untouched.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.state = UploadState.EMPTY
        self.selected_file: Optional[FileHandle] = None
        self.preview_url: Optional[str] = None
        self.message = ""

    @property
    def can_upload(self) -> bool:
        return self.selected_file is not None and self.state is not UploadState.UPLOADING

    def select_file(self, file: Optional[FileHandle]) -> bool:
        """Handle a file-picker change; returns True when a PDF was selected."""
        self.message = ""

        if file is None:
            self._clear_selection()
            self.state = UploadState.EMPTY
            return False

        if file.mime_type != PDF_MIME_TYPE:
            self.message = INVALID_TYPE_MESSAGE
            return False

        self.selected_file = file
        self.preview_url = file.object_url()
        self.state = UploadState.FILE_SELECTED
        return True

    def drop(self, files: Iterable[FileHandle]) -> bool:
        """Handle a drag-and-drop; the first file goes through ``select_file``."""
        first = next(iter(files), None)
        if first is None:
            return False
        return self.select_file(first)

    def upload(self) -> bool:
        """Send the selected file; returns True on a 200 response."""
        if not self.can_upload:
            return False

        file = self.selected_file
        self.state = UploadState.UPLOADING
        self.message = ""

        encoded = base64.b64encode(file.data).decode("ascii")
        try:
            response = self.api.send_pdf(encoded)
        except requests.RequestException as exc:
            logger.error("Upload of %s failed: %s", file.name, exc)
            return self._fail()

        if response.status_code != 200:
            logger.error("Upload of %s rejected with HTTP %s", file.name, response.status_code)
            return self._fail()

        self.state = UploadState.SUCCESS
        self.message = f'File "{file.name}" uploaded successfully!'
        self._clear_selection()
        return True

    def remove_file(self) -> None:
        """Drop the selected file, keeping any status message on screen."""
        self._clear_selection()
        self.state = UploadState.EMPTY

    def reset(self) -> None:
        """Drop the selection and any status message."""
        self._clear_selection()
        self.message = ""
        self.state = UploadState.EMPTY

    def _fail(self) -> bool:
        self.state = UploadState.ERROR
        self.message = UPLOAD_FAILED_MESSAGE
        return False

    def _clear_selection(self) -> None:
        self.selected_file = None
        self.preview_url = None
