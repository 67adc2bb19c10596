"""Mime type detection for pending inputs."""

import mimetypes
from pathlib import Path
from typing import Optional, Protocol

from .constants import DEFAULT_MIME_TYPE
from .errors import MimeTypeDetectionError


class MimeTypeDetector(Protocol):
    """Derives a mime type from a local file."""

    def get_from_path(self, path: Optional[str]) -> str:
        ...


class ExtensionMimeTypeDetector:
    """Probe the input path and map its extension to a mime type.

    The file must exist: a pending input that cannot be read is an error,
    not an untyped upload. Unknown extensions map to the default type.
    """

    def __init__(self, default: str = DEFAULT_MIME_TYPE):
        self.default = default

    def get_from_path(self, path: Optional[str]) -> str:
        if not path:
            raise MimeTypeDetectionError(path, "no input path given")
        local = Path(path)
        if not local.is_file():
            raise MimeTypeDetectionError(path, "file does not exist")
        mime_type, _ = mimetypes.guess_type(local.name)
        return mime_type or self.default
