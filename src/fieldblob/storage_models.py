"""Storage-related data models for the object store.

This module contains the object store's view of a blob (BinaryFile) and the
struct used to commit a local file into the store.
"""

import urllib.parse
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


def canonicalize_uri(uri: str) -> str:
    """
    Canonicalize blob URI:
    - No query/fragment (forbids SAS tokens in references)
    - No double slashes
    - Proper percent encoding
    - Format: <provider>://<container>/<key>
    """
    parsed = urllib.parse.urlparse(uri)
    if parsed.query or parsed.fragment:
        raise ValueError("URI cannot have query or fragment (no SAS tokens in references)")

    path = urllib.parse.quote(parsed.path.replace("//", "/"))
    return f"{parsed.scheme}://{parsed.netloc}{path}"


class BinaryFile(BaseModel):
    """A blob as currently held by the object store."""
    id: str                         # Storage path, e.g. "42/1-eng-GB/ab12.../report.pdf"
    uri: str                        # "fs:///var/blobs/42/..." or "azure://container/..."
    size: int
    mime_type: Optional[str] = None
    mtime: Optional[datetime] = None

    @field_validator("uri")
    @classmethod
    def validate_uri(cls, v: str) -> str:
        """Validate and canonicalize the URI."""
        return canonicalize_uri(v)


class BinaryFileCreateStruct(BaseModel):
    """Instructions for committing a local file into the object store."""
    id: Optional[str] = None        # Target storage path, set by the caller
    input_path: str
    size: int
    mime_type: Optional[str] = None
