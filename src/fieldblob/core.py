"""Core data models for fieldblob.

A content item is stored in numbered versions; each version holds fields, and
a field of a binary type carries its file through ``external_data``:

- Pending input: ``input_uri`` set, ``id`` unset. The local file has not been
  committed to the object store yet.
- Committed: ``id`` set. The blob already exists in the object store (either
  stored earlier or copied from another translation).

Only ``id``, ``mime_type`` and ``file_name`` are persisted in the reference
table. ``uri`` and ``file_size`` are hydrated from the object store on load.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class VersionInfo(BaseModel):
    """Identifies one version of a content item."""

    content_id: int
    version_no: int


class AttachmentData(BaseModel):
    """External data of a binary field."""

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[str] = None          # Blob id in the object store
    input_uri: Optional[str] = None   # Local file awaiting upload
    mime_type: Optional[str] = None
    file_name: Optional[str] = None   # Original upload name
    file_size: Optional[int] = None   # Live value from the object store
    uri: Optional[str] = None         # Live value from the object store

    @property
    def is_pending(self) -> bool:
        """True when the data still points at an uncommitted local file."""
        return self.id is None


class Field(BaseModel):
    """A field of a content version, reduced to what storage needs."""

    model_config = ConfigDict(validate_assignment=True)

    id: int
    field_definition_id: int = 0
    type: str = "binaryfile"
    language_code: str = "eng-GB"
    external_data: Optional[AttachmentData] = None


class AttachmentReference(BaseModel):
    """A reference row: (field, version) -> blob.

    ``uri`` and ``file_size`` are never read from the row itself; they are
    populated from the object store when a reference is loaded.
    """

    field_id: int
    version_no: int
    blob_id: str
    mime_type: Optional[str] = None
    file_name: Optional[str] = None
    uri: Optional[str] = None
    file_size: Optional[int] = None

    def to_attachment_data(self) -> AttachmentData:
        """Convert the persisted part of the row into field external data."""
        return AttachmentData(
            id=self.blob_id,
            mime_type=self.mime_type,
            file_name=self.file_name,
        )
