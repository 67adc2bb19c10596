"""Service layer types for fieldblob."""

from typing import List, Optional
from pydantic import BaseModel


class StoreResult(BaseModel):
    """Result of storing a file into a field."""
    field_id: int
    version_no: int
    blob_id: str
    mime_type: Optional[str] = None
    uri: Optional[str] = None
    size: int = 0


class AttachmentInfo(BaseModel):
    """A field's attachment as seen after load."""
    field_id: int
    version_no: int
    blob_id: str
    mime_type: Optional[str] = None
    file_name: Optional[str] = None
    uri: str
    size: int


class DeleteResult(BaseModel):
    """Result of deleting field attachments in one version."""
    version_no: int
    field_ids: List[int]
    blobs_deleted: List[str]
    blobs_kept: List[str]


class BlobUsage(BaseModel):
    """Which field/version pairs reference one blob."""
    blob_id: str
    references: List[str]  # "<field_id>/<version_no>"
    count: int
