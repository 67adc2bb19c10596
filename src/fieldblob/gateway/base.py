"""Base protocol for reference gateway implementations."""

from typing import ContextManager, Dict, Iterable, List, Optional, Protocol, Set

from ..core import AttachmentReference, Field, VersionInfo
from ..errors import InvalidInputError


class ReferenceGateway(Protocol):
    """
    Protocol for the relational reference table.

    One row per (field_id, version_no) naming the blob the field points at.
    Reference counts are derived from the rows on demand; nothing stores a
    counter.
    """

    def store_reference(self, version_info: VersionInfo, field: Field) -> None:
        """Insert or replace the row for (field.id, version_info.version_no)."""
        ...

    def get_reference(self, field_id: int, version_no: int) -> Optional[AttachmentReference]:
        """Return the row for a field/version, or None when absent."""
        ...

    def remove_reference(self, field_id: int, version_no: int) -> None:
        """Delete the row for a field/version. Missing rows are ignored."""
        ...

    def get_referenced_blob_ids(self, field_ids: Iterable[int], version_no: int) -> Set[str]:
        """Return the blob ids referenced by the given fields in one version."""
        ...

    def remove_references(self, field_ids: Iterable[int], version_no: int) -> None:
        """Delete the rows of the given fields in one version."""
        ...

    def count_references_per_blob(self, blob_ids: Iterable[str]) -> Dict[str, int]:
        """Count rows per blob id across all fields and versions.

        Every requested id appears in the result, with 0 when unreferenced.
        """
        ...

    def list_references(self, blob_id: Optional[str] = None) -> List[AttachmentReference]:
        """List rows ordered by field and version, optionally for one blob."""
        ...

    def transaction(self) -> ContextManager[None]:
        """Group several calls into one unit that commits or rolls back."""
        ...

    def close(self) -> None:
        """Release any underlying connection."""
        ...


def reference_from_field(version_info: VersionInfo, field: Field) -> AttachmentReference:
    """Build the row to persist for a field.

    Raises:
        InvalidInputError: If the field has no committed blob id
    """
    data = field.external_data
    if data is None or data.id is None:
        raise InvalidInputError(
            f"Field {field.id} has no committed blob id to reference"
        )
    return AttachmentReference(
        field_id=field.id,
        version_no=version_info.version_no,
        blob_id=data.id,
        mime_type=data.mime_type,
        file_name=data.file_name,
    )
