"""InMemoryReferenceGateway: dict-based reference table for development and testing."""

import contextlib
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..core import AttachmentReference, Field, VersionInfo
from .base import reference_from_field


class InMemoryReferenceGateway:
    """In-memory reference table keyed by (field_id, version_no)."""

    def __init__(self) -> None:
        self._rows: Dict[Tuple[int, int], AttachmentReference] = {}

    def close(self) -> None:
        pass

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Restore the previous rows if the block raises."""
        snapshot = dict(self._rows)
        try:
            yield
        except BaseException:
            self._rows = snapshot
            raise

    def store_reference(self, version_info: VersionInfo, field: Field) -> None:
        ref = reference_from_field(version_info, field)
        self._rows[(ref.field_id, ref.version_no)] = ref

    def get_reference(self, field_id: int, version_no: int) -> Optional[AttachmentReference]:
        ref = self._rows.get((field_id, version_no))
        return ref.model_copy() if ref is not None else None

    def remove_reference(self, field_id: int, version_no: int) -> None:
        self._rows.pop((field_id, version_no), None)

    def get_referenced_blob_ids(self, field_ids: Iterable[int], version_no: int) -> Set[str]:
        wanted = set(field_ids)
        return {
            ref.blob_id
            for (field_id, ver), ref in self._rows.items()
            if ver == version_no and field_id in wanted
        }

    def remove_references(self, field_ids: Iterable[int], version_no: int) -> None:
        for field_id in set(field_ids):
            self._rows.pop((field_id, version_no), None)

    def count_references_per_blob(self, blob_ids: Iterable[str]) -> Dict[str, int]:
        counts = {blob_id: 0 for blob_id in blob_ids}
        for ref in self._rows.values():
            if ref.blob_id in counts:
                counts[ref.blob_id] += 1
        return counts

    def list_references(self, blob_id: Optional[str] = None) -> List[AttachmentReference]:
        """List rows, optionally only those naming one blob."""
        rows = sorted(self._rows.values(), key=lambda ref: (ref.field_id, ref.version_no))
        return [ref.model_copy() for ref in rows if blob_id is None or ref.blob_id == blob_id]
