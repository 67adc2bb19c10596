"""Attachment storage: keeps binary fields, the object store and the reference table in step.

Store/Load/Delete Lifecycle:
----------------------------
A binary field's file lives in the object store as a blob; the reference
table records which (field, version) points at which blob. Blobs are shared:
copying a translation or a version adds a second row naming the same blob
instead of uploading again. A blob is deleted only when a count of the rows
naming it reaches zero, and that count is taken right after the caller's own
rows are removed.

Limitation: the count and the delete that follows are two steps. Without an
enclosing write transaction (see SqliteReferenceGateway.transaction), a
concurrent request that adds a reference to the same blob between the two
can be left pointing at a deleted blob.
"""

from pathlib import Path
from typing import Iterable, List, Optional

from .core import Field, VersionInfo
from .errors import BlobNotFoundError, InvalidInputError, MissingCollaboratorError
from .gateway.base import ReferenceGateway
from .mime import MimeTypeDetector
from .path_generator import PathGenerator
from .storage.base import IOService


class AttachmentStorage:
    """External storage for binary fields.

    Stateless apart from its collaborators; every call runs to completion
    within the caller's request and transaction.
    """

    def __init__(
        self,
        gateway: ReferenceGateway,
        io_service: IOService,
        path_generator: PathGenerator,
        mime_type_detector: MimeTypeDetector,
    ):
        for name, value in (
            ("reference gateway", gateway),
            ("object store", io_service),
            ("path generator", path_generator),
            ("mime type detector", mime_type_detector),
        ):
            if value is None:
                raise MissingCollaboratorError(name)
        self.gateway = gateway
        self.io_service = io_service
        self.path_generator = path_generator
        self.mime_type_detector = mime_type_detector

    def store_attachment(self, version_info: VersionInfo, field: Field) -> bool:
        """Store the field's file and point its reference row at it.

        The field's external data is either a pending input (``input_uri``,
        no ``id``) or an already committed blob (``id`` set, e.g. copied from
        another translation). Only a pending input is uploaded. Any previous
        reference of the same field/version is replaced, and its blob deleted
        once nothing references it any more.

        Returns:
            False when the field carries no external data, True otherwise
        """
        data = field.external_data
        if data is None:
            # Nothing to store
            return False

        # No mime type means a local input file
        if data.mime_type is None:
            data.mime_type = self.mime_type_detector.get_from_path(data.input_uri)

        if data.is_pending:
            if not data.input_uri:
                raise InvalidInputError(
                    f"Field {field.id} has neither a blob id nor an input file"
                )
            if data.file_name is None:
                data.file_name = Path(data.input_uri).name

            create_struct = self.io_service.new_create_struct_from_local_file(data.input_uri)
            create_struct.id = self.path_generator.get_storage_path_for_field(field, version_info)
            create_struct.mime_type = data.mime_type
            binary_file = self.io_service.create_blob(create_struct)

            data.id = binary_file.id
            data.mime_type = create_struct.mime_type
            data.uri = binary_file.uri
            data.file_size = binary_file.size

        self._remove_old_file(field.id, version_info.version_no, keep_blob_id=data.id)

        self.gateway.store_reference(version_info, field)
        return True

    def copy_reference(self, version_info: VersionInfo, target_field: Field, source_field: Field) -> bool:
        """Give target_field its own reference row to source_field's blob.

        Used when a field value is duplicated (translation or version copy).
        Nothing is uploaded: the extra row is what keeps the blob alive. A
        reference the target already had is replaced, and its blob deleted
        once nothing references it any more.

        Returns:
            False when the source carries no external data, True otherwise
        """
        source = source_field.external_data
        if source is None:
            return False
        if source.is_pending:
            raise InvalidInputError(
                f"Field {source_field.id} has no committed blob to copy"
            )

        self._remove_old_file(target_field.id, version_info.version_no, keep_blob_id=source.id)

        target_field.external_data = source.model_copy()
        self.gateway.store_reference(version_info, target_field)
        return True

    def load_attachment(self, version_info: VersionInfo, field: Field) -> Field:
        """Hydrate field.external_data from the reference row and the object store.

        ``file_size`` and ``uri`` always come from the object store's current
        state; the row only contributes blob id, mime type and file name.
        """
        ref = self.gateway.get_reference(field.id, version_info.version_no)
        if ref is None:
            field.external_data = None
            return field

        data = ref.to_attachment_data()
        binary_file = self.io_service.load_blob(data.id)
        data.file_size = binary_file.size
        data.uri = binary_file.uri
        field.external_data = data
        return field

    def delete_attachments(self, version_info: VersionInfo, field_ids: Iterable[int]) -> List[str]:
        """Drop the references of field_ids in one version and orphaned blobs.

        Blobs still referenced by any other field or version survive. An
        empty field_ids is a no-op, never a version-wide wipe.

        Returns:
            Sorted ids of the blobs left without references
        """
        ids: List[int] = list(dict.fromkeys(field_ids))
        if not ids:
            return []

        version_no = version_info.version_no
        referenced = self.gateway.get_referenced_blob_ids(ids, version_no)

        self.gateway.remove_references(ids, version_no)

        if not referenced:
            return []

        counts = self.gateway.count_references_per_blob(sorted(referenced))
        orphaned = sorted(blob_id for blob_id, count in counts.items() if count == 0)
        for blob_id in orphaned:
            self._delete_blob(blob_id)
        return orphaned

    def has_attachable_data(self) -> bool:
        """Binary fields always take part in store/load/delete."""
        return True

    def get_index_data(self, version_info: VersionInfo, field: Field) -> list:
        """Binary attachments contribute nothing to the search index."""
        return []

    def _remove_old_file(self, field_id: int, version_no: int, keep_blob_id: Optional[str] = None) -> None:
        """Remove the previous reference of a field/version and its blob if orphaned."""
        old = self.gateway.get_reference(field_id, version_no)
        if old is None:
            # No previous file
            return

        self.gateway.remove_reference(field_id, version_no)

        if old.blob_id == keep_blob_id:
            return

        counts = self.gateway.count_references_per_blob([old.blob_id])
        if counts.get(old.blob_id, 0) == 0:
            self._delete_blob(old.blob_id)

    def _delete_blob(self, blob_id: str) -> None:
        try:
            binary_file = self.io_service.load_blob(blob_id)
        except BlobNotFoundError:
            return
        self.io_service.delete_blob(binary_file)
