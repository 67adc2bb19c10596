"""High-level service layer for attachment operations."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .config import FieldBlobConfig, load_config
from .context import ProjectContext
from .core import AttachmentData, Field, VersionInfo
from .errors import InvalidInputError, ReferenceNotFoundError
from .gateway import ReferenceGateway, make_reference_gateway
from .mime import ExtensionMimeTypeDetector, MimeTypeDetector
from .path_generator import DigestPathGenerator, PathGenerator
from .service_types import AttachmentInfo, BlobUsage, DeleteResult, StoreResult
from .storage import IOService, make_io_service
from .synchronizer import AttachmentStorage


@dataclass
class AttachmentDeps:
    """Dependency injection container for testability."""
    gateway: ReferenceGateway
    io_service: IOService
    path_generator: PathGenerator = field(default_factory=DigestPathGenerator)
    mime_type_detector: MimeTypeDetector = field(default_factory=ExtensionMimeTypeDetector)


def deps_from_config(
    config: FieldBlobConfig,
    root: Path,
    io_service_factory: Callable = make_io_service,
    gateway_factory: Callable = make_reference_gateway,
) -> AttachmentDeps:
    """Build collaborators from project configuration."""
    return AttachmentDeps(
        gateway=gateway_factory(config, root),
        io_service=io_service_factory(config.storage, root),
        path_generator=DigestPathGenerator(config.path_prefix),
    )


class AttachmentService:
    """High-level service for attachment operations.

    Every operation runs inside one gateway transaction so that reference
    rows and reference counts are read and written consistently.
    """

    def __init__(self, deps: Optional[AttachmentDeps] = None, ctx: Optional[ProjectContext] = None):
        """Initialize with deps, or build them from the enclosing project.

        Args:
            deps: Full dependency injection (for testing)
            ctx: Project context used when deps is None
        """
        if deps is None:
            ctx = ctx or ProjectContext()
            deps = deps_from_config(load_config(ctx), ctx.root)
        self.deps = deps
        self.storage = AttachmentStorage(
            deps.gateway,
            deps.io_service,
            deps.path_generator,
            deps.mime_type_detector,
        )

    @property
    def gateway(self) -> ReferenceGateway:
        return self.deps.gateway

    def close(self) -> None:
        """Release the reference gateway connection."""
        self.gateway.close()

    def __enter__(self) -> "AttachmentService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def store_file(
        self,
        field_id: int,
        version_no: int,
        path: Path,
        *,
        content_id: int = 0,
        language_code: str = "eng-GB",
        mime_type: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> StoreResult:
        """Upload a local file into a field/version."""
        version_info = VersionInfo(content_id=content_id, version_no=version_no)
        target = Field(
            id=field_id,
            language_code=language_code,
            external_data=AttachmentData(
                input_uri=str(path),
                mime_type=mime_type,
                file_name=file_name,
            ),
        )
        with self.gateway.transaction():
            self.storage.store_attachment(version_info, target)

        data = target.external_data
        return StoreResult(
            field_id=field_id,
            version_no=version_no,
            blob_id=data.id,
            mime_type=data.mime_type,
            uri=data.uri,
            size=data.file_size or 0,
        )

    def load(self, field_id: int, version_no: int, *, content_id: int = 0) -> AttachmentInfo:
        """Load a field's attachment with live object store metadata.

        Raises:
            ReferenceNotFoundError: If the field/version has no attachment
        """
        version_info = VersionInfo(content_id=content_id, version_no=version_no)
        target = self.storage.load_attachment(version_info, Field(id=field_id))
        data = target.external_data
        if data is None:
            raise ReferenceNotFoundError(field_id, version_no)
        return AttachmentInfo(
            field_id=field_id,
            version_no=version_no,
            blob_id=data.id,
            mime_type=data.mime_type,
            file_name=data.file_name,
            uri=data.uri,
            size=data.file_size,
        )

    def copy(
        self,
        source_field_id: int,
        target_field_id: int,
        version_no: int,
        *,
        source_version_no: Optional[int] = None,
        content_id: int = 0,
    ) -> AttachmentInfo:
        """Point another field at the blob of an existing attachment.

        Raises:
            ReferenceNotFoundError: If the source has no attachment
        """
        source_version = source_version_no if source_version_no is not None else version_no
        if (source_field_id, source_version) == (target_field_id, version_no):
            raise InvalidInputError("Cannot copy an attachment onto itself")
        with self.gateway.transaction():
            ref = self.gateway.get_reference(source_field_id, source_version)
            if ref is None:
                raise ReferenceNotFoundError(source_field_id, source_version)
            source = Field(id=source_field_id, external_data=ref.to_attachment_data())
            target = Field(id=target_field_id)
            version_info = VersionInfo(content_id=content_id, version_no=version_no)
            self.storage.copy_reference(version_info, target, source)
        return self.load(target_field_id, version_no, content_id=content_id)

    def delete(self, version_no: int, field_ids: List[int], *, content_id: int = 0) -> DeleteResult:
        """Delete the attachments of several fields in one version."""
        version_info = VersionInfo(content_id=content_id, version_no=version_no)
        with self.gateway.transaction():
            referenced = sorted(self.gateway.get_referenced_blob_ids(field_ids, version_no)) if field_ids else []
            deleted = self.storage.delete_attachments(version_info, field_ids)

        return DeleteResult(
            version_no=version_no,
            field_ids=list(field_ids),
            blobs_deleted=deleted,
            blobs_kept=[blob_id for blob_id in referenced if blob_id not in deleted],
        )

    def usage(self, blob_id: str) -> BlobUsage:
        """Report which field/version pairs reference a blob."""
        refs = self.gateway.list_references(blob_id)
        return BlobUsage(
            blob_id=blob_id,
            references=[f"{ref.field_id}/{ref.version_no}" for ref in refs],
            count=self.gateway.count_references_per_blob([blob_id])[blob_id],
        )
