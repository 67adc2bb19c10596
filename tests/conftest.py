"""Shared test fixtures and utilities."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from fieldblob.core import AttachmentData, Field, VersionInfo
from fieldblob.gateway import InMemoryReferenceGateway, SqliteReferenceGateway
from fieldblob.mime import ExtensionMimeTypeDetector
from fieldblob.path_generator import DigestPathGenerator
from fieldblob.storage import FilesystemIOService
from fieldblob.storage_models import BinaryFile, BinaryFileCreateStruct
from fieldblob.synchronizer import AttachmentStorage


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture to write input files relative to tmp_path/input."""
    def _write(name: str, content: bytes = b"test content"):
        file_path = tmp_path / "input" / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
        return file_path
    return _write


@pytest.fixture
def version1():
    return VersionInfo(content_id=10, version_no=1)


@pytest.fixture
def make_field():
    """Factory fixture for fields with a pending input."""
    def _make(field_id: int, path: Path = None, **data):
        external = None
        if path is not None or data:
            external = AttachmentData(input_uri=str(path) if path else None, **data)
        return Field(id=field_id, external_data=external)
    return _make


@pytest.fixture(params=["memory", "sqlite"])
def gateway(request, tmp_path):
    """Every gateway implementation, so behavior is checked against both."""
    if request.param == "memory":
        yield InMemoryReferenceGateway()
    else:
        gw = SqliteReferenceGateway.open(tmp_path / "refs.sqlite3")
        yield gw
        gw.close()


@pytest.fixture
def io_service(tmp_path):
    return FilesystemIOService(tmp_path / "storage")


@pytest.fixture
def storage(gateway, io_service):
    """AttachmentStorage over real collaborators."""
    return AttachmentStorage(
        gateway,
        io_service,
        DigestPathGenerator(),
        ExtensionMimeTypeDetector(),
    )


@pytest.fixture
def mock_collaborators():
    """Mocked gateway, object store, path generator and mime detector."""
    gateway = Mock(name="gateway")
    gateway.get_reference.return_value = None
    gateway.count_references_per_blob.side_effect = lambda ids: {i: 0 for i in ids}

    io_service = Mock(name="io_service")
    io_service.new_create_struct_from_local_file.side_effect = (
        lambda path: BinaryFileCreateStruct(input_path=path, size=3)
    )
    io_service.create_blob.side_effect = lambda struct: BinaryFile(
        id=struct.id, uri=f"fs:///store/{struct.id}", size=struct.size, mime_type=struct.mime_type
    )
    io_service.load_blob.side_effect = lambda blob_id: BinaryFile(
        id=blob_id, uri=f"fs:///store/{blob_id}", size=3
    )

    path_generator = Mock(name="path_generator")
    path_generator.get_storage_path_for_field.return_value = "B1"

    mime_type_detector = Mock(name="mime_type_detector")
    mime_type_detector.get_from_path.return_value = "image/jpeg"

    return gateway, io_service, path_generator, mime_type_detector
