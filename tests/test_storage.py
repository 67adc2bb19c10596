"""Test object store implementations and factory."""

import pytest

from fieldblob.errors import BlobNotFoundError, InvalidStorageProviderError, StorageError
from fieldblob.policy import StoragePolicy
from fieldblob.storage import FilesystemIOService, make_io_service
from fieldblob.storage_models import BinaryFile, BinaryFileCreateStruct, canonicalize_uri


class TestFilesystemIOService:
    """Filesystem store behavior."""

    @pytest.fixture
    def store(self, tmp_path):
        return FilesystemIOService(tmp_path / "blobs")

    def _create(self, store, write_file, blob_id="a/b/file.txt", content=b"hello"):
        struct = store.new_create_struct_from_local_file(str(write_file("file.txt", content)))
        struct.id = blob_id
        struct.mime_type = "text/plain"
        return store.create_blob(struct)

    def test_init_creates_base_dir(self, tmp_path):
        FilesystemIOService(tmp_path / "new")
        assert (tmp_path / "new").is_dir()

    def test_create_struct_from_local_file(self, store, write_file):
        """Test the struct records path and size."""
        src = write_file("doc.pdf", b"12345")
        struct = store.new_create_struct_from_local_file(str(src))

        assert struct.input_path == str(src)
        assert struct.size == 5
        assert struct.id is None

    def test_create_struct_missing_file(self, store, tmp_path):
        with pytest.raises(FileNotFoundError):
            store.new_create_struct_from_local_file(str(tmp_path / "missing.bin"))

    def test_create_and_load(self, store, write_file):
        """Test a created blob is loadable with live metadata."""
        created = self._create(store, write_file)

        assert created.id == "a/b/file.txt"
        assert created.size == 5
        assert created.mime_type == "text/plain"
        assert created.uri.startswith("fs://")
        assert created.uri.endswith("/a/b/file.txt")

        loaded = store.load_blob("a/b/file.txt")
        assert loaded.size == 5
        assert loaded.uri == created.uri
        assert loaded.mtime is not None

    def test_create_requires_id(self, store, write_file):
        struct = store.new_create_struct_from_local_file(str(write_file("x.txt")))
        with pytest.raises(StorageError):
            store.create_blob(struct)

    def test_duplicate_create_is_tolerated(self, store, write_file):
        """Test creating the same id twice keeps the first payload."""
        self._create(store, write_file, content=b"first")
        again = self._create(store, write_file, content=b"second!")

        assert again.size == len(b"first")

    def test_load_missing(self, store):
        with pytest.raises(BlobNotFoundError, match="nope"):
            store.load_blob("nope")

    def test_delete_prunes_empty_dirs(self, store, write_file):
        """Test deleting removes the file and its now-empty parents."""
        created = self._create(store, write_file)

        store.delete_blob(created)

        assert not store.exists("a/b/file.txt")
        assert not (store.base_dir / "a").exists()
        assert store.base_dir.exists()

    def test_delete_missing_is_noop(self, store):
        """Test delete of an absent blob is idempotent."""
        store.delete_blob(BinaryFile(id="gone/file", uri="fs:///gone/file", size=0))

    def test_path_traversal_rejected(self, store, write_file):
        """Test ids cannot escape the store root."""
        assert not store.exists("../../etc/passwd")
        struct = store.new_create_struct_from_local_file(str(write_file("x.txt")))
        struct.id = "../escape.txt"
        with pytest.raises(ValueError, match="outside store root"):
            store.create_blob(struct)


class TestCanonicalizeUri:
    """URI canonicalization."""

    def test_rejects_query(self):
        with pytest.raises(ValueError, match="query or fragment"):
            canonicalize_uri("azure://container/key?sig=secret")

    def test_collapses_double_slashes_and_encodes(self):
        assert canonicalize_uri("azure://c//dir/my file") == "azure://c/dir/my%20file"

    def test_binary_file_canonicalizes(self):
        assert BinaryFile(id="x", uri="fs:///a//b", size=1).uri == "fs:///a/b"


class TestFactory:
    """make_io_service selection."""

    def test_fs_relative_to_root(self, tmp_path):
        policy = StoragePolicy(provider="fs", container="var/storage", prefix="images")
        store = make_io_service(policy, tmp_path)

        assert isinstance(store, FilesystemIOService)
        assert store.base_dir == tmp_path / "var" / "storage" / "images"

    def test_fs_absolute(self, tmp_path):
        policy = StoragePolicy(provider="fs", container=str(tmp_path / "abs"))
        assert make_io_service(policy, tmp_path / "elsewhere").base_dir == tmp_path / "abs"

    def test_azure_requires_connection_string(self, monkeypatch):
        monkeypatch.delenv("AZURE_STORAGE_CONNECTION_STRING", raising=False)
        policy = StoragePolicy(provider="azure", container="attachments")

        with pytest.raises(InvalidStorageProviderError, match="AZURE_STORAGE_CONNECTION_STRING"):
            make_io_service(policy)

    def test_unknown_provider_rejected_by_policy(self):
        with pytest.raises(InvalidStorageProviderError, match="s3"):
            StoragePolicy(provider="s3")

    def test_empty_container_rejected(self):
        with pytest.raises(InvalidStorageProviderError, match="container"):
            StoragePolicy(provider="fs", container="")


class TestCreateStruct:
    def test_defaults(self):
        struct = BinaryFileCreateStruct(input_path="/tmp/x", size=1)
        assert struct.id is None
        assert struct.mime_type is None
