"""Filesystem object store implementation."""

import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from ..errors import BlobNotFoundError, StorageError
from ..storage_models import BinaryFile, BinaryFileCreateStruct

logger = logging.getLogger(__name__)


class FilesystemIOService:
    """
    Local filesystem object store.

    Blobs are stored under their id: base_dir/<blob_id>
    """

    def __init__(self, base_dir: Path):
        """
        Initialize filesystem store.

        Args:
            base_dir: Base directory for blob storage
        """
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def new_create_struct_from_local_file(self, path: str) -> BinaryFileCreateStruct:
        """
        Describe a local file for create_blob.

        Args:
            path: Local file path

        Returns:
            BinaryFileCreateStruct with size filled in
        """
        local = Path(path)
        if not local.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")
        return BinaryFileCreateStruct(input_path=str(local), size=local.stat().st_size)

    def create_blob(self, struct: BinaryFileCreateStruct) -> BinaryFile:
        """
        Copy the input file into the store.

        Args:
            struct: Create struct with target id set

        Returns:
            BinaryFile with fs:// URI
        """
        if not struct.id:
            raise StorageError("Create struct has no target id")

        dest = self._path_for(struct.id)

        # Check if already exists (idempotent)
        if dest.exists():
            logger.debug("Blob already present, skipping copy: %s", struct.id)
            return self._binary_file(struct.id, dest, struct.mime_type)

        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=".tmp-")
        os.close(fd)
        try:
            shutil.copy2(struct.input_path, tmp_name)
            os.replace(tmp_name, dest)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Stored blob %s (%d bytes)", struct.id, struct.size)
        return self._binary_file(struct.id, dest, struct.mime_type)

    def load_blob(self, blob_id: str) -> BinaryFile:
        """
        Load blob metadata from disk.

        Args:
            blob_id: Blob id (path relative to base_dir)

        Returns:
            BinaryFile with current size and uri
        """
        path = self._path_for(blob_id)
        if not path.is_file():
            raise BlobNotFoundError(blob_id)
        return self._binary_file(blob_id, path)

    def delete_blob(self, binary_file: BinaryFile) -> None:
        """
        Delete a blob and prune empty parent directories.

        Args:
            binary_file: Blob to delete
        """
        path = self._path_for(binary_file.id)
        if not path.exists():
            logger.debug("Blob already gone: %s", binary_file.id)
            return

        path.unlink()
        logger.debug("Deleted blob %s", binary_file.id)

        root = self.base_dir.resolve()
        parent = path.parent
        while parent != root and root in parent.parents:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent

    def exists(self, blob_id: str) -> bool:
        """
        Check if blob exists on disk.

        Args:
            blob_id: Blob id to check

        Returns:
            True if file exists
        """
        try:
            return self._path_for(blob_id).is_file()
        except ValueError:
            return False

    def _path_for(self, blob_id: str) -> Path:
        """
        Resolve a blob id to a path under base_dir.

        Raises:
            ValueError: If the id escapes the store root
        """
        root = self.base_dir.resolve()
        candidate = (root / blob_id).resolve()
        try:
            candidate.relative_to(root)
        except ValueError:
            raise ValueError(f"Blob id {blob_id!r} resolves outside store root")
        return candidate

    def _binary_file(self, blob_id: str, path: Path, mime_type=None) -> BinaryFile:
        stat = path.stat()
        return BinaryFile(
            id=blob_id,
            uri=f"fs://{path}",
            size=stat.st_size,
            mime_type=mime_type,
            mtime=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )
