"""Base protocol for object store implementations."""

from typing import Protocol

from ..storage_models import BinaryFile, BinaryFileCreateStruct


class IOService(Protocol):
    """
    Protocol for object store implementations.

    All implementations must provide create/load/delete/exists operations.
    Deleting a missing blob is a no-op and creating an already present blob
    is tolerated, so callers may repeat either call safely.
    """

    def new_create_struct_from_local_file(self, path: str) -> BinaryFileCreateStruct:
        """
        Describe a local file for a later create_blob call.

        Args:
            path: Local file path

        Returns:
            BinaryFileCreateStruct without a target id
        """
        ...

    def create_blob(self, struct: BinaryFileCreateStruct) -> BinaryFile:
        """
        Commit a local file into the store under ``struct.id``.

        Args:
            struct: Create struct with target id set

        Returns:
            BinaryFile describing the stored blob
        """
        ...

    def load_blob(self, blob_id: str) -> BinaryFile:
        """
        Load the current metadata of a blob.

        Args:
            blob_id: Blob id (storage path)

        Returns:
            BinaryFile with live size and uri

        Raises:
            BlobNotFoundError: If the blob does not exist
        """
        ...

    def delete_blob(self, binary_file: BinaryFile) -> None:
        """
        Delete a blob. Missing blobs are ignored.

        Args:
            binary_file: Blob to delete
        """
        ...

    def exists(self, blob_id: str) -> bool:
        """
        Check if a blob exists in storage.

        Args:
            blob_id: Blob id to check

        Returns:
            True if blob exists
        """
        ...
