"""Azure blob storage implementation."""

import logging
from pathlib import Path

from ..errors import BlobNotFoundError, StorageError
from ..storage_models import BinaryFile, BinaryFileCreateStruct

logger = logging.getLogger(__name__)


class AzureIOService:
    """
    Azure Blob Storage object store.

    Blobs are stored under their id: prefix/<blob_id>
    """

    def __init__(self, connection_string: str, container: str, prefix: str = ""):
        """
        Initialize Azure object store.

        Args:
            connection_string: Azure Storage connection string
            container: Container name
            prefix: Optional key prefix
        """
        try:
            from azure.storage.blob import BlobServiceClient
        except ImportError:
            raise ImportError(
                "azure-storage-blob required for Azure blob storage. "
                "Install with: pip install 'fieldblob[azure]'"
            )

        self.client = BlobServiceClient.from_connection_string(connection_string)
        self.container = container
        self.prefix = prefix.strip("/") if prefix else ""

        # Ensure container exists
        container_client = self.client.get_container_client(container)
        if not container_client.exists():
            container_client.create_container()

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
        Upload the input file to Azure blob storage.

        Args:
            struct: Create struct with target id set

        Returns:
            BinaryFile with azure:// URI
        """
        if not struct.id:
            raise StorageError("Create struct has no target id")

        blob_client = self._blob_client(struct.id)

        # Check if already exists (idempotent)
        if blob_client.exists():
            logger.debug("Blob already present, skipping upload: %s", struct.id)
            return self._binary_file(struct.id, blob_client.get_blob_properties(), struct.mime_type)

        content_settings = None
        if struct.mime_type:
            from azure.storage.blob import ContentSettings
            content_settings = ContentSettings(content_type=struct.mime_type)

        with open(struct.input_path, "rb") as f:
            blob_client.upload_blob(f, overwrite=False, content_settings=content_settings)

        logger.debug("Uploaded blob %s (%d bytes)", struct.id, struct.size)
        return self._binary_file(struct.id, blob_client.get_blob_properties(), struct.mime_type)

    def load_blob(self, blob_id: str) -> BinaryFile:
        """
        Load blob properties from Azure.

        Args:
            blob_id: Blob id

        Returns:
            BinaryFile with current size and uri
        """
        blob_client = self._blob_client(blob_id)
        if not blob_client.exists():
            raise BlobNotFoundError(blob_id)
        return self._binary_file(blob_id, blob_client.get_blob_properties())

    def delete_blob(self, binary_file: BinaryFile) -> None:
        """
        Delete a blob from Azure. Missing blobs are ignored.

        Args:
            binary_file: Blob to delete
        """
        from azure.core.exceptions import ResourceNotFoundError

        try:
            self._blob_client(binary_file.id).delete_blob()
            logger.debug("Deleted blob %s", binary_file.id)
        except ResourceNotFoundError:
            logger.debug("Blob already gone: %s", binary_file.id)

    def exists(self, blob_id: str) -> bool:
        """
        Check if blob exists in Azure storage.

        Args:
            blob_id: Blob id to check

        Returns:
            True if blob exists
        """
        return self._blob_client(blob_id).exists()

    def _key_for(self, blob_id: str) -> str:
        """Build the container key for a blob id."""
        key = blob_id.lstrip("/")
        if self.prefix:
            key = f"{self.prefix}/{key}"
        return key

    def _blob_client(self, blob_id: str):
        return self.client.get_blob_client(container=self.container, blob=self._key_for(blob_id))

    def _binary_file(self, blob_id: str, props, mime_type=None) -> BinaryFile:
        content_settings = props.get("content_settings")
        if mime_type is None and content_settings is not None:
            mime_type = content_settings.get("content_type")
        return BinaryFile(
            id=blob_id,
            uri=f"azure://{self.container}/{self._key_for(blob_id)}",
            size=props.get("size", 0),
            mime_type=mime_type,
            mtime=props.get("last_modified"),
        )
