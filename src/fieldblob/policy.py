"""Storage policy: where attachment blobs are kept."""

from pydantic import BaseModel, model_validator

from .errors import InvalidStorageProviderError

SUPPORTED_PROVIDERS = ("fs", "azure")


class StoragePolicy(BaseModel):
    """
    Object store configuration.

    Providers:
    - "fs" (default): container is a directory, relative to the project root
    - "azure": container is an Azure Blob Storage container; credentials come
      from AZURE_STORAGE_CONNECTION_STRING
    """
    provider: str = "fs"            # "fs" | "azure"
    container: str = "var/storage"  # Container name or fs path
    prefix: str = ""                # Optional key prefix for organization

    @model_validator(mode='after')
    def validate_provider(self):
        """Reject unknown providers and an empty container."""
        if self.provider not in SUPPORTED_PROVIDERS:
            raise InvalidStorageProviderError(self.provider)
        if not self.container:
            raise InvalidStorageProviderError(self.provider, "storage.container is required")
        return self
