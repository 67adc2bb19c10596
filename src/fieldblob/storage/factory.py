"""Factory for creating object store instances."""

import os
from pathlib import Path

from ..errors import InvalidStorageProviderError
from ..policy import StoragePolicy
from .azure import AzureIOService
from .base import IOService
from .fs import FilesystemIOService


def validate_azure_config(policy: StoragePolicy) -> None:
    """
    Early validation of Azure configuration.

    Args:
        policy: Storage policy to validate

    Raises:
        InvalidStorageProviderError: If configuration is invalid
    """
    if "AZURE_STORAGE_CONNECTION_STRING" not in os.environ:
        raise InvalidStorageProviderError(
            "azure",
            "set AZURE_STORAGE_CONNECTION_STRING and storage.container",
        )


def make_io_service(policy: StoragePolicy, root: Path | None = None) -> IOService:
    """
    Create object store instance based on policy.

    Args:
        policy: Storage policy configuration
        root: Base for relative filesystem containers (project root)

    Returns:
        IOService instance

    Raises:
        InvalidStorageProviderError: If the provider is unknown or misconfigured
    """
    if policy.provider == "azure":
        validate_azure_config(policy)
        conn_str = os.environ["AZURE_STORAGE_CONNECTION_STRING"]
        return AzureIOService(conn_str, policy.container, policy.prefix)

    elif policy.provider == "fs":
        base_dir = Path(policy.container)
        if not base_dir.is_absolute() and root is not None:
            base_dir = root / base_dir
        if policy.prefix:
            base_dir = base_dir / policy.prefix
        return FilesystemIOService(base_dir)

    else:
        raise InvalidStorageProviderError(policy.provider)
