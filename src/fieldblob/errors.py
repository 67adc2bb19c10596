"""Custom exceptions for fieldblob.

This module defines typed exceptions for better error handling and clearer
error messages throughout the application.
"""


class FieldBlobError(RuntimeError):
    """Base class for all fieldblob errors."""
    pass


# Lookup Errors
class NotFoundError(FieldBlobError):
    """Base class for missing references and blobs."""
    pass


class ReferenceNotFoundError(NotFoundError):
    """No attachment reference exists for a field/version pair."""

    def __init__(self, field_id: int, version_no: int):
        self.field_id = field_id
        self.version_no = version_no
        super().__init__(
            f"No attachment reference for field {field_id} in version {version_no}"
        )


class BlobNotFoundError(NotFoundError):
    """Blob is absent from the object store."""

    def __init__(self, blob_id: str):
        self.blob_id = blob_id
        super().__init__(f"Blob not found: {blob_id}")


# Input Errors
class InvalidInputError(FieldBlobError):
    """Base class for malformed input and wiring errors."""
    pass


class MissingCollaboratorError(InvalidInputError):
    """A required collaborator was not supplied at construction time."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"AttachmentStorage requires a {name}, got None")


class MimeTypeDetectionError(InvalidInputError):
    """Mime type could not be derived from the pending input."""

    def __init__(self, path: str | None, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot detect mime type of {path!r}: {reason}")


# Storage Errors
class StorageError(FieldBlobError):
    """Object store operation failed."""
    pass


# Configuration Errors
class ConfigError(FieldBlobError):
    """Base class for configuration errors."""
    pass


class InvalidStorageProviderError(ConfigError):
    """Storage provider is unknown or incompletely configured."""

    def __init__(self, provider: str, hint: str = ""):
        self.provider = provider
        message = f"Storage provider '{provider}' is not supported"
        if hint:
            message = f"Storage provider '{provider}' is misconfigured: {hint}"
        super().__init__(message)


class UnknownGatewayError(ConfigError):
    """No reference gateway is registered under the configured name."""

    def __init__(self, name: str, available: list):
        self.name = name
        self.available = available
        super().__init__(
            f"Reference gateway '{name}' is not available. "
            f"Choose one of: {', '.join(sorted(available))}"
        )
