"""Storage package for object store backends."""

from .base import IOService
from .factory import make_io_service
from .fs import FilesystemIOService

__all__ = ["FilesystemIOService", "IOService", "make_io_service"]
