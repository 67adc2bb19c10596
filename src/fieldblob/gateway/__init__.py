"""Gateway package for the attachment reference table."""

from .base import ReferenceGateway
from .factory import make_reference_gateway
from .memory import InMemoryReferenceGateway
from .sqlite import SqliteReferenceGateway

__all__ = [
    "InMemoryReferenceGateway",
    "ReferenceGateway",
    "SqliteReferenceGateway",
    "make_reference_gateway",
]
