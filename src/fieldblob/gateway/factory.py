"""Factory for creating reference gateway instances."""

from pathlib import Path
from typing import Callable, Dict

from ..config import FieldBlobConfig
from ..errors import UnknownGatewayError
from .base import ReferenceGateway
from .memory import InMemoryReferenceGateway
from .sqlite import SqliteReferenceGateway

GATEWAYS: Dict[str, Callable[[FieldBlobConfig, Path], ReferenceGateway]] = {
    "sqlite": lambda config, root: SqliteReferenceGateway.open(config.database_path(root)),
    "memory": lambda config, root: InMemoryReferenceGateway(),
}


def make_reference_gateway(config: FieldBlobConfig, root: Path) -> ReferenceGateway:
    """
    Create the reference gateway named by config.database.gateway.

    Args:
        config: Project configuration
        root: Project root, base for relative database paths

    Returns:
        ReferenceGateway instance

    Raises:
        UnknownGatewayError: If no gateway is registered under that name
    """
    name = config.database.gateway
    try:
        build = GATEWAYS[name]
    except KeyError:
        raise UnknownGatewayError(name, list(GATEWAYS))
    return build(config, root)
