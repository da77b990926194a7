"""Built-in connectors and the connector registry."""

from realm.infrastructure.connectors.registry import (
    ConnectorRegistry,
    create_default_registry,
    get_default_registry,
)

__all__ = [
    "ConnectorRegistry",
    "create_default_registry",
    "get_default_registry",
]
