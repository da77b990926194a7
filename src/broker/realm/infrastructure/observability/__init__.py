"""Domain-Oriented Observability for realm infrastructure."""

from realm.infrastructure.observability.config_loader_probe import (
    ConfigLoaderProbe,
    DefaultConfigLoaderProbe,
)
from realm.infrastructure.observability.connector_probe import (
    ConnectorProbe,
    DefaultConnectorProbe,
)

__all__ = [
    "ConfigLoaderProbe",
    "DefaultConfigLoaderProbe",
    "ConnectorProbe",
    "DefaultConnectorProbe",
]
