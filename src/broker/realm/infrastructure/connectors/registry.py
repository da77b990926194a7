"""Connector registry.

Maps (store type, connector-type tag) to a factory producing a fresh,
uninitialized connector. The default registry holds the built-in
connectors; deployments register additional backends on their own registry
before constructing a realm.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from typing import Any

from realm.infrastructure.connectors.in_memory.authorization_connector import (
    CONNECTOR_TYPE as IN_MEMORY_AUTHORIZATION,
    InMemoryAuthorizationStoreConnector,
)
from realm.infrastructure.connectors.in_memory.credential_connector import (
    CONNECTOR_TYPE as IN_MEMORY_CREDENTIAL,
    InMemoryCredentialStoreConnector,
)
from realm.infrastructure.connectors.in_memory.identity_connector import (
    CONNECTOR_TYPE as IN_MEMORY_IDENTITY,
    InMemoryIdentityStoreConnector,
)
from realm.infrastructure.connectors.sql.credential_connector import (
    CONNECTOR_TYPE as SQL_CREDENTIAL,
    SqlCredentialStoreConnector,
)
from realm.infrastructure.connectors.sql.identity_connector import (
    CONNECTOR_TYPE as SQL_IDENTITY,
    SqlIdentityStoreConnector,
)
from realm.ports.config import StoreType
from realm.ports.exceptions import StoreError

ConnectorFactory = Callable[[], Any]


class ConnectorRegistry:
    """Registry of connector factories keyed by store type and type tag."""

    def __init__(self) -> None:
        self._factories: dict[tuple[StoreType, str], ConnectorFactory] = {}

    def register(
        self, store_type: StoreType, connector_type: str, factory: ConnectorFactory
    ) -> None:
        """Register a factory.

        Raises:
            StoreError: If a factory is already registered for the pair
        """
        key = (store_type, connector_type)
        if key in self._factories:
            raise StoreError(
                f"A {store_type} connector factory is already registered for "
                f"type {connector_type}."
            )
        self._factories[key] = factory

    def create(self, store_type: StoreType, connector_type: str) -> Any:
        """Create an uninitialized connector.

        Raises:
            StoreError: If no factory is registered for the pair
        """
        factory = self._factories.get((store_type, connector_type))
        if factory is None:
            raise StoreError(
                f"No {store_type} store connector factory found for type "
                f"{connector_type}."
            )
        return factory()

    def connector_types(self, store_type: StoreType) -> list[str]:
        """List the tags registered for a store type."""
        return [tag for kind, tag in self._factories if kind == store_type]


def create_default_registry() -> ConnectorRegistry:
    """Create a registry holding the built-in connectors."""
    registry = ConnectorRegistry()
    registry.register(
        StoreType.IDENTITY, IN_MEMORY_IDENTITY, InMemoryIdentityStoreConnector
    )
    registry.register(
        StoreType.CREDENTIAL, IN_MEMORY_CREDENTIAL, InMemoryCredentialStoreConnector
    )
    registry.register(
        StoreType.AUTHORIZATION,
        IN_MEMORY_AUTHORIZATION,
        InMemoryAuthorizationStoreConnector,
    )
    registry.register(StoreType.IDENTITY, SQL_IDENTITY, SqlIdentityStoreConnector)
    registry.register(StoreType.CREDENTIAL, SQL_CREDENTIAL, SqlCredentialStoreConnector)
    return registry


@lru_cache
def get_default_registry() -> ConnectorRegistry:
    """Get the process-wide registry of built-in connectors."""
    return create_default_registry()
