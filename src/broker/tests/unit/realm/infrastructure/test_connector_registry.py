"""Unit tests for the connector registry."""

import pytest

from realm.infrastructure.connectors import (
    ConnectorRegistry,
    create_default_registry,
    get_default_registry,
)
from realm.infrastructure.connectors.in_memory import (
    InMemoryAuthorizationStoreConnector,
    InMemoryIdentityStoreConnector,
)
from realm.infrastructure.connectors.sql import SqlCredentialStoreConnector
from realm.ports.config import StoreType
from realm.ports.connectors import IConnectorRegistry
from realm.ports.exceptions import StoreError


class TestConnectorRegistry:
    """Tests for ConnectorRegistry."""

    def test_implements_protocol(self):
        assert isinstance(ConnectorRegistry(), IConnectorRegistry)

    def test_create_returns_fresh_instances(self):
        registry = ConnectorRegistry()
        registry.register(StoreType.IDENTITY, "Memory", InMemoryIdentityStoreConnector)

        first = registry.create(StoreType.IDENTITY, "Memory")
        second = registry.create(StoreType.IDENTITY, "Memory")

        assert isinstance(first, InMemoryIdentityStoreConnector)
        assert first is not second

    def test_unknown_type_raises(self):
        registry = ConnectorRegistry()

        with pytest.raises(StoreError, match="No identity store connector factory"):
            registry.create(StoreType.IDENTITY, "Ldap")

    def test_tags_are_scoped_by_store_type(self):
        registry = ConnectorRegistry()
        registry.register(StoreType.IDENTITY, "Memory", InMemoryIdentityStoreConnector)

        with pytest.raises(StoreError):
            registry.create(StoreType.AUTHORIZATION, "Memory")

    def test_duplicate_registration_raises(self):
        registry = ConnectorRegistry()
        registry.register(StoreType.IDENTITY, "Memory", InMemoryIdentityStoreConnector)

        with pytest.raises(StoreError):
            registry.register(
                StoreType.IDENTITY, "Memory", InMemoryIdentityStoreConnector
            )


class TestDefaultRegistry:
    """Tests for the built-in connector registrations."""

    def test_registers_built_in_connectors(self):
        registry = create_default_registry()

        assert sorted(registry.connector_types(StoreType.IDENTITY)) == [
            "InMemoryIdentityStore",
            "SqlIdentityStore",
        ]
        assert sorted(registry.connector_types(StoreType.CREDENTIAL)) == [
            "InMemoryCredentialStore",
            "SqlCredentialStore",
        ]
        assert registry.connector_types(StoreType.AUTHORIZATION) == [
            "InMemoryAuthorizationStore"
        ]

    def test_creates_by_tag(self):
        registry = create_default_registry()

        assert isinstance(
            registry.create(StoreType.CREDENTIAL, "SqlCredentialStore"),
            SqlCredentialStoreConnector,
        )
        assert isinstance(
            registry.create(StoreType.AUTHORIZATION, "InMemoryAuthorizationStore"),
            InMemoryAuthorizationStoreConnector,
        )

    def test_default_registry_is_cached(self):
        assert get_default_registry() is get_default_registry()
