"""Unit tests for RealmService construction and wiring."""

from unittest.mock import MagicMock, create_autospec

import pytest

from realm.application.observability import RealmServiceProbe
from realm.application.services import (
    AuthorizationStore,
    CredentialStore,
    IdentityStore,
    RealmService,
)
from realm.ports.config import (
    ConnectorConfig,
    DomainConfig,
    StoreConfig,
    StoreType,
    StoreTypeConfig,
)
from realm.ports.connectors import (
    AuthorizationStoreConnector,
    CredentialStoreConnector,
    IConnectorRegistry,
    IdentityStoreConnector,
)
from realm.ports.exceptions import (
    ConnectorInitializationError,
    IdentityStoreError,
    StoreError,
)

_PROTOCOLS = {
    StoreType.IDENTITY: IdentityStoreConnector,
    StoreType.CREDENTIAL: CredentialStoreConnector,
    StoreType.AUTHORIZATION: AuthorizationStoreConnector,
}


def _store(*connector_ids: str, domain: str | None = None, cache: bool = False):
    return StoreTypeConfig(
        enable_cache=cache,
        connectors=[
            ConnectorConfig(
                connector_id=connector_id,
                connector_type="Mock",
                domain_name=domain,
            )
            for connector_id in connector_ids
        ],
    )


def _config(**overrides) -> StoreConfig:
    values = {
        "identity_store": _store("ids-1"),
        "credential_store": _store("cs-1"),
        "authorization_store": _store("as-1"),
    }
    values.update(overrides)
    return StoreConfig(**values)


@pytest.fixture
def created():
    """Connectors handed out by the mock registry, keyed by store type."""
    return {store_type: [] for store_type in StoreType}


@pytest.fixture
def mock_registry(created):
    """Create mock registry producing autospec connectors."""
    registry = create_autospec(IConnectorRegistry, instance=True)

    def _create(store_type, connector_type):
        connector = create_autospec(_PROTOCOLS[store_type], instance=True)
        created[store_type].append(connector)
        return connector

    registry.create.side_effect = _create
    return registry


@pytest.fixture
def mock_probe():
    """Create mock realm service probe."""
    return create_autospec(RealmServiceProbe, instance=True)


class TestRealmServiceConstruction:
    """Tests for building a realm from configuration."""

    def test_builds_the_three_stores(self, mock_registry, mock_probe):
        realm = RealmService(_config(), mock_registry, probe=mock_probe)

        assert isinstance(realm.identity_store, IdentityStore)
        assert isinstance(realm.authorization_store, AuthorizationStore)
        assert isinstance(realm.credential_store, CredentialStore)
        mock_probe.realm_initialized.assert_called_once()

    def test_initializes_each_connector_with_its_config(
        self, mock_registry, created, mock_probe
    ):
        config = _config()

        RealmService(config, mock_registry, probe=mock_probe)

        created[StoreType.IDENTITY][0].init.assert_called_once_with(
            "ids-1", config.identity_store.connectors[0]
        )
        mock_registry.create.assert_any_call(StoreType.CREDENTIAL, "Mock")

    def test_connectors_join_their_domain(self, mock_registry, mock_probe):
        config = _config(
            domains=[DomainConfig(name="SALES", priority=5)],
            identity_store=_store("ids-sales", domain="SALES"),
        )

        realm = RealmService(config, mock_registry, probe=mock_probe)

        sales = realm.domain_manager.get_domain_from_name("SALES")
        assert list(sales.identity_store_connectors) == ["ids-sales"]
        assert sales.priority == 5

    def test_default_domain_priority_from_config(self, mock_registry, mock_probe):
        config = _config(domains=[DomainConfig(name="PRIMARY", priority=3)])

        realm = RealmService(config, mock_registry, probe=mock_probe)

        assert realm.domain_manager.get_default_domain().priority == 3

    def test_custom_default_domain_name(self, mock_registry, mock_probe):
        realm = RealmService(
            _config(), mock_registry, default_domain_name="CORP", probe=mock_probe
        )

        assert "ids-1" in realm.domain_manager.get_default_domain().identity_store_connectors
        assert realm.domain_manager.get_default_domain().name == "CORP"

    def test_empty_store_type_raises(self, mock_registry, mock_probe):
        with pytest.raises(StoreError, match="credential"):
            RealmService(
                _config(credential_store=StoreTypeConfig()), mock_registry, probe=mock_probe
            )

    def test_unknown_connector_type_raises(self, mock_registry, mock_probe):
        mock_registry.create.side_effect = StoreError("No factory")

        with pytest.raises(StoreError, match="No factory"):
            RealmService(_config(), mock_registry, probe=mock_probe)

    def test_init_failure_aborts_construction(self, mock_registry, mock_probe):
        connector = create_autospec(IdentityStoreConnector, instance=True)
        connector.init.side_effect = IdentityStoreError("cannot connect")
        mock_registry.create.side_effect = None
        mock_registry.create.return_value = connector

        with pytest.raises(ConnectorInitializationError) as exc_info:
            RealmService(_config(), mock_registry, probe=mock_probe)

        assert exc_info.value.connector_id == "ids-1"
        mock_probe.connector_initialization_failed.assert_called_once_with(
            StoreType.IDENTITY, "ids-1", "cannot connect"
        )

    def test_unknown_connector_domain_raises(self, mock_registry, mock_probe):
        config = _config(identity_store=_store("ids-1", domain="HR"))

        with pytest.raises(StoreError, match="unknown domain HR"):
            RealmService(config, mock_registry, probe=mock_probe)

    def test_authenticate_delegates_to_credential_store(
        self, mock_registry, mock_probe
    ):
        realm = RealmService(_config(), mock_registry, probe=mock_probe)
        realm._credential_store = MagicMock()

        realm.authenticate([])

        realm._credential_store.authenticate.assert_called_once_with([])


class TestCacheDecorators:
    """Tests for applying caller-supplied cache decorators."""

    def test_decorators_applied_when_both_flags_set(self, mock_registry, mock_probe):
        decorated = MagicMock()
        config = _config(enable_cache=True, identity_store=_store("ids-1", cache=True))

        realm = RealmService(
            config,
            mock_registry,
            identity_store_decorator=lambda store: decorated,
            probe=mock_probe,
        )

        assert realm.identity_store is decorated
        assert isinstance(realm.authorization_store, AuthorizationStore)
        mock_probe.store_decorated.assert_called_once_with(StoreType.IDENTITY)

    def test_store_flag_alone_does_not_decorate(self, mock_registry, mock_probe):
        decorator = MagicMock()
        config = _config(identity_store=_store("ids-1", cache=True))

        realm = RealmService(
            config, mock_registry, identity_store_decorator=decorator, probe=mock_probe
        )

        decorator.assert_not_called()
        assert isinstance(realm.identity_store, IdentityStore)

    def test_missing_decorator_is_reported(self, mock_registry, mock_probe):
        config = _config(
            enable_cache=True, authorization_store=_store("as-1", cache=True)
        )

        realm = RealmService(config, mock_registry, probe=mock_probe)

        assert isinstance(realm.authorization_store, AuthorizationStore)
        mock_probe.cache_decorator_missing.assert_called_once_with(
            StoreType.AUTHORIZATION
        )
