"""Realm service: the broker's context object.

A RealmService is constructed once from a StoreConfig. It creates and
initializes every configured connector, registers each in its domain and
builds the three store aggregators on top. There is no process-wide
instance; callers hold and pass the service explicitly.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from infrastructure.version import __version__
from realm.application.observability import (
    DefaultRealmServiceProbe,
    RealmServiceProbe,
)
from realm.application.services.authorization_store import AuthorizationStore
from realm.application.services.credential_store import CredentialStore
from realm.application.services.domain_manager import DomainManager
from realm.application.services.identity_store import IdentityStore
from realm.application.value_objects import AuthenticationContext
from realm.domain.aggregates.domain import Domain
from realm.domain.callbacks import Callback
from realm.domain.protocols import AuthorizationStoreHandle, IdentityStoreHandle
from realm.domain.value_objects import DEFAULT_DOMAIN_NAME
from realm.ports.config import DomainConfig, StoreConfig, StoreType, StoreTypeConfig
from realm.ports.connectors import IConnectorRegistry
from realm.ports.exceptions import (
    ConnectorError,
    ConnectorInitializationError,
    DomainNotFoundError,
    StoreError,
)

IdentityStoreDecorator = Callable[[IdentityStoreHandle], IdentityStoreHandle]
AuthorizationStoreDecorator = Callable[[AuthorizationStoreHandle], AuthorizationStoreHandle]


class RealmService:
    """Owns the domains, connectors and store aggregators of a realm.

    Caching is delegated: when the global cache flag and a store type's
    cache flag are both set, the matching caller-supplied decorator wraps
    that store. The decorated store is what ``identity_store`` and
    ``authorization_store`` return and what built entities call back into.
    """

    def __init__(
        self,
        config: StoreConfig,
        registry: IConnectorRegistry,
        *,
        identity_store_decorator: IdentityStoreDecorator | None = None,
        authorization_store_decorator: AuthorizationStoreDecorator | None = None,
        default_domain_name: str = DEFAULT_DOMAIN_NAME,
        probe: RealmServiceProbe | None = None,
    ) -> None:
        """Build the realm.

        Args:
            config: Resolved store configuration
            registry: Creates connectors from their connector-type tag
            identity_store_decorator: Cache decorator for the identity store
            authorization_store_decorator: Cache decorator for the
                authorization store
            default_domain_name: Name of the domain for unqualified usernames
            probe: Domain probe for observability

        Raises:
            StoreError: If a store type has no connectors, a connector type is
                unknown or a connector references an unknown domain
            ConnectorInitializationError: If a connector fails to initialize
            DuplicateDomainNameError: If a domain is declared twice
        """
        self._probe = probe or DefaultRealmServiceProbe()
        self._registry = registry
        self._domain_manager = DomainManager(default_domain_name)
        self._register_domains(config.domains)

        identity_connectors = self._init_connectors(
            StoreType.IDENTITY,
            config.identity_store,
            self._domain_manager.add_identity_store_connector_to_domain,
        )
        self._init_connectors(
            StoreType.CREDENTIAL,
            config.credential_store,
            self._domain_manager.add_credential_store_connector_to_domain,
        )
        authorization_connectors = self._init_connectors(
            StoreType.AUTHORIZATION,
            config.authorization_store,
            self._domain_manager.add_authorization_store_connector_to_domain,
        )

        self._identity_store: IdentityStoreHandle = IdentityStore(
            self, self._domain_manager, identity_connectors
        )
        self._authorization_store: AuthorizationStoreHandle = AuthorizationStore(
            self, authorization_connectors, config.authorization_store.connectors
        )
        self._credential_store = CredentialStore(self, self._domain_manager)

        if config.is_cache_enabled(StoreType.IDENTITY):
            self._identity_store = self._decorate(
                StoreType.IDENTITY, self._identity_store, identity_store_decorator
            )
        if config.is_cache_enabled(StoreType.AUTHORIZATION):
            self._authorization_store = self._decorate(
                StoreType.AUTHORIZATION,
                self._authorization_store,
                authorization_store_decorator,
            )

        self._probe.realm_initialized(
            version=__version__,
            domains=[domain.name for domain in self._domain_manager.list_domains()],
            identity_connectors=len(config.identity_store.connectors),
            credential_connectors=len(config.credential_store.connectors),
            authorization_connectors=len(config.authorization_store.connectors),
        )

    @property
    def identity_store(self) -> IdentityStoreHandle:
        return self._identity_store

    @property
    def authorization_store(self) -> AuthorizationStoreHandle:
        return self._authorization_store

    @property
    def credential_store(self) -> CredentialStore:
        return self._credential_store

    @property
    def domain_manager(self) -> DomainManager:
        return self._domain_manager

    def authenticate(self, callbacks: Sequence[Callback]) -> AuthenticationContext:
        """Authenticate through the credential store.

        Raises:
            AuthenticationFailure: If authentication fails
        """
        return self._credential_store.authenticate(callbacks)

    def _register_domains(self, domains: Sequence[DomainConfig]) -> None:
        default_domain = self._domain_manager.get_default_domain()
        for domain_config in domains:
            if domain_config.name == default_domain.name:
                default_domain.priority = domain_config.priority
            else:
                self._domain_manager.add_domain(
                    Domain(name=domain_config.name, priority=domain_config.priority)
                )
            self._probe.domain_registered(domain_config.name, domain_config.priority)

    def _init_connectors(
        self,
        store_type: StoreType,
        store_config: StoreTypeConfig,
        add_to_domain: Callable[[str, Any, str], None],
    ) -> dict[str, Any]:
        if not store_config.connectors:
            raise StoreError(
                f"At least one {store_type} store connector must be configured."
            )

        connectors: dict[str, Any] = {}
        for connector_config in store_config.connectors:
            connector_id = connector_config.connector_id
            connector = self._registry.create(store_type, connector_config.connector_type)
            try:
                connector.init(connector_id, connector_config)
            except ConnectorError as e:
                self._probe.connector_initialization_failed(
                    store_type, connector_id, str(e)
                )
                raise ConnectorInitializationError(connector_id, str(e)) from e

            domain_name = (
                connector_config.domain_name
                or self._domain_manager.get_default_domain().name
            )
            try:
                add_to_domain(connector_id, connector, domain_name)
            except DomainNotFoundError as e:
                raise StoreError(
                    f"Connector {connector_id} references unknown domain {domain_name}."
                ) from e

            connectors[connector_id] = connector
            self._probe.connector_initialized(
                store_type, connector_id, connector_config.connector_type, domain_name
            )
        return connectors

    def _decorate(self, store_type: StoreType, store: Any, decorator: Callable | None) -> Any:
        if decorator is None:
            self._probe.cache_decorator_missing(store_type)
            return store
        self._probe.store_decorated(store_type)
        return decorator(store)
