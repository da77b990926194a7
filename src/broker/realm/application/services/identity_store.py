"""Identity store aggregator.

Presents the identity connectors of a realm as a single identity store.
Name lookups fan out over the connectors of the domain named by the username
prefix; id lookups go straight to the connector that holds the id.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from realm.application.observability import (
    DefaultIdentityStoreProbe,
    IdentityStoreProbe,
)
from realm.application.services.domain_manager import DomainManager
from realm.application.services.fan_out import collect_all, first_resolved
from realm.domain.aggregates.group import Group, GroupBuilder
from realm.domain.aggregates.user import User, UserBuilder
from realm.domain.protocols import StoreResolver
from realm.domain.value_objects import Claim
from realm.ports.connectors import IdentityStoreConnector
from realm.ports.exceptions import (
    ConnectorError,
    GroupNotFoundError,
    StoreError,
    UserNotFoundError,
)


class IdentityStore:
    """Single virtual identity store over any number of identity connectors."""

    def __init__(
        self,
        realm: StoreResolver,
        domain_manager: DomainManager,
        connectors: Mapping[str, IdentityStoreConnector],
        probe: IdentityStoreProbe | None = None,
    ) -> None:
        """Create the identity store.

        Args:
            realm: Resolver for the store handles attached to built entities
            domain_manager: Domains the connectors are registered in
            connectors: Every identity connector keyed by id, in configured order
            probe: Domain probe for observability

        Raises:
            StoreError: If no connectors are given
        """
        if not connectors:
            raise StoreError("At least one identity store connector must be configured.")
        self._realm = realm
        self._domain_manager = domain_manager
        self._connectors = dict(connectors)
        self._probe = probe or DefaultIdentityStoreProbe()

    def get_user(self, username: str) -> User:
        """Resolve a user by (possibly domain-qualified) name.

        The domain prefix selects which connectors are consulted; the bare
        name is what the connectors see.

        Args:
            username: Name such as "alice" or "SALES/alice"

        Returns:
            The user from the first connector that resolves the name

        Raises:
            DomainNotFoundError: If the prefix names an unknown domain
            UserNotFoundError: If no connector resolves the name; carries one
                cause per connector tried
        """
        domain = self._domain_manager.get_domain_from_username(username)
        _, bare_name = self._domain_manager.split_username(username)
        not_found = UserNotFoundError(f"User {username} was not found.")
        try:
            connector_id, builder = first_resolved(
                domain.identity_store_connectors,
                lambda connector: connector.get_user(bare_name),
                not_found,
                self._declined("get_user"),
            )
        except UserNotFoundError:
            self._probe.user_not_found(username, domain.name, len(not_found.causes))
            raise
        self._probe.user_resolved(username, connector_id, domain.name)
        return self._build_user(builder, domain.name)

    def get_user_by_claim(self, claim: Claim) -> User:
        """Resolve a user by claim.

        Only the username claim can be resolved.

        Raises:
            StoreError: If the claim is not the username claim
            UserNotFoundError: If no connector resolves the name
        """
        if not claim.is_username:
            raise StoreError(f"Claim {claim.claim_uri} is not supported for lookups.")
        return self.get_user(claim.value)

    def get_user_from_id(self, user_id: str, identity_store_id: str) -> User:
        """Get a user by id from the connector that holds it.

        Raises:
            StoreError: If no connector has the store id
            UserNotFoundError: If the connector has no such user
        """
        builder = self._connector(identity_store_id).get_user_from_id(user_id)
        return self._build_user(builder)

    def list_users(
        self, filter_pattern: str = "*", offset: int = 0, length: int = -1
    ) -> list[User]:
        """List users of every connector.

        Offset and length apply per connector. Results are concatenated in
        connector order without de-duplication.
        """
        builders = collect_all(
            self._connectors,
            lambda connector: connector.list_users(filter_pattern, offset, length),
            self._declined("list_users"),
        )
        return [self._build_user(builder) for builder in builders]

    def get_user_attribute_values(
        self,
        user_id: str,
        identity_store_id: str,
        attribute_names: Sequence[str] | None = None,
    ) -> dict[str, str]:
        """Get a user's attribute values keyed by claim URI.

        Returns:
            Mapping of claim URI to value; empty when the user has none
        """
        values = self._connector(identity_store_id).get_user_attribute_values(
            user_id, attribute_names
        )
        return dict(values or {})

    def get_group(self, group_name: str) -> Group:
        """Resolve a group by (possibly domain-qualified) name.

        Raises:
            DomainNotFoundError: If the prefix names an unknown domain
            GroupNotFoundError: If no connector resolves the name
        """
        domain = self._domain_manager.get_domain_from_username(group_name)
        _, bare_name = self._domain_manager.split_username(group_name)
        not_found = GroupNotFoundError(f"Group {group_name} was not found.")
        try:
            connector_id, builder = first_resolved(
                domain.identity_store_connectors,
                lambda connector: connector.get_group(bare_name),
                not_found,
                self._declined("get_group"),
            )
        except GroupNotFoundError:
            self._probe.group_not_found(group_name, domain.name, len(not_found.causes))
            raise
        self._probe.group_resolved(group_name, connector_id, domain.name)
        return self._build_group(builder, domain.name)

    def get_group_from_id(self, group_id: str, identity_store_id: str) -> Group:
        """Get a group by id from the connector that holds it.

        Raises:
            StoreError: If no connector has the store id
            GroupNotFoundError: If the connector has no such group
        """
        builder = self._connector(identity_store_id).get_group_by_id(group_id)
        return self._build_group(builder)

    def list_groups(
        self, filter_pattern: str = "*", offset: int = 0, length: int = -1
    ) -> list[Group]:
        """List groups of every connector."""
        builders = collect_all(
            self._connectors,
            lambda connector: connector.list_groups(filter_pattern, offset, length),
            self._declined("list_groups"),
        )
        return [self._build_group(builder) for builder in builders]

    def get_groups_of_user(self, user_id: str, identity_store_id: str) -> list[Group]:
        builders = self._connector(identity_store_id).get_groups_of_user(user_id)
        return [self._build_group(builder) for builder in builders]

    def get_users_of_group(self, group_id: str, identity_store_id: str) -> list[User]:
        builders = self._connector(identity_store_id).get_users_of_group(group_id)
        return [self._build_user(builder) for builder in builders]

    def is_user_in_group(
        self, user_id: str, group_id: str, identity_store_id: str
    ) -> bool:
        return self._connector(identity_store_id).is_user_in_group(user_id, group_id)

    def add_user(
        self,
        username: str,
        claims: Mapping[str, str] | None = None,
        credential: str | None = None,
        group_names: Sequence[str] = (),
        identity_store_id: str | None = None,
    ) -> User:
        """Create a user in one identity connector.

        Args:
            username: Name of the user; a domain prefix selects the domain
            claims: Claim values keyed by claim URI
            credential: Initial credential, stored by connectors that keep one
            group_names: Existing groups to add the user to
            identity_store_id: Target connector; defaults to the first
                identity connector of the user's domain

        Raises:
            StoreError: If the target connector cannot be determined
            IdentityStoreError: If the connector rejects the user
        """
        connector_id, connector, bare_name = self._target(username, identity_store_id)
        builder = connector.add_user(bare_name, dict(claims or {}), credential, group_names)
        user = self._build_user(builder)
        self._probe.user_added(user.user_id, user.username, connector_id)
        return user

    def add_group(
        self,
        group_name: str,
        user_names: Sequence[str] = (),
        identity_store_id: str | None = None,
    ) -> Group:
        """Create a group in one identity connector.

        Raises:
            StoreError: If the target connector cannot be determined
            IdentityStoreError: If the connector rejects the group
        """
        connector_id, connector, bare_name = self._target(group_name, identity_store_id)
        builder = connector.add_group(bare_name, user_names)
        group = self._build_group(builder)
        self._probe.group_added(group.group_id, group.group_name, connector_id)
        return group

    def delete_user(self, user_id: str, identity_store_id: str) -> None:
        self._connector(identity_store_id).delete_user(user_id)
        self._probe.user_deleted(user_id, identity_store_id)

    def delete_group(self, group_id: str, identity_store_id: str) -> None:
        self._connector(identity_store_id).delete_group(group_id)
        self._probe.group_deleted(group_id, identity_store_id)

    def _connector(self, identity_store_id: str) -> IdentityStoreConnector:
        connector = self._connectors.get(identity_store_id)
        if connector is None:
            raise StoreError(f"No identity store found for the given id: {identity_store_id}.")
        return connector

    def _target(
        self, name: str, identity_store_id: str | None
    ) -> tuple[str, IdentityStoreConnector, str]:
        domain = self._domain_manager.get_domain_from_username(name)
        _, bare_name = self._domain_manager.split_username(name)
        if identity_store_id is not None:
            return identity_store_id, self._connector(identity_store_id), bare_name
        if not domain.identity_store_connectors:
            raise StoreError(f"Domain {domain.name} has no identity store connectors.")
        connector_id, connector = next(iter(domain.identity_store_connectors.items()))
        return connector_id, connector, bare_name

    def _declined(self, operation: str):
        def on_decline(connector_id: str, error: ConnectorError) -> None:
            self._probe.connector_declined(connector_id, operation, str(error))

        return on_decline

    def _domain_name_of(self, identity_store_id: str | None) -> str:
        if identity_store_id is None:
            return self._domain_manager.get_default_domain().name
        return self._domain_manager.find_domain_of_identity_connector(
            identity_store_id
        ).name

    def _build_user(self, builder: UserBuilder, tenant_domain: str | None = None) -> User:
        return (
            builder.with_tenant_domain(
                tenant_domain or self._domain_name_of(builder.identity_store_id)
            )
            .with_stores(self._realm.identity_store, self._realm.authorization_store)
            .build()
        )

    def _build_group(
        self, builder: GroupBuilder, tenant_domain: str | None = None
    ) -> Group:
        return (
            builder.with_tenant_domain(
                tenant_domain or self._domain_name_of(builder.identity_store_id)
            )
            .with_stores(self._realm.identity_store, self._realm.authorization_store)
            .build()
        )
