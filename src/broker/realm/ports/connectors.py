"""Connector protocols (ports) for the realm bounded context.

A connector adapts one backend (relational database, directory, file,
memory) to one store type. The broker creates connector instances through
the connector registry, calls ``init`` once with the resolved configuration,
and afterwards treats each instance as an independent source.

Lookups return builders: the broker completes them with the tenant domain
and store handles. Connectors raise the NotFoundError subclass matching the
lookup when nothing matches, and a ConnectorError subclass for their own
failures. Reads are idempotent and side-effect free; a mutation is atomic
for one entity within one connector.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from realm.domain.aggregates.group import GroupBuilder
    from realm.domain.aggregates.permission import Permission
    from realm.domain.aggregates.role import Role, RoleBuilder
    from realm.domain.aggregates.user import UserBuilder
    from realm.domain.callbacks import Callback
    from realm.domain.value_objects import (
        Action,
        GroupReference,
        Resource,
        UserReference,
    )
    from realm.ports.config import ConnectorConfig, StoreType


@runtime_checkable
class IdentityStoreConnector(Protocol):
    """Backend holding users, groups and their claims."""

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        """Initialize the connector.

        Args:
            connector_id: Id the broker addresses this instance by
            config: Resolved connector configuration

        Raises:
            IdentityStoreError: If the backend cannot be set up
        """
        ...

    def get_identity_store_id(self) -> str:
        """Return the connector id given to init()."""
        ...

    def get_user(self, username: str) -> UserBuilder:
        """Look up a user by bare username.

        Raises:
            UserNotFoundError: If no user has the name
            IdentityStoreError: If the backend fails
        """
        ...

    def get_user_from_id(self, user_id: str) -> UserBuilder:
        """Look up a user by id.

        Raises:
            UserNotFoundError: If no user has the id
        """
        ...

    def list_users(
        self, filter_pattern: str, offset: int, length: int
    ) -> list[UserBuilder]:
        """List users whose name matches a glob pattern.

        Args:
            filter_pattern: Glob pattern, ``*`` for all
            offset: Number of matches to skip
            length: Maximum number of results, -1 for no limit
        """
        ...

    def get_user_attribute_values(
        self, user_id: str, attribute_names: Sequence[str] | None = None
    ) -> dict[str, str]:
        """Get a user's attribute values keyed by claim URI.

        Args:
            user_id: Id of the user
            attribute_names: Claim URIs to return; all when None

        Raises:
            UserNotFoundError: If no user has the id
        """
        ...

    def get_group(self, group_name: str) -> GroupBuilder:
        """Look up a group by name.

        Raises:
            GroupNotFoundError: If no group has the name
        """
        ...

    def get_group_by_id(self, group_id: str) -> GroupBuilder:
        """Look up a group by id.

        Raises:
            GroupNotFoundError: If no group has the id
        """
        ...

    def list_groups(
        self, filter_pattern: str, offset: int, length: int
    ) -> list[GroupBuilder]:
        """List groups whose name matches a glob pattern."""
        ...

    def get_groups_of_user(self, user_id: str) -> list[GroupBuilder]:
        ...

    def get_users_of_group(self, group_id: str) -> list[UserBuilder]:
        ...

    def is_user_in_group(self, user_id: str, group_id: str) -> bool:
        ...

    def add_user(
        self,
        username: str,
        claims: Mapping[str, str],
        credential: str | None,
        group_names: Sequence[str],
    ) -> UserBuilder:
        """Create a user and add it to existing groups.

        Raises:
            IdentityStoreError: If the name is taken or a group does not exist
        """
        ...

    def add_group(self, group_name: str, user_names: Sequence[str]) -> GroupBuilder:
        """Create a group with existing users as members.

        Raises:
            IdentityStoreError: If the name is taken or a user does not exist
        """
        ...

    def delete_user(self, user_id: str) -> None:
        ...

    def delete_group(self, group_id: str) -> None:
        ...


@runtime_checkable
class CredentialStoreConnector(Protocol):
    """Backend verifying credentials."""

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        """Initialize the connector.

        Raises:
            CredentialStoreError: If the backend cannot be set up
        """
        ...

    def get_credential_store_id(self) -> str:
        """Return the connector id given to init()."""
        ...

    def can_handle(self, callbacks: Sequence[Callback]) -> bool:
        """Whether the callbacks carry a credential this connector verifies."""
        ...

    def authenticate(self, callbacks: Sequence[Callback]) -> None:
        """Verify the credentials carried by the callbacks.

        Returns normally on success.

        Raises:
            AuthenticationFailure: If the credentials do not verify
            CredentialStoreError: If the backend fails
        """
        ...


@runtime_checkable
class AuthorizationStoreConnector(Protocol):
    """Backend holding roles, permissions and their assignments.

    Users and groups are addressed by (id, identity store id) since their
    ids are only unique within their identity store.
    """

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        """Initialize the connector.

        Raises:
            AuthorizationStoreError: If the backend cannot be set up
        """
        ...

    def get_authorization_store_id(self) -> str:
        """Return the connector id given to init()."""
        ...

    def get_role(self, role_name: str) -> RoleBuilder:
        """Look up a role by name.

        Raises:
            RoleNotFoundError: If no role has the name
        """
        ...

    def get_permission(self, resource: Resource, action: Action) -> Permission:
        """Look up a stored permission.

        Raises:
            PermissionNotFoundError: If the permission is not stored here
        """
        ...

    def get_roles_for_user(
        self, user_id: str, identity_store_id: str
    ) -> list[RoleBuilder]:
        ...

    def get_roles_for_group(
        self, group_id: str, identity_store_id: str
    ) -> list[RoleBuilder]:
        ...

    def get_permissions_for_role(
        self,
        role_id: str,
        resource: Resource | None = None,
        action: Action | None = None,
    ) -> list[Permission]:
        """Get a role's permissions.

        Args:
            role_id: Id of the role
            resource: Only permissions on this resource; the universal
                resource or None matches every resource
            action: Only permissions for this action when given
        """
        ...

    def add_role(self, role_name: str, permissions: Sequence[Permission]) -> RoleBuilder:
        ...

    def add_permission(self, resource: Resource, action: Action) -> Permission:
        ...

    def add_action(self, namespace: str, action_name: str) -> Action:
        ...

    def add_resource(
        self, namespace: str, resource_id: str, owner: UserReference
    ) -> Resource:
        ...

    def update_roles_in_user(
        self, user_id: str, identity_store_id: str, roles: Sequence[Role]
    ) -> None:
        """Replace the roles this store assigns to the user."""
        ...

    def patch_roles_in_user(
        self,
        user_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role],
        roles_to_unassign: Sequence[Role],
    ) -> None:
        ...

    def update_roles_in_group(
        self, group_id: str, identity_store_id: str, roles: Sequence[Role]
    ) -> None:
        ...

    def patch_roles_in_group(
        self,
        group_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role],
        roles_to_unassign: Sequence[Role],
    ) -> None:
        ...

    def update_users_in_role(
        self, role_id: str, users: Sequence[UserReference]
    ) -> None:
        ...

    def patch_users_in_role(
        self,
        role_id: str,
        users_to_assign: Sequence[UserReference],
        users_to_unassign: Sequence[UserReference],
    ) -> None:
        ...

    def update_groups_in_role(
        self, role_id: str, groups: Sequence[GroupReference]
    ) -> None:
        ...

    def patch_groups_in_role(
        self,
        role_id: str,
        groups_to_assign: Sequence[GroupReference],
        groups_to_unassign: Sequence[GroupReference],
    ) -> None:
        ...

    def update_permissions_in_role(
        self, role_id: str, permissions: Sequence[Permission]
    ) -> None:
        ...

    def patch_permissions_in_role(
        self,
        role_id: str,
        permissions_to_add: Sequence[Permission],
        permissions_to_remove: Sequence[Permission],
    ) -> None:
        ...

    def is_user_in_role(
        self, user_id: str, identity_store_id: str, role_name: str
    ) -> bool:
        ...

    def is_group_in_role(
        self, group_id: str, identity_store_id: str, role_name: str
    ) -> bool:
        ...

    def get_users_of_role(self, role_id: str) -> list[UserReference]:
        ...

    def get_groups_of_role(self, role_id: str) -> list[GroupReference]:
        ...

    def delete_role(self, role_id: str) -> None:
        ...

    def delete_permission(self, permission_id: str) -> None:
        ...


@runtime_checkable
class IConnectorRegistry(Protocol):
    """Creates connector instances from their connector-type tag."""

    def create(
        self, store_type: StoreType, connector_type: str
    ) -> IdentityStoreConnector | CredentialStoreConnector | AuthorizationStoreConnector:
        """Create an uninitialized connector.

        Args:
            store_type: Store type the connector will back
            connector_type: Tag the connector implementation is registered under

        Returns:
            A new connector instance; the caller invokes init() on it

        Raises:
            StoreError: If no factory is registered for the tag
        """
        ...
