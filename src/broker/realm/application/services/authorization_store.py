"""Authorization store aggregator.

Presents the authorization connectors of a realm as a single authorization
store. Roles and permissions live in exactly one connector and are always
addressed by (id, authorization store id). Role assignments of a user or
group may be spread over several connectors.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from realm.application.observability import (
    AuthorizationStoreProbe,
    DefaultAuthorizationStoreProbe,
)
from realm.application.services.fan_out import any_true, collect_all, first_resolved
from realm.domain.aggregates.group import Group
from realm.domain.aggregates.permission import Permission
from realm.domain.aggregates.role import Role, RoleBuilder
from realm.domain.aggregates.user import User
from realm.domain.protocols import StoreResolver
from realm.domain.value_objects import (
    Action,
    GroupReference,
    Resource,
    UserReference,
)
from realm.ports.config import ConnectorConfig
from realm.ports.connectors import AuthorizationStoreConnector
from realm.ports.exceptions import (
    AuthorizationStoreError,
    ConnectorError,
    NoRolesAssignedError,
    PermissionNotFoundError,
    RoleNotFoundError,
    StoreError,
)


def select_primary_store_id(connector_configs: Sequence[ConnectorConfig]) -> str:
    """Select the authorization connector that receives writes by default.

    Selection order:
    1. The first connector whose ``primary`` property is true
    2. The connector with the lowest numeric ``priority`` property; ties go
       to the connector declared first
    3. The first configured connector

    Args:
        connector_configs: Authorization connector configurations, in order

    Returns:
        The id of the primary connector

    Raises:
        StoreError: If no connectors are configured or a priority is malformed
    """
    if not connector_configs:
        raise StoreError("At least one authorization store connector must be configured.")

    for config in connector_configs:
        if config.is_primary:
            return config.connector_id

    prioritised: list[tuple[int, str]] = []
    for config in connector_configs:
        try:
            priority = config.priority
        except ValueError as e:
            raise StoreError(
                f"Invalid priority {config.get_property('priority')!r} "
                f"for authorization store connector {config.connector_id}."
            ) from e
        if priority is not None:
            prioritised.append((priority, config.connector_id))
    if prioritised:
        return min(prioritised, key=lambda entry: entry[0])[1]

    return connector_configs[0].connector_id


class AuthorizationStore:
    """Single virtual authorization store over any number of connectors."""

    def __init__(
        self,
        realm: StoreResolver,
        connectors: Mapping[str, AuthorizationStoreConnector],
        connector_configs: Sequence[ConnectorConfig] | None = None,
        probe: AuthorizationStoreProbe | None = None,
    ) -> None:
        """Create the authorization store.

        Args:
            realm: Resolver for the store handles attached to built entities
            connectors: Every authorization connector keyed by id, in order
            connector_configs: Configurations used to select the primary
                store; the first connector is primary when omitted
            probe: Domain probe for observability

        Raises:
            StoreError: If no connectors are given or the primary store
                cannot be selected
        """
        if not connectors:
            raise StoreError("At least one authorization store connector must be configured.")
        self._realm = realm
        self._connectors = dict(connectors)
        self._probe = probe or DefaultAuthorizationStoreProbe()

        if connector_configs:
            self._primary_store_id = select_primary_store_id(connector_configs)
            reason = "configuration"
        else:
            self._primary_store_id = next(iter(self._connectors))
            reason = "first_connector"
        self._connector(self._primary_store_id)
        self._probe.primary_store_selected(self._primary_store_id, reason)

    @property
    def primary_store_id(self) -> str:
        return self._primary_store_id

    def is_user_authorized(
        self, user_id: str, permission: Permission, identity_store_id: str
    ) -> bool:
        """Check whether a user holds a permission.

        The owner of the permission's resource is always authorized. Other
        users are evaluated against their direct roles and the roles of the
        groups they belong to.

        Args:
            user_id: Id of the user
            permission: Permission to check
            identity_store_id: Identity store holding the user

        Returns:
            True if any of the user's roles grants the permission

        Raises:
            NoRolesAssignedError: If the user has no direct or group roles
        """
        owner = permission.resource.owner
        if owner is not None and owner.user_id == user_id:
            self._probe.owner_authorized(user_id, str(permission.resource))
            return True

        roles = self.get_roles_of_user(user_id, identity_store_id)
        groups = self._realm.identity_store.get_groups_of_user(user_id, identity_store_id)
        for group in groups:
            roles.extend(self.get_roles_of_group(group.group_id, group.identity_store_id))

        if not roles:
            self._probe.no_roles_assigned(user_id, identity_store_id)
            raise NoRolesAssignedError("No roles assigned for this user.")

        return self._is_any_role_authorized(user_id, roles, permission)

    def is_group_authorized(
        self, group_id: str, identity_store_id: str, permission: Permission
    ) -> bool:
        """Check whether any role of a group grants a permission."""
        roles = self.get_roles_of_group(group_id, identity_store_id)
        return self._is_any_role_authorized(group_id, roles, permission)

    def is_role_authorized(
        self, role_id: str, authorization_store_id: str, permission: Permission
    ) -> bool:
        """Check whether a role grants a permission.

        Raises:
            StoreError: If no connector has the store id
        """
        permissions = self._connector(authorization_store_id).get_permissions_for_role(
            role_id, resource=permission.resource
        )
        return any(candidate == permission for candidate in permissions)

    def is_user_in_role(
        self, user_id: str, identity_store_id: str, role_name: str
    ) -> bool:
        return any_true(
            self._connectors,
            lambda connector: connector.is_user_in_role(
                user_id, identity_store_id, role_name
            ),
            self._declined("is_user_in_role"),
        )

    def is_group_in_role(
        self, group_id: str, identity_store_id: str, role_name: str
    ) -> bool:
        return any_true(
            self._connectors,
            lambda connector: connector.is_group_in_role(
                group_id, identity_store_id, role_name
            ),
            self._declined("is_group_in_role"),
        )

    def get_role(self, role_name: str) -> Role:
        """Get a role by name from the first connector that has it.

        Raises:
            RoleNotFoundError: If no connector has the role
        """
        _, builder = first_resolved(
            self._connectors,
            lambda connector: connector.get_role(role_name),
            RoleNotFoundError(f"Role {role_name} was not found."),
            self._declined("get_role"),
        )
        return self._build_role(builder)

    def get_permission(self, resource: Resource, action: Action) -> Permission:
        """Get a stored permission from the first connector that has it.

        Raises:
            PermissionNotFoundError: If no connector has the permission
        """
        _, permission = first_resolved(
            self._connectors,
            lambda connector: connector.get_permission(resource, action),
            PermissionNotFoundError(f"Permission {resource}#{action} was not found."),
            self._declined("get_permission"),
        )
        return permission

    def get_roles_of_user(self, user_id: str, identity_store_id: str) -> list[Role]:
        """Get the roles assigned directly to a user by every connector."""
        builders = collect_all(
            self._connectors,
            lambda connector: connector.get_roles_for_user(user_id, identity_store_id),
            self._declined("get_roles_of_user"),
        )
        return [self._build_role(builder) for builder in builders]

    def get_roles_of_group(self, group_id: str, identity_store_id: str) -> list[Role]:
        """Get the roles assigned to a group by every connector."""
        builders = collect_all(
            self._connectors,
            lambda connector: connector.get_roles_for_group(group_id, identity_store_id),
            self._declined("get_roles_of_group"),
        )
        return [self._build_role(builder) for builder in builders]

    def get_users_of_role(self, role_id: str, authorization_store_id: str) -> list[User]:
        references = self._connector(authorization_store_id).get_users_of_role(role_id)
        return [
            self._realm.identity_store.get_user_from_id(
                reference.user_id, reference.identity_store_id
            )
            for reference in references
        ]

    def get_groups_of_role(
        self, role_id: str, authorization_store_id: str
    ) -> list[Group]:
        references = self._connector(authorization_store_id).get_groups_of_role(role_id)
        return [
            self._realm.identity_store.get_group_from_id(
                reference.group_id, reference.identity_store_id
            )
            for reference in references
        ]

    def get_permissions_of_role(
        self,
        role_id: str,
        authorization_store_id: str,
        resource: Resource | None = None,
        action: Action | None = None,
    ) -> list[Permission]:
        return self._connector(authorization_store_id).get_permissions_for_role(
            role_id, resource=resource, action=action
        )

    def get_permissions_of_user(
        self,
        user_id: str,
        identity_store_id: str,
        resource: Resource | None = None,
        action: Action | None = None,
    ) -> list[Permission]:
        """Get the permissions granted by a user's direct roles."""
        permissions: list[Permission] = []
        for role in self.get_roles_of_user(user_id, identity_store_id):
            permissions.extend(
                self.get_permissions_of_role(
                    role.role_id, role.authorization_store_id, resource, action
                )
            )
        return permissions

    def add_role(
        self,
        role_name: str,
        permissions: Sequence[Permission] = (),
        authorization_store_id: str | None = None,
    ) -> Role:
        """Create a role in the given store, or the primary store."""
        store_id = authorization_store_id or self._primary_store_id
        role = self._build_role(self._connector(store_id).add_role(role_name, permissions))
        self._probe.role_added(role.role_id, role.name, store_id)
        return role

    def add_permission(
        self,
        resource: Resource,
        action: Action,
        authorization_store_id: str | None = None,
    ) -> Permission:
        """Create a permission in the given store, or the primary store."""
        store_id = authorization_store_id or self._primary_store_id
        permission = self._connector(store_id).add_permission(resource, action)
        self._probe.permission_added(str(permission), store_id)
        return permission

    def add_action(
        self,
        namespace: str,
        action_name: str,
        authorization_store_id: str | None = None,
    ) -> Action:
        store_id = authorization_store_id or self._primary_store_id
        return self._connector(store_id).add_action(namespace, action_name)

    def add_resource(
        self,
        namespace: str,
        resource_id: str,
        user_id: str,
        identity_store_id: str,
        authorization_store_id: str | None = None,
    ) -> Resource:
        """Create a resource owned by a user."""
        store_id = authorization_store_id or self._primary_store_id
        return self._connector(store_id).add_resource(
            namespace, resource_id, UserReference(user_id, identity_store_id)
        )

    def update_roles_in_user(
        self, user_id: str, identity_store_id: str, new_roles: Sequence[Role] | None
    ) -> None:
        """Replace a user's roles.

        Roles are grouped by authorization store and each store receives one
        call. None or an empty list clears the user's roles in every store.

        Raises:
            StoreError: If a role belongs to an unknown store
        """
        self._dispatch_replace(
            user_id,
            "update_roles_in_user",
            new_roles,
            lambda connector, roles: connector.update_roles_in_user(
                user_id, identity_store_id, roles
            ),
        )

    def patch_roles_in_user(
        self,
        user_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role] | None,
        roles_to_unassign: Sequence[Role] | None,
    ) -> None:
        """Assign and unassign a user's roles.

        Each store owning a role in either list receives one call, with an
        empty list for the side it has no roles in.

        Raises:
            StoreError: If a role belongs to an unknown store
        """
        self._dispatch_patch(
            user_id,
            "patch_roles_in_user",
            roles_to_assign,
            roles_to_unassign,
            lambda connector, assign, unassign: connector.patch_roles_in_user(
                user_id, identity_store_id, assign, unassign
            ),
        )

    def update_roles_in_group(
        self, group_id: str, identity_store_id: str, new_roles: Sequence[Role] | None
    ) -> None:
        """Replace a group's roles; see update_roles_in_user."""
        self._dispatch_replace(
            group_id,
            "update_roles_in_group",
            new_roles,
            lambda connector, roles: connector.update_roles_in_group(
                group_id, identity_store_id, roles
            ),
        )

    def patch_roles_in_group(
        self,
        group_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role] | None,
        roles_to_unassign: Sequence[Role] | None,
    ) -> None:
        """Assign and unassign a group's roles; see patch_roles_in_user."""
        self._dispatch_patch(
            group_id,
            "patch_roles_in_group",
            roles_to_assign,
            roles_to_unassign,
            lambda connector, assign, unassign: connector.patch_roles_in_group(
                group_id, identity_store_id, assign, unassign
            ),
        )

    def update_users_in_role(
        self, role_id: str, authorization_store_id: str, users: Sequence[User] | None
    ) -> None:
        self._connector(authorization_store_id).update_users_in_role(
            role_id, [UserReference.of(user) for user in users or ()]
        )

    def patch_users_in_role(
        self,
        role_id: str,
        authorization_store_id: str,
        users_to_assign: Sequence[User] | None,
        users_to_unassign: Sequence[User] | None,
    ) -> None:
        self._connector(authorization_store_id).patch_users_in_role(
            role_id,
            [UserReference.of(user) for user in users_to_assign or ()],
            [UserReference.of(user) for user in users_to_unassign or ()],
        )

    def update_groups_in_role(
        self, role_id: str, authorization_store_id: str, groups: Sequence[Group] | None
    ) -> None:
        self._connector(authorization_store_id).update_groups_in_role(
            role_id, [GroupReference.of(group) for group in groups or ()]
        )

    def patch_groups_in_role(
        self,
        role_id: str,
        authorization_store_id: str,
        groups_to_assign: Sequence[Group] | None,
        groups_to_unassign: Sequence[Group] | None,
    ) -> None:
        self._connector(authorization_store_id).patch_groups_in_role(
            role_id,
            [GroupReference.of(group) for group in groups_to_assign or ()],
            [GroupReference.of(group) for group in groups_to_unassign or ()],
        )

    def update_permissions_in_role(
        self,
        role_id: str,
        authorization_store_id: str,
        permissions: Sequence[Permission] | None,
    ) -> None:
        self._connector(authorization_store_id).update_permissions_in_role(
            role_id, list(permissions or ())
        )

    def patch_permissions_in_role(
        self,
        role_id: str,
        authorization_store_id: str,
        permissions_to_add: Sequence[Permission] | None,
        permissions_to_remove: Sequence[Permission] | None,
    ) -> None:
        self._connector(authorization_store_id).patch_permissions_in_role(
            role_id, list(permissions_to_add or ()), list(permissions_to_remove or ())
        )

    def delete_role(self, role: Role) -> None:
        self._connector(role.authorization_store_id).delete_role(role.role_id)
        self._probe.role_deleted(role.role_id, role.authorization_store_id)

    def delete_permission(self, permission: Permission) -> None:
        """Delete a stored permission.

        Raises:
            StoreError: If the permission does not carry its store and id
        """
        if permission.authorization_store_id is None or permission.permission_id is None:
            raise StoreError(f"Permission {permission} is not a stored permission.")
        self._connector(permission.authorization_store_id).delete_permission(
            permission.permission_id
        )
        self._probe.permission_deleted(
            permission.permission_id, permission.authorization_store_id
        )

    def _is_any_role_authorized(
        self, subject_id: str, roles: Sequence[Role], permission: Permission
    ) -> bool:
        unique_roles = list(
            {(role.role_id, role.authorization_store_id): role for role in roles}.values()
        )
        for role in unique_roles:
            try:
                authorized = self.is_role_authorized(
                    role.role_id, role.authorization_store_id, permission
                )
            except AuthorizationStoreError as e:
                self._probe.connector_declined(
                    role.authorization_store_id, "is_role_authorized", str(e)
                )
                continue
            if authorized:
                self._probe.authorization_evaluated(
                    subject_id, str(permission), True, len(unique_roles)
                )
                return True
        self._probe.authorization_evaluated(
            subject_id, str(permission), False, len(unique_roles)
        )
        return False

    def _partition(self, roles: Sequence[Role] | None) -> dict[str, list[Role]]:
        partitioned: dict[str, list[Role]] = {}
        for role in roles or ():
            partitioned.setdefault(role.authorization_store_id, []).append(role)
        for store_id in partitioned:
            self._connector(store_id)
        return partitioned

    def _dispatch_replace(
        self,
        subject_id: str,
        operation: str,
        new_roles: Sequence[Role] | None,
        call: Callable[[AuthorizationStoreConnector, list[Role]], None],
    ) -> None:
        if not new_roles:
            for connector in self._connectors.values():
                call(connector, [])
            self._probe.role_assignments_dispatched(
                subject_id, operation, list(self._connectors)
            )
            return

        partitioned = self._partition(new_roles)
        for store_id, roles in partitioned.items():
            call(self._connectors[store_id], roles)
        self._probe.role_assignments_dispatched(subject_id, operation, list(partitioned))

    def _dispatch_patch(
        self,
        subject_id: str,
        operation: str,
        roles_to_assign: Sequence[Role] | None,
        roles_to_unassign: Sequence[Role] | None,
        call: Callable[[AuthorizationStoreConnector, list[Role], list[Role]], None],
    ) -> None:
        assign = self._partition(roles_to_assign)
        unassign = self._partition(roles_to_unassign)
        store_ids = list(dict.fromkeys([*assign, *unassign]))
        for store_id in store_ids:
            call(
                self._connectors[store_id],
                assign.get(store_id, []),
                unassign.get(store_id, []),
            )
        self._probe.role_assignments_dispatched(subject_id, operation, store_ids)

    def _connector(self, authorization_store_id: str) -> AuthorizationStoreConnector:
        connector = self._connectors.get(authorization_store_id)
        if connector is None:
            raise StoreError(
                f"No authorization store found for the given id: {authorization_store_id}."
            )
        return connector

    def _declined(self, operation: str):
        def on_decline(connector_id: str, error: ConnectorError) -> None:
            self._probe.connector_declined(connector_id, operation, str(error))

        return on_decline

    def _build_role(self, builder: RoleBuilder) -> Role:
        return builder.with_store(self._realm.authorization_store).build()
