"""In-memory authorization store connector.

Keeps roles, permissions and role assignments in process memory. Roles and
their permissions can be declared in configuration:

    properties:
      roles:
        - name: report-reader
          permissions:
            - resource: reports:quarterly
              action: reports:read
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from ulid import ULID

from realm.domain.aggregates.permission import Permission, PermissionBuilder
from realm.domain.aggregates.role import Role, RoleBuilder
from realm.domain.value_objects import (
    Action,
    GroupReference,
    Resource,
    UserReference,
)
from realm.infrastructure.observability import ConnectorProbe, DefaultConnectorProbe
from realm.ports.config import ConnectorConfig
from realm.ports.exceptions import (
    AuthorizationStoreError,
    PermissionNotFoundError,
    RoleNotFoundError,
)

CONNECTOR_TYPE = "InMemoryAuthorizationStore"

_Subject = tuple[str, str]


@dataclass
class _RoleRecord:
    role_id: str
    name: str
    permission_ids: list[str] = field(default_factory=list)


class InMemoryAuthorizationStoreConnector:
    """Authorization connector backed by dictionaries guarded by a re-entrant lock.

    Users and groups are keyed by (id, identity store id).
    """

    def __init__(self, probe: ConnectorProbe | None = None) -> None:
        self._probe = probe or DefaultConnectorProbe()
        self._lock = threading.RLock()
        self._connector_id: str | None = None
        self._roles: dict[str, _RoleRecord] = {}
        self._role_ids_by_name: dict[str, str] = {}
        self._permissions: dict[str, Permission] = {}
        self._actions: set[Action] = set()
        self._resources: dict[Resource, Resource] = {}
        self._user_roles: dict[_Subject, list[str]] = {}
        self._group_roles: dict[_Subject, list[str]] = {}

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        """Initialize and seed roles from the ``roles`` property.

        Raises:
            AuthorizationStoreError: If the roles property is malformed
        """
        self._connector_id = connector_id
        roles = config.get_property("roles") or []
        if not isinstance(roles, list):
            raise AuthorizationStoreError("The roles property must be a list.")

        for entry in roles:
            if not isinstance(entry, Mapping) or not entry.get("name"):
                raise AuthorizationStoreError(f"Invalid role entry: {entry!r}")
            try:
                permissions = [
                    Permission.of(str(item["resource"]), str(item["action"]))
                    for item in entry.get("permissions") or []
                ]
            except (KeyError, TypeError, ValueError) as e:
                raise AuthorizationStoreError(
                    f"Invalid permissions for role {entry['name']}: {e}"
                ) from e
            self.add_role(str(entry["name"]), permissions)

        self._probe.connector_seeded(connector_id, len(roles))
        self._probe.connector_ready(connector_id, CONNECTOR_TYPE)

    def get_authorization_store_id(self) -> str:
        return self._connector_id

    def get_role(self, role_name: str) -> RoleBuilder:
        with self._lock:
            role_id = self._role_ids_by_name.get(role_name)
            if role_id is None:
                raise RoleNotFoundError(
                    f"Role {role_name} not found in {self._connector_id}."
                )
            return self._role_builder(self._roles[role_id])

    def get_permission(self, resource: Resource, action: Action) -> Permission:
        with self._lock:
            permission = self._find_permission(Permission(resource, action))
            if permission is None:
                raise PermissionNotFoundError(
                    f"Permission {resource}#{action} not found in {self._connector_id}."
                )
            return permission

    def get_roles_for_user(
        self, user_id: str, identity_store_id: str
    ) -> list[RoleBuilder]:
        with self._lock:
            return self._role_builders(self._user_roles.get((user_id, identity_store_id), []))

    def get_roles_for_group(
        self, group_id: str, identity_store_id: str
    ) -> list[RoleBuilder]:
        with self._lock:
            return self._role_builders(
                self._group_roles.get((group_id, identity_store_id), [])
            )

    def get_permissions_for_role(
        self,
        role_id: str,
        resource: Resource | None = None,
        action: Action | None = None,
    ) -> list[Permission]:
        with self._lock:
            record = self._require_role(role_id)
            permissions = [self._permissions[pid] for pid in record.permission_ids]
        if resource is not None and not resource.is_universal:
            permissions = [p for p in permissions if p.resource == resource]
        if action is not None:
            permissions = [p for p in permissions if p.action == action]
        return permissions

    def add_role(self, role_name: str, permissions: Sequence[Permission]) -> RoleBuilder:
        """Create a role holding the given permissions.

        Permissions not yet stored here are stored first.

        Raises:
            AuthorizationStoreError: If the role name is taken
        """
        with self._lock:
            if role_name in self._role_ids_by_name:
                raise AuthorizationStoreError(f"Role {role_name} already exists.")
            record = _RoleRecord(
                role_id=str(ULID()),
                name=role_name,
                permission_ids=self._store_permissions(permissions),
            )
            self._roles[record.role_id] = record
            self._role_ids_by_name[role_name] = record.role_id
            return self._role_builder(record)

    def add_permission(self, resource: Resource, action: Action) -> Permission:
        """Store a permission; returns the stored one if it already exists."""
        with self._lock:
            existing = self._find_permission(Permission(resource, action))
            if existing is not None:
                return existing
            permission = PermissionBuilder(
                resource=resource,
                action=action,
                authorization_store_id=self._connector_id,
                permission_id=str(ULID()),
            ).build()
            self._permissions[permission.permission_id] = permission
            self._actions.add(action)
            return permission

    def add_action(self, namespace: str, action_name: str) -> Action:
        action = Action(namespace=namespace, name=action_name)
        with self._lock:
            self._actions.add(action)
        return action

    def add_resource(
        self, namespace: str, resource_id: str, owner: UserReference
    ) -> Resource:
        """Store a resource owned by a user.

        Raises:
            AuthorizationStoreError: If the resource already exists
        """
        resource = Resource(namespace=namespace, resource_id=resource_id, owner=owner)
        with self._lock:
            if resource in self._resources:
                raise AuthorizationStoreError(f"Resource {resource} already exists.")
            self._resources[resource] = resource
        return resource

    def update_roles_in_user(
        self, user_id: str, identity_store_id: str, roles: Sequence[Role]
    ) -> None:
        with self._lock:
            self._replace(self._user_roles, (user_id, identity_store_id), roles)

    def patch_roles_in_user(
        self,
        user_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role],
        roles_to_unassign: Sequence[Role],
    ) -> None:
        with self._lock:
            self._patch(
                self._user_roles,
                (user_id, identity_store_id),
                roles_to_assign,
                roles_to_unassign,
            )

    def update_roles_in_group(
        self, group_id: str, identity_store_id: str, roles: Sequence[Role]
    ) -> None:
        with self._lock:
            self._replace(self._group_roles, (group_id, identity_store_id), roles)

    def patch_roles_in_group(
        self,
        group_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role],
        roles_to_unassign: Sequence[Role],
    ) -> None:
        with self._lock:
            self._patch(
                self._group_roles,
                (group_id, identity_store_id),
                roles_to_assign,
                roles_to_unassign,
            )

    def update_users_in_role(
        self, role_id: str, users: Sequence[UserReference]
    ) -> None:
        with self._lock:
            self._replace_subjects(
                self._user_roles,
                role_id,
                [(user.user_id, user.identity_store_id) for user in users],
            )

    def patch_users_in_role(
        self,
        role_id: str,
        users_to_assign: Sequence[UserReference],
        users_to_unassign: Sequence[UserReference],
    ) -> None:
        with self._lock:
            self._patch_subjects(
                self._user_roles,
                role_id,
                [(user.user_id, user.identity_store_id) for user in users_to_assign],
                [(user.user_id, user.identity_store_id) for user in users_to_unassign],
            )

    def update_groups_in_role(
        self, role_id: str, groups: Sequence[GroupReference]
    ) -> None:
        with self._lock:
            self._replace_subjects(
                self._group_roles,
                role_id,
                [(group.group_id, group.identity_store_id) for group in groups],
            )

    def patch_groups_in_role(
        self,
        role_id: str,
        groups_to_assign: Sequence[GroupReference],
        groups_to_unassign: Sequence[GroupReference],
    ) -> None:
        with self._lock:
            self._patch_subjects(
                self._group_roles,
                role_id,
                [(group.group_id, group.identity_store_id) for group in groups_to_assign],
                [
                    (group.group_id, group.identity_store_id)
                    for group in groups_to_unassign
                ],
            )

    def update_permissions_in_role(
        self, role_id: str, permissions: Sequence[Permission]
    ) -> None:
        with self._lock:
            self._require_role(role_id).permission_ids = self._store_permissions(
                permissions
            )

    def patch_permissions_in_role(
        self,
        role_id: str,
        permissions_to_add: Sequence[Permission],
        permissions_to_remove: Sequence[Permission],
    ) -> None:
        with self._lock:
            record = self._require_role(role_id)
            removed = {
                stored.permission_id
                for stored in map(self._find_permission, permissions_to_remove)
                if stored is not None
            }
            kept = [pid for pid in record.permission_ids if pid not in removed]
            for pid in self._store_permissions(permissions_to_add):
                if pid not in kept:
                    kept.append(pid)
            record.permission_ids = kept

    def is_user_in_role(
        self, user_id: str, identity_store_id: str, role_name: str
    ) -> bool:
        with self._lock:
            role_id = self._role_ids_by_name.get(role_name)
            return role_id in self._user_roles.get((user_id, identity_store_id), [])

    def is_group_in_role(
        self, group_id: str, identity_store_id: str, role_name: str
    ) -> bool:
        with self._lock:
            role_id = self._role_ids_by_name.get(role_name)
            return role_id in self._group_roles.get((group_id, identity_store_id), [])

    def get_users_of_role(self, role_id: str) -> list[UserReference]:
        with self._lock:
            self._require_role(role_id)
            return [
                UserReference(user_id=subject[0], identity_store_id=subject[1])
                for subject, role_ids in self._user_roles.items()
                if role_id in role_ids
            ]

    def get_groups_of_role(self, role_id: str) -> list[GroupReference]:
        with self._lock:
            self._require_role(role_id)
            return [
                GroupReference(group_id=subject[0], identity_store_id=subject[1])
                for subject, role_ids in self._group_roles.items()
                if role_id in role_ids
            ]

    def delete_role(self, role_id: str) -> None:
        with self._lock:
            record = self._require_role(role_id)
            del self._roles[role_id]
            del self._role_ids_by_name[record.name]
            for assignments in (self._user_roles, self._group_roles):
                for role_ids in assignments.values():
                    if role_id in role_ids:
                        role_ids.remove(role_id)

    def delete_permission(self, permission_id: str) -> None:
        with self._lock:
            if self._permissions.pop(permission_id, None) is None:
                raise PermissionNotFoundError(
                    f"Permission id {permission_id} not found in {self._connector_id}."
                )
            for record in self._roles.values():
                if permission_id in record.permission_ids:
                    record.permission_ids.remove(permission_id)

    def _find_permission(self, permission: Permission) -> Permission | None:
        for stored in self._permissions.values():
            if stored == permission:
                return stored
        return None

    def _store_permissions(self, permissions: Iterable[Permission]) -> list[str]:
        permission_ids: list[str] = []
        for permission in permissions:
            stored = self.add_permission(permission.resource, permission.action)
            if stored.permission_id not in permission_ids:
                permission_ids.append(stored.permission_id)
        return permission_ids

    def _role_ids_of(self, roles: Iterable[Role]) -> list[str]:
        role_ids: list[str] = []
        for role in roles:
            self._require_role(role.role_id)
            if role.role_id not in role_ids:
                role_ids.append(role.role_id)
        return role_ids

    def _replace(
        self, assignments: dict[_Subject, list[str]], subject: _Subject, roles: Sequence[Role]
    ) -> None:
        assignments[subject] = self._role_ids_of(roles)

    def _patch(
        self,
        assignments: dict[_Subject, list[str]],
        subject: _Subject,
        roles_to_assign: Sequence[Role],
        roles_to_unassign: Sequence[Role],
    ) -> None:
        removed = set(self._role_ids_of(roles_to_unassign))
        current = [rid for rid in assignments.get(subject, []) if rid not in removed]
        for role_id in self._role_ids_of(roles_to_assign):
            if role_id not in current:
                current.append(role_id)
        assignments[subject] = current

    def _replace_subjects(
        self,
        assignments: dict[_Subject, list[str]],
        role_id: str,
        subjects: Sequence[_Subject],
    ) -> None:
        self._require_role(role_id)
        for role_ids in assignments.values():
            if role_id in role_ids:
                role_ids.remove(role_id)
        self._patch_subjects(assignments, role_id, subjects, [])

    def _patch_subjects(
        self,
        assignments: dict[_Subject, list[str]],
        role_id: str,
        subjects_to_assign: Sequence[_Subject],
        subjects_to_unassign: Sequence[_Subject],
    ) -> None:
        self._require_role(role_id)
        for subject in subjects_to_unassign:
            role_ids = assignments.get(subject, [])
            if role_id in role_ids:
                role_ids.remove(role_id)
        for subject in subjects_to_assign:
            role_ids = assignments.setdefault(subject, [])
            if role_id not in role_ids:
                role_ids.append(role_id)

    def _require_role(self, role_id: str) -> _RoleRecord:
        record = self._roles.get(role_id)
        if record is None:
            raise RoleNotFoundError(f"Role id {role_id} not found in {self._connector_id}.")
        return record

    def _role_builders(self, role_ids: Iterable[str]) -> list[RoleBuilder]:
        return [self._role_builder(self._roles[role_id]) for role_id in role_ids]

    def _role_builder(self, record: _RoleRecord) -> RoleBuilder:
        return RoleBuilder(
            role_id=record.role_id,
            name=record.name,
            authorization_store_id=self._connector_id,
        )
