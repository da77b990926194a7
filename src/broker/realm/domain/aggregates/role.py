"""Role entity and its builder."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from realm.domain.exceptions import EntityBuildError

if TYPE_CHECKING:
    from realm.domain.aggregates.group import Group
    from realm.domain.aggregates.permission import Permission
    from realm.domain.aggregates.user import User
    from realm.domain.protocols import AuthorizationStoreHandle
    from realm.domain.value_objects import Action, Resource


@dataclass(frozen=True)
class Role:
    """A named set of permissions held by one authorization store.

    Role ids are unique only within their authorization store, so a role is
    always addressed by (role_id, authorization_store_id).
    """

    role_id: str
    authorization_store_id: str
    name: str
    authorization_store: AuthorizationStoreHandle = field(repr=False, compare=False)

    def get_permissions(
        self, resource: Resource | None = None, action: Action | None = None
    ) -> list[Permission]:
        """Get the role's permissions, optionally filtered by resource and action."""
        return self.authorization_store.get_permissions_of_role(
            self.role_id, self.authorization_store_id, resource, action
        )

    def get_users(self) -> list[User]:
        return self.authorization_store.get_users_of_role(
            self.role_id, self.authorization_store_id
        )

    def get_groups(self) -> list[Group]:
        return self.authorization_store.get_groups_of_role(
            self.role_id, self.authorization_store_id
        )

    def is_authorized(self, permission: Permission) -> bool:
        return self.authorization_store.is_role_authorized(
            self.role_id, self.authorization_store_id, permission
        )


@dataclass
class RoleBuilder:
    """Collects the data of a Role."""

    role_id: str | None = None
    name: str | None = None
    authorization_store_id: str | None = None
    authorization_store: AuthorizationStoreHandle | None = None

    def with_role_id(self, role_id: str) -> RoleBuilder:
        self.role_id = role_id
        return self

    def with_name(self, name: str) -> RoleBuilder:
        self.name = name
        return self

    def with_authorization_store_id(self, authorization_store_id: str) -> RoleBuilder:
        self.authorization_store_id = authorization_store_id
        return self

    def with_store(self, authorization_store: AuthorizationStoreHandle) -> RoleBuilder:
        self.authorization_store = authorization_store
        return self

    def build(self) -> Role:
        """Build the role.

        Raises:
            EntityBuildError: If any field has not been supplied
        """
        missing = [f.name for f in fields(self) if getattr(self, f.name) is None]
        if missing:
            raise EntityBuildError("role", missing)
        return Role(
            role_id=self.role_id,
            authorization_store_id=self.authorization_store_id,
            name=self.name,
            authorization_store=self.authorization_store,
        )
