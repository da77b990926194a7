"""Group entity and its builder."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from realm.domain.exceptions import EntityBuildError

if TYPE_CHECKING:
    from realm.domain.aggregates.permission import Permission
    from realm.domain.aggregates.role import Role
    from realm.domain.aggregates.user import User
    from realm.domain.protocols import AuthorizationStoreHandle, IdentityStoreHandle


@dataclass(frozen=True)
class Group:
    """A group resolved through one identity store connector.

    Attributes:
        group_id: Opaque id, unique within its identity store
        identity_store_id: Id of the identity connector holding the group
        tenant_domain: Name of the domain the group was resolved in
        group_name: Group name
    """

    group_id: str
    identity_store_id: str
    tenant_domain: str
    group_name: str
    identity_store: IdentityStoreHandle = field(repr=False, compare=False)
    authorization_store: AuthorizationStoreHandle = field(repr=False, compare=False)

    def get_users(self) -> list[User]:
        return self.identity_store.get_users_of_group(
            self.group_id, self.identity_store_id
        )

    def has_user(self, user_id: str) -> bool:
        return self.identity_store.is_user_in_group(
            user_id, self.group_id, self.identity_store_id
        )

    def get_roles(self) -> list[Role]:
        return self.authorization_store.get_roles_of_group(
            self.group_id, self.identity_store_id
        )

    def is_authorized(self, permission: Permission) -> bool:
        return self.authorization_store.is_group_authorized(
            self.group_id, self.identity_store_id, permission
        )

    def is_in_role(self, role_name: str) -> bool:
        return self.authorization_store.is_group_in_role(
            self.group_id, self.identity_store_id, role_name
        )

    def update_roles(self, new_roles: Sequence[Role] | None) -> None:
        """Replace the group's roles; None or empty removes all of them."""
        self.authorization_store.update_roles_in_group(
            self.group_id, self.identity_store_id, new_roles
        )

    def update_roles_patch(
        self, roles_to_assign: Sequence[Role], roles_to_unassign: Sequence[Role]
    ) -> None:
        self.authorization_store.patch_roles_in_group(
            self.group_id, self.identity_store_id, roles_to_assign, roles_to_unassign
        )


@dataclass
class GroupBuilder:
    """Collects the data of a Group."""

    group_id: str | None = None
    group_name: str | None = None
    identity_store_id: str | None = None
    tenant_domain: str | None = None
    identity_store: IdentityStoreHandle | None = None
    authorization_store: AuthorizationStoreHandle | None = None

    def with_group_id(self, group_id: str) -> GroupBuilder:
        self.group_id = group_id
        return self

    def with_group_name(self, group_name: str) -> GroupBuilder:
        self.group_name = group_name
        return self

    def with_identity_store_id(self, identity_store_id: str) -> GroupBuilder:
        self.identity_store_id = identity_store_id
        return self

    def with_tenant_domain(self, tenant_domain: str) -> GroupBuilder:
        self.tenant_domain = tenant_domain
        return self

    def with_stores(
        self,
        identity_store: IdentityStoreHandle,
        authorization_store: AuthorizationStoreHandle,
    ) -> GroupBuilder:
        self.identity_store = identity_store
        self.authorization_store = authorization_store
        return self

    def build(self) -> Group:
        """Build the group.

        Raises:
            EntityBuildError: If any field has not been supplied
        """
        missing = [f.name for f in fields(self) if getattr(self, f.name) is None]
        if missing:
            raise EntityBuildError("group", missing)
        return Group(
            group_id=self.group_id,
            identity_store_id=self.identity_store_id,
            tenant_domain=self.tenant_domain,
            group_name=self.group_name,
            identity_store=self.identity_store,
            authorization_store=self.authorization_store,
        )
