"""Store handles carried by built entities.

Users, groups and roles keep a non-owning handle to the broker's stores so
that lazy operations such as ``user.get_roles()`` can re-enter the broker
with the ids captured in the entity. The handles are structural: the
aggregators (or cache decorators wrapping them) satisfy these protocols.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from realm.domain.aggregates.group import Group
    from realm.domain.aggregates.permission import Permission
    from realm.domain.aggregates.role import Role
    from realm.domain.aggregates.user import User
    from realm.domain.value_objects import Action, Claim, Resource


@runtime_checkable
class IdentityStoreHandle(Protocol):
    """Identity store operations reachable from built entities."""

    def get_user_attribute_values(
        self,
        user_id: str,
        identity_store_id: str,
        attribute_names: Sequence[str] | None = None,
    ) -> Mapping[str, str]: ...

    def get_user_by_claim(self, claim: Claim) -> User: ...

    def get_user_from_id(self, user_id: str, identity_store_id: str) -> User: ...

    def get_group_from_id(self, group_id: str, identity_store_id: str) -> Group: ...

    def get_groups_of_user(self, user_id: str, identity_store_id: str) -> list[Group]: ...

    def get_users_of_group(self, group_id: str, identity_store_id: str) -> list[User]: ...

    def is_user_in_group(
        self, user_id: str, group_id: str, identity_store_id: str
    ) -> bool: ...


@runtime_checkable
class AuthorizationStoreHandle(Protocol):
    """Authorization store operations reachable from built entities."""

    def get_roles_of_user(self, user_id: str, identity_store_id: str) -> list[Role]: ...

    def get_roles_of_group(
        self, group_id: str, identity_store_id: str
    ) -> list[Role]: ...

    def is_user_authorized(
        self, user_id: str, permission: Permission, identity_store_id: str
    ) -> bool: ...

    def is_group_authorized(
        self, group_id: str, identity_store_id: str, permission: Permission
    ) -> bool: ...

    def is_role_authorized(
        self, role_id: str, authorization_store_id: str, permission: Permission
    ) -> bool: ...

    def is_user_in_role(
        self, user_id: str, identity_store_id: str, role_name: str
    ) -> bool: ...

    def is_group_in_role(
        self, group_id: str, identity_store_id: str, role_name: str
    ) -> bool: ...

    def update_roles_in_user(
        self, user_id: str, identity_store_id: str, new_roles: Sequence[Role] | None
    ) -> None: ...

    def patch_roles_in_user(
        self,
        user_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role],
        roles_to_unassign: Sequence[Role],
    ) -> None: ...

    def update_roles_in_group(
        self, group_id: str, identity_store_id: str, new_roles: Sequence[Role] | None
    ) -> None: ...

    def patch_roles_in_group(
        self,
        group_id: str,
        identity_store_id: str,
        roles_to_assign: Sequence[Role],
        roles_to_unassign: Sequence[Role],
    ) -> None: ...

    def get_permissions_of_role(
        self,
        role_id: str,
        authorization_store_id: str,
        resource: Resource | None = None,
        action: Action | None = None,
    ) -> list[Permission]: ...

    def get_users_of_role(
        self, role_id: str, authorization_store_id: str
    ) -> list[User]: ...

    def get_groups_of_role(
        self, role_id: str, authorization_store_id: str
    ) -> list[Group]: ...


class StoreResolver(Protocol):
    """Resolves the broker's current store handles.

    The realm service satisfies this; aggregators use it to hand out handles
    (possibly cache-decorated) to the entities they build and to reach the
    sibling store.
    """

    @property
    def identity_store(self) -> IdentityStoreHandle: ...

    @property
    def authorization_store(self) -> AuthorizationStoreHandle: ...
