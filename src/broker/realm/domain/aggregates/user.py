"""User entity and its builder."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from realm.domain.exceptions import EntityBuildError
from realm.domain.value_objects import CLAIM_DIALECT_URI, Claim

if TYPE_CHECKING:
    from realm.domain.aggregates.group import Group
    from realm.domain.aggregates.permission import Permission
    from realm.domain.aggregates.role import Role
    from realm.domain.protocols import AuthorizationStoreHandle, IdentityStoreHandle


@dataclass(frozen=True)
class User:
    """A user resolved through one identity store connector.

    Users are immutable and only created through UserBuilder. Lazy operations
    re-enter the broker through the store handles captured at build time,
    using the ids recorded in the entity.

    Attributes:
        user_id: Opaque id, unique within its identity store
        identity_store_id: Id of the identity connector holding the user
        credential_store_id: Id of the credential connector paired with it
        tenant_domain: Name of the domain the user was resolved in
        username: Bare username (without domain prefix)
    """

    user_id: str
    identity_store_id: str
    credential_store_id: str
    tenant_domain: str
    username: str
    identity_store: IdentityStoreHandle = field(repr=False, compare=False)
    authorization_store: AuthorizationStoreHandle = field(repr=False, compare=False)

    def get_claims(self, claim_uris: Sequence[str] | None = None) -> list[Claim]:
        """Get the user's claims.

        Args:
            claim_uris: Claim URIs to fetch; all claims when None

        Returns:
            Claims in the default dialect, one per attribute held by the store
        """
        values = self.identity_store.get_user_attribute_values(
            self.user_id, self.identity_store_id, claim_uris
        )
        return [
            Claim(dialect_uri=CLAIM_DIALECT_URI, claim_uri=uri, value=value)
            for uri, value in values.items()
        ]

    def get_groups(self) -> list[Group]:
        return self.identity_store.get_groups_of_user(
            self.user_id, self.identity_store_id
        )

    def is_in_group(self, group_id: str) -> bool:
        return self.identity_store.is_user_in_group(
            self.user_id, group_id, self.identity_store_id
        )

    def get_roles(self) -> list[Role]:
        return self.authorization_store.get_roles_of_user(
            self.user_id, self.identity_store_id
        )

    def is_authorized(self, permission: Permission) -> bool:
        """Check whether the user holds a permission.

        Raises:
            NoRolesAssignedError: If the user has no direct or group roles
        """
        return self.authorization_store.is_user_authorized(
            self.user_id, permission, self.identity_store_id
        )

    def is_in_role(self, role_name: str) -> bool:
        return self.authorization_store.is_user_in_role(
            self.user_id, self.identity_store_id, role_name
        )

    def update_roles(self, new_roles: Sequence[Role] | None) -> None:
        """Replace the user's roles; None or empty removes all of them."""
        self.authorization_store.update_roles_in_user(
            self.user_id, self.identity_store_id, new_roles
        )

    def update_roles_patch(
        self, roles_to_assign: Sequence[Role], roles_to_unassign: Sequence[Role]
    ) -> None:
        """Assign and unassign roles in one call per authorization store."""
        self.authorization_store.patch_roles_in_user(
            self.user_id, self.identity_store_id, roles_to_assign, roles_to_unassign
        )


@dataclass
class UserBuilder:
    """Collects the data of a User.

    Connectors fill in the stored fields; the identity store aggregator adds
    the tenant domain and store handles before calling build().
    """

    user_id: str | None = None
    username: str | None = None
    identity_store_id: str | None = None
    credential_store_id: str | None = None
    tenant_domain: str | None = None
    identity_store: IdentityStoreHandle | None = None
    authorization_store: AuthorizationStoreHandle | None = None

    def with_user_id(self, user_id: str) -> UserBuilder:
        self.user_id = user_id
        return self

    def with_username(self, username: str) -> UserBuilder:
        self.username = username
        return self

    def with_identity_store_id(self, identity_store_id: str) -> UserBuilder:
        self.identity_store_id = identity_store_id
        return self

    def with_credential_store_id(self, credential_store_id: str) -> UserBuilder:
        self.credential_store_id = credential_store_id
        return self

    def with_tenant_domain(self, tenant_domain: str) -> UserBuilder:
        self.tenant_domain = tenant_domain
        return self

    def with_stores(
        self,
        identity_store: IdentityStoreHandle,
        authorization_store: AuthorizationStoreHandle,
    ) -> UserBuilder:
        self.identity_store = identity_store
        self.authorization_store = authorization_store
        return self

    def build(self) -> User:
        """Build the user.

        Raises:
            EntityBuildError: If any field has not been supplied
        """
        missing = [f.name for f in fields(self) if getattr(self, f.name) is None]
        if missing:
            raise EntityBuildError("user", missing)
        return User(
            user_id=self.user_id,
            identity_store_id=self.identity_store_id,
            credential_store_id=self.credential_store_id,
            tenant_domain=self.tenant_domain,
            username=self.username,
            identity_store=self.identity_store,
            authorization_store=self.authorization_store,
        )
