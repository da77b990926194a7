"""Value objects for the realm domain.

Value objects are immutable descriptors for claims, resources, actions and
references to entities held by a particular store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from realm.domain.aggregates.group import Group
    from realm.domain.aggregates.user import User

DEFAULT_DOMAIN_NAME = "PRIMARY"
DOMAIN_SEPARATOR = "/"

CLAIM_DIALECT_URI = "http://wso2.org/claims"
USERNAME_CLAIM_URI = "http://wso2.org/claims/username"

UNIVERSAL_RESOURCE = "*"
_NAMESPACE_SEPARATOR = ":"


def split_domain_name(
    username: str, separator: str = DOMAIN_SEPARATOR
) -> tuple[str | None, str]:
    """Split a possibly domain-qualified username.

    Args:
        username: Name such as "SALES/alice" or "alice"
        separator: Separator between domain and bare name

    Returns:
        Tuple of (domain name or None, bare username). Only the first
        separator splits; an empty domain segment counts as no domain.
    """
    domain, sep, bare = username.partition(separator)
    if not sep or not domain:
        return None, username
    return domain, bare


@dataclass(frozen=True)
class Claim:
    """An attribute of a user within a claim dialect.

    Attributes:
        dialect_uri: URI of the dialect the claim belongs to
        claim_uri: URI naming the claim
        value: Claim value
    """

    dialect_uri: str
    claim_uri: str
    value: str

    @classmethod
    def username(cls, value: str) -> Claim:
        """Create the username claim for a (possibly qualified) name."""
        return cls(
            dialect_uri=CLAIM_DIALECT_URI,
            claim_uri=USERNAME_CLAIM_URI,
            value=value,
        )

    @property
    def is_username(self) -> bool:
        """Whether this is the username claim."""
        return self.claim_uri == USERNAME_CLAIM_URI


@dataclass(frozen=True)
class UserReference:
    """Identifies a user by id within the identity store that holds it."""

    user_id: str
    identity_store_id: str

    @classmethod
    def of(cls, user: User) -> UserReference:
        """Create a reference to a built user."""
        return cls(user_id=user.user_id, identity_store_id=user.identity_store_id)


@dataclass(frozen=True)
class GroupReference:
    """Identifies a group by id within the identity store that holds it."""

    group_id: str
    identity_store_id: str

    @classmethod
    def of(cls, group: Group) -> GroupReference:
        """Create a reference to a built group."""
        return cls(group_id=group.group_id, identity_store_id=group.identity_store_id)


@dataclass(frozen=True)
class Resource:
    """A protected resource, written as ``namespace:resource_id``.

    Equality and hashing consider only the namespace and resource id; the
    owner is descriptive and never takes part in permission matching.
    """

    namespace: str
    resource_id: str
    owner: UserReference | None = field(default=None, compare=False)

    def __str__(self) -> str:
        if self.is_universal:
            return UNIVERSAL_RESOURCE
        return f"{self.namespace}{_NAMESPACE_SEPARATOR}{self.resource_id}"

    @property
    def is_universal(self) -> bool:
        """Whether this is the ``*`` resource."""
        return self.namespace == UNIVERSAL_RESOURCE

    @classmethod
    def universal(cls) -> Resource:
        """The resource matching every resource."""
        return cls(namespace=UNIVERSAL_RESOURCE, resource_id=UNIVERSAL_RESOURCE)

    @classmethod
    def from_string(cls, value: str, owner: UserReference | None = None) -> Resource:
        """Parse ``namespace:resource_id``.

        Args:
            value: Resource string; ``*`` yields the universal resource
            owner: Optional owner of the resource

        Returns:
            Resource instance

        Raises:
            ValueError: If the value has no namespace separator
        """
        if value == UNIVERSAL_RESOURCE:
            return cls.universal()
        namespace, sep, resource_id = value.partition(_NAMESPACE_SEPARATOR)
        if not sep or not namespace or not resource_id:
            raise ValueError(f"Invalid resource string: {value!r}")
        return cls(namespace=namespace, resource_id=resource_id, owner=owner)


@dataclass(frozen=True)
class Action:
    """An action performed on a resource, written as ``namespace:action``."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}{_NAMESPACE_SEPARATOR}{self.name}"

    @classmethod
    def from_string(cls, value: str) -> Action:
        """Parse ``namespace:action``.

        Raises:
            ValueError: If the value has no namespace separator
        """
        namespace, sep, name = value.partition(_NAMESPACE_SEPARATOR)
        if not sep or not namespace or not name:
            raise ValueError(f"Invalid action string: {value!r}")
        return cls(namespace=namespace, name=name)
