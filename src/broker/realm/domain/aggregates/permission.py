"""Permission entity and its builder."""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from realm.domain.exceptions import EntityBuildError
from realm.domain.value_objects import Action, Resource


@dataclass(frozen=True)
class Permission:
    """An action allowed on a resource.

    Two permissions are equal when their resource and action are equal. The
    store id and permission id identify where a stored permission lives and
    are ignored when matching.
    """

    resource: Resource
    action: Action
    authorization_store_id: str | None = field(default=None, compare=False)
    permission_id: str | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"{self.resource}#{self.action}"

    @classmethod
    def of(cls, resource: str, action: str) -> Permission:
        """Create an unstored permission from ``ns:id`` and ``ns:action`` strings."""
        return cls(
            resource=Resource.from_string(resource),
            action=Action.from_string(action),
        )


@dataclass
class PermissionBuilder:
    """Collects the data of a stored Permission."""

    resource: Resource | None = None
    action: Action | None = None
    authorization_store_id: str | None = None
    permission_id: str | None = None

    def build(self) -> Permission:
        """Build the permission.

        Raises:
            EntityBuildError: If any field has not been supplied
        """
        missing = [f.name for f in fields(self) if getattr(self, f.name) is None]
        if missing:
            raise EntityBuildError("permission", missing)
        return Permission(
            resource=self.resource,
            action=self.action,
            authorization_store_id=self.authorization_store_id,
            permission_id=self.permission_id,
        )
