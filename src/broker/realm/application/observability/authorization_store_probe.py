"""Protocol for authorization store observability.

Defines the interface for domain probes that capture authorization
decisions and role administration across authorization connectors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class AuthorizationStoreProbe(Protocol):
    """Domain probe for authorization store operations."""

    def primary_store_selected(self, connector_id: str, reason: str) -> None:
        """Record which connector receives writes by default."""
        ...

    def owner_authorized(self, user_id: str, resource: str) -> None:
        """Record that a user was authorized as the resource owner."""
        ...

    def no_roles_assigned(self, user_id: str, identity_store_id: str) -> None:
        """Record that a user has no roles to evaluate."""
        ...

    def authorization_evaluated(
        self, subject_id: str, permission: str, authorized: bool, roles_checked: int
    ) -> None:
        """Record the outcome of a role-based authorization check."""
        ...

    def connector_declined(self, connector_id: str, operation: str, error: str) -> None:
        """Record that a connector failed and was skipped."""
        ...

    def role_assignments_dispatched(
        self, subject_id: str, operation: str, store_ids: list[str]
    ) -> None:
        """Record which stores received a role assignment update."""
        ...

    def role_added(self, role_id: str, role_name: str, connector_id: str) -> None:
        """Record that a role was created."""
        ...

    def role_deleted(self, role_id: str, connector_id: str) -> None:
        """Record that a role was deleted."""
        ...

    def permission_added(self, permission: str, connector_id: str) -> None:
        """Record that a permission was created."""
        ...

    def permission_deleted(self, permission_id: str, connector_id: str) -> None:
        """Record that a permission was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationStoreProbe:
    """Default implementation of AuthorizationStoreProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def _log(self, level: str, event: str, **kwargs: Any) -> None:
        getattr(self._logger, level)(event, **{**self._get_context_kwargs(), **kwargs})

    def with_context(
        self, context: ObservationContext
    ) -> DefaultAuthorizationStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationStoreProbe(logger=self._logger, context=context)

    def primary_store_selected(self, connector_id: str, reason: str) -> None:
        """Record which connector receives writes by default."""
        self._log(
            "info",
            "primary_authorization_store_selected",
            connector_id=connector_id,
            reason=reason,
        )

    def owner_authorized(self, user_id: str, resource: str) -> None:
        """Record that a user was authorized as the resource owner."""
        self._log(
            "debug",
            "owner_authorized",
            user_id=user_id,
            resource=resource,
        )

    def no_roles_assigned(self, user_id: str, identity_store_id: str) -> None:
        """Record that a user has no roles to evaluate."""
        self._log(
            "warning",
            "no_roles_assigned",
            user_id=user_id,
            identity_store_id=identity_store_id,
        )

    def authorization_evaluated(
        self, subject_id: str, permission: str, authorized: bool, roles_checked: int
    ) -> None:
        """Record the outcome of a role-based authorization check."""
        self._log(
            "debug",
            "authorization_evaluated",
            subject_id=subject_id,
            permission=permission,
            authorized=authorized,
            roles_checked=roles_checked,
        )

    def connector_declined(self, connector_id: str, operation: str, error: str) -> None:
        """Record that a connector failed and was skipped."""
        self._log(
            "warning",
            "authorization_connector_declined",
            connector_id=connector_id,
            operation=operation,
            error=error,
        )

    def role_assignments_dispatched(
        self, subject_id: str, operation: str, store_ids: list[str]
    ) -> None:
        """Record which stores received a role assignment update."""
        self._log(
            "info",
            "role_assignments_dispatched",
            subject_id=subject_id,
            operation=operation,
            store_ids=store_ids,
        )

    def role_added(self, role_id: str, role_name: str, connector_id: str) -> None:
        """Record that a role was created."""
        self._log(
            "info",
            "role_added",
            role_id=role_id,
            role_name=role_name,
            connector_id=connector_id,
        )

    def role_deleted(self, role_id: str, connector_id: str) -> None:
        """Record that a role was deleted."""
        self._log(
            "info",
            "role_deleted",
            role_id=role_id,
            connector_id=connector_id,
        )

    def permission_added(self, permission: str, connector_id: str) -> None:
        """Record that a permission was created."""
        self._log(
            "info",
            "permission_added",
            permission=permission,
            connector_id=connector_id,
        )

    def permission_deleted(self, permission_id: str, connector_id: str) -> None:
        """Record that a permission was deleted."""
        self._log(
            "info",
            "permission_deleted",
            permission_id=permission_id,
            connector_id=connector_id,
        )
