"""Protocol for identity store observability.

Defines the interface for domain probes that capture identity resolution
events across identity connectors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class IdentityStoreProbe(Protocol):
    """Domain probe for identity store operations."""

    def user_resolved(
        self, username: str, connector_id: str, tenant_domain: str
    ) -> None:
        """Record that a connector resolved a user."""
        ...

    def user_not_found(self, username: str, tenant_domain: str, attempts: int) -> None:
        """Record that no connector resolved a user."""
        ...

    def group_resolved(
        self, group_name: str, connector_id: str, tenant_domain: str
    ) -> None:
        """Record that a connector resolved a group."""
        ...

    def group_not_found(
        self, group_name: str, tenant_domain: str, attempts: int
    ) -> None:
        """Record that no connector resolved a group."""
        ...

    def connector_declined(self, connector_id: str, operation: str, error: str) -> None:
        """Record that a connector failed and was skipped."""
        ...

    def user_added(self, user_id: str, username: str, connector_id: str) -> None:
        """Record that a user was created."""
        ...

    def group_added(self, group_id: str, group_name: str, connector_id: str) -> None:
        """Record that a group was created."""
        ...

    def user_deleted(self, user_id: str, connector_id: str) -> None:
        """Record that a user was deleted."""
        ...

    def group_deleted(self, group_id: str, connector_id: str) -> None:
        """Record that a group was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> IdentityStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIdentityStoreProbe:
    """Default implementation of IdentityStoreProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultIdentityStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultIdentityStoreProbe(logger=self._logger, context=context)

    def user_resolved(
        self, username: str, connector_id: str, tenant_domain: str
    ) -> None:
        """Record that a connector resolved a user."""
        self._log(
            "debug",
            "user_resolved",
            username=username,
            connector_id=connector_id,
            tenant_domain=tenant_domain,
        )

    def user_not_found(self, username: str, tenant_domain: str, attempts: int) -> None:
        """Record that no connector resolved a user."""
        self._log(
            "info",
            "user_not_found",
            username=username,
            tenant_domain=tenant_domain,
            attempts=attempts,
        )

    def group_resolved(
        self, group_name: str, connector_id: str, tenant_domain: str
    ) -> None:
        """Record that a connector resolved a group."""
        self._log(
            "debug",
            "group_resolved",
            group_name=group_name,
            connector_id=connector_id,
            tenant_domain=tenant_domain,
        )

    def group_not_found(
        self, group_name: str, tenant_domain: str, attempts: int
    ) -> None:
        """Record that no connector resolved a group."""
        self._log(
            "info",
            "group_not_found",
            group_name=group_name,
            tenant_domain=tenant_domain,
            attempts=attempts,
        )

    def connector_declined(self, connector_id: str, operation: str, error: str) -> None:
        """Record that a connector failed and was skipped."""
        self._log(
            "warning",
            "identity_connector_declined",
            connector_id=connector_id,
            operation=operation,
            error=error,
        )

    def user_added(self, user_id: str, username: str, connector_id: str) -> None:
        """Record that a user was created."""
        self._log(
            "info",
            "user_added",
            user_id=user_id,
            username=username,
            connector_id=connector_id,
        )

    def group_added(self, group_id: str, group_name: str, connector_id: str) -> None:
        """Record that a group was created."""
        self._log(
            "info",
            "group_added",
            group_id=group_id,
            group_name=group_name,
            connector_id=connector_id,
        )

    def user_deleted(self, user_id: str, connector_id: str) -> None:
        """Record that a user was deleted."""
        self._log(
            "info",
            "user_deleted",
            user_id=user_id,
            connector_id=connector_id,
        )

    def group_deleted(self, group_id: str, connector_id: str) -> None:
        """Record that a group was deleted."""
        self._log(
            "info",
            "group_deleted",
            group_id=group_id,
            connector_id=connector_id,
        )
