"""Protocol for connector observability.

Captures backend-level events of the built-in connectors: initialization,
seeding and backend failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ConnectorProbe(Protocol):
    """Domain probe for connector operations."""

    def connector_ready(self, connector_id: str, connector_type: str) -> None:
        """Record that a connector finished initialization."""
        ...

    def connector_seeded(self, connector_id: str, entries: int) -> None:
        """Record that a connector loaded entries from its properties."""
        ...

    def backend_failed(self, connector_id: str, operation: str, error: str) -> None:
        """Record that the backend of a connector failed."""
        ...

    def credential_rejected(self, connector_id: str, reason: str) -> None:
        """Record that a credential connector rejected credentials."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectorProbe:
    """Default implementation of ConnectorProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultConnectorProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectorProbe(logger=self._logger, context=context)

    def connector_ready(self, connector_id: str, connector_type: str) -> None:
        """Record that a connector finished initialization."""
        self._log(
            "debug",
            "connector_ready",
            connector_id=connector_id,
            connector_type=connector_type,
        )

    def connector_seeded(self, connector_id: str, entries: int) -> None:
        """Record that a connector loaded entries from its properties."""
        self._log(
            "info",
            "connector_seeded",
            connector_id=connector_id,
            entries=entries,
        )

    def backend_failed(self, connector_id: str, operation: str, error: str) -> None:
        """Record that the backend of a connector failed."""
        self._log(
            "error",
            "connector_backend_failed",
            connector_id=connector_id,
            operation=operation,
            error=error,
        )

    def credential_rejected(self, connector_id: str, reason: str) -> None:
        """Record that a credential connector rejected credentials."""
        self._log(
            "debug",
            "credential_rejected",
            connector_id=connector_id,
            reason=reason,
        )
