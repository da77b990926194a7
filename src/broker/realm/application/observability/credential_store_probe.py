"""Protocol for credential store observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class CredentialStoreProbe(Protocol):
    """Domain probe for authentication attempts."""

    def authentication_succeeded(
        self, username: str, connector_id: str, tenant_domain: str
    ) -> None:
        """Record that a credential connector verified a user."""
        ...

    def authentication_failed(self, username: str | None, reason: str) -> None:
        """Record that an authentication attempt failed."""
        ...

    def connector_declined(self, connector_id: str, username: str, error: str) -> None:
        """Record that a credential connector rejected or failed an attempt."""
        ...

    def with_context(self, context: ObservationContext) -> CredentialStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCredentialStoreProbe:
    """Default implementation of CredentialStoreProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCredentialStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultCredentialStoreProbe(logger=self._logger, context=context)

    def authentication_succeeded(
        self, username: str, connector_id: str, tenant_domain: str
    ) -> None:
        """Record that a credential connector verified a user."""
        self._log(
            "info",
            "authentication_succeeded",
            username=username,
            connector_id=connector_id,
            tenant_domain=tenant_domain,
        )

    def authentication_failed(self, username: str | None, reason: str) -> None:
        """Record that an authentication attempt failed."""
        self._log(
            "warning",
            "authentication_failed",
            username=username,
            reason=reason,
        )

    def connector_declined(self, connector_id: str, username: str, error: str) -> None:
        """Record that a credential connector rejected or failed an attempt."""
        self._log(
            "debug",
            "credential_connector_declined",
            connector_id=connector_id,
            username=username,
            error=error,
        )
