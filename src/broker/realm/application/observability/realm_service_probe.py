"""Protocol for realm service observability.

Captures the lifecycle of a realm: connector initialization, domain
registration and cache decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class RealmServiceProbe(Protocol):
    """Domain probe for realm construction."""

    def domain_registered(self, domain_name: str, priority: int) -> None:
        """Record that a domain was registered."""
        ...

    def connector_initialized(
        self,
        store_type: str,
        connector_id: str,
        connector_type: str,
        domain_name: str,
    ) -> None:
        """Record that a connector was created and initialized."""
        ...

    def connector_initialization_failed(
        self, store_type: str, connector_id: str, error: str
    ) -> None:
        """Record that a connector failed to initialize."""
        ...

    def store_decorated(self, store_type: str) -> None:
        """Record that a cache decorator was applied to a store."""
        ...

    def cache_decorator_missing(self, store_type: str) -> None:
        """Record that caching is enabled but no decorator was supplied."""
        ...

    def realm_initialized(
        self,
        version: str,
        domains: list[str],
        identity_connectors: int,
        credential_connectors: int,
        authorization_connectors: int,
    ) -> None:
        """Record that the realm is ready."""
        ...

    def with_context(self, context: ObservationContext) -> RealmServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRealmServiceProbe:
    """Default implementation of RealmServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRealmServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRealmServiceProbe(logger=self._logger, context=context)

    def domain_registered(self, domain_name: str, priority: int) -> None:
        """Record that a domain was registered."""
        self._log(
            "info",
            "domain_registered",
            domain_name=domain_name,
            priority=priority,
        )

    def connector_initialized(
        self,
        store_type: str,
        connector_id: str,
        connector_type: str,
        domain_name: str,
    ) -> None:
        """Record that a connector was created and initialized."""
        self._log(
            "info",
            "connector_initialized",
            store_type=store_type,
            connector_id=connector_id,
            connector_type=connector_type,
            domain_name=domain_name,
        )

    def connector_initialization_failed(
        self, store_type: str, connector_id: str, error: str
    ) -> None:
        """Record that a connector failed to initialize."""
        self._log(
            "error",
            "connector_initialization_failed",
            store_type=store_type,
            connector_id=connector_id,
            error=error,
        )

    def store_decorated(self, store_type: str) -> None:
        """Record that a cache decorator was applied to a store."""
        self._log(
            "info",
            "store_decorated",
            store_type=store_type,
        )

    def cache_decorator_missing(self, store_type: str) -> None:
        """Record that caching is enabled but no decorator was supplied."""
        self._log(
            "warning",
            "cache_decorator_missing",
            store_type=store_type,
        )

    def realm_initialized(
        self,
        version: str,
        domains: list[str],
        identity_connectors: int,
        credential_connectors: int,
        authorization_connectors: int,
    ) -> None:
        """Record that the realm is ready."""
        self._log(
            "info",
            "realm_initialized",
            version=version,
            domains=domains,
            identity_connectors=identity_connectors,
            credential_connectors=credential_connectors,
            authorization_connectors=authorization_connectors,
        )
