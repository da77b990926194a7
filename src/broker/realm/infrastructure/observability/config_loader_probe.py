"""Protocol for store configuration loading observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ConfigLoaderProbe(Protocol):
    """Domain probe for store configuration loading."""

    def config_loaded(self, path: str, connectors: int, domains: int) -> None:
        """Record that a store configuration file was loaded."""
        ...

    def external_connector_skipped(self, path: str, reason: str) -> None:
        """Record that an external connector definition was ignored."""
        ...

    def with_context(self, context: ObservationContext) -> ConfigLoaderProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConfigLoaderProbe:
    """Default implementation of ConfigLoaderProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultConfigLoaderProbe:
        """Create a new probe with observation context bound."""
        return DefaultConfigLoaderProbe(logger=self._logger, context=context)

    def config_loaded(self, path: str, connectors: int, domains: int) -> None:
        """Record that a store configuration file was loaded."""
        self._log(
            "info",
            "store_config_loaded",
            path=path,
            connectors=connectors,
            domains=domains,
        )

    def external_connector_skipped(self, path: str, reason: str) -> None:
        """Record that an external connector definition was ignored."""
        self._log(
            "warning",
            "external_connector_skipped",
            path=path,
            reason=reason,
        )
