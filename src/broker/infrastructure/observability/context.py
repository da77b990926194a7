"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        request_id: Identifier of the current authentication or lookup request.
        user_id: Identifier of the user the operation concerns (if known).
        tenant_domain: Name of the domain the operation is scoped to.
        connector_id: Identifier of the connector being operated on.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", tenant_domain="SALES")
        probe = DefaultCredentialStoreProbe().with_context(context)
    """

    request_id: str | None = None
    user_id: str | None = None
    tenant_domain: str | None = None
    connector_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.tenant_domain is not None:
            result["tenant_domain"] = self.tenant_domain
        if self.connector_id is not None:
            result["connector_id"] = self.connector_id
        result.update(self.extra)
        return result

    def with_domain(self, tenant_domain: str) -> ObservationContext:
        """Create a new context scoped to a domain."""
        return replace(self, tenant_domain=tenant_domain)

    def with_connector(self, connector_id: str) -> ObservationContext:
        """Create a new context scoped to a connector."""
        return replace(self, connector_id=connector_id)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
