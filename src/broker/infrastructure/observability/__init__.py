"""Domain-oriented observability infrastructure.

Domain probes encapsulate instrumentation details and provide a clean,
domain-focused API for observability. Probes accept an ObservationContext
carrying request-scoped metadata that is attached to every event.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from infrastructure.observability.context import ObservationContext

__all__ = [
    "ObservationContext",
]
