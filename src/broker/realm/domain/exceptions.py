"""Domain exceptions for the realm bounded context."""

from __future__ import annotations


class EntityBuildError(ValueError):
    """Raised when a builder is asked to build an entity with missing data.

    Attributes:
        missing: Names of the fields that were not supplied.
    """

    def __init__(self, entity: str, missing: list[str]) -> None:
        self.entity = entity
        self.missing = missing
        super().__init__(
            f"Required data missing for building {entity}: {', '.join(missing)}."
        )
