"""Database infrastructure - shared SQLAlchemy primitives."""

from infrastructure.database.engines import get_engine
from infrastructure.database.models import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "get_engine",
]
