"""Engine management for relational connectors.

Connectors that point at the same database URL share one Engine (and so
one connection pool). In-memory SQLite URLs get a StaticPool so that every
session sees the same database.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool


def _is_in_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


@lru_cache(maxsize=32)
def get_engine(url: str, echo: bool = False) -> Engine:
    """Get the shared Engine for a database URL.

    Args:
        url: SQLAlchemy database URL
        echo: Whether to log emitted SQL

    Returns:
        A cached Engine for the URL
    """
    if _is_in_memory_sqlite(url):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True)
