"""Pagination shared by list operations of the built-in connectors."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

NO_LIMIT = -1


def page(items: Sequence[T], offset: int, length: int) -> list[T]:
    """Slice a page out of items.

    Args:
        items: Items in listing order
        offset: Number of items to skip; negative counts as zero
        length: Maximum page size; NO_LIMIT (or any negative) for no limit
    """
    start = max(offset, 0)
    if length < 0:
        return list(items[start:])
    return list(items[start : start + length])
