"""Sequential fan-out over an ordered set of connectors.

Connectors are consulted in mapping order, which is the order they were
declared in configuration. A connector raising a ConnectorError is reported
through ``on_decline`` and skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TypeVar

from realm.ports.exceptions import ConnectorError, NotFoundError

C = TypeVar("C")
T = TypeVar("T")

DeclineHandler = Callable[[str, ConnectorError], None]


def first_resolved(
    connectors: Mapping[str, C],
    lookup: Callable[[C], T],
    not_found: NotFoundError,
    on_decline: DeclineHandler,
) -> tuple[str, T]:
    """Return the first connector result.

    Args:
        connectors: Connectors keyed by id, in fan-out order
        lookup: Lookup to run against each connector
        not_found: Error raised when nothing resolves; each connector's
            failure is added to its causes
        on_decline: Called for connectors that failed with a ConnectorError

    Returns:
        Tuple of (id of the resolving connector, lookup result)

    Raises:
        NotFoundError: ``not_found``, once every connector has been tried
    """
    for connector_id, connector in connectors.items():
        try:
            return connector_id, lookup(connector)
        except NotFoundError as e:
            not_found.add_cause(e)
        except ConnectorError as e:
            on_decline(connector_id, e)
            not_found.add_cause(e)
    raise not_found


def collect_all(
    connectors: Mapping[str, C],
    fetch: Callable[[C], Iterable[T]],
    on_decline: DeclineHandler,
) -> list[T]:
    """Concatenate the results of every connector, skipping failed ones."""
    results: list[T] = []
    for connector_id, connector in connectors.items():
        try:
            results.extend(fetch(connector))
        except ConnectorError as e:
            on_decline(connector_id, e)
    return results


def any_true(
    connectors: Mapping[str, C],
    check: Callable[[C], bool],
    on_decline: DeclineHandler,
) -> bool:
    """Whether any connector answers True, stopping at the first that does."""
    for connector_id, connector in connectors.items():
        try:
            if check(connector):
                return True
        except ConnectorError as e:
            on_decline(connector_id, e)
    return False
