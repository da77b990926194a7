"""Authentication callbacks.

A front-end collects authentication material into an ordered list of
callbacks. The credential store passes the list to each credential
connector, which picks out the callbacks it understands.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

USER_ID_KEY = "user_id"
IDENTITY_STORE_ID_KEY = "identity_store_id"


@dataclass(frozen=True)
class NameCallback:
    """Carries the username being authenticated."""

    name: str


@dataclass(frozen=True)
class PasswordCallback:
    """Carries a password."""

    password: str = field(repr=False)


@dataclass(frozen=True)
class BearerTokenCallback:
    """Carries a bearer token."""

    token: str = field(repr=False)


@dataclass(frozen=True)
class UserDataCallback:
    """Carries data about the resolved user, keyed by USER_ID_KEY and friends."""

    content: Mapping[str, str] = field(default_factory=dict)

    @property
    def user_id(self) -> str | None:
        return self.content.get(USER_ID_KEY)

    @property
    def identity_store_id(self) -> str | None:
        return self.content.get(IDENTITY_STORE_ID_KEY)


Callback = NameCallback | PasswordCallback | BearerTokenCallback | UserDataCallback

C = TypeVar("C", NameCallback, PasswordCallback, BearerTokenCallback, UserDataCallback)


def find_callback(callbacks: Sequence[Callback], kind: type[C]) -> C | None:
    """Return the first callback of the given type, or None."""
    for callback in callbacks:
        if isinstance(callback, kind):
            return callback
    return None
