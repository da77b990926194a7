"""Value objects returned by the realm application layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from realm.domain.aggregates.user import User


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class AuthenticationContext:
    """Outcome of a successful authentication.

    Attributes:
        user: The authenticated user, fully built
        credential_store_id: Id of the credential connector that verified it
        authenticated_at: When verification succeeded
    """

    user: User
    credential_store_id: str
    authenticated_at: datetime = field(default_factory=_utc_now)
