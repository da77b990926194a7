"""Application layer for the realm bounded context."""

from realm.application.services import (
    AuthorizationStore,
    CredentialStore,
    DomainManager,
    IdentityStore,
    RealmService,
)
from realm.application.value_objects import AuthenticationContext

__all__ = [
    "AuthenticationContext",
    "AuthorizationStore",
    "CredentialStore",
    "DomainManager",
    "IdentityStore",
    "RealmService",
]
