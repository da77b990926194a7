"""Application services for the realm bounded context.

The store aggregators present many connectors as one store; the realm
service builds them from configuration and owns their lifetime.
"""

from realm.application.services.authorization_store import (
    AuthorizationStore,
    select_primary_store_id,
)
from realm.application.services.credential_store import CredentialStore
from realm.application.services.domain_manager import DomainManager
from realm.application.services.identity_store import IdentityStore
from realm.application.services.realm_service import RealmService

__all__ = [
    "AuthorizationStore",
    "CredentialStore",
    "DomainManager",
    "IdentityStore",
    "RealmService",
    "select_primary_store_id",
]
