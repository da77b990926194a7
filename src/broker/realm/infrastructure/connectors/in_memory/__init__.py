"""In-memory connectors for every store type."""

from realm.infrastructure.connectors.in_memory.authorization_connector import (
    InMemoryAuthorizationStoreConnector,
)
from realm.infrastructure.connectors.in_memory.credential_connector import (
    InMemoryCredentialStoreConnector,
)
from realm.infrastructure.connectors.in_memory.identity_connector import (
    InMemoryIdentityStoreConnector,
)

__all__ = [
    "InMemoryAuthorizationStoreConnector",
    "InMemoryCredentialStoreConnector",
    "InMemoryIdentityStoreConnector",
]
