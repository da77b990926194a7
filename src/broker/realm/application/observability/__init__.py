"""Domain-Oriented Observability for the realm application layer.

Probes for the store aggregators and realm construction.
"""

from realm.application.observability.authorization_store_probe import (
    AuthorizationStoreProbe,
    DefaultAuthorizationStoreProbe,
)
from realm.application.observability.credential_store_probe import (
    CredentialStoreProbe,
    DefaultCredentialStoreProbe,
)
from realm.application.observability.identity_store_probe import (
    DefaultIdentityStoreProbe,
    IdentityStoreProbe,
)
from realm.application.observability.realm_service_probe import (
    DefaultRealmServiceProbe,
    RealmServiceProbe,
)

__all__ = [
    "AuthorizationStoreProbe",
    "DefaultAuthorizationStoreProbe",
    "CredentialStoreProbe",
    "DefaultCredentialStoreProbe",
    "IdentityStoreProbe",
    "DefaultIdentityStoreProbe",
    "RealmServiceProbe",
    "DefaultRealmServiceProbe",
]
