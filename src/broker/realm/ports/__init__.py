"""Ports (interfaces) for the realm bounded context.

Ports define the connector contracts, the resolved configuration model and
the exceptions shared between the broker and its connectors.
"""

from realm.ports.connectors import (
    AuthorizationStoreConnector,
    CredentialStoreConnector,
    IConnectorRegistry,
    IdentityStoreConnector,
)

__all__ = [
    "AuthorizationStoreConnector",
    "CredentialStoreConnector",
    "IConnectorRegistry",
    "IdentityStoreConnector",
]
