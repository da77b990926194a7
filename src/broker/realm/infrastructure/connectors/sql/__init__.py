"""Relational connectors built on SQLAlchemy."""

from realm.infrastructure.connectors.sql.credential_connector import (
    SqlCredentialStoreConnector,
)
from realm.infrastructure.connectors.sql.identity_connector import (
    SqlIdentityStoreConnector,
)

__all__ = [
    "SqlCredentialStoreConnector",
    "SqlIdentityStoreConnector",
]
