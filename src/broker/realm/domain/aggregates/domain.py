"""Domain entity: the connectors serving one tenant."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from realm.ports.connectors import (
        AuthorizationStoreConnector,
        CredentialStoreConnector,
        IdentityStoreConnector,
    )


@dataclass
class Domain:
    """A named set of connector instances with a priority.

    A domain is the isolation boundary for domain-qualified usernames such
    as ``SALES/alice``: identity lookups and credential checks for such a
    name only consult the connectors registered in the SALES domain. Each
    connector map keeps registration order, which is the fan-out order.

    Business rules:
    - Connector ids are unique per store type within a domain
    """

    name: str
    priority: int = 0
    identity_store_connectors: dict[str, IdentityStoreConnector] = field(
        default_factory=dict, repr=False
    )
    credential_store_connectors: dict[str, CredentialStoreConnector] = field(
        default_factory=dict, repr=False
    )
    authorization_store_connectors: dict[str, AuthorizationStoreConnector] = field(
        default_factory=dict, repr=False
    )

    def add_identity_store_connector(
        self, connector_id: str, connector: IdentityStoreConnector
    ) -> None:
        """Register an identity connector.

        Raises:
            ValueError: If a connector with the same id is already registered
        """
        self._add(self.identity_store_connectors, connector_id, connector)

    def add_credential_store_connector(
        self, connector_id: str, connector: CredentialStoreConnector
    ) -> None:
        """Register a credential connector.

        Raises:
            ValueError: If a connector with the same id is already registered
        """
        self._add(self.credential_store_connectors, connector_id, connector)

    def add_authorization_store_connector(
        self, connector_id: str, connector: AuthorizationStoreConnector
    ) -> None:
        """Register an authorization connector.

        Raises:
            ValueError: If a connector with the same id is already registered
        """
        self._add(self.authorization_store_connectors, connector_id, connector)

    def is_identity_store_connector_present(self, connector_id: str) -> bool:
        return connector_id in self.identity_store_connectors

    def _add(self, connectors: dict, connector_id: str, connector: object) -> None:
        if connector_id in connectors:
            raise ValueError(
                f"Connector {connector_id} is already registered in domain {self.name}"
            )
        connectors[connector_id] = connector
