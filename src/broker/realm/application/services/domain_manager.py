"""Registry of the domains of a realm."""

from __future__ import annotations

from realm.domain.aggregates.domain import Domain
from realm.domain.value_objects import (
    DEFAULT_DOMAIN_NAME,
    DOMAIN_SEPARATOR,
    split_domain_name,
)
from realm.ports.connectors import (
    AuthorizationStoreConnector,
    CredentialStoreConnector,
    IdentityStoreConnector,
)
from realm.ports.exceptions import (
    DomainManagerError,
    DomainNotFoundError,
    DuplicateDomainNameError,
    StoreError,
)


class DomainManager:
    """Maps domain names to domains.

    Exactly one default domain exists from construction onwards. Usernames
    without a domain prefix resolve to it.
    """

    def __init__(
        self,
        default_domain_name: str = DEFAULT_DOMAIN_NAME,
        separator: str = DOMAIN_SEPARATOR,
    ) -> None:
        self._domains: dict[str, Domain] = {}
        self._separator = separator
        self._default_domain = self.add_domain(Domain(name=default_domain_name))

    @property
    def separator(self) -> str:
        return self._separator

    def add_domain(self, domain: Domain) -> Domain:
        """Register a domain.

        Raises:
            DuplicateDomainNameError: If a domain with the name exists
            DomainManagerError: If the name contains the username separator
        """
        if self._separator in domain.name:
            raise DomainManagerError(
                f"Domain name {domain.name!r} must not contain {self._separator!r}"
            )
        if domain.name in self._domains:
            raise DuplicateDomainNameError(
                f"Domain {domain.name} already exists in the domain map"
            )
        self._domains[domain.name] = domain
        return domain

    def get_domain_from_name(self, domain_name: str) -> Domain:
        """Get a domain by name.

        Raises:
            DomainNotFoundError: If no domain has the name
        """
        domain = self._domains.get(domain_name)
        if domain is None:
            raise DomainNotFoundError(f"Domain {domain_name} was not found")
        return domain

    def get_default_domain(self) -> Domain:
        return self._default_domain

    def get_domain_from_username(self, username: str) -> Domain:
        """Get the domain a username is qualified with.

        Raises:
            DomainNotFoundError: If the prefix names an unknown domain
        """
        domain_name, _ = split_domain_name(username, self._separator)
        if domain_name is None:
            return self._default_domain
        return self.get_domain_from_name(domain_name)

    def split_username(self, username: str) -> tuple[str | None, str]:
        """Split a username into (domain name or None, bare name)."""
        return split_domain_name(username, self._separator)

    def list_domains(self) -> list[Domain]:
        """List domains ordered by priority, then registration order."""
        return sorted(self._domains.values(), key=lambda domain: domain.priority)

    def find_domain_of_identity_connector(self, connector_id: str) -> Domain:
        """Get the domain an identity connector is registered in.

        Falls back to the default domain for unregistered connectors.
        """
        for domain in self._domains.values():
            if domain.is_identity_store_connector_present(connector_id):
                return domain
        return self._default_domain

    def add_identity_store_connector_to_domain(
        self, connector_id: str, connector: IdentityStoreConnector, domain_name: str
    ) -> None:
        """Register an identity connector in a domain.

        Raises:
            DomainNotFoundError: If the domain does not exist
            StoreError: If the connector id is already used in the domain
        """
        domain = self.get_domain_from_name(domain_name)
        try:
            domain.add_identity_store_connector(connector_id, connector)
        except ValueError as e:
            raise StoreError(str(e)) from e

    def add_credential_store_connector_to_domain(
        self, connector_id: str, connector: CredentialStoreConnector, domain_name: str
    ) -> None:
        """Register a credential connector in a domain.

        Raises:
            DomainNotFoundError: If the domain does not exist
            StoreError: If the connector id is already used in the domain
        """
        domain = self.get_domain_from_name(domain_name)
        try:
            domain.add_credential_store_connector(connector_id, connector)
        except ValueError as e:
            raise StoreError(str(e)) from e

    def add_authorization_store_connector_to_domain(
        self,
        connector_id: str,
        connector: AuthorizationStoreConnector,
        domain_name: str,
    ) -> None:
        """Register an authorization connector in a domain.

        Raises:
            DomainNotFoundError: If the domain does not exist
            StoreError: If the connector id is already used in the domain
        """
        domain = self.get_domain_from_name(domain_name)
        try:
            domain.add_authorization_store_connector(connector_id, connector)
        except ValueError as e:
            raise StoreError(str(e)) from e

    def get_identity_store_connector(
        self, connector_id: str, domain_name: str
    ) -> IdentityStoreConnector:
        """Get an identity connector registered in a domain.

        Raises:
            DomainNotFoundError: If the domain does not exist
            StoreError: If the domain has no such connector
        """
        domain = self.get_domain_from_name(domain_name)
        connector = domain.identity_store_connectors.get(connector_id)
        if connector is None:
            raise StoreError(
                f"Identity store connector {connector_id} is not in domain {domain_name}"
            )
        return connector

    def get_identity_store_connectors(
        self, domain_name: str
    ) -> dict[str, IdentityStoreConnector]:
        return self.get_domain_from_name(domain_name).identity_store_connectors

    def get_credential_store_connectors(
        self, domain_name: str
    ) -> dict[str, CredentialStoreConnector]:
        return self.get_domain_from_name(domain_name).credential_store_connectors
