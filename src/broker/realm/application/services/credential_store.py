"""Credential store aggregator.

Authenticates a caller against the credential connectors of the domain the
caller's username belongs to.
"""

from __future__ import annotations

from collections.abc import Sequence

from realm.application.observability import (
    CredentialStoreProbe,
    DefaultCredentialStoreProbe,
)
from realm.application.services.domain_manager import DomainManager
from realm.application.value_objects import AuthenticationContext
from realm.domain.callbacks import (
    IDENTITY_STORE_ID_KEY,
    USER_ID_KEY,
    Callback,
    NameCallback,
    UserDataCallback,
)
from realm.domain.protocols import StoreResolver
from realm.domain.value_objects import Claim
from realm.ports.exceptions import (
    AuthenticationFailure,
    CredentialStoreError,
    NotFoundError,
    StoreError,
)

INVALID_CREDENTIALS = "Invalid user credentials."


class CredentialStore:
    """Single virtual credential store over domain-scoped connectors."""

    def __init__(
        self,
        realm: StoreResolver,
        domain_manager: DomainManager,
        probe: CredentialStoreProbe | None = None,
    ) -> None:
        """Create the credential store.

        Args:
            realm: Resolver for the identity store used to resolve users
            domain_manager: Domains holding the credential connectors
            probe: Domain probe for observability

        Raises:
            StoreError: If no domain has a credential connector
        """
        if not any(
            domain.credential_store_connectors
            for domain in domain_manager.list_domains()
        ):
            raise StoreError("At least one credential store connector must be configured.")
        self._realm = realm
        self._domain_manager = domain_manager
        self._probe = probe or DefaultCredentialStoreProbe()

    def authenticate(self, callbacks: Sequence[Callback]) -> AuthenticationContext:
        """Authenticate the caller described by the callbacks.

        The first name callback names the user, optionally qualified with a
        domain ("SALES/alice"). Connectors receive a copy of the callbacks in
        which that name is bare, followed by a UserDataCallback identifying
        the resolved user. The caller's list is left untouched.

        Args:
            callbacks: Authentication material, in order

        Returns:
            AuthenticationContext for the verified user

        Raises:
            AuthenticationFailure: If there is no name callback, the user
                cannot be resolved, or no connector verifies the credentials
        """
        name_index = next(
            (i for i, cb in enumerate(callbacks) if isinstance(cb, NameCallback)),
            None,
        )
        if name_index is None:
            self._probe.authentication_failed(None, "name_callback_missing")
            raise AuthenticationFailure("Name callback is not present.")

        qualified_name = callbacks[name_index].name
        domain_name, bare_name = self._domain_manager.split_username(qualified_name)
        working: list[Callback] = list(callbacks)
        if domain_name is not None:
            working[name_index] = NameCallback(name=bare_name)

        try:
            user = self._realm.identity_store.get_user_by_claim(
                Claim.username(qualified_name)
            )
        except (NotFoundError, StoreError) as e:
            self._probe.authentication_failed(qualified_name, "user_not_resolved")
            raise AuthenticationFailure(INVALID_CREDENTIALS) from e

        working.append(
            UserDataCallback(
                content={
                    USER_ID_KEY: user.user_id,
                    IDENTITY_STORE_ID_KEY: user.identity_store_id,
                }
            )
        )

        connectors = self._domain_manager.get_credential_store_connectors(
            user.tenant_domain
        )
        for connector_id, connector in connectors.items():
            try:
                if not connector.can_handle(working):
                    continue
                connector.authenticate(working)
            except (AuthenticationFailure, CredentialStoreError) as e:
                self._probe.connector_declined(connector_id, qualified_name, str(e))
                continue
            self._probe.authentication_succeeded(
                qualified_name, connector_id, user.tenant_domain
            )
            return AuthenticationContext(user=user, credential_store_id=connector_id)

        self._probe.authentication_failed(qualified_name, "no_connector_verified")
        raise AuthenticationFailure(INVALID_CREDENTIALS)
