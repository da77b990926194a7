"""In-memory credential store connector.

Verifies username/password pairs against bcrypt hashes held in memory. The
``credentials`` property maps usernames to plaintext passwords, hashed at
init time; ``hashRounds`` sets the bcrypt work factor.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence

from realm.domain.callbacks import (
    Callback,
    NameCallback,
    PasswordCallback,
    find_callback,
)
from realm.infrastructure.observability import ConnectorProbe, DefaultConnectorProbe
from realm.infrastructure.security import (
    DEFAULT_ROUNDS,
    hash_credential,
    verify_credential,
)
from realm.ports.config import ConnectorConfig
from realm.ports.exceptions import AuthenticationFailure, CredentialStoreError

CONNECTOR_TYPE = "InMemoryCredentialStore"


class InMemoryCredentialStoreConnector:
    """Credential connector verifying passwords held in memory."""

    def __init__(self, probe: ConnectorProbe | None = None) -> None:
        self._probe = probe or DefaultConnectorProbe()
        self._lock = threading.RLock()
        self._connector_id: str | None = None
        self._rounds = DEFAULT_ROUNDS
        self._hashes: dict[str, str] = {}

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        """Initialize and hash the ``credentials`` property.

        Raises:
            CredentialStoreError: If the properties are malformed
        """
        self._connector_id = connector_id
        try:
            self._rounds = int(config.get_property("hashRounds", DEFAULT_ROUNDS))
        except (TypeError, ValueError) as e:
            raise CredentialStoreError("hashRounds must be an integer.") from e
        if not 4 <= self._rounds <= 31:
            raise CredentialStoreError("hashRounds must be between 4 and 31.")

        credentials = config.get_property("credentials") or {}
        if not isinstance(credentials, Mapping):
            raise CredentialStoreError("The credentials property must be a mapping.")
        for username, password in credentials.items():
            self.set_credential(str(username), str(password))

        self._probe.connector_seeded(connector_id, len(credentials))
        self._probe.connector_ready(connector_id, CONNECTOR_TYPE)

    def get_credential_store_id(self) -> str:
        return self._connector_id

    def set_credential(self, username: str, password: str) -> None:
        """Store (or replace) the password of a user."""
        credential_hash = hash_credential(password, self._rounds)
        with self._lock:
            self._hashes[username] = credential_hash

    def can_handle(self, callbacks: Sequence[Callback]) -> bool:
        return (
            find_callback(callbacks, NameCallback) is not None
            and find_callback(callbacks, PasswordCallback) is not None
        )

    def authenticate(self, callbacks: Sequence[Callback]) -> None:
        """Verify the name and password callbacks.

        Raises:
            AuthenticationFailure: If the user is unknown or the password is wrong
        """
        name = find_callback(callbacks, NameCallback)
        password = find_callback(callbacks, PasswordCallback)
        if name is None or password is None:
            raise AuthenticationFailure("Name and password callbacks are required.")

        with self._lock:
            credential_hash = self._hashes.get(name.name)
        if credential_hash is None:
            self._probe.credential_rejected(self._connector_id, "unknown_user")
            raise AuthenticationFailure("Invalid user credentials.")
        if not verify_credential(password.password, credential_hash):
            self._probe.credential_rejected(self._connector_id, "password_mismatch")
            raise AuthenticationFailure("Invalid user credentials.")
