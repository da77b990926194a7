"""Relational credential store connector.

Verifies passwords against the bcrypt hashes in the realm_passwords table.
When the ``identityStoreId`` property names the identity connector that
owns the same tables, the user id handed over by the broker is used
directly; otherwise the user is looked up by name.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select

from realm.domain.callbacks import (
    Callback,
    NameCallback,
    PasswordCallback,
    UserDataCallback,
    find_callback,
)
from realm.infrastructure.connectors.sql.models import PasswordModel, UserModel
from realm.infrastructure.connectors.sql.support import SqlConnectorSupport
from realm.infrastructure.security import hash_credential, verify_credential
from realm.ports.config import ConnectorConfig
from realm.ports.exceptions import (
    AuthenticationFailure,
    CredentialStoreError,
    UserNotFoundError,
)

CONNECTOR_TYPE = "SqlCredentialStore"


class SqlCredentialStoreConnector(SqlConnectorSupport):
    """Credential connector backed by a relational database."""

    error_class = CredentialStoreError
    connector_type = CONNECTOR_TYPE

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        super().init(connector_id, config)
        identity_store_id = config.get_property("identityStoreId")
        self._identity_store_id = str(identity_store_id) if identity_store_id else None

    def get_credential_store_id(self) -> str:
        return self._connector_id

    def can_handle(self, callbacks: Sequence[Callback]) -> bool:
        return (
            find_callback(callbacks, NameCallback) is not None
            and find_callback(callbacks, PasswordCallback) is not None
        )

    def authenticate(self, callbacks: Sequence[Callback]) -> None:
        """Verify the name and password callbacks.

        Raises:
            AuthenticationFailure: If no hash is stored or the password is wrong
            CredentialStoreError: If the database fails
        """
        name = find_callback(callbacks, NameCallback)
        password = find_callback(callbacks, PasswordCallback)
        if name is None or password is None:
            raise AuthenticationFailure("Name and password callbacks are required.")
        user_data = find_callback(callbacks, UserDataCallback)

        stmt = select(PasswordModel.password_hash)
        if (
            user_data is not None
            and user_data.user_id
            and self._identity_store_id is not None
            and user_data.identity_store_id == self._identity_store_id
        ):
            stmt = stmt.where(PasswordModel.user_id == user_data.user_id)
        else:
            stmt = stmt.join(UserModel, UserModel.id == PasswordModel.user_id).where(
                UserModel.username == name.name
            )

        with self._session("authenticate") as session:
            credential_hash = session.scalar(stmt)

        if credential_hash is None:
            self._probe.credential_rejected(self._connector_id, "no_credential")
            raise AuthenticationFailure("Invalid user credentials.")
        if not verify_credential(password.password, credential_hash):
            self._probe.credential_rejected(self._connector_id, "password_mismatch")
            raise AuthenticationFailure("Invalid user credentials.")

    def set_credential(self, username: str, password: str) -> None:
        """Store (or replace) the password of an existing user.

        Raises:
            UserNotFoundError: If no user has the name
        """
        with self._session("set_credential") as session, session.begin():
            user_id = session.scalar(select(UserModel.id).where(UserModel.username == username))
            if user_id is None:
                raise UserNotFoundError(f"User {username} not found in {self._connector_id}.")
            credential_hash = hash_credential(password, self._rounds)
            existing = session.get(PasswordModel, user_id)
            if existing is None:
                session.add(PasswordModel(user_id=user_id, password_hash=credential_hash))
            else:
                existing.password_hash = credential_hash
