"""Tests for the relational connectors against a SQLite database file."""

from unittest.mock import create_autospec

import pytest

from realm.domain.callbacks import NameCallback, PasswordCallback, UserDataCallback
from realm.domain.value_objects import USERNAME_CLAIM_URI
from realm.infrastructure.connectors.sql import (
    SqlCredentialStoreConnector,
    SqlIdentityStoreConnector,
)
from realm.infrastructure.observability import ConnectorProbe
from realm.ports.config import ConnectorConfig
from realm.ports.exceptions import (
    AuthenticationFailure,
    CredentialStoreError,
    GroupNotFoundError,
    IdentityStoreError,
    UserNotFoundError,
)

EMAIL = "http://wso2.org/claims/email"


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path}/realm.db"


@pytest.fixture
def mock_probe():
    """Create mock connector probe."""
    return create_autospec(ConnectorProbe, instance=True)


@pytest.fixture
def identity_connector(database_url, mock_probe):
    connector = SqlIdentityStoreConnector(probe=mock_probe)
    connector.init(
        "jdbc",
        ConnectorConfig(
            connector_id="jdbc",
            connector_type="SqlIdentityStore",
            properties={
                "url": database_url,
                "createSchema": "true",
                "hashRounds": "4",
                "credentialStoreId": "jdbc-creds",
            },
        ),
    )
    return connector


@pytest.fixture
def credential_connector(database_url, identity_connector):
    connector = SqlCredentialStoreConnector()
    connector.init(
        "jdbc-creds",
        ConnectorConfig(
            connector_id="jdbc-creds",
            connector_type="SqlCredentialStore",
            properties={"url": database_url, "identityStoreId": "jdbc", "hashRounds": "4"},
        ),
    )
    return connector


@pytest.fixture
def alice(identity_connector):
    identity_connector.add_group("engineering", [])
    return identity_connector.add_user(
        "alice", {EMAIL: "alice@example.com"}, "s3cret", ["engineering"]
    )


class TestSqlConnectorInit:
    """Tests for connector initialization."""

    def test_requires_url(self):
        connector = SqlIdentityStoreConnector()

        with pytest.raises(IdentityStoreError, match="url"):
            connector.init(
                "jdbc", ConnectorConfig(connector_id="jdbc", connector_type="x")
            )

    def test_rejects_invalid_hash_rounds(self, database_url):
        connector = SqlCredentialStoreConnector()

        with pytest.raises(CredentialStoreError):
            connector.init(
                "c",
                ConnectorConfig(
                    connector_id="c",
                    connector_type="x",
                    properties={"url": database_url, "hashRounds": "2"},
                ),
            )

    def test_reports_ready(self, identity_connector, mock_probe):
        mock_probe.connector_ready.assert_called_once_with("jdbc", "SqlIdentityStore")

    def test_url_hides_password(self, identity_connector, database_url):
        assert identity_connector.url == database_url


class TestSqlIdentityStore:
    """Tests for SqlIdentityStoreConnector."""

    def test_add_and_get_user(self, identity_connector, alice):
        builder = identity_connector.get_user("alice")

        assert builder.user_id == alice.user_id
        assert builder.identity_store_id == "jdbc"
        assert builder.credential_store_id == "jdbc-creds"

    def test_user_from_id(self, identity_connector, alice):
        assert identity_connector.get_user_from_id(alice.user_id).username == "alice"

    def test_unknown_user_raises_not_found(self, identity_connector):
        with pytest.raises(UserNotFoundError):
            identity_connector.get_user("nobody")

    def test_claims_stored_with_username(self, identity_connector, alice):
        claims = identity_connector.get_user_attribute_values(alice.user_id)

        assert claims == {EMAIL: "alice@example.com", USERNAME_CLAIM_URI: "alice"}

    def test_claims_filtered(self, identity_connector, alice):
        claims = identity_connector.get_user_attribute_values(alice.user_id, [EMAIL])

        assert claims == {EMAIL: "alice@example.com"}

    def test_memberships(self, identity_connector, alice):
        group = identity_connector.get_group("engineering")

        assert identity_connector.is_user_in_group(alice.user_id, group.group_id)
        assert [g.group_name for g in identity_connector.get_groups_of_user(alice.user_id)] == [
            "engineering"
        ]
        assert [u.username for u in identity_connector.get_users_of_group(group.group_id)] == [
            "alice"
        ]

    def test_list_users_pattern_and_paging(self, identity_connector, alice):
        identity_connector.add_user("albert", {}, None, [])
        identity_connector.add_user("bob", {}, None, [])

        assert [u.username for u in identity_connector.list_users("al*", 0, -1)] == [
            "albert",
            "alice",
        ]
        assert [u.username for u in identity_connector.list_users("*", 1, 1)] == [
            "alice"
        ]

    def test_like_wildcards_in_names_are_literal(self, identity_connector):
        identity_connector.add_user("a_b", {}, None, [])
        identity_connector.add_user("axb", {}, None, [])

        assert [u.username for u in identity_connector.list_users("a_b", 0, -1)] == [
            "a_b"
        ]

    def test_duplicate_user_rejected(self, identity_connector, alice):
        with pytest.raises(IdentityStoreError):
            identity_connector.add_user("alice", {}, None, [])

    def test_unknown_group_rolls_back_user(self, identity_connector):
        with pytest.raises(IdentityStoreError):
            identity_connector.add_user("carol", {}, None, ["finance"])

        with pytest.raises(UserNotFoundError):
            identity_connector.get_user("carol")

    def test_add_group_with_members(self, identity_connector, alice):
        group = identity_connector.add_group("reviewers", ["alice"])

        assert identity_connector.is_user_in_group(alice.user_id, group.group_id)

    def test_delete_user(self, identity_connector, alice):
        identity_connector.delete_user(alice.user_id)

        with pytest.raises(UserNotFoundError):
            identity_connector.get_user_from_id(alice.user_id)

    def test_delete_group(self, identity_connector, alice):
        group = identity_connector.get_group("engineering")

        identity_connector.delete_group(group.group_id)

        assert not identity_connector.is_user_in_group(alice.user_id, group.group_id)
        with pytest.raises(GroupNotFoundError):
            identity_connector.get_group_by_id(group.group_id)


class TestSqlCredentialStore:
    """Tests for SqlCredentialStoreConnector."""

    def test_verifies_password_by_user_id(self, credential_connector, alice):
        credential_connector.authenticate(
            [
                NameCallback("alice"),
                PasswordCallback("s3cret"),
                UserDataCallback({"user_id": alice.user_id, "identity_store_id": "jdbc"}),
            ]
        )

    def test_verifies_password_by_name(self, credential_connector, alice):
        credential_connector.authenticate([NameCallback("alice"), PasswordCallback("s3cret")])

    def test_other_identity_store_falls_back_to_name(self, credential_connector, alice):
        credential_connector.authenticate(
            [
                NameCallback("alice"),
                PasswordCallback("s3cret"),
                UserDataCallback({"user_id": "other", "identity_store_id": "ldap"}),
            ]
        )

    def test_wrong_password_rejected(self, credential_connector, alice):
        with pytest.raises(AuthenticationFailure):
            credential_connector.authenticate(
                [NameCallback("alice"), PasswordCallback("wrong")]
            )

    def test_user_without_password_rejected(self, credential_connector, identity_connector):
        identity_connector.add_user("bob", {}, None, [])

        with pytest.raises(AuthenticationFailure):
            credential_connector.authenticate([NameCallback("bob"), PasswordCallback("x")])

    def test_set_credential(self, credential_connector, identity_connector):
        identity_connector.add_user("bob", {}, None, [])

        credential_connector.set_credential("bob", "fresh")

        credential_connector.authenticate([NameCallback("bob"), PasswordCallback("fresh")])

    def test_set_credential_for_unknown_user(self, credential_connector):
        with pytest.raises(UserNotFoundError):
            credential_connector.set_credential("nobody", "x")
