"""Tests for a realm wired from the built-in in-memory connectors."""

import pytest

from realm.application.services import RealmService
from realm.domain.aggregates import Permission
from realm.domain.callbacks import NameCallback, PasswordCallback
from realm.infrastructure.config_loader import parse_store_config
from realm.infrastructure.connectors import create_default_registry
from realm.ports.exceptions import (
    AuthenticationFailure,
    NoRolesAssignedError,
    UserNotFoundError,
)

READ_REPORT = Permission.of("reports:q1", "reports:read")

STORE_FILE = {
    "domains": [{"name": "SALES", "priority": 10}],
    "identityStore": {
        "connectors": [
            {
                "name": "primary-users",
                "connectorType": "InMemoryIdentityStore",
                "properties": {
                    "groups": ["readers"],
                    "users": [{"username": "alice", "groups": ["readers"]}],
                },
            },
            {
                "name": "sales-users",
                "connectorType": "InMemoryIdentityStore",
                "domain": "SALES",
                "properties": {"users": [{"username": "alice"}, {"username": "bob"}]},
            },
        ]
    },
    "credentialStore": {
        "properties": {"hashRounds": "4"},
        "connectors": [
            {
                "name": "primary-creds",
                "connectorType": "InMemoryCredentialStore",
                "properties": {"credentials": {"alice": "primary-pw"}},
            },
            {
                "name": "sales-creds",
                "connectorType": "InMemoryCredentialStore",
                "domain": "SALES",
                "properties": {"credentials": {"alice": "sales-pw"}},
            },
        ],
    },
    "authorizationStore": {
        "connectors": [
            {
                "name": "authz",
                "connectorType": "InMemoryAuthorizationStore",
                "properties": {
                    "roles": [
                        {
                            "name": "report-reader",
                            "permissions": [
                                {"resource": "reports:q1", "action": "reports:read"}
                            ],
                        }
                    ]
                },
            }
        ]
    },
}


@pytest.fixture
def realm() -> RealmService:
    return RealmService(parse_store_config(STORE_FILE), create_default_registry())


class TestAuthentication:
    """End-to-end authentication through domain-scoped connectors."""

    def test_unqualified_name_uses_default_domain(self, realm):
        context = realm.authenticate([NameCallback("alice"), PasswordCallback("primary-pw")])

        assert context.user.identity_store_id == "primary-users"
        assert context.user.tenant_domain == "PRIMARY"
        assert context.credential_store_id == "primary-creds"

    def test_qualified_name_uses_its_domain(self, realm):
        context = realm.authenticate(
            [NameCallback("SALES/alice"), PasswordCallback("sales-pw")]
        )

        assert context.user.identity_store_id == "sales-users"
        assert context.user.username == "alice"
        assert context.user.tenant_domain == "SALES"
        assert context.credential_store_id == "sales-creds"

    def test_password_of_other_domain_fails(self, realm):
        with pytest.raises(AuthenticationFailure):
            realm.authenticate([NameCallback("SALES/alice"), PasswordCallback("primary-pw")])

    def test_user_without_credential_fails(self, realm):
        with pytest.raises(AuthenticationFailure):
            realm.authenticate([NameCallback("SALES/bob"), PasswordCallback("x")])


class TestLazyEntityOperations:
    """Entities built by the realm call back into its stores."""

    def test_group_role_authorizes_user(self, realm):
        alice = realm.identity_store.get_user("alice")
        readers = realm.identity_store.get_group("readers")
        role = realm.authorization_store.get_role("report-reader")

        readers.update_roles([role])

        assert alice.is_authorized(READ_REPORT)
        assert not alice.is_authorized(Permission.of("reports:q1", "reports:write"))
        assert [group.group_name for group in alice.get_groups()] == ["readers"]

    def test_direct_role_listed_on_user(self, realm):
        alice = realm.identity_store.get_user("SALES/alice")
        role = realm.authorization_store.get_role("report-reader")

        alice.update_roles([role])

        assert [r.name for r in alice.get_roles()] == ["report-reader"]
        assert alice.is_in_role("report-reader")
        assert [u.user_id for u in role.get_users()] == [alice.user_id]

    def test_user_without_roles_cannot_be_evaluated(self, realm):
        bob = realm.identity_store.get_user("SALES/bob")

        with pytest.raises(NoRolesAssignedError):
            bob.is_authorized(READ_REPORT)

    def test_resource_owner_is_authorized(self, realm):
        bob = realm.identity_store.get_user("SALES/bob")
        resource = realm.authorization_store.add_resource(
            "reports", "bob-notes", bob.user_id, bob.identity_store_id
        )

        assert bob.is_authorized(
            Permission(resource=resource, action=READ_REPORT.action)
        )

    def test_claims_of_user(self, realm):
        alice = realm.identity_store.get_user("alice")

        claims = {claim.claim_uri: claim.value for claim in alice.get_claims()}

        assert claims == {"http://wso2.org/claims/username": "alice"}

    def test_added_user_is_resolvable(self, realm):
        realm.identity_store.add_user("SALES/carol")

        carol = realm.identity_store.get_user("SALES/carol")

        assert carol.identity_store_id == "sales-users"
        with pytest.raises(UserNotFoundError):
            realm.identity_store.get_user("carol")
