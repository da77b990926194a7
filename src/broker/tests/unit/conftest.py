"""Unit test fixtures with mocked dependencies."""

from unittest.mock import MagicMock, create_autospec

import pytest

from realm.domain.aggregates import GroupBuilder, RoleBuilder, UserBuilder
from realm.domain.protocols import AuthorizationStoreHandle, IdentityStoreHandle


@pytest.fixture
def mock_identity_handle():
    """Create mock identity store handle."""
    return create_autospec(IdentityStoreHandle, instance=True)


@pytest.fixture
def mock_authorization_handle():
    """Create mock authorization store handle."""
    return create_autospec(AuthorizationStoreHandle, instance=True)


@pytest.fixture
def mock_realm(mock_identity_handle, mock_authorization_handle):
    """Create a store resolver exposing the mock handles."""
    realm = MagicMock()
    realm.identity_store = mock_identity_handle
    realm.authorization_store = mock_authorization_handle
    return realm


@pytest.fixture
def user_factory(mock_identity_handle, mock_authorization_handle):
    """Build users bound to the mock handles."""

    def _build(
        user_id: str = "u-1",
        username: str = "alice",
        identity_store_id: str = "ids-1",
        tenant_domain: str = "PRIMARY",
    ):
        return (
            UserBuilder()
            .with_user_id(user_id)
            .with_username(username)
            .with_identity_store_id(identity_store_id)
            .with_credential_store_id("cs-1")
            .with_tenant_domain(tenant_domain)
            .with_stores(mock_identity_handle, mock_authorization_handle)
            .build()
        )

    return _build


@pytest.fixture
def group_factory(mock_identity_handle, mock_authorization_handle):
    """Build groups bound to the mock handles."""

    def _build(
        group_id: str = "g-1",
        group_name: str = "engineering",
        identity_store_id: str = "ids-1",
    ):
        return (
            GroupBuilder()
            .with_group_id(group_id)
            .with_group_name(group_name)
            .with_identity_store_id(identity_store_id)
            .with_tenant_domain("PRIMARY")
            .with_stores(mock_identity_handle, mock_authorization_handle)
            .build()
        )

    return _build


@pytest.fixture
def role_factory(mock_authorization_handle):
    """Build roles bound to the mock authorization handle."""

    def _build(
        role_id: str = "r-1",
        name: str = "admin",
        authorization_store_id: str = "as-1",
    ):
        return (
            RoleBuilder()
            .with_role_id(role_id)
            .with_name(name)
            .with_authorization_store_id(authorization_store_id)
            .with_store(mock_authorization_handle)
            .build()
        )

    return _build
