"""Unit tests for the realm application probes.

Each default probe emits one structlog event per domain occurrence and
merges the bound observation context into the event.
"""

from unittest.mock import MagicMock

import structlog

from infrastructure.observability import ObservationContext
from realm.application.observability import (
    AuthorizationStoreProbe,
    CredentialStoreProbe,
    DefaultAuthorizationStoreProbe,
    DefaultCredentialStoreProbe,
    DefaultIdentityStoreProbe,
    DefaultRealmServiceProbe,
    IdentityStoreProbe,
    RealmServiceProbe,
)


class TestDefaultProbeInit:
    """Tests for default probe construction."""

    def test_creates_with_default_logger(self):
        probe = DefaultIdentityStoreProbe()

        assert probe._logger is not None

    def test_creates_with_custom_logger(self):
        custom_logger = structlog.get_logger()

        probe = DefaultCredentialStoreProbe(logger=custom_logger)

        assert probe._logger is custom_logger

    def test_with_context_keeps_logger(self):
        mock_logger = MagicMock()
        context = ObservationContext(request_id="req-1")

        probe = DefaultAuthorizationStoreProbe(logger=mock_logger).with_context(context)

        assert isinstance(probe, DefaultAuthorizationStoreProbe)
        assert probe._logger is mock_logger
        assert probe._context is context


class TestIdentityStoreProbe:
    """Tests for DefaultIdentityStoreProbe events."""

    def test_user_not_found(self):
        mock_logger = MagicMock()
        probe = DefaultIdentityStoreProbe(logger=mock_logger)

        probe.user_not_found("SALES/alice", "SALES", 2)

        mock_logger.info.assert_called_once()
        assert mock_logger.info.call_args[0][0] == "user_not_found"
        assert mock_logger.info.call_args[1]["attempts"] == 2

    def test_connector_declined_is_a_warning(self):
        mock_logger = MagicMock()
        probe = DefaultIdentityStoreProbe(logger=mock_logger)

        probe.connector_declined("ldap", "get_user", "timeout")

        assert mock_logger.warning.call_args[0][0] == "identity_connector_declined"
        assert mock_logger.warning.call_args[1]["connector_id"] == "ldap"

    def test_context_is_merged(self):
        mock_logger = MagicMock()
        context = ObservationContext(request_id="req-1", tenant_domain="SALES")
        probe = DefaultIdentityStoreProbe(logger=mock_logger, context=context)

        probe.user_added("u-1", "alice", "ldap")

        kwargs = mock_logger.info.call_args[1]
        assert kwargs["request_id"] == "req-1"
        assert kwargs["tenant_domain"] == "SALES"
        assert kwargs["connector_id"] == "ldap"

    def test_explicit_fields_override_context(self):
        mock_logger = MagicMock()
        context = ObservationContext(connector_id="bound", tenant_domain="PRIMARY")
        probe = DefaultIdentityStoreProbe(logger=mock_logger, context=context)

        probe.user_resolved("alice", "ldap", "SALES")

        kwargs = mock_logger.debug.call_args[1]
        assert kwargs["connector_id"] == "ldap"
        assert kwargs["tenant_domain"] == "SALES"


class TestAuthorizationStoreProbe:
    """Tests for DefaultAuthorizationStoreProbe events."""

    def test_primary_store_selected(self):
        mock_logger = MagicMock()
        probe = DefaultAuthorizationStoreProbe(logger=mock_logger)

        probe.primary_store_selected("authz", "configuration")

        assert mock_logger.info.call_args[0][0] == "primary_authorization_store_selected"
        assert mock_logger.info.call_args[1]["reason"] == "configuration"

    def test_connector_declined(self):
        mock_logger = MagicMock()
        probe = DefaultAuthorizationStoreProbe(logger=mock_logger)

        probe.connector_declined("authz", "get_role", "down")

        assert mock_logger.warning.call_args[0][0] == "authorization_connector_declined"


class TestCredentialStoreProbe:
    """Tests for DefaultCredentialStoreProbe events."""

    def test_authentication_failed(self):
        mock_logger = MagicMock()
        probe = DefaultCredentialStoreProbe(logger=mock_logger)

        probe.authentication_failed(None, "name_callback_missing")

        assert mock_logger.warning.call_args[0][0] == "authentication_failed"
        assert mock_logger.warning.call_args[1]["username"] is None

    def test_authentication_succeeded(self):
        mock_logger = MagicMock()
        probe = DefaultCredentialStoreProbe(logger=mock_logger)

        probe.authentication_succeeded("SALES/alice", "creds", "SALES")

        assert mock_logger.info.call_args[0][0] == "authentication_succeeded"


class TestRealmServiceProbe:
    """Tests for DefaultRealmServiceProbe events."""

    def test_cache_decorator_missing(self):
        mock_logger = MagicMock()
        probe = DefaultRealmServiceProbe(logger=mock_logger)

        probe.cache_decorator_missing("identity")

        assert mock_logger.warning.call_args[0][0] == "cache_decorator_missing"

    def test_connector_initialization_failed(self):
        mock_logger = MagicMock()
        probe = DefaultRealmServiceProbe(logger=mock_logger)

        probe.connector_initialization_failed("identity", "ldap", "refused")

        assert mock_logger.error.call_args[0][0] == "connector_initialization_failed"


class TestProtocolCompliance:
    """Default probes provide every protocol method."""

    def test_default_probes_cover_protocols(self):
        pairs = [
            (IdentityStoreProbe, DefaultIdentityStoreProbe),
            (AuthorizationStoreProbe, DefaultAuthorizationStoreProbe),
            (CredentialStoreProbe, DefaultCredentialStoreProbe),
            (RealmServiceProbe, DefaultRealmServiceProbe),
        ]
        for protocol, default in pairs:
            methods = [
                name
                for name in vars(protocol)
                if not name.startswith("_") and callable(getattr(protocol, name))
            ]
            for name in methods:
                assert hasattr(default, name), f"{default.__name__} lacks {name}"
