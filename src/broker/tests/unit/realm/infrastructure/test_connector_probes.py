"""Unit tests for connector and configuration loader probes."""

from unittest.mock import MagicMock

from infrastructure.observability import ObservationContext
from realm.infrastructure.observability import (
    DefaultConfigLoaderProbe,
    DefaultConnectorProbe,
)


class TestDefaultConnectorProbe:
    """Tests for DefaultConnectorProbe."""

    def test_connector_ready(self):
        mock_logger = MagicMock()
        probe = DefaultConnectorProbe(logger=mock_logger)

        probe.connector_ready("jdbc", "SqlIdentityStore")

        mock_logger.debug.assert_called_once()
        assert mock_logger.debug.call_args[0][0] == "connector_ready"
        assert mock_logger.debug.call_args[1]["connector_type"] == "SqlIdentityStore"

    def test_connector_seeded(self):
        mock_logger = MagicMock()
        probe = DefaultConnectorProbe(logger=mock_logger)

        probe.connector_seeded("memory", 3)

        assert mock_logger.info.call_args[0][0] == "connector_seeded"
        assert mock_logger.info.call_args[1]["entries"] == 3

    def test_backend_failed_is_an_error(self):
        mock_logger = MagicMock()
        probe = DefaultConnectorProbe(logger=mock_logger)

        probe.backend_failed("jdbc", "get_user", "disk I/O error")

        assert mock_logger.error.call_args[0][0] == "connector_backend_failed"
        assert mock_logger.error.call_args[1]["operation"] == "get_user"

    def test_bound_connector_is_overridden(self):
        mock_logger = MagicMock()
        probe = DefaultConnectorProbe(logger=mock_logger).with_context(
            ObservationContext(request_id="req-1", connector_id="bound")
        )

        probe.credential_rejected("creds", "password_mismatch")

        kwargs = mock_logger.debug.call_args[1]
        assert kwargs["connector_id"] == "creds"
        assert kwargs["request_id"] == "req-1"


class TestDefaultConfigLoaderProbe:
    """Tests for DefaultConfigLoaderProbe."""

    def test_config_loaded(self):
        mock_logger = MagicMock()
        probe = DefaultConfigLoaderProbe(logger=mock_logger)

        probe.config_loaded("conf/store.yml", 3, 1)

        assert mock_logger.info.call_args[0][0] == "store_config_loaded"
        assert mock_logger.info.call_args[1]["connectors"] == 3

    def test_external_connector_skipped(self):
        mock_logger = MagicMock()
        probe = DefaultConfigLoaderProbe(logger=mock_logger)

        probe.external_connector_skipped("conf/x-connector.yml", "missing_name")

        assert mock_logger.warning.call_args[0][0] == "external_connector_skipped"
