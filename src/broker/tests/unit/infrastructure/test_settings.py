"""Unit tests for realm settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from infrastructure.settings import RealmSettings, get_realm_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_realm_settings.cache_clear()
    yield
    get_realm_settings.cache_clear()


class TestRealmSettingsDefaults:
    """Tests for default values."""

    def test_defaults(self, monkeypatch):
        for name in (
            "REALM_STORE_CONFIG_PATH",
            "REALM_CONNECTOR_CONFIG_DIR",
            "REALM_DEFAULT_DOMAIN_NAME",
            "REALM_LOG_LEVEL",
            "REALM_SQL_ECHO",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = RealmSettings(_env_file=None)

        assert settings.store_config_path == Path("conf/security/store-config.yml")
        assert settings.connector_config_dir == Path("conf/security")
        assert settings.default_domain_name == "PRIMARY"
        assert settings.log_level == "INFO"
        assert settings.sql_echo is False


class TestRealmSettingsEnvironment:
    """Tests for environment overrides."""

    def test_reads_prefixed_environment(self, monkeypatch, tmp_path):
        store_file = tmp_path / "store.yml"
        monkeypatch.setenv("REALM_STORE_CONFIG_PATH", str(store_file))
        monkeypatch.setenv("REALM_DEFAULT_DOMAIN_NAME", "CORP")
        monkeypatch.setenv("REALM_SQL_ECHO", "true")

        settings = get_realm_settings()

        assert settings.store_config_path == store_file
        assert settings.default_domain_name == "CORP"
        assert settings.sql_echo is True

    def test_getter_is_cached(self):
        assert get_realm_settings() is get_realm_settings()


class TestRealmSettingsValidation:
    """Tests for field validation."""

    def test_log_level_is_normalised(self):
        assert RealmSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            RealmSettings(log_level="verbose")

        assert "log_level" in str(exc_info.value)

    def test_domain_name_with_separator_rejected(self):
        with pytest.raises(ValidationError):
            RealmSettings(default_domain_name="SALES/EU")

    def test_empty_domain_name_rejected(self):
        with pytest.raises(ValidationError):
            RealmSettings(default_domain_name="")
