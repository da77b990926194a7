"""Broker settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RealmSettings(BaseSettings):
    """Realm broker settings.

    Environment variables:
        REALM_STORE_CONFIG_PATH: Path of the store configuration YAML
            (default: conf/security/store-config.yml)
        REALM_CONNECTOR_CONFIG_DIR: Directory scanned for *-connector.yml
            definitions (default: conf/security)
        REALM_DEFAULT_DOMAIN_NAME: Name of the default domain (default: PRIMARY)
        REALM_LOG_LEVEL: Minimum log level (default: INFO)
        REALM_SQL_ECHO: Echo SQL issued by relational connectors (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="REALM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    store_config_path: Path = Field(
        default=Path("conf/security/store-config.yml"),
        description="Path of the store configuration file",
    )
    connector_config_dir: Path | None = Field(
        default=Path("conf/security"),
        description="Directory holding external connector definitions",
    )
    default_domain_name: str = Field(
        default="PRIMARY",
        min_length=1,
        description="Name of the domain used when a username has no prefix",
    )
    log_level: str = Field(default="INFO", description="Minimum log level")
    sql_echo: bool = Field(
        default=False,
        description="Echo SQL statements issued by relational connectors",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalise and validate the log level name."""
        normalised = value.upper()
        if normalised not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}"
            )
        return normalised

    @field_validator("default_domain_name")
    @classmethod
    def validate_default_domain_name(cls, value: str) -> str:
        """Reject domain names containing the username separator."""
        if "/" in value:
            raise ValueError("default_domain_name must not contain '/'")
        return value


@lru_cache
def get_realm_settings() -> RealmSettings:
    """Get cached realm settings."""
    return RealmSettings()
