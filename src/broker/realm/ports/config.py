"""Resolved store configuration.

These models describe configuration after any file-level inheritance has
been applied; see realm.infrastructure.config_loader for the YAML format.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

PRIMARY_PROPERTY = "primary"
PRIORITY_PROPERTY = "priority"


class StoreType(StrEnum):
    """The three kinds of store a connector can back."""

    IDENTITY = "identity"
    CREDENTIAL = "credential"
    AUTHORIZATION = "authorization"


class ConnectorConfig(BaseModel):
    """Configuration of one connector instance.

    Attributes:
        connector_id: Unique id of the instance within its store type
        connector_type: Registry tag selecting the connector implementation
        domain_name: Domain the connector serves; the default domain when None
        properties: Connector-specific properties
    """

    model_config = ConfigDict(frozen=True)

    connector_id: str = Field(min_length=1)
    connector_type: str = Field(min_length=1)
    domain_name: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)

    def get_property(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    @property
    def is_primary(self) -> bool:
        """Whether the ``primary`` property is set to true."""
        return str(self.properties.get(PRIMARY_PROPERTY, "")).strip().lower() == "true"

    @property
    def priority(self) -> int | None:
        """The numeric ``priority`` property, or None when absent.

        Raises:
            ValueError: If the property is present but not an integer
        """
        value = self.properties.get(PRIORITY_PROPERTY)
        if value is None or value == "":
            return None
        return int(str(value).strip())


class StoreTypeConfig(BaseModel):
    """Connectors of one store type, in fan-out order."""

    model_config = ConfigDict(frozen=True)

    enable_cache: bool = False
    connectors: list[ConnectorConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> StoreTypeConfig:
        """Reject two connectors sharing an id."""
        seen: set[str] = set()
        for connector in self.connectors:
            if connector.connector_id in seen:
                raise ValueError(f"Duplicate connector id: {connector.connector_id}")
            seen.add(connector.connector_id)
        return self


class DomainConfig(BaseModel):
    """A domain declared in configuration."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    priority: int = 0


class StoreConfig(BaseModel):
    """Complete store configuration of a realm."""

    model_config = ConfigDict(frozen=True)

    enable_cache: bool = False
    domains: list[DomainConfig] = Field(default_factory=list)
    identity_store: StoreTypeConfig = Field(default_factory=StoreTypeConfig)
    credential_store: StoreTypeConfig = Field(default_factory=StoreTypeConfig)
    authorization_store: StoreTypeConfig = Field(default_factory=StoreTypeConfig)

    def for_store_type(self, store_type: StoreType) -> StoreTypeConfig:
        return {
            StoreType.IDENTITY: self.identity_store,
            StoreType.CREDENTIAL: self.credential_store,
            StoreType.AUTHORIZATION: self.authorization_store,
        }[store_type]

    def is_cache_enabled(self, store_type: StoreType) -> bool:
        """Whether both the global and the per-store cache flags are set."""
        return self.enable_cache and self.for_store_type(store_type).enable_cache
