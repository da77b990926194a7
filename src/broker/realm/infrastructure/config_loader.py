"""YAML store configuration loader.

The store file names the connectors of each store type and may define
shared connector entries under ``storeConnectors``::

    enableCache: false
    domains:
      - name: SALES
        priority: 10
    storeConnectors:
      - name: jdbc
        connectorType: SqlIdentityStore
        properties:
          url: sqlite:///realm.db
    identityStore:
      enableCache: true
      connectors:
        - "#jdbc"
        - name: ldap
          domain: SALES
          properties:
            timeout: "5"
    credentialStore:
      connector: "#jdbc-credentials"
    authorizationStore:
      connectors: [memory]

A ``#name`` entry inherits the connector type and properties of the
``storeConnectors`` entry with that name. An unprefixed name inherits from
the ``*-connector.yml`` file in the connector directory whose ``name``
matches. Properties merge in order: inherited, then the store section's
``properties``, then the entry's own ``properties``. An entry's own
``connectorType`` overrides the inherited one.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from realm.infrastructure.observability import (
    ConfigLoaderProbe,
    DefaultConfigLoaderProbe,
)
from realm.ports.config import (
    ConnectorConfig,
    DomainConfig,
    StoreConfig,
    StoreTypeConfig,
)
from realm.ports.exceptions import StoreError

EXTERNAL_CONNECTOR_PATTERN = "*-connector.yml"
SHARED_PREFIX = "#"

_STORE_SECTIONS = {
    "identity_store": "identityStore",
    "credential_store": "credentialStore",
    "authorization_store": "authorizationStore",
}


def load_store_config(
    path: Path,
    connector_dir: Path | None = None,
    probe: ConfigLoaderProbe | None = None,
) -> StoreConfig:
    """Load and resolve a store configuration file.

    Args:
        path: The store configuration file
        connector_dir: Directory scanned for external connector files;
            the directory of ``path`` when None
        probe: Optional probe for observability

    Returns:
        The resolved StoreConfig

    Raises:
        StoreError: If a file is missing, unreadable or invalid
    """
    probe = probe or DefaultConfigLoaderProbe()
    if not path.is_file():
        raise StoreError(f"Configuration file {path} is not available.")

    data = _read_yaml(path)
    external = load_external_connectors(connector_dir or path.parent, probe)
    config = parse_store_config(data, external)

    probe.config_loaded(
        path=str(path),
        connectors=_count_connectors(config),
        domains=len(config.domains),
    )
    return config


def load_external_connectors(
    directory: Path, probe: ConfigLoaderProbe | None = None
) -> dict[str, dict[str, Any]]:
    """Read every ``*-connector.yml`` file in a directory, keyed by name.

    Files without a name are skipped. A missing directory yields no entries.

    Raises:
        StoreError: If a file cannot be parsed
    """
    probe = probe or DefaultConfigLoaderProbe()
    entries: dict[str, dict[str, Any]] = {}
    if not directory.is_dir():
        return entries

    for file_path in sorted(directory.glob(EXTERNAL_CONNECTOR_PATTERN)):
        data = _read_yaml(file_path)
        if not isinstance(data, Mapping):
            probe.external_connector_skipped(str(file_path), "not_a_mapping")
            continue
        name = str(data.get("name") or "").strip()
        if not name:
            probe.external_connector_skipped(str(file_path), "missing_name")
            continue
        entries[name] = dict(data)
    return entries


def parse_store_config(
    data: Any, external: Mapping[str, Mapping[str, Any]] | None = None
) -> StoreConfig:
    """Resolve parsed YAML content into a StoreConfig.

    Args:
        data: The parsed store file
        external: External connector definitions keyed by name

    Raises:
        StoreError: If a store section is missing or an entry is invalid
    """
    external = external or {}
    if not isinstance(data, Mapping):
        raise StoreError("Invalid or missing store configuration.")

    missing = [key for key in _STORE_SECTIONS.values() if not data.get(key)]
    if missing:
        raise StoreError(
            f"Invalid or missing configurations: {', '.join(missing)}."
        )

    shared = {
        str(entry.get("name")): entry
        for entry in data.get("storeConnectors") or []
        if isinstance(entry, Mapping) and entry.get("name")
    }

    try:
        return StoreConfig(
            enable_cache=bool(data.get("enableCache", False)),
            domains=[
                DomainConfig(name=entry["name"], priority=entry.get("priority", 0))
                for entry in data.get("domains") or []
            ],
            **{
                field: _parse_store_section(data[key], key, shared, external)
                for field, key in _STORE_SECTIONS.items()
            },
        )
    except (ValidationError, KeyError, TypeError) as e:
        raise StoreError(f"Invalid store configuration: {e}") from e


def _parse_store_section(
    section: Any,
    section_name: str,
    shared: Mapping[str, Mapping[str, Any]],
    external: Mapping[str, Mapping[str, Any]],
) -> StoreTypeConfig:
    if not isinstance(section, Mapping):
        raise StoreError(f"{section_name} must be a mapping.")

    section_properties = dict(section.get("properties") or {})
    entries = list(section.get("connectors") or [])
    if section.get("connector"):
        entries.extend(
            name.strip()
            for name in str(section["connector"]).split(",")
            if name.strip()
        )
    if not entries:
        raise StoreError(f"No connectors configured for {section_name}.")

    return StoreTypeConfig(
        enable_cache=bool(section.get("enableCache", False)),
        connectors=[
            _resolve_entry(entry, section_name, section_properties, shared, external)
            for entry in entries
        ],
    )


def _resolve_entry(
    entry: Any,
    section_name: str,
    section_properties: Mapping[str, Any],
    shared: Mapping[str, Mapping[str, Any]],
    external: Mapping[str, Mapping[str, Any]],
) -> ConnectorConfig:
    local: Mapping[str, Any] = {"name": entry} if isinstance(entry, str) else entry
    if not isinstance(local, Mapping) or not local.get("name"):
        raise StoreError(f"A connector entry in {section_name} has no name.")

    name = str(local["name"]).strip()
    if name.startswith(SHARED_PREFIX):
        name = name[len(SHARED_PREFIX) :]
        inherited = shared.get(name, {})
    else:
        inherited = external.get(name, {})

    connector_type = local.get("connectorType") or inherited.get("connectorType")
    if not connector_type:
        raise StoreError(
            f"Connector type is not defined for connector {name} in {section_name}."
        )

    properties: dict[str, Any] = {}
    properties.update(inherited.get("properties") or {})
    properties.update(section_properties)
    properties.update(local.get("properties") or {})

    return ConnectorConfig(
        connector_id=name,
        connector_type=str(connector_type),
        domain_name=local.get("domain") or inherited.get("domain"),
        properties=properties,
    )


def _count_connectors(config: StoreConfig) -> int:
    return (
        len(config.identity_store.connectors)
        + len(config.credential_store.connectors)
        + len(config.authorization_store.connectors)
    )


def _read_yaml(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise StoreError(f"Error while loading configuration file {path}: {e}") from e
