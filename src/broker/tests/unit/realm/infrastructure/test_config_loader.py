"""Unit tests for the YAML store configuration loader."""

from textwrap import dedent
from unittest.mock import create_autospec

import pytest

from realm.infrastructure.config_loader import (
    load_external_connectors,
    load_store_config,
    parse_store_config,
)
from realm.infrastructure.observability import ConfigLoaderProbe
from realm.ports.exceptions import StoreError


def _minimal(**overrides):
    data = {
        "identityStore": {"connectors": [{"name": "ids", "connectorType": "I"}]},
        "credentialStore": {"connectors": [{"name": "cs", "connectorType": "C"}]},
        "authorizationStore": {"connectors": [{"name": "as", "connectorType": "A"}]},
    }
    data.update(overrides)
    return data


@pytest.fixture
def mock_probe():
    """Create mock config loader probe."""
    return create_autospec(ConfigLoaderProbe, instance=True)


class TestParseStoreConfig:
    """Tests for resolving parsed YAML into a StoreConfig."""

    def test_minimal_configuration(self):
        config = parse_store_config(_minimal())

        assert [c.connector_id for c in config.identity_store.connectors] == ["ids"]
        assert config.identity_store.connectors[0].connector_type == "I"
        assert config.domains == []
        assert not config.enable_cache

    def test_missing_section_raises(self):
        data = _minimal()
        del data["credentialStore"]

        with pytest.raises(StoreError, match="credentialStore"):
            parse_store_config(data)

    def test_non_mapping_raises(self):
        with pytest.raises(StoreError):
            parse_store_config(None)

    def test_domains_and_cache_flags(self):
        data = _minimal(enableCache=True, domains=[{"name": "SALES", "priority": 10}])
        data["identityStore"]["enableCache"] = True

        config = parse_store_config(data)

        assert config.domains[0].name == "SALES"
        assert config.domains[0].priority == 10
        assert config.enable_cache
        assert config.identity_store.enable_cache
        assert not config.credential_store.enable_cache

    def test_connector_domain(self):
        data = _minimal()
        data["identityStore"]["connectors"][0]["domain"] = "SALES"

        config = parse_store_config(data)

        assert config.identity_store.connectors[0].domain_name == "SALES"

    def test_hash_entry_inherits_from_store_connectors(self):
        data = _minimal(
            storeConnectors=[
                {
                    "name": "jdbc",
                    "connectorType": "SqlIdentityStore",
                    "properties": {"url": "sqlite://", "timeout": "5"},
                }
            ]
        )
        data["identityStore"] = {"connectors": ["#jdbc"]}

        connector = parse_store_config(data).identity_store.connectors[0]

        assert connector.connector_id == "jdbc"
        assert connector.connector_type == "SqlIdentityStore"
        assert connector.properties == {"url": "sqlite://", "timeout": "5"}

    def test_plain_name_inherits_from_external_definition(self):
        data = _minimal()
        data["identityStore"] = {"connectors": ["ldap"]}
        external = {
            "ldap": {
                "name": "ldap",
                "connectorType": "LdapIdentityStore",
                "properties": {"host": "ldap.local"},
            }
        }

        connector = parse_store_config(data, external).identity_store.connectors[0]

        assert connector.connector_type == "LdapIdentityStore"
        assert connector.properties == {"host": "ldap.local"}

    def test_properties_merge_inherited_then_section_then_local(self):
        data = _minimal(
            storeConnectors=[
                {
                    "name": "jdbc",
                    "connectorType": "SqlIdentityStore",
                    "properties": {"a": "inherited", "b": "inherited", "c": "inherited"},
                }
            ]
        )
        data["identityStore"] = {
            "properties": {"b": "section", "c": "section"},
            "connectors": [{"name": "#jdbc", "properties": {"c": "local"}}],
        }

        connector = parse_store_config(data).identity_store.connectors[0]

        assert connector.properties == {"a": "inherited", "b": "section", "c": "local"}

    def test_local_type_overrides_inherited(self):
        data = _minimal(
            storeConnectors=[{"name": "jdbc", "connectorType": "SqlIdentityStore"}]
        )
        data["identityStore"] = {
            "connectors": [{"name": "#jdbc", "connectorType": "Custom"}]
        }

        connector = parse_store_config(data).identity_store.connectors[0]

        assert connector.connector_type == "Custom"

    def test_comma_separated_connector_names(self):
        data = _minimal(
            storeConnectors=[
                {"name": "one", "connectorType": "A"},
                {"name": "two", "connectorType": "A"},
            ]
        )
        data["authorizationStore"] = {"connector": "#one, #two"}

        config = parse_store_config(data)

        assert [c.connector_id for c in config.authorization_store.connectors] == [
            "one",
            "two",
        ]

    def test_unresolvable_type_raises(self):
        data = _minimal()
        data["identityStore"] = {"connectors": ["unknown"]}

        with pytest.raises(StoreError, match="Connector type is not defined"):
            parse_store_config(data)

    def test_duplicate_connector_ids_raise(self):
        data = _minimal()
        data["credentialStore"]["connectors"].append({"name": "cs", "connectorType": "C"})

        with pytest.raises(StoreError):
            parse_store_config(data)

    def test_entry_without_name_raises(self):
        data = _minimal()
        data["identityStore"] = {"connectors": [{"connectorType": "I"}]}

        with pytest.raises(StoreError, match="no name"):
            parse_store_config(data)


class TestLoadStoreConfig:
    """Tests for loading configuration files from disk."""

    def test_loads_file_and_external_connectors(self, tmp_path, mock_probe):
        store_file = tmp_path / "store-config.yml"
        store_file.write_text(
            dedent(
                """\
                identityStore:
                  connectors: [ldap]
                credentialStore:
                  connectors:
                    - name: creds
                      connectorType: InMemoryCredentialStore
                authorizationStore:
                  connectors:
                    - name: authz
                      connectorType: InMemoryAuthorizationStore
                """
            )
        )
        (tmp_path / "ldap-connector.yml").write_text(
            dedent(
                """\
                name: ldap
                connectorType: InMemoryIdentityStore
                properties:
                  groups: [readers]
                """
            )
        )

        config = load_store_config(store_file, probe=mock_probe)

        connector = config.identity_store.connectors[0]
        assert connector.connector_type == "InMemoryIdentityStore"
        assert connector.properties == {"groups": ["readers"]}
        mock_probe.config_loaded.assert_called_once_with(
            path=str(store_file), connectors=3, domains=0
        )

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(StoreError, match="not available"):
            load_store_config(tmp_path / "missing.yml")

    def test_invalid_yaml_raises(self, tmp_path):
        store_file = tmp_path / "store-config.yml"
        store_file.write_text("identityStore: [unclosed")

        with pytest.raises(StoreError, match="Error while loading"):
            load_store_config(store_file)

    def test_external_definition_without_name_is_skipped(self, tmp_path, mock_probe):
        nameless = tmp_path / "nameless-connector.yml"
        nameless.write_text("connectorType: InMemoryIdentityStore\n")

        entries = load_external_connectors(tmp_path, mock_probe)

        assert entries == {}
        mock_probe.external_connector_skipped.assert_called_once_with(
            str(nameless), "missing_name"
        )

    def test_missing_connector_directory_yields_nothing(self, tmp_path):
        assert load_external_connectors(tmp_path / "absent") == {}
