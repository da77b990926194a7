"""Composition root of the realm.

Wires settings, the store configuration file and the built-in connector
registry into a RealmService.
"""

from functools import lru_cache

from infrastructure.logging import configure_logging
from infrastructure.settings import get_realm_settings
from realm.application.services import RealmService
from realm.infrastructure.config_loader import load_store_config
from realm.infrastructure.connectors import get_default_registry


@lru_cache
def get_realm_service() -> RealmService:
    """Get the process-wide RealmService.

    Built on first use from the configured store file. Call
    ``get_realm_service.cache_clear()`` to rebuild after changing settings.

    Raises:
        StoreError: If the configuration cannot be loaded or a connector
            cannot be created
        ConnectorInitializationError: If a connector fails to initialize
    """
    settings = get_realm_settings()
    configure_logging(settings.log_level)
    config = load_store_config(
        settings.store_config_path,
        connector_dir=settings.connector_config_dir,
    )
    return RealmService(
        config,
        registry=get_default_registry(),
        default_domain_name=settings.default_domain_name,
    )
