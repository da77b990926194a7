"""Engine and session handling shared by the relational connectors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from infrastructure.database.engines import get_engine
from infrastructure.database.models import Base
from infrastructure.settings import get_realm_settings
from realm.infrastructure.observability import ConnectorProbe, DefaultConnectorProbe
from realm.infrastructure.security import DEFAULT_ROUNDS
from realm.ports.config import ConnectorConfig
from realm.ports.exceptions import ConnectorError


class SqlConnectorSupport:
    """Base for connectors backed by a SQLAlchemy database.

    Properties read at init:
        url: SQLAlchemy database URL (required)
        createSchema: "true" to create the realm tables if missing
        hashRounds: bcrypt work factor for stored passwords

    Every operation runs in its own session, closed on every exit path.
    Database failures surface as ``error_class``.
    """

    error_class: type[ConnectorError] = ConnectorError
    connector_type: str = ""

    def __init__(self, probe: ConnectorProbe | None = None) -> None:
        self._probe = probe or DefaultConnectorProbe()
        self._connector_id: str | None = None
        self._engine: Engine | None = None
        self._rounds = DEFAULT_ROUNDS

    @property
    def url(self) -> str:
        """Database URL, rendered without password."""
        return self._engine.url.render_as_string(hide_password=True)

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        """Connect to the database named by the ``url`` property.

        Raises:
            ConnectorError: ``error_class`` if the properties are invalid or
                the schema cannot be created
        """
        self._connector_id = connector_id
        url = config.get_property("url")
        if not url:
            raise self.error_class("The url property is required.")
        try:
            self._rounds = int(config.get_property("hashRounds", DEFAULT_ROUNDS))
        except (TypeError, ValueError) as e:
            raise self.error_class("hashRounds must be an integer.") from e
        if not 4 <= self._rounds <= 31:
            raise self.error_class("hashRounds must be between 4 and 31.")

        try:
            self._engine = get_engine(str(url), echo=get_realm_settings().sql_echo)
            if str(config.get_property("createSchema", "false")).lower() == "true":
                Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            self._probe.backend_failed(connector_id, "init", str(e))
            raise self.error_class(f"Cannot prepare database: {e}") from e

        self._probe.connector_ready(connector_id, self.connector_type)

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with Session(self._engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as e:
            self._probe.backend_failed(self._connector_id, operation, str(e))
            raise self.error_class(f"{operation} failed: {e}") from e
