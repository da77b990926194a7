"""In-memory identity store connector.

Keeps users, groups and memberships in process memory. Useful for tests,
development and small static user bases declared in configuration:

    connectors:
      - name: local-users
        connectorType: InMemoryIdentityStore
        properties:
          credentialStoreId: local-credentials
          groups: [engineering, sales]
          users:
            - username: alice
              groups: [engineering]
              claims:
                http://wso2.org/claims/email: alice@example.com
"""

from __future__ import annotations

import fnmatch
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ulid import ULID

from realm.domain.aggregates.group import GroupBuilder
from realm.domain.aggregates.user import UserBuilder
from realm.domain.value_objects import USERNAME_CLAIM_URI
from realm.infrastructure.connectors.paging import page
from realm.infrastructure.observability import ConnectorProbe, DefaultConnectorProbe
from realm.ports.config import ConnectorConfig
from realm.ports.exceptions import (
    GroupNotFoundError,
    IdentityStoreError,
    UserNotFoundError,
)

CONNECTOR_TYPE = "InMemoryIdentityStore"


@dataclass
class _UserRecord:
    user_id: str
    username: str
    claims: dict[str, str] = field(default_factory=dict)


@dataclass
class _GroupRecord:
    group_id: str
    name: str


class InMemoryIdentityStoreConnector:
    """Identity connector backed by dictionaries guarded by a re-entrant lock."""

    def __init__(self, probe: ConnectorProbe | None = None) -> None:
        self._probe = probe or DefaultConnectorProbe()
        self._lock = threading.RLock()
        self._connector_id: str | None = None
        self._credential_store_id: str | None = None
        self._users: dict[str, _UserRecord] = {}
        self._user_ids_by_name: dict[str, str] = {}
        self._groups: dict[str, _GroupRecord] = {}
        self._group_ids_by_name: dict[str, str] = {}
        self._memberships: set[tuple[str, str]] = set()

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        """Initialize and seed from the ``groups`` and ``users`` properties.

        Raises:
            IdentityStoreError: If the seed properties are malformed
        """
        self._connector_id = connector_id
        self._credential_store_id = str(
            config.get_property("credentialStoreId", connector_id)
        )

        groups = config.get_property("groups") or []
        users = config.get_property("users") or []
        if not isinstance(groups, list) or not isinstance(users, list):
            raise IdentityStoreError("The groups and users properties must be lists.")

        for group_name in groups:
            self.add_group(str(group_name), [])
        for entry in users:
            if not isinstance(entry, Mapping) or not entry.get("username"):
                raise IdentityStoreError(f"Invalid user entry: {entry!r}")
            self.add_user(
                str(entry["username"]),
                {str(k): str(v) for k, v in (entry.get("claims") or {}).items()},
                None,
                [str(name) for name in entry.get("groups") or []],
            )

        self._probe.connector_seeded(connector_id, len(groups) + len(users))
        self._probe.connector_ready(connector_id, CONNECTOR_TYPE)

    def get_identity_store_id(self) -> str:
        return self._connector_id

    def get_user(self, username: str) -> UserBuilder:
        with self._lock:
            user_id = self._user_ids_by_name.get(username)
            if user_id is None:
                raise UserNotFoundError(
                    f"User {username} not found in {self._connector_id}."
                )
            return self._user_builder(self._users[user_id])

    def get_user_from_id(self, user_id: str) -> UserBuilder:
        with self._lock:
            return self._user_builder(self._require_user(user_id))

    def list_users(
        self, filter_pattern: str, offset: int, length: int
    ) -> list[UserBuilder]:
        with self._lock:
            matches = [
                record
                for record in self._users.values()
                if fnmatch.fnmatchcase(record.username, filter_pattern)
            ]
            return [self._user_builder(record) for record in page(matches, offset, length)]

    def get_user_attribute_values(
        self, user_id: str, attribute_names: Sequence[str] | None = None
    ) -> dict[str, str]:
        with self._lock:
            claims = self._require_user(user_id).claims
            if attribute_names is None:
                return dict(claims)
            return {name: claims[name] for name in attribute_names if name in claims}

    def get_group(self, group_name: str) -> GroupBuilder:
        with self._lock:
            group_id = self._group_ids_by_name.get(group_name)
            if group_id is None:
                raise GroupNotFoundError(
                    f"Group {group_name} not found in {self._connector_id}."
                )
            return self._group_builder(self._groups[group_id])

    def get_group_by_id(self, group_id: str) -> GroupBuilder:
        with self._lock:
            return self._group_builder(self._require_group(group_id))

    def list_groups(
        self, filter_pattern: str, offset: int, length: int
    ) -> list[GroupBuilder]:
        with self._lock:
            matches = [
                record
                for record in self._groups.values()
                if fnmatch.fnmatchcase(record.name, filter_pattern)
            ]
            return [
                self._group_builder(record) for record in page(matches, offset, length)
            ]

    def get_groups_of_user(self, user_id: str) -> list[GroupBuilder]:
        with self._lock:
            self._require_user(user_id)
            return [
                self._group_builder(record)
                for record in self._groups.values()
                if (user_id, record.group_id) in self._memberships
            ]

    def get_users_of_group(self, group_id: str) -> list[UserBuilder]:
        with self._lock:
            self._require_group(group_id)
            return [
                self._user_builder(record)
                for record in self._users.values()
                if (record.user_id, group_id) in self._memberships
            ]

    def is_user_in_group(self, user_id: str, group_id: str) -> bool:
        with self._lock:
            return (user_id, group_id) in self._memberships

    def add_user(
        self,
        username: str,
        claims: Mapping[str, str],
        credential: str | None,
        group_names: Sequence[str],
    ) -> UserBuilder:
        """Create a user; credentials are not kept by this connector.

        Raises:
            IdentityStoreError: If the name is taken or a group does not exist
        """
        with self._lock:
            if username in self._user_ids_by_name:
                raise IdentityStoreError(f"User {username} already exists.")
            group_ids = [self._group_id_for(name) for name in group_names]

            record = _UserRecord(
                user_id=str(ULID()),
                username=username,
                claims={**claims, USERNAME_CLAIM_URI: username},
            )
            self._users[record.user_id] = record
            self._user_ids_by_name[username] = record.user_id
            for group_id in group_ids:
                self._memberships.add((record.user_id, group_id))
            return self._user_builder(record)

    def add_group(self, group_name: str, user_names: Sequence[str]) -> GroupBuilder:
        """Create a group with existing users as members.

        Raises:
            IdentityStoreError: If the name is taken or a user does not exist
        """
        with self._lock:
            if group_name in self._group_ids_by_name:
                raise IdentityStoreError(f"Group {group_name} already exists.")
            user_ids = []
            for user_name in user_names:
                user_id = self._user_ids_by_name.get(user_name)
                if user_id is None:
                    raise IdentityStoreError(f"User {user_name} does not exist.")
                user_ids.append(user_id)

            record = _GroupRecord(group_id=str(ULID()), name=group_name)
            self._groups[record.group_id] = record
            self._group_ids_by_name[group_name] = record.group_id
            for user_id in user_ids:
                self._memberships.add((user_id, record.group_id))
            return self._group_builder(record)

    def delete_user(self, user_id: str) -> None:
        with self._lock:
            record = self._require_user(user_id)
            del self._users[user_id]
            del self._user_ids_by_name[record.username]
            self._memberships = {m for m in self._memberships if m[0] != user_id}

    def delete_group(self, group_id: str) -> None:
        with self._lock:
            record = self._require_group(group_id)
            del self._groups[group_id]
            del self._group_ids_by_name[record.name]
            self._memberships = {m for m in self._memberships if m[1] != group_id}

    def _group_id_for(self, group_name: str) -> str:
        group_id = self._group_ids_by_name.get(group_name)
        if group_id is None:
            raise IdentityStoreError(f"Group {group_name} does not exist.")
        return group_id

    def _require_user(self, user_id: str) -> _UserRecord:
        record = self._users.get(user_id)
        if record is None:
            raise UserNotFoundError(f"User id {user_id} not found in {self._connector_id}.")
        return record

    def _require_group(self, group_id: str) -> _GroupRecord:
        record = self._groups.get(group_id)
        if record is None:
            raise GroupNotFoundError(
                f"Group id {group_id} not found in {self._connector_id}."
            )
        return record

    def _user_builder(self, record: _UserRecord) -> UserBuilder:
        return UserBuilder(
            user_id=record.user_id,
            username=record.username,
            identity_store_id=self._connector_id,
            credential_store_id=self._credential_store_id,
        )

    def _group_builder(self, record: _GroupRecord) -> GroupBuilder:
        return GroupBuilder(
            group_id=record.group_id,
            group_name=record.name,
            identity_store_id=self._connector_id,
        )
