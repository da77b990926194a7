"""Relational identity store connector.

Stores users, claims, groups and memberships through SQLAlchemy. Passwords
given to add_user() are stored as bcrypt hashes for the relational
credential connector to verify.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session
from ulid import ULID

from realm.domain.aggregates.group import GroupBuilder
from realm.domain.aggregates.user import UserBuilder
from realm.domain.value_objects import USERNAME_CLAIM_URI
from realm.infrastructure.connectors.sql.models import (
    GroupMembershipModel,
    GroupModel,
    PasswordModel,
    UserClaimModel,
    UserModel,
)
from realm.infrastructure.connectors.sql.support import SqlConnectorSupport
from realm.infrastructure.security import hash_credential
from realm.ports.config import ConnectorConfig
from realm.ports.exceptions import (
    GroupNotFoundError,
    IdentityStoreError,
    UserNotFoundError,
)

CONNECTOR_TYPE = "SqlIdentityStore"


def _like_pattern(filter_pattern: str) -> str:
    """Translate a glob pattern into a LIKE pattern."""
    escaped = filter_pattern.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped.replace("*", "%").replace("?", "_")


class SqlIdentityStoreConnector(SqlConnectorSupport):
    """Identity connector backed by a relational database."""

    error_class = IdentityStoreError
    connector_type = CONNECTOR_TYPE

    def init(self, connector_id: str, config: ConnectorConfig) -> None:
        super().init(connector_id, config)
        self._credential_store_id = str(
            config.get_property("credentialStoreId", connector_id)
        )

    def get_identity_store_id(self) -> str:
        return self._connector_id

    def get_user(self, username: str) -> UserBuilder:
        with self._session("get_user") as session:
            model = session.scalar(select(UserModel).where(UserModel.username == username))
        if model is None:
            raise UserNotFoundError(f"User {username} not found in {self._connector_id}.")
        return self._user_builder(model)

    def get_user_from_id(self, user_id: str) -> UserBuilder:
        with self._session("get_user_from_id") as session:
            return self._user_builder(self._require_user(session, user_id))

    def list_users(
        self, filter_pattern: str, offset: int, length: int
    ) -> list[UserBuilder]:
        stmt = (
            select(UserModel)
            .where(UserModel.username.like(_like_pattern(filter_pattern), escape="\\"))
            .order_by(UserModel.username)
            .offset(max(offset, 0))
        )
        if length >= 0:
            stmt = stmt.limit(length)
        with self._session("list_users") as session:
            return [self._user_builder(model) for model in session.scalars(stmt)]

    def get_user_attribute_values(
        self, user_id: str, attribute_names: Sequence[str] | None = None
    ) -> dict[str, str]:
        stmt = select(UserClaimModel).where(UserClaimModel.user_id == user_id)
        if attribute_names is not None:
            stmt = stmt.where(UserClaimModel.claim_uri.in_(list(attribute_names)))
        with self._session("get_user_attribute_values") as session:
            self._require_user(session, user_id)
            return {claim.claim_uri: claim.value for claim in session.scalars(stmt)}

    def get_group(self, group_name: str) -> GroupBuilder:
        with self._session("get_group") as session:
            model = session.scalar(select(GroupModel).where(GroupModel.name == group_name))
        if model is None:
            raise GroupNotFoundError(
                f"Group {group_name} not found in {self._connector_id}."
            )
        return self._group_builder(model)

    def get_group_by_id(self, group_id: str) -> GroupBuilder:
        with self._session("get_group_by_id") as session:
            return self._group_builder(self._require_group(session, group_id))

    def list_groups(
        self, filter_pattern: str, offset: int, length: int
    ) -> list[GroupBuilder]:
        stmt = (
            select(GroupModel)
            .where(GroupModel.name.like(_like_pattern(filter_pattern), escape="\\"))
            .order_by(GroupModel.name)
            .offset(max(offset, 0))
        )
        if length >= 0:
            stmt = stmt.limit(length)
        with self._session("list_groups") as session:
            return [self._group_builder(model) for model in session.scalars(stmt)]

    def get_groups_of_user(self, user_id: str) -> list[GroupBuilder]:
        stmt = (
            select(GroupModel)
            .join(GroupMembershipModel, GroupMembershipModel.group_id == GroupModel.id)
            .where(GroupMembershipModel.user_id == user_id)
            .order_by(GroupModel.name)
        )
        with self._session("get_groups_of_user") as session:
            self._require_user(session, user_id)
            return [self._group_builder(model) for model in session.scalars(stmt)]

    def get_users_of_group(self, group_id: str) -> list[UserBuilder]:
        stmt = (
            select(UserModel)
            .join(GroupMembershipModel, GroupMembershipModel.user_id == UserModel.id)
            .where(GroupMembershipModel.group_id == group_id)
            .order_by(UserModel.username)
        )
        with self._session("get_users_of_group") as session:
            self._require_group(session, group_id)
            return [self._user_builder(model) for model in session.scalars(stmt)]

    def is_user_in_group(self, user_id: str, group_id: str) -> bool:
        with self._session("is_user_in_group") as session:
            return session.get(GroupMembershipModel, (user_id, group_id)) is not None

    def add_user(
        self,
        username: str,
        claims: Mapping[str, str],
        credential: str | None,
        group_names: Sequence[str],
    ) -> UserBuilder:
        """Create a user with its claims, groups and password in one transaction.

        Raises:
            IdentityStoreError: If the name is taken or a group does not exist
        """
        with self._session("add_user") as session, session.begin():
            if session.scalar(select(UserModel.id).where(UserModel.username == username)):
                raise IdentityStoreError(f"User {username} already exists.")
            group_ids = self._group_ids(session, group_names)

            user = UserModel(id=str(ULID()), username=username)
            session.add(user)
            session.flush()
            for claim_uri, value in {**claims, USERNAME_CLAIM_URI: username}.items():
                session.add(
                    UserClaimModel(user_id=user.id, claim_uri=claim_uri, value=value)
                )
            for group_id in group_ids:
                session.add(GroupMembershipModel(user_id=user.id, group_id=group_id))
            if credential is not None:
                session.add(
                    PasswordModel(
                        user_id=user.id,
                        password_hash=hash_credential(credential, self._rounds),
                    )
                )
        return self._user_builder(user)

    def add_group(self, group_name: str, user_names: Sequence[str]) -> GroupBuilder:
        """Create a group with existing users as members.

        Raises:
            IdentityStoreError: If the name is taken or a user does not exist
        """
        with self._session("add_group") as session, session.begin():
            if session.scalar(select(GroupModel.id).where(GroupModel.name == group_name)):
                raise IdentityStoreError(f"Group {group_name} already exists.")
            user_ids = self._user_ids(session, user_names)

            group = GroupModel(id=str(ULID()), name=group_name)
            session.add(group)
            session.flush()
            for user_id in user_ids:
                session.add(GroupMembershipModel(user_id=user_id, group_id=group.id))
        return self._group_builder(group)

    def delete_user(self, user_id: str) -> None:
        with self._session("delete_user") as session, session.begin():
            user = self._require_user(session, user_id)
            session.execute(delete(UserClaimModel).where(UserClaimModel.user_id == user_id))
            session.execute(
                delete(GroupMembershipModel).where(GroupMembershipModel.user_id == user_id)
            )
            session.execute(delete(PasswordModel).where(PasswordModel.user_id == user_id))
            session.delete(user)

    def delete_group(self, group_id: str) -> None:
        with self._session("delete_group") as session, session.begin():
            group = self._require_group(session, group_id)
            session.execute(
                delete(GroupMembershipModel).where(GroupMembershipModel.group_id == group_id)
            )
            session.delete(group)

    def _group_ids(self, session: Session, group_names: Sequence[str]) -> list[str]:
        if not group_names:
            return []
        found = {
            model.name: model.id
            for model in session.scalars(
                select(GroupModel).where(GroupModel.name.in_(list(group_names)))
            )
        }
        missing = [name for name in group_names if name not in found]
        if missing:
            raise IdentityStoreError(f"Groups do not exist: {', '.join(missing)}.")
        return [found[name] for name in group_names]

    def _user_ids(self, session: Session, user_names: Sequence[str]) -> list[str]:
        if not user_names:
            return []
        found = {
            model.username: model.id
            for model in session.scalars(
                select(UserModel).where(UserModel.username.in_(list(user_names)))
            )
        }
        missing = [name for name in user_names if name not in found]
        if missing:
            raise IdentityStoreError(f"Users do not exist: {', '.join(missing)}.")
        return [found[name] for name in user_names]

    def _require_user(self, session: Session, user_id: str) -> UserModel:
        model = session.get(UserModel, user_id)
        if model is None:
            raise UserNotFoundError(f"User id {user_id} not found in {self._connector_id}.")
        return model

    def _require_group(self, session: Session, group_id: str) -> GroupModel:
        model = session.get(GroupModel, group_id)
        if model is None:
            raise GroupNotFoundError(
                f"Group id {group_id} not found in {self._connector_id}."
            )
        return model

    def _user_builder(self, model: UserModel) -> UserBuilder:
        return UserBuilder(
            user_id=model.id,
            username=model.username,
            identity_store_id=self._connector_id,
            credential_store_id=self._credential_store_id,
        )

    def _group_builder(self, model: GroupModel) -> GroupBuilder:
        return GroupBuilder(
            group_id=model.id,
            group_name=model.name,
            identity_store_id=self._connector_id,
        )
