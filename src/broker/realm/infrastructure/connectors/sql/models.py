"""SQLAlchemy ORM models for the relational connectors.

The identity and credential connectors can share one database: the
credential connector reads password hashes written by the identity
connector's add_user().
"""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """ORM model for realm_users table."""

    __tablename__ = "realm_users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    username: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, username={self.username})>"


class UserClaimModel(Base):
    """ORM model for realm_user_claims table.

    One row per (user, claim URI).
    """

    __tablename__ = "realm_user_claims"
    __table_args__ = (UniqueConstraint("user_id", "claim_uri"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("realm_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    claim_uri: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str] = mapped_column(String(1024), nullable=False)


class GroupModel(Base, TimestampMixin):
    """ORM model for realm_groups table."""

    __tablename__ = "realm_groups"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<GroupModel(id={self.id}, name={self.name})>"


class GroupMembershipModel(Base):
    """ORM model for realm_group_memberships table."""

    __tablename__ = "realm_group_memberships"

    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("realm_users.id", ondelete="CASCADE"), primary_key=True
    )
    group_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("realm_groups.id", ondelete="CASCADE"), primary_key=True
    )


class PasswordModel(Base, TimestampMixin):
    """ORM model for realm_passwords table (bcrypt hashes only)."""

    __tablename__ = "realm_passwords"

    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("realm_users.id", ondelete="CASCADE"), primary_key=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
