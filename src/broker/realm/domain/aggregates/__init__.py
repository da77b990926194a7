"""Entities of the realm domain.

Users, groups and roles are immutable once built and are only created
through their builders. Permissions compare by resource and action. A
Domain groups the connector instances that serve one tenant.
"""

from realm.domain.aggregates.domain import Domain
from realm.domain.aggregates.group import Group, GroupBuilder
from realm.domain.aggregates.permission import Permission, PermissionBuilder
from realm.domain.aggregates.role import Role, RoleBuilder
from realm.domain.aggregates.user import User, UserBuilder

__all__ = [
    "Domain",
    "Group",
    "GroupBuilder",
    "Permission",
    "PermissionBuilder",
    "Role",
    "RoleBuilder",
    "User",
    "UserBuilder",
]
