"""Exceptions for the realm bounded context.

Three families are raised by the broker:

- NotFoundError and its subclasses: nothing matched after every applicable
  connector was consulted. ``causes`` holds the per-connector failures in
  the order the connectors were tried.
- StoreError and its subclasses: configuration or wiring defects, and
  states the broker cannot continue from (such as a user with no roles).
- AuthenticationFailure: the terminal outcome of a failed authentication.

Connectors raise ConnectorError subclasses for their own failures. The
aggregators treat those as a declining connector during fan-out.
"""

from __future__ import annotations

from collections.abc import Iterable


class NotFoundError(Exception):
    """Raised when no connector could resolve the requested entity.

    Attributes:
        causes: Failures recorded for each connector that was tried, in order.
    """

    def __init__(self, message: str, causes: Iterable[Exception] = ()) -> None:
        super().__init__(message)
        self.causes: list[Exception] = list(causes)

    def add_cause(self, cause: Exception) -> None:
        """Record the failure of one more connector."""
        self.causes.append(cause)


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    pass


class GroupNotFoundError(NotFoundError):
    """Raised when a group cannot be found."""

    pass


class RoleNotFoundError(NotFoundError):
    """Raised when a role cannot be found."""

    pass


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission cannot be found."""

    pass


class DomainNotFoundError(NotFoundError):
    """Raised when a username names a domain that is not registered."""

    pass


class StoreError(Exception):
    """Raised for configuration and wiring defects.

    Examples are an empty connector list, an unknown connector type, an
    unknown store id or a malformed priority property.
    """

    pass


class ConnectorInitializationError(StoreError):
    """Raised when a connector fails to initialize.

    Any connector failing to initialize aborts construction of the realm.
    """

    def __init__(self, connector_id: str, message: str) -> None:
        self.connector_id = connector_id
        super().__init__(f"Failed to initialize connector {connector_id}: {message}")


class NoRolesAssignedError(StoreError):
    """Raised when a user has neither direct nor group-derived roles.

    This is distinct from an authorization denial: it signals that the user
    could not be evaluated at all.
    """

    pass


class DomainManagerError(StoreError):
    """Raised for invalid domain registrations."""

    pass


class DuplicateDomainNameError(DomainManagerError):
    """Raised when registering a domain under a name already in use."""

    pass


class AuthenticationFailure(Exception):
    """Raised when authentication fails.

    The broker raises exactly one of these per failed authenticate() call.
    Credential connectors also raise it when the supplied credentials do not
    verify, which the broker treats as that connector declining.
    """

    pass


class ConnectorError(Exception):
    """Base class for failures reported by a connector."""

    pass


class IdentityStoreError(ConnectorError):
    """Raised by identity store connectors."""

    pass


class CredentialStoreError(ConnectorError):
    """Raised by credential store connectors."""

    pass


class AuthorizationStoreError(ConnectorError):
    """Raised by authorization store connectors."""

    pass
