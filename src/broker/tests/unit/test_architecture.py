"""Architecture tests for the realm package.

These tests enforce the layering of the realm: the domain knows nothing
of services or connectors, ports describe contracts without depending on
implementations, and the application aggregates connectors only through
ports.
"""

from pytest_archon import archrule


class TestDomainLayer:
    """The domain layer must not depend on outer layers."""

    def test_domain_does_not_import_application(self):
        (
            archrule("domain_no_application")
            .match("realm.domain*")
            .should_not_import("realm.application*")
            .check("realm")
        )

    def test_domain_does_not_import_infrastructure(self):
        (
            archrule("domain_no_infrastructure")
            .match("realm.domain*")
            .should_not_import("realm.infrastructure*")
            .should_not_import("infrastructure*")
            .check("realm")
        )


class TestPortsLayer:
    """Ports may depend on the domain only."""

    def test_ports_do_not_import_application(self):
        (
            archrule("ports_no_application")
            .match("realm.ports*")
            .should_not_import("realm.application*")
            .check("realm")
        )

    def test_ports_do_not_import_infrastructure(self):
        (
            archrule("ports_no_infrastructure")
            .match("realm.ports*")
            .should_not_import("realm.infrastructure*")
            .check("realm")
        )


class TestApplicationLayer:
    """Services reach connectors through ports, never implementations."""

    def test_application_does_not_import_connectors(self):
        """The realm service receives its registry from the composition root."""
        (
            archrule("application_no_realm_infrastructure")
            .match("realm.application*")
            .should_not_import("realm.infrastructure*")
            .check("realm")
        )

    def test_application_does_not_import_database(self):
        (
            archrule("application_no_database")
            .match("realm.application*")
            .should_not_import("infrastructure.database*")
            .should_not_import("sqlalchemy*")
            .check("realm")
        )
