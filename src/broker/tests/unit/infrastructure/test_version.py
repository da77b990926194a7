"""Unit tests for version lookup."""

from importlib.metadata import PackageNotFoundError

from infrastructure import version as version_module


class TestGetVersion:
    """Tests for get_version."""

    def test_reads_installed_metadata(self, monkeypatch):
        monkeypatch.setattr(version_module, "version", lambda name: "9.9.9")

        assert version_module.get_version() == "9.9.9"

    def test_falls_back_to_pyproject(self, monkeypatch):
        def missing(name):
            raise PackageNotFoundError(name)

        monkeypatch.setattr(version_module, "version", missing)

        assert version_module.get_version() == "0.1.0"
