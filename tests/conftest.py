"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add core and cli packages to path for testing
root = Path(__file__).parent.parent
sys.path.insert(0, str(root / "core" / "src"))
sys.path.insert(0, str(root / "cli" / "src"))

from cavectl_core import Config, Registry, InstallLocation  # noqa: E402


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config isolated under tmp_path, with an API key in the environment."""
    monkeypatch.setattr("cavectl_core.config.user_config_dir", lambda name: str(tmp_path / "config"))
    monkeypatch.setenv("CAVECTL_API_KEY", "test-key")
    monkeypatch.setenv("CAVECTL_PLATFORM", "linux")
    monkeypatch.delenv("CAVECTL_CATALOG_URL", raising=False)
    return Config(config_path=tmp_path / "config.yaml", data_dir=tmp_path / "data")


@pytest.fixture
def registry(config):
    return Registry(config)


@pytest.fixture
def location(registry, tmp_path):
    """A registered install location with an existing folder."""
    loc = InstallLocation(id="main", path=tmp_path / "games")
    loc.path.mkdir(parents=True)
    registry.add_install_location(loc)
    return loc


@pytest.fixture
def catalog():
    """Mock catalog client usable as a context manager."""
    client = MagicMock()
    client.__enter__.return_value = client
    client.__exit__.return_value = False
    return client
