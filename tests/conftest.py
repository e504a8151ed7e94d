# Shared fixtures: every test gets an isolated home and config directory
from pathlib import Path

import pytest

from ccswitch.settings import AppSettings
from ccswitch.store import ConfigStore


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def settings(home: Path) -> AppSettings:
    """Live paths resolved under the temporary home."""
    return AppSettings(home=home)


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    """Empty store backed by <tmp>/cc-switch/config.json."""
    return ConfigStore(tmp_path / "cc-switch" / "config.json")
