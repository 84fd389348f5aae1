# Shared fixtures: every test runs against a throwaway home directory
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def home(tmp_path, monkeypatch) -> Path:
    """Point HOME at a temp directory so ~/.claude and ~/.codex are isolated."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    monkeypatch.setattr(Path, "home", lambda: home_dir)
    return home_dir


@pytest.fixture
def store_path(home) -> Path:
    return home / ".claude" / "apiConfigs.json"


@pytest.fixture
def settings_path(home) -> Path:
    return home / ".claude" / "settings.json"


@pytest.fixture
def codex_dir(home) -> Path:
    return home / ".codex"
