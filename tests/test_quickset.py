# Tests for multi-platform quick setup
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ccswitch.config import read_profiles
from ccswitch.manager import ConfigManager
from ccswitch.models import InvalidArgumentError
from ccswitch.quickset import process_url_for_platform, quick_set


@pytest.fixture
def manager(home: Path) -> ConfigManager:
    return ConfigManager(legacy_paths=[], notifier=MagicMock())


class TestProcessUrl:
    """Tests for process_url_for_platform."""

    def test_claude_suffix(self):
        """Test /api is appended for Claude."""
        assert process_url_for_platform("claude", "https://gw.example.com") == "https://gw.example.com/api"

    def test_codex_suffix(self):
        """Test /openai/v1 is appended for Codex."""
        assert process_url_for_platform("codex", "https://gw.example.com/") == "https://gw.example.com/openai/v1"

    def test_suffix_not_duplicated(self):
        """Test that an existing suffix is kept as is."""
        assert process_url_for_platform("claude", "https://gw.example.com/api/") == "https://gw.example.com/api"
        assert process_url_for_platform("codex", "https://gw/openai/v1") == "https://gw/openai/v1"

    def test_trailing_slashes_stripped(self):
        """Test that several trailing slashes are removed."""
        assert process_url_for_platform("claude", "https://gw.example.com///") == "https://gw.example.com/api"


class TestQuickSet:
    """Tests for quick_set."""

    def test_configures_each_platform(self, manager: ConfigManager, home: Path):
        """Test one profile per platform, named after it, last one activated."""
        report = quick_set(manager, "sk-shared", "https://gw.example.com", ["claude", "codex"])

        profiles = read_profiles()
        assert [(p.name, p.platform) for p in profiles] == [("claude", "claude"), ("codex", "codex")]
        assert profiles[0].config["env"]["ANTHROPIC_BASE_URL"] == "https://gw.example.com/api"
        assert profiles[1].config["url"] == "https://gw.example.com/openai/v1"

        assert report.activated == profiles[1]
        assert report.errors == []
        auth = json.loads((home / ".codex" / "auth.json").read_text())
        assert auth == {"OPENAI_API_KEY": "sk-shared"}

    def test_overwrites_existing(self, manager: ConfigManager):
        """Test that a second run replaces the platform-named profile."""
        quick_set(manager, "sk-old", "https://old.example.com", ["codex"])
        quick_set(manager, "sk-new", "https://new.example.com", ["codex"])

        profiles = read_profiles()
        assert len(profiles) == 1
        assert profiles[0].config["key"] == "sk-new"

    def test_case_insensitive_platforms(self, manager: ConfigManager):
        """Test platform name normalisation."""
        report = quick_set(manager, "tok", "https://gw.example.com", ["Claude"])
        assert report.configured[0].platform == "claude"

    def test_blank_inputs(self, manager: ConfigManager):
        """Test that blank key or url is rejected."""
        with pytest.raises(InvalidArgumentError):
            quick_set(manager, "", "https://gw.example.com", ["claude"])
        with pytest.raises(InvalidArgumentError):
            quick_set(manager, "tok", " ", ["claude"])

    def test_unknown_platform(self, manager: ConfigManager):
        """Test that an unsupported platform is rejected before writing."""
        with pytest.raises(InvalidArgumentError):
            quick_set(manager, "tok", "https://gw.example.com", ["claude", "gemini"])
        assert read_profiles() == []

    def test_no_platforms(self, manager: ConfigManager):
        """Test that an empty selection is rejected."""
        with pytest.raises(InvalidArgumentError):
            quick_set(manager, "tok", "https://gw.example.com", [])
