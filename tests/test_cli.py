# ABOUTME: Tests for the ccs command line
# ABOUTME: Commands run through main() against the temp home; prompts are patched
import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from ccswitch.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_FATAL,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    _parse_selection,
    main,
    open_path_command,
)
from ccswitch.config import read_profiles
from ccswitch.models import InvalidArgumentError
from ccswitch.utils.webdav import MirrorReport


def settings_env(home: Path) -> dict:
    return json.loads((home / ".claude" / "settings.json").read_text())["env"]


class TestBasics:
    """Tests for parser wiring."""

    def test_no_command_prints_help(self, capsys):
        """Test that a bare invocation shows usage."""
        assert main([]) == EXIT_SUCCESS
        assert "usage: ccs" in capsys.readouterr().out

    def test_version(self, capsys):
        """Test --version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "ccs v" in capsys.readouterr().out

    def test_unknown_platform(self, capsys):
        """Test that -p is validated before dispatch."""
        assert main(["add", "a", "k", "https://x", "-p", "gemini"]) == EXIT_CONFIG_ERROR
        assert "Supported: claude, codex" in capsys.readouterr().out
        assert read_profiles() == []

    def test_platforms(self, capsys, home: Path):
        """Test the platform table."""
        assert main(["platforms"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "claude" in out and "codex" in out
        assert str(home / ".codex") in out


class TestAddAndList:
    """Tests for add, list and use."""

    def test_add(self, capsys):
        """Test adding to the default platform."""
        assert main(["add", "work", "tok-12345678901234", "https://a.example/api"]) == EXIT_SUCCESS
        assert "Added profile 'work' [Claude]" in capsys.readouterr().out
        assert [(p.name, p.platform) for p in read_profiles()] == [("work", "claude")]

    def test_add_blank_key(self, capsys):
        """Test that blank fields are invalid arguments."""
        assert main(["add", "work", " ", "https://a.example/api"]) == EXIT_CONFIG_ERROR

    def test_list_empty(self, capsys):
        """Test the hint shown without profiles."""
        assert main(["list"]) == EXIT_SUCCESS
        assert "No profiles found" in capsys.readouterr().out

    def test_list_cancel(self, capsys):
        """Test that empty input cancels."""
        main(["add", "work", "tok-12345678901234", "https://a.example/api"])
        main(["add", "cx", "sk-12345678901234", "https://c.example/v1", "-p", "codex"])

        with patch("builtins.input", return_value=""):
            assert main(["list"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "1. work [Claude]" in out
        assert "2. cx [Codex]" in out
        assert "tok-123456...1234" in out
        assert "Cancelled." in out

    def test_list_select_activates(self, capsys, home: Path):
        """Test that a number switches to that profile."""
        main(["add", "work", "tok-1", "https://a.example/api"])

        with patch("builtins.input", return_value="1"):
            assert main(["list"]) == EXIT_SUCCESS

        assert "Switched to work [Claude]" in capsys.readouterr().out
        assert settings_env(home)["ANTHROPIC_AUTH_TOKEN"] == "tok-1"

    def test_list_select_current_is_noop(self, capsys):
        """Test picking the already active profile."""
        main(["add", "work", "tok-1", "https://a.example/api"])
        main(["use", "1"])

        with patch("builtins.input", return_value="1"):
            assert main(["list"]) == EXIT_SUCCESS
        assert "already the current profile" in capsys.readouterr().out

    def test_list_invalid_selection(self, capsys):
        """Test out-of-range input."""
        main(["add", "work", "tok-1", "https://a.example/api"])

        with patch("builtins.input", return_value="7"):
            assert main(["list"]) == EXIT_CONFIG_ERROR

    def test_list_activation_failure(self, capsys, home: Path):
        """Test that an unwritable live config is fatal."""
        main(["add", "work", "tok-1", "https://a.example/api"])
        (home / ".claude" / "settings.json").write_text("{broken")

        with patch("builtins.input", return_value="1"):
            assert main(["list"]) == EXIT_FATAL

    def test_use(self, capsys, home: Path):
        """Test activation by index within a platform."""
        main(["add", "work", "tok-1", "https://a.example/api"])
        main(["add", "cx", "sk-1", "https://c.example/v1", "-p", "codex"])

        assert main(["use", "1", "-p", "codex"]) == EXIT_SUCCESS
        assert "Switched to cx [codex]" in capsys.readouterr().out
        assert json.loads((home / ".codex" / "auth.json").read_text()) == {"OPENAI_API_KEY": "sk-1"}

    def test_use_out_of_range(self, capsys):
        """Test index bounds."""
        main(["add", "work", "tok-1", "https://a.example/api"])
        assert main(["use", "3"]) == EXIT_CONFIG_ERROR

    def test_use_without_profiles(self, capsys):
        """Test activation with an empty store."""
        assert main(["use", "1"]) == EXIT_CONFIG_ERROR


class TestCurrent:
    """Tests for the current command."""

    def test_current_all_platforms(self, capsys):
        """Test that each platform is reported independently."""
        main(["add", "work", "tok-1", "https://a.example/api"])
        main(["use", "1"])
        capsys.readouterr()

        assert main(["current"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Claude:" in out
        assert "Name:     work" in out
        assert "Codex: no active profile" in out

    def test_current_single_platform(self, capsys):
        """Test -p with nothing active."""
        assert main(["current", "-p", "codex"]) == EXIT_SUCCESS
        assert "No active Codex profile." in capsys.readouterr().out


class TestDelete:
    """Tests for the delete command."""

    def test_delete_by_name_with_yes(self, capsys):
        """Test non-interactive deletion."""
        main(["add", "work", "tok-1", "https://a.example/api"])
        main(["add", "home", "tok-2", "https://b.example/api"])

        assert main(["delete", "home", "-y"]) == EXIT_SUCCESS
        assert "Deleted 'home' [claude]" in capsys.readouterr().out
        assert [p.name for p in read_profiles()] == ["work"]

    def test_delete_confirm_declined(self, capsys):
        """Test that anything but yes keeps the profile."""
        main(["add", "work", "tok-1", "https://a.example/api"])

        with patch("builtins.input", return_value="n"):
            assert main(["rm", "1"]) == EXIT_SUCCESS
        assert len(read_profiles()) == 1

    def test_delete_interactive_multi(self, capsys, home: Path):
        """Test comma-separated selection and clearing of the live config."""
        main(["add", "a", "tok-a", "https://a.example/api"])
        main(["add", "b", "tok-b", "https://b.example/api"])
        main(["add", "c", "tok-c", "https://c.example/api"])
        main(["use", "1"])

        with patch("builtins.input", side_effect=["1, 3", "y"]):
            assert main(["delete"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Deleted 'a' [claude]" in out
        assert "Cleared live claude credentials" in out
        assert [p.name for p in read_profiles()] == ["b"]
        assert "ANTHROPIC_AUTH_TOKEN" not in settings_env(home)

    def test_delete_invalid_selection(self, capsys):
        """Test a bad number in the list."""
        main(["add", "a", "tok-a", "https://a.example/api"])

        with patch("builtins.input", return_value="1,x"):
            assert main(["delete"]) == EXIT_CONFIG_ERROR
        assert len(read_profiles()) == 1

    def test_delete_missing(self, capsys):
        """Test an unknown name."""
        assert main(["delete", "ghost", "-y"]) == EXIT_CONFIG_ERROR

    def test_parse_selection(self):
        """Test dedupe, ordering and bounds."""
        assert _parse_selection("3, 1,3,", 3) == [1, 3]
        assert _parse_selection("", 3) == []
        with pytest.raises(InvalidArgumentError):
            _parse_selection("4", 3)


class TestOpen:
    """Tests for the open command."""

    def test_open_path_command(self):
        """Test that a command is produced for the current OS."""
        command = open_path_command("/tmp/x")
        assert command[-1] == "/tmp/x"

    def test_open_missing(self, capsys):
        """Test that a missing store is reported."""
        assert main(["open"]) == EXIT_CONFIG_ERROR
        assert "does not exist yet" in capsys.readouterr().out

    @patch("ccswitch.cli.subprocess.run")
    def test_open_dir(self, mock_run, capsys, home: Path):
        """Test opening the config directory."""
        (home / ".claude").mkdir()

        assert main(["open", "dir"]) == EXIT_SUCCESS
        assert mock_run.call_args[0][0][-1] == str(home / ".claude")

    @patch("ccswitch.cli.subprocess.run")
    def test_open_failure_prints_path(self, mock_run, capsys, home: Path):
        """Test the fallback when no opener works."""
        main(["add", "work", "tok-1", "https://a.example/api"])
        mock_run.side_effect = subprocess.CalledProcessError(1, "xdg-open")

        assert main(["open"]) == EXIT_PARTIAL
        assert "Could not open automatically" in capsys.readouterr().out


class TestSet:
    """Tests for the set command."""

    def test_set_all_platforms(self, capsys, home: Path):
        """Test quick setup across every platform."""
        assert main(["set", "sk-shared", "https://gw.example.com"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Configured claude: https://gw.example.com/api" in out
        assert "Configured codex: https://gw.example.com/openai/v1" in out
        assert "Activated 'codex' [codex]" in out

    def test_set_unknown_platform(self, capsys):
        """Test that bad platforms are rejected before writing."""
        assert main(["set", "sk", "https://gw.example.com", "--platforms", "claude,gemini"]) == EXIT_CONFIG_ERROR
        assert read_profiles() == []


class TestWebhookCommands:
    """Tests for webhook subcommands."""

    def test_add_list_remove(self, capsys):
        """Test webhook management from the command line."""
        assert main(["webhook", "add", "https://hooks.example.com/x", "--name", "team", "--format", "slack"]) == EXIT_SUCCESS
        assert main(["webhook", "list"]) == EXIT_SUCCESS
        assert "team  https://hooks.example.com/x  [slack, enabled]" in capsys.readouterr().out

        assert main(["webhook", "remove", "team"]) == EXIT_SUCCESS
        assert main(["webhook", "remove", "team"]) == EXIT_CONFIG_ERROR

    def test_add_invalid_url(self, capsys):
        """Test URL validation."""
        assert main(["webhook", "add", "not-a-url"]) == EXIT_CONFIG_ERROR

    def test_missing_subcommand(self, capsys):
        """Test bare webhook."""
        assert main(["webhook"]) == EXIT_CONFIG_ERROR

    @patch("ccswitch.utils.webhook.send_webhook", return_value=True)
    def test_test_sends_sample(self, mock_send, capsys):
        """Test the test notification."""
        main(["webhook", "add", "https://hooks.example.com/x", "--name", "team"])

        assert main(["webhook", "test"]) == EXIT_SUCCESS
        assert "Test notification delivered." in capsys.readouterr().out
        mock_send.assert_called_once()


class TestWebdavCommands:
    """Tests for webdav subcommands."""

    def test_config_saves(self, capsys, home: Path):
        """Test saving connection settings."""
        code = main([
            "webdav", "config",
            "--url", "https://dav.example.com",
            "--username", "alice",
            "--password", "pw",
        ])
        assert code == EXIT_SUCCESS
        saved = json.loads((home / ".claude" / "webdav.json").read_text())
        assert saved["username"] == "alice"
        assert saved["remote_path"] == "/claude-configs/"

    @patch("ccswitch.cli.getpass.getpass", return_value="")
    def test_config_requires_password(self, mock_getpass, capsys):
        """Test that an empty prompted password is rejected."""
        code = main(["webdav", "config", "--url", "https://dav.example.com", "--username", "alice"])
        assert code == EXIT_CONFIG_ERROR
        mock_getpass.assert_called_once()

    def test_upload_without_config(self, capsys):
        """Test the hint when nothing is configured."""
        assert main(["webdav", "upload"]) == EXIT_CONFIG_ERROR
        assert "ccs webdav config" in capsys.readouterr().out

    @patch("ccswitch.cli.upload_files")
    def test_upload_reports_files(self, mock_upload, capsys, home: Path):
        """Test upload output and the mirrored file set."""
        main(["webdav", "config", "--url", "https://dav.example.com", "--username", "a", "--password", "p"])
        mock_upload.return_value = MirrorReport(transferred=["apiConfigs.json"], skipped=["CLAUDE.md"])

        assert main(["webdav", "upload"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Uploaded apiConfigs.json" in out
        assert "Skipped CLAUDE.md" in out
        files = mock_upload.call_args[0][1]
        assert [f.name for f in files] == ["apiConfigs.json", "settings.json", "CLAUDE.md", "webdav.json"]

    @patch("ccswitch.cli.download_files")
    def test_download_all_failed(self, mock_download, capsys):
        """Test partial exit when every file failed."""
        main(["webdav", "config", "--url", "https://dav.example.com", "--username", "a", "--password", "p"])
        mock_download.return_value = MirrorReport(errors=["settings.json: HTTP 500"])

        assert main(["webdav", "download"]) == EXIT_PARTIAL
