# Claude Code platform adapter
import copy
import logging
from pathlib import Path
from typing import Any

from ccswitch.config import get_settings_path
from ccswitch.models import Profile
from ccswitch.platforms.base import BaseAdapter, read_json_file, write_json_file

logger = logging.getLogger(__name__)

# ABOUTME: Credential keys inside settings.json's env map
AUTH_TOKEN_KEY = "ANTHROPIC_AUTH_TOKEN"
BASE_URL_KEY = "ANTHROPIC_BASE_URL"

# ABOUTME: Tuning field written only when the user has not set it
TIMEOUT_KEY = "API_TIMEOUT_MS"
DEFAULT_TIMEOUT_MS = "600000"


class ClaudeAdapter(BaseAdapter):
    """Adapter for Claude Code (~/.claude/settings.json).

    ABOUTME: Activation merges the two credential keys into env
    ABOUTME: Every other key in settings.json is carried through unchanged
    """

    platform_name = "claude"
    label = "Claude"

    def __init__(
        self,
        settings_path: Path | None = None,
        store_path: Path | None = None,
        backup_dir: Path | None = None,
    ) -> None:
        """Initialize adapter with optional custom paths.

        ABOUTME: Defaults to ~/.claude/settings.json if not provided
        """
        self._settings_path = settings_path if settings_path else get_settings_path()
        super().__init__(self._settings_path.parent, store_path=store_path, backup_dir=backup_dir)

    @property
    def settings_path(self) -> Path:
        return self._settings_path

    def read_settings(self) -> dict[str, Any]:
        """Load settings.json; raises ValueError if it is not valid JSON."""
        return read_json_file(self._settings_path)

    def build_payload(self, key: str, url: str) -> dict[str, Any]:
        return {
            "env": {
                AUTH_TOKEN_KEY: key,
                BASE_URL_KEY: url,
            },
            "permissions": {
                "allow": [],
                "deny": [],
            },
        }

    def activate_config(self, profile: Profile) -> bool:
        """Write the profile's credentials into settings.json.

        ABOUTME: Only env.ANTHROPIC_AUTH_TOKEN and env.ANTHROPIC_BASE_URL are overwritten
        ABOUTME: API_TIMEOUT_MS is backfilled only when absent
        ABOUTME: Returns False (logged) on invalid settings or write failure
        """
        try:
            profile_env = profile.config.get("env") or {}
            token = profile_env.get(AUTH_TOKEN_KEY)
            base_url = profile_env.get(BASE_URL_KEY)
            if not token or not base_url:
                raise ValueError(f"Profile '{profile.name}' has no auth token or base URL")

            settings = copy.deepcopy(self.read_settings())
            env = settings.get("env")
            if not isinstance(env, dict):
                env = {}

            env[AUTH_TOKEN_KEY] = token
            env[BASE_URL_KEY] = base_url
            env.setdefault(TIMEOUT_KEY, DEFAULT_TIMEOUT_MS)
            settings["env"] = env

            self.ensure_config_dir()
            self._backup(self._settings_path, "claude-settings")
            write_json_file(self._settings_path, settings)
            return True
        except (OSError, ValueError, AttributeError) as e:
            logger.error(f"Failed to activate Claude profile '{profile.name}': {e}")
            return False

    def identity_fields(self, profile: Profile) -> tuple[str, ...] | None:
        env = profile.config.get("env") if isinstance(profile.config, dict) else None
        if not isinstance(env, dict):
            return None
        return (env.get(AUTH_TOKEN_KEY), env.get(BASE_URL_KEY))

    def read_live_identity(self) -> tuple[str, ...] | None:
        """Credential pair currently in settings.json, or None if incomplete."""
        try:
            settings = self.read_settings()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {self._settings_path}: {e}")
            return None

        env = settings.get("env")
        if not isinstance(env, dict):
            return None

        token = env.get(AUTH_TOKEN_KEY)
        base_url = env.get(BASE_URL_KEY)
        if not token or not base_url:
            return None
        return (token, base_url)

    def clear_activation(self) -> bool:
        """Strip the two credential keys from env, leaving everything else.

        ABOUTME: No-op (True) when settings.json is missing or already clear
        """
        try:
            settings = self.read_settings()
            env = settings.get("env")
            if not isinstance(env, dict) or not (AUTH_TOKEN_KEY in env or BASE_URL_KEY in env):
                return True

            env = {k: v for k, v in env.items() if k not in (AUTH_TOKEN_KEY, BASE_URL_KEY)}
            settings["env"] = env
            write_json_file(self._settings_path, settings)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Failed to clear Claude credentials: {e}")
            return False

    def summary_fields(self, profile: Profile) -> tuple[Any, Any]:
        env = profile.config.get("env") or {}
        return env.get(AUTH_TOKEN_KEY), env.get(BASE_URL_KEY)
