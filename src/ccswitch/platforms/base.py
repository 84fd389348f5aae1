# Platform adapter base utilities
import json
import logging
from pathlib import Path
from typing import Any, cast

from ccswitch.config import get_config_path, get_profiles_by_platform, upsert_profile, write_text_atomic
from ccswitch.models import NOT_AVAILABLE, ConfigSummary, InvalidArgumentError, Profile
from ccswitch.utils.backup import create_backup, get_backup_dir
from ccswitch.utils.validation import is_blank, validate_credentials

logger = logging.getLogger(__name__)

# ABOUTME: Keys up to this length only show a short prefix when masked
SHORT_KEY_LENGTH = 14


def read_json_file(path: Path) -> dict[str, Any]:
    """Read JSON file with error handling.

    ABOUTME: Returns empty dict if file doesn't exist
    ABOUTME: Raises ValueError for invalid JSON or a non-object document
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            result = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return cast(dict[str, Any], result)


def write_json_file(path: Path, data: dict[str, Any]) -> None:
    """Write JSON file with error handling.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Uses 2-space indentation and keeps key order
    """
    write_text_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def mask_key(key: str | None) -> str:
    """Redact an API key for display.

    ABOUTME: Short keys show at most their first 6 characters
    ABOUTME: Longer keys show the first 10 and last 4 characters

    Examples:
        >>> mask_key("sk-abcdefghijklmnop")
        'sk-abcdefg...mnop'
        >>> mask_key("short")
        'short...'
        >>> mask_key("")
        'N/A'
    """
    if not key or not isinstance(key, str):
        return NOT_AVAILABLE

    if len(key) <= SHORT_KEY_LENGTH:
        return key[:6] + "..."

    return key[:10] + "..." + key[-4:]


class BaseAdapter:
    """Shared behaviour of every platform adapter.

    ABOUTME: Subclasses supply payload building, activation and identity projection
    ABOUTME: Profiles are always read from and written to the unified store
    """

    platform_name = ""
    label = ""
    key_prefix: str | None = None

    def __init__(self, config_dir: Path, store_path: Path | None = None, backup_dir: Path | None = None) -> None:
        self._config_dir = config_dir
        self._store_path = store_path
        self._backup_dir = backup_dir

    @property
    def name(self) -> str:
        """Platform identifier used in the store."""
        return self.platform_name

    @property
    def display_name(self) -> str:
        """Human-readable platform name."""
        return self.label

    @property
    def config_dir(self) -> Path:
        """Directory holding the platform's native files."""
        return self._config_dir

    @property
    def store_path(self) -> Path:
        return self._store_path or get_config_path()

    def ensure_config_dir(self) -> Path:
        """Create the platform directory (and the store's) if missing."""
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_dir.mkdir(parents=True, exist_ok=True)
        return self._config_dir

    def read_configs(self) -> list[Profile]:
        """Stored profiles of this platform."""
        return get_profiles_by_platform(self.name, self.store_path)

    def build_payload(self, key: str, url: str) -> dict[str, Any]:
        raise NotImplementedError

    def add_config(self, alias: str, key: str, url: str) -> Profile:
        """Store a new profile built from alias, key and url.

        ABOUTME: Overwrites an existing profile with the same alias on this platform

        Raises:
            InvalidArgumentError: If alias, key or url is blank
            OSError: If the store cannot be written
        """
        if is_blank(alias):
            raise InvalidArgumentError("Profile name cannot be empty")
        if not self.validate_config(key, url):
            raise InvalidArgumentError("Invalid profile: API key and URL must not be empty")

        profile = Profile(
            name=alias.strip(),
            platform=self.name,
            config=self.build_payload(key.strip(), url.strip()),
        )
        upsert_profile(profile, self.store_path)
        return profile

    def activate_config(self, profile: Profile) -> bool:
        raise NotImplementedError

    def identity_fields(self, profile: Profile) -> tuple[str, ...] | None:
        raise NotImplementedError

    def read_live_identity(self) -> tuple[str, ...] | None:
        raise NotImplementedError

    def clear_activation(self) -> bool:
        raise NotImplementedError

    def get_current_config(self) -> Profile | None:
        """Return the stored profile matching the live native state.

        ABOUTME: Compares identity fields only, never whole payloads
        ABOUTME: Returns None when live credentials are absent or nothing matches
        """
        live = self.read_live_identity()
        if live is None:
            return None

        for profile in self.read_configs():
            if self.identity_fields(profile) == live:
                return profile
        return None

    def summary_fields(self, profile: Profile) -> tuple[Any, Any]:
        raise NotImplementedError

    def get_config_summary(self, profile: Profile | None) -> ConfigSummary:
        """Display projection of a profile; never raises."""
        if profile is None or not isinstance(profile.config, dict):
            return ConfigSummary()

        try:
            key, url = self.summary_fields(profile)
        except (AttributeError, KeyError, TypeError):
            return ConfigSummary()

        key = key if isinstance(key, str) and key else NOT_AVAILABLE
        url = url if isinstance(url, str) and url else NOT_AVAILABLE
        return ConfigSummary(
            key=key,
            url=url,
            masked_key=self.mask_key(key if key != NOT_AVAILABLE else None),
        )

    def mask_key(self, key: str | None) -> str:
        return mask_key(key)

    def validate_config(self, key: str, url: str) -> bool:
        """Check that key and url are non-blank.

        ABOUTME: Warnings (odd URL, unexpected key prefix) are logged, never blocking
        """
        results = validate_credentials(key, url, key_prefix=self.key_prefix)
        for result in results:
            if result.severity == "warning":
                logger.warning(f"{self.display_name}: {result.message}")
        return not any(r.severity == "error" for r in results)

    def _backup(self, path: Path, prefix: str) -> None:
        """Back up a native file before it is overwritten (best effort)."""
        if not path.exists():
            return
        try:
            create_backup(path, self._backup_dir or get_backup_dir(), prefix=prefix)
        except OSError as e:
            logger.warning(f"Could not back up {path}: {e}")
