# Unified profile store for ccswitch
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ccswitch.models import Profile

logger = logging.getLogger(__name__)

# ABOUTME: Store file name inside the Claude config directory
PROFILES_FILENAME = "apiConfigs.json"

# ABOUTME: Platform assumed for entries written before the platform field existed
LEGACY_DEFAULT_PLATFORM = "claude"


def get_config_dir() -> Path:
    """Return the directory holding the store and Claude settings.

    ABOUTME: Returns ~/.claude, resolved at call time
    """
    return Path.home() / ".claude"


def get_config_path() -> Path:
    """Return the path to the unified profile store.

    ABOUTME: Returns ~/.claude/apiConfigs.json
    ABOUTME: File may not exist yet - it is created on first write
    """
    return get_config_dir() / PROFILES_FILENAME


def get_settings_path() -> Path:
    """Return the path to Claude Code's settings.json."""
    return get_config_dir() / "settings.json"


def get_legacy_paths() -> list[tuple[Path, str]]:
    """Return (legacy file, platform) pairs that migration pulls forward.

    ABOUTME: Codex profiles used to live in ~/.codex/configs.json
    """
    return [(Path.home() / ".codex" / "configs.json", "codex")]


def ensure_config_dir() -> Path:
    """Create config directory if it doesn't exist.

    Returns:
        Path to config directory (guaranteed to exist)
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def write_text_atomic(path: Path, content: str) -> None:
    """Replace a file's content in one step.

    ABOUTME: Writes a sibling temp file then os.replace()s it over the target
    ABOUTME: A failure leaves the previous file untouched

    Raises:
        OSError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _load_raw(path: Path) -> list[Any]:
    """Load the raw JSON array, or [] when absent or malformed."""
    if not path.exists():
        return []

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read profile store {path}: {e}")
        return []

    if not isinstance(data, list):
        logger.warning(f"Profile store {path} is not a JSON array, ignoring it")
        return []

    return data


def _parse_entries(entries: list[Any], path: Path, default_platform: str | None = None) -> list[Profile]:
    profiles: list[Profile] = []
    for entry in entries:
        try:
            profiles.append(Profile.from_dict(entry, default_platform=default_platform))
        except ValueError as e:
            logger.warning(f"Skipping invalid entry in {path}: {e}")
    return profiles


def read_profiles(path: Path | None = None) -> list[Profile]:
    """Load every profile from the unified store.

    ABOUTME: Returns [] if the file is missing or malformed (logged, not fatal)
    ABOUTME: Entries missing a platform are read as Claude profiles
    ABOUTME: Insertion order is preserved

    Args:
        path: Store path, defaults to get_config_path()

    Returns:
        Profiles in store order
    """
    path = path or get_config_path()
    return _parse_entries(_load_raw(path), path, default_platform=LEGACY_DEFAULT_PLATFORM)


def write_profiles(profiles: list[Profile], path: Path | None = None) -> None:
    """Write the full profile list to the unified store.

    ABOUTME: Whole-file replace with 2-space indentation
    ABOUTME: Creates parent directory if needed

    Raises:
        OSError: If file cannot be written
    """
    path = path or get_config_path()
    content = json.dumps([p.to_dict() for p in profiles], indent=2, ensure_ascii=False)
    write_text_atomic(path, content + "\n")


def get_profiles_by_platform(platform: str, path: Path | None = None) -> list[Profile]:
    """Return the stored profiles of one platform, in store order."""
    return [p for p in read_profiles(path) if p.platform == platform]


def find_profile(name: str, platform: str, path: Path | None = None) -> Profile | None:
    """Find a profile by (name, platform)."""
    for profile in read_profiles(path):
        if profile.name == name and profile.platform == platform:
            return profile
    return None


def upsert_profile(profile: Profile, path: Path | None = None) -> bool:
    """Add a profile, replacing any entry with the same (name, platform).

    ABOUTME: Replacement happens in place so menu numbering is stable
    ABOUTME: Overwrite is allowed and only logged as a warning

    Args:
        profile: Profile to store
        path: Store path, defaults to get_config_path()

    Returns:
        True if an existing entry was replaced, False if appended

    Raises:
        OSError: If the store cannot be written
    """
    profiles = read_profiles(path)

    for i, existing in enumerate(profiles):
        if existing.key == profile.key:
            logger.warning(
                f"Profile '{profile.name}' [{profile.platform}] already exists and will be overwritten"
            )
            profiles[i] = profile
            write_profiles(profiles, path)
            return True

    profiles.append(profile)
    write_profiles(profiles, path)
    return False


def remove_profile(name: str, platform: str, path: Path | None = None) -> bool:
    """Remove a profile from the store.

    ABOUTME: Only writes when something was removed

    Returns:
        True if profile was removed, False if not found
    """
    profiles = read_profiles(path)
    remaining = [p for p in profiles if not (p.name == name and p.platform == platform)]

    if len(remaining) == len(profiles):
        return False

    write_profiles(remaining, path)
    return True


def migrate_legacy_profiles(
    path: Path | None = None,
    legacy_paths: list[tuple[Path, str]] | None = None,
) -> bool:
    """Pull profiles from legacy per-platform files into the unified store.

    ABOUTME: Skips legacy entries whose (name, platform) already exists
    ABOUTME: Backfills a missing platform field on existing entries as 'claude'
    ABOUTME: Persists only if something changed, so repeated calls are no-ops

    Args:
        path: Store path, defaults to get_config_path()
        legacy_paths: (file, platform) pairs, defaults to get_legacy_paths()

    Returns:
        True if the store was rewritten
    """
    path = path or get_config_path()
    if legacy_paths is None:
        legacy_paths = get_legacy_paths()

    raw_entries = _load_raw(path)
    changed = any(isinstance(e, dict) and not e.get("platform") for e in raw_entries)

    profiles = _parse_entries(raw_entries, path, default_platform=LEGACY_DEFAULT_PLATFORM)
    existing_keys = {p.key for p in profiles}

    for legacy_file, platform in legacy_paths:
        if not legacy_file.exists():
            continue

        try:
            with legacy_file.open("r", encoding="utf-8") as f:
                legacy_entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to migrate {legacy_file}: {e}")
            continue

        if not isinstance(legacy_entries, list):
            logger.warning(f"Legacy file {legacy_file} is not a JSON array, skipping")
            continue

        for entry in legacy_entries:
            if isinstance(entry, dict):
                entry = {**entry, "platform": platform}
            try:
                legacy = Profile.from_dict(entry)
            except ValueError as e:
                logger.warning(f"Skipping invalid entry in {legacy_file}: {e}")
                continue

            if legacy.key in existing_keys:
                continue

            profiles.append(legacy)
            existing_keys.add(legacy.key)
            changed = True
            logger.info(f"Migrated {platform} profile: {legacy.name}")

    if changed:
        write_profiles(profiles, path)
        logger.info("Profile migration complete")

    return changed
