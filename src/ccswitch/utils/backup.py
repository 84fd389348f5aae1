# ABOUTME: Backup utilities for native platform files (settings.json, config.toml, auth.json).
# ABOUTME: Handles timestamped backups with automatic retention cleanup (keep last 5 per prefix).
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# ABOUTME: Number of backups kept per prefix
MAX_BACKUPS_PER_PREFIX = 5


def create_backup(source_path: Path, backup_dir: Path, prefix: str | None = None) -> Path:
    """Create a timestamped backup of a file.

    ABOUTME: Backup format: {prefix}_{YYYYMMDD}_{HHMMSS}{ext}
    ABOUTME: Uses shutil.copy2() to preserve file metadata
    ABOUTME: Creates backup_dir if it doesn't exist

    Args:
        source_path: Path to file to backup
        backup_dir: Directory where backup should be created
        prefix: Name prefix, defaults to the first dotted part of the filename

    Returns:
        Path to created backup file

    Raises:
        FileNotFoundError: If source_path doesn't exist
        OSError: If backup creation fails

    Examples:
        >>> source = Path("~/.claude/settings.json").expanduser()
        >>> backup_path = create_backup(source, get_backup_dir(), prefix="claude-settings")
        >>> backup_path.name
        'claude-settings_20260108_143022.json'
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    # e.g., settings.json -> settings
    if prefix is None:
        prefix = source_path.name.replace(".", "_").split("_")[0]

    backup_path = backup_dir / f"{prefix}_{timestamp}{source_path.suffix}"

    shutil.copy2(source_path, backup_path)

    cleanup_old_backups(backup_dir)

    return backup_path


def get_backup_dir() -> Path:
    """Get the default backup directory path.

    ABOUTME: Returns ~/.claude/backups
    ABOUTME: Does not create the directory
    """
    return Path.home() / ".claude" / "backups"


def cleanup_old_backups(backup_dir: Path, max_backups_per_prefix: int = MAX_BACKUPS_PER_PREFIX) -> list[Path]:
    """Remove old backup files, keeping only the most recent per prefix.

    ABOUTME: Groups backups by prefix (before _timestamp)
    ABOUTME: Sorts by timestamp descending (newest first)
    ABOUTME: Logs warnings on errors but does not raise exceptions

    Args:
        backup_dir: Directory containing backup files
        max_backups_per_prefix: Maximum backups to keep per prefix (default 5)

    Returns:
        List of paths that were deleted
    """
    deleted_files: list[Path] = []

    if not backup_dir.exists():
        return deleted_files

    # e.g., claude-settings_20260108_143022.json
    backup_pattern = re.compile(r"^(.+?)_(\d{8}_\d{6})(\..+)?$")

    backups_by_prefix: dict[str, list[tuple[str, Path]]] = {}

    for file_path in backup_dir.iterdir():
        if not file_path.is_file():
            continue

        match = backup_pattern.match(file_path.name)
        if not match:
            continue

        backups_by_prefix.setdefault(match.group(1), []).append((match.group(2), file_path))

    for backups in backups_by_prefix.values():
        backups.sort(key=lambda x: x[0], reverse=True)

        for _timestamp, file_path in backups[max_backups_per_prefix:]:
            try:
                file_path.unlink()
                deleted_files.append(file_path)
                logger.debug(f"Deleted old backup: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to delete old backup {file_path}: {e}")

    return deleted_files
