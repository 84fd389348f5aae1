# ABOUTME: Utility modules for ccswitch
# ABOUTME: Exports env expansion, backup, and validation functions

from ccswitch.utils.backup import cleanup_old_backups, create_backup, get_backup_dir
from ccswitch.utils.env import expand_env_vars
from ccswitch.utils.validation import (
    ValidationError,
    is_blank,
    validate_credentials,
    validate_url,
)

__all__ = [
    "expand_env_vars",
    "ValidationError",
    "is_blank",
    "validate_credentials",
    "validate_url",
    "create_backup",
    "cleanup_old_backups",
    "get_backup_dir",
]
