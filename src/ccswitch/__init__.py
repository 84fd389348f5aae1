# ccswitch - API credential profile switcher for Claude Code and Codex CLI
# ABOUTME: Version information
__version__ = "1.0.0"

# ABOUTME: Export core data models and store paths
from ccswitch.config import ensure_config_dir, get_config_path, read_profiles
from ccswitch.models import (
    ConfigSummary,
    InvalidArgumentError,
    ListedProfile,
    PlatformAdapter,
    Profile,
    ProfileNotFoundError,
    RemoteError,
)

# ABOUTME: Export the manager and platform registry
from ccswitch.manager import ConfigManager, DeleteReport
from ccswitch.platforms import DEFAULT_PLATFORM, PlatformRegistry

__all__ = [
    "__version__",
    "Profile",
    "ConfigSummary",
    "ListedProfile",
    "PlatformAdapter",
    "ProfileNotFoundError",
    "InvalidArgumentError",
    "RemoteError",
    "ensure_config_dir",
    "get_config_path",
    "read_profiles",
    "ConfigManager",
    "DeleteReport",
    "PlatformRegistry",
    "DEFAULT_PLATFORM",
]
