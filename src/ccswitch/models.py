# Core data models for ccswitch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

# ABOUTME: Sentinel shown wherever a display field is missing
NOT_AVAILABLE = "N/A"


class ProfileNotFoundError(LookupError):
    """Raised when a name or index does not resolve to a stored profile."""


class InvalidArgumentError(ValueError):
    """Raised for blank credentials, bad indices or unsupported platforms."""


class RemoteError(Exception):
    """Raised by the webhook and WebDAV collaborators on network/auth failure."""


@dataclass(frozen=True)
class Profile:
    """Named credential set for one platform.

    ABOUTME: (name, platform) is unique inside the unified store
    ABOUTME: config holds the platform-specific payload, opaque to the store
    ABOUTME: extra carries unknown keys from the stored object through unchanged
    """
    name: str
    platform: str
    config: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> tuple[str, str]:
        """Store identity of this profile."""
        return (self.name, self.platform)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON object written to apiConfigs.json."""
        result: dict[str, Any] = dict(self.extra)
        result["name"] = self.name
        result["platform"] = self.platform
        result["config"] = self.config
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_platform: str | None = None) -> "Profile":
        """Build a Profile from a stored JSON object.

        ABOUTME: Missing platform falls back to default_platform
        ABOUTME: Raises ValueError when name or platform cannot be determined

        Args:
            data: One entry of the store array
            default_platform: Platform used when the entry has none

        Returns:
            Parsed Profile
        """
        if not isinstance(data, dict):
            raise ValueError(f"Profile entry must be an object, got {type(data).__name__}")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("Profile entry missing required 'name' field")

        platform = data.get("platform") or default_platform
        if not platform:
            raise ValueError(f"Profile '{name}' missing required 'platform' field")

        config = data.get("config")
        extra = {k: v for k, v in data.items() if k not in ("name", "platform", "config")}

        return cls(
            name=name,
            platform=platform,
            config=config if isinstance(config, dict) else {},
            extra=extra,
        )


@dataclass(frozen=True)
class ConfigSummary:
    """Display projection of a profile (never used for comparison)."""
    key: str = NOT_AVAILABLE
    url: str = NOT_AVAILABLE
    masked_key: str = NOT_AVAILABLE


@dataclass(frozen=True)
class ListedProfile:
    """A profile as shown in a numbered listing.

    ABOUTME: index is 1-based over the (possibly platform-filtered) listing
    """
    index: int
    profile: Profile
    display_name: str
    is_current: bool = False


@runtime_checkable
class PlatformAdapter(Protocol):
    """Protocol for platform-specific credential adapters.

    ABOUTME: Defines the capability set every platform must implement
    ABOUTME: Uses @runtime_checkable for isinstance() support
    """

    @property
    def name(self) -> str:
        """Platform identifier used in the store (e.g. 'claude')."""
        ...

    @property
    def display_name(self) -> str:
        """Human-readable platform label."""
        ...

    @property
    def config_dir(self) -> Path:
        """Directory holding the platform's native files."""
        ...

    def ensure_config_dir(self) -> Path:
        ...

    def read_configs(self) -> list[Profile]:
        ...

    def add_config(self, alias: str, key: str, url: str) -> Profile:
        ...

    def activate_config(self, profile: Profile) -> bool:
        ...

    def identity_fields(self, profile: Profile) -> tuple[str, ...] | None:
        ...

    def read_live_identity(self) -> tuple[str, ...] | None:
        ...

    def get_current_config(self) -> Profile | None:
        ...

    def clear_activation(self) -> bool:
        ...

    def get_config_summary(self, profile: Profile | None) -> ConfigSummary:
        ...

    def mask_key(self, key: str | None) -> str:
        ...

    def validate_config(self, key: str, url: str) -> bool:
        ...
