# Platform adapter registry
from collections.abc import Iterator
from typing import Any

from ccswitch.models import InvalidArgumentError, PlatformAdapter
from ccswitch.platforms.claude import ClaudeAdapter
from ccswitch.platforms.codex import CodexAdapter

# Registry of all available platform adapters, in menu order
ALL_PLATFORMS: dict[str, type[PlatformAdapter]] = {
    "claude": ClaudeAdapter,
    "codex": CodexAdapter,
}

# ABOUTME: Platform used when a command does not name one
DEFAULT_PLATFORM = "claude"

__all__ = [
    "PlatformAdapter",
    "ClaudeAdapter",
    "CodexAdapter",
    "ALL_PLATFORMS",
    "DEFAULT_PLATFORM",
    "PlatformRegistry",
    "get_all_platforms",
]


def get_all_platforms() -> list[PlatformAdapter]:
    """Instantiate and return all platform adapters.

    ABOUTME: Creates instances of all registered adapters
    ABOUTME: Returns list for easy iteration
    """
    return [platform_cls() for platform_cls in ALL_PLATFORMS.values()]


class PlatformRegistry:
    """Name -> adapter lookup over the closed platform set.

    ABOUTME: Lookups are case-insensitive; None means DEFAULT_PLATFORM
    ABOUTME: Iterates (name, adapter) pairs in registry order
    """

    def __init__(self, adapters: dict[str, PlatformAdapter] | None = None) -> None:
        if adapters is None:
            adapters = {name: cls() for name, cls in ALL_PLATFORMS.items()}
        self._adapters = dict(adapters)

    def __iter__(self) -> Iterator[tuple[str, PlatformAdapter]]:
        return iter(self._adapters.items())

    def __len__(self) -> int:
        return len(self._adapters)

    def validate(self, name: str | None) -> str | None:
        """Normalise a platform name, or None if it is not supported."""
        if name is None:
            return DEFAULT_PLATFORM if DEFAULT_PLATFORM in self._adapters else None
        normalized = name.strip().lower()
        return normalized if normalized in self._adapters else None

    def get(self, name: str | None = None) -> PlatformAdapter:
        """Return the adapter for a platform name.

        Raises:
            InvalidArgumentError: If the platform is not supported
        """
        normalized = self.validate(name)
        if normalized is None:
            supported = ", ".join(self.list_supported())
            raise InvalidArgumentError(f"Unsupported platform: {name} (supported: {supported})")
        return self._adapters[normalized]

    def list_supported(self) -> list[str]:
        return list(self._adapters)

    def platform_info(self) -> list[dict[str, Any]]:
        """Name, label and native directory of every platform."""
        return [
            {
                "name": name,
                "display_name": adapter.display_name,
                "config_dir": adapter.config_dir,
            }
            for name, adapter in self._adapters.items()
        ]
