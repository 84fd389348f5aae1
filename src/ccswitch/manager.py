# Multi-platform profile manager for ccswitch
import logging
from dataclasses import dataclass, field
from pathlib import Path

from ccswitch.config import (
    get_config_path,
    migrate_legacy_profiles,
    read_profiles,
    remove_profile,
)
from ccswitch.models import (
    InvalidArgumentError,
    ListedProfile,
    PlatformAdapter,
    Profile,
    ProfileNotFoundError,
)
from ccswitch.platforms import ALL_PLATFORMS, PlatformRegistry
from ccswitch.utils.webhook import EVENT_ADD, EVENT_DELETE, EVENT_SWITCH, Notifier

logger = logging.getLogger(__name__)


@dataclass
class DeleteReport:
    """Result of a (batch) delete.

    ABOUTME: cleared_platforms lists platforms whose live credentials were removed
    """
    deleted: list[Profile] = field(default_factory=list)
    cleared_platforms: list[str] = field(default_factory=list)


class ConfigManager:
    """Lists, resolves, activates and deletes profiles across platforms.

    ABOUTME: Owns the unified store; native files are touched only through adapters
    ABOUTME: Legacy migration runs before every listing
    ABOUTME: Notifications are sent only after the native write succeeded
    """

    def __init__(
        self,
        registry: PlatformRegistry | None = None,
        store_path: Path | None = None,
        legacy_paths: list[tuple[Path, str]] | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        if registry is None:
            registry = PlatformRegistry(
                {name: cls(store_path=store_path) for name, cls in ALL_PLATFORMS.items()}
            )
        self.registry = registry
        self._store_path = store_path
        self._legacy_paths = legacy_paths
        self.notifier = notifier

    @property
    def store_path(self) -> Path:
        return self._store_path or get_config_path()

    def _adapter_for(self, profile: Profile) -> PlatformAdapter | None:
        name = self.registry.validate(profile.platform)
        return self.registry.get(name) if name else None

    def _normalize_platform(self, platform: str | None) -> str | None:
        """Normalised platform filter; None means all platforms."""
        if platform is None:
            return None
        return self.registry.get(platform).name

    def _notify(self, event: str, previous: Profile | None, current: Profile | None) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(event, previous, current)
        except Exception as e:
            logger.warning(f"Notification for {event} failed: {e}")

    def _current_of(self, adapter: PlatformAdapter) -> Profile | None:
        """The single profile the adapter reports as live, or None."""
        try:
            return adapter.get_current_config()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to detect current {adapter.display_name} profile: {e}")
            return None

    def list_all(self, platform: str | None = None) -> list[ListedProfile]:
        """Numbered listing of stored profiles.

        ABOUTME: Runs legacy migration first
        ABOUTME: Indices are 1-based over the filtered list
        ABOUTME: Current flag comes from the one profile each adapter reports as live

        Raises:
            InvalidArgumentError: If platform is not supported
        """
        wanted = self._normalize_platform(platform)

        try:
            migrate_legacy_profiles(self.store_path, self._legacy_paths)
        except OSError as e:
            logger.warning(f"Legacy migration failed: {e}")

        profiles = [p for p in read_profiles(self.store_path) if wanted is None or p.platform == wanted]

        current: dict[str, Profile | None] = {}
        listed: list[ListedProfile] = []
        for index, profile in enumerate(profiles, start=1):
            adapter = self._adapter_for(profile)
            if adapter is None:
                listed.append(ListedProfile(index, profile, f"{profile.name} [{profile.platform}]"))
                continue

            if adapter.name not in current:
                current[adapter.name] = self._current_of(adapter)
            live = current[adapter.name]

            listed.append(
                ListedProfile(
                    index=index,
                    profile=profile,
                    display_name=f"{profile.name} [{adapter.display_name}]",
                    is_current=live is not None and live.key == profile.key,
                )
            )
        return listed

    def get_current_across_platforms(self) -> Profile | None:
        """First current profile in registry order (primary platform wins)."""
        for _name, adapter in self.registry:
            current = self._current_of(adapter)
            if current is not None:
                return current
        return None

    def get_current_by_platform(self) -> dict[str, Profile | None]:
        """Current profile of every platform, detected independently."""
        result: dict[str, Profile | None] = {}
        for name, adapter in self.registry:
            result[name] = self._current_of(adapter)
        return result

    def get_current(self, platform: str | None = None) -> Profile | None:
        """Current profile of one platform, or across platforms when None."""
        if platform is None:
            return self.get_current_across_platforms()
        return self.registry.get(platform).get_current_config()

    def is_current(self, profile: Profile, reference: Profile | None = None) -> bool:
        """Whether profile is the active one, by identity fields.

        ABOUTME: Compares against reference when given (same platform only)
        ABOUTME: Otherwise it must be the one profile the adapter reports as live
        """
        adapter = self._adapter_for(profile)
        if adapter is None:
            return False

        identity = adapter.identity_fields(profile)
        if identity is None:
            return False

        if reference is not None:
            if reference.platform != profile.platform:
                return False
            return adapter.identity_fields(reference) == identity

        live = self._current_of(adapter)
        return live is not None and live.key == profile.key

    def add(self, alias: str, key: str, url: str, platform: str | None = None) -> Profile:
        """Store a profile on a platform (default: primary).

        Raises:
            InvalidArgumentError: Blank fields or unsupported platform
            OSError: If the store cannot be written
        """
        adapter = self.registry.get(platform)
        profile = adapter.add_config(alias, key, url)
        self._notify(EVENT_ADD, None, profile)
        return profile

    def activate(self, profile: Profile) -> bool:
        """Make profile the live configuration of its platform.

        ABOUTME: Snapshots the previous current profile before writing
        ABOUTME: Notifier runs only after a successful write; its errors are logged

        Raises:
            InvalidArgumentError: If the profile's platform is not supported
        """
        adapter = self.registry.get(profile.platform)

        previous = self._current_of(adapter)
        if previous is None:
            previous = self.get_current_across_platforms()

        if not adapter.activate_config(profile):
            return False

        logger.info(f"Activated {adapter.display_name} profile '{profile.name}'")
        self._notify(EVENT_SWITCH, previous, profile)
        return True

    def activate_by_index(self, index: int, platform: str | None = None) -> Profile:
        """Activate the profile at a 1-based index of the (filtered) listing.

        Raises:
            ProfileNotFoundError: If there are no profiles
            InvalidArgumentError: If index is out of range
            OSError: If the adapter could not write the native files
        """
        listing = self.list_all(platform)
        if not listing:
            raise ProfileNotFoundError("No profiles found")
        if index < 1 or index > len(listing):
            raise InvalidArgumentError(f"Invalid index {index}, expected 1-{len(listing)}")

        profile = listing[index - 1].profile
        if not self.activate(profile):
            raise OSError(f"Failed to activate profile '{profile.name}'")
        return profile

    def resolve(self, identifier: str, platform: str | None = None) -> Profile:
        """Find a profile by 1-based index or exact name.

        ABOUTME: All-digit identifiers are indices into the filtered listing
        ABOUTME: Names match within platform when given, else the first match wins

        Raises:
            ProfileNotFoundError: If nothing matches
        """
        listing = self.list_all(platform)
        identifier = identifier.strip()

        if identifier.isdigit():
            index = int(identifier)
            if 1 <= index <= len(listing):
                return listing[index - 1].profile
            raise ProfileNotFoundError(f"No profile at index {index}")

        for item in listing:
            if item.profile.name == identifier:
                return item.profile

        raise ProfileNotFoundError(f"Profile '{identifier}' not found")

    def delete(self, identifier: str, platform: str | None = None) -> DeleteReport:
        """Resolve and delete one profile, then apply the clearing rule."""
        return self.delete_many([self.resolve(identifier, platform)])

    def delete_many(self, profiles: list[Profile]) -> DeleteReport:
        """Remove profiles and clear live credentials where needed.

        ABOUTME: A platform is cleared if a deleted profile was current
        ABOUTME: or if the platform has no profiles left
        ABOUTME: The rule is checked once per platform, after the whole batch

        Raises:
            OSError: If the store cannot be written
        """
        report = DeleteReport()

        adapters: dict[str, PlatformAdapter] = {}
        current: dict[str, Profile | None] = {}
        for profile in profiles:
            adapter = self._adapter_for(profile)
            if adapter is not None and adapter.name not in adapters:
                adapters[adapter.name] = adapter
                current[adapter.name] = self._current_of(adapter)

        for profile in profiles:
            if remove_profile(profile.name, profile.platform, self.store_path):
                report.deleted.append(profile)
                logger.info(f"Deleted profile '{profile.name}' [{profile.platform}]")

        for name, adapter in adapters.items():
            deleted_here = [p for p in report.deleted if p.platform == name]
            if not deleted_here:
                continue

            live = current[name]
            was_current = live is not None and live.key in {p.key for p in deleted_here}
            if was_current or not adapter.read_configs():
                if adapter.clear_activation():
                    report.cleared_platforms.append(name)
                else:
                    logger.warning(f"Failed to clear live {adapter.display_name} credentials")

        for profile in report.deleted:
            self._notify(EVENT_DELETE, profile, None)

        return report
