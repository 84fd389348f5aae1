# Quick setup: one key and base URL configured on several platforms at once
import logging
from dataclasses import dataclass, field

from ccswitch.manager import ConfigManager
from ccswitch.models import InvalidArgumentError, Profile
from ccswitch.utils.validation import is_blank

logger = logging.getLogger(__name__)

# ABOUTME: Path suffix each platform expects on a shared gateway URL
PLATFORM_URL_SUFFIXES = {
    "claude": "/api",
    "codex": "/openai/v1",
}


@dataclass
class QuickSetReport:
    """Report from quick setup.

    ABOUTME: configured holds one profile per platform that was written
    ABOUTME: activated is the last configured profile, if activation succeeded
    """
    configured: list[Profile] = field(default_factory=list)
    activated: Profile | None = None
    errors: list[str] = field(default_factory=list)


def process_url_for_platform(platform: str, url: str) -> str:
    """Adapt a gateway base URL to a platform's expected path.

    Examples:
        >>> process_url_for_platform("claude", "https://gw.example.com/")
        'https://gw.example.com/api'
        >>> process_url_for_platform("codex", "https://gw.example.com/openai/v1")
        'https://gw.example.com/openai/v1'
    """
    platform_url = url.rstrip("/")
    suffix = PLATFORM_URL_SUFFIXES.get(platform)
    if suffix and not platform_url.endswith(suffix):
        platform_url += suffix
    return platform_url


def quick_set(manager: ConfigManager, key: str, url: str, platforms: list[str]) -> QuickSetReport:
    """Add a profile named after each platform, then activate the last one.

    ABOUTME: Existing profiles with the platform's name are overwritten
    ABOUTME: A failing platform is recorded and the rest still run

    Raises:
        InvalidArgumentError: Blank key/url, no platforms, or an unsupported platform
    """
    if is_blank(key) or is_blank(url):
        raise InvalidArgumentError("API key and URL must not be empty")
    if not platforms:
        raise InvalidArgumentError("No platforms selected")

    names = [manager.registry.get(p).name for p in platforms]

    report = QuickSetReport()
    for name in names:
        try:
            profile = manager.add(name, key, process_url_for_platform(name, url.strip()), platform=name)
        except (InvalidArgumentError, OSError) as e:
            logger.warning(f"Quick setup for {name} failed: {e}")
            report.errors.append(f"{name}: {e}")
            continue
        report.configured.append(profile)

    if report.configured:
        last = report.configured[-1]
        if manager.activate(last):
            report.activated = last
        else:
            report.errors.append(f"{last.platform}: activation failed")

    return report
