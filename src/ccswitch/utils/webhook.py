# ABOUTME: Webhook notifications for profile switches, adds, deletes and WebDAV syncs.
# ABOUTME: Config lives in ~/.claude/webhook.json; delivery is best-effort and never raises to callers.
import json
import logging
import time
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from ccswitch.config import write_text_atomic
from ccswitch.models import InvalidArgumentError, Profile, RemoteError
from ccswitch.utils.env import expand_env_vars
from ccswitch.utils.validation import is_blank, validate_url

logger = logging.getLogger(__name__)

WEBHOOK_FILENAME = "webhook.json"

# ABOUTME: Events a webhook can subscribe to
EVENT_SWITCH = "config_switch"
EVENT_ADD = "config_add"
EVENT_DELETE = "config_delete"
EVENT_WEBDAV_SYNC = "webdav_sync"
EVENTS = (EVENT_SWITCH, EVENT_ADD, EVENT_DELETE, EVENT_WEBDAV_SYNC)

FORMATS = ("feishu", "dingtalk", "slack", "generic")

DEFAULT_FORMAT = "feishu"
DEFAULT_TIMEOUT = 5.0
DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0


@dataclass(frozen=True)
class WebhookTarget:
    """One configured webhook endpoint."""
    name: str
    url: str
    enabled: bool = True
    events: tuple[str, ...] = (EVENT_SWITCH,)
    format: str = DEFAULT_FORMAT
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "enabled": self.enabled,
            "events": list(self.events),
            "format": self.format,
            "timeout": self.timeout,
            "retries": self.retries,
            "retry_delay": self.retry_delay,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebhookTarget":
        """Build a target from a webhook.json entry.

        ABOUTME: Raises ValueError when url is missing
        """
        url = data.get("url")
        if not isinstance(url, str) or not url:
            raise ValueError("Webhook entry missing required 'url' field")

        events = data.get("events") or [EVENT_SWITCH]
        return cls(
            name=str(data.get("name") or url),
            url=url,
            enabled=bool(data.get("enabled", True)),
            events=tuple(str(e) for e in events),
            format=str(data.get("format") or DEFAULT_FORMAT),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            retries=max(1, int(data.get("retries", DEFAULT_RETRIES))),
            retry_delay=float(data.get("retry_delay", DEFAULT_RETRY_DELAY)),
        )


def get_webhook_path() -> Path:
    """Return ~/.claude/webhook.json (resolved at call time)."""
    return Path.home() / ".claude" / WEBHOOK_FILENAME


def load_webhooks(path: Path | None = None) -> list[WebhookTarget]:
    """Load configured webhooks.

    ABOUTME: Returns [] when the file is absent or malformed (logged)
    ABOUTME: Legacy {"webhook_url": url} is read as one feishu config_switch hook
    """
    path = path or get_webhook_path()
    if not path.exists():
        return []

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read webhook config {path}: {e}")
        return []

    if not isinstance(data, dict):
        logger.warning(f"Webhook config {path} is not a JSON object, ignoring it")
        return []

    if not isinstance(data.get("webhooks"), list):
        legacy_url = data.get("webhook_url")
        if isinstance(legacy_url, str) and legacy_url:
            return [WebhookTarget(name="default", url=legacy_url)]
        logger.warning(f"Webhook config {path} has no 'webhooks' list, ignoring it")
        return []

    targets: list[WebhookTarget] = []
    for entry in data["webhooks"]:
        if not isinstance(entry, dict):
            continue
        try:
            targets.append(WebhookTarget.from_dict(entry))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping invalid webhook entry: {e}")
    return targets


def save_webhooks(targets: list[WebhookTarget], path: Path | None = None) -> None:
    """Write the webhook list; always in the current (non-legacy) layout."""
    path = path or get_webhook_path()
    document = {"webhooks": [t.to_dict() for t in targets]}
    write_text_atomic(path, json.dumps(document, indent=2, ensure_ascii=False) + "\n")


def add_webhook(
    url: str,
    name: str | None = None,
    fmt: str = DEFAULT_FORMAT,
    events: list[str] | None = None,
    path: Path | None = None,
) -> WebhookTarget:
    """Register a webhook, replacing any existing one with the same name.

    Raises:
        InvalidArgumentError: Non-http(s) URL, unknown format or event
    """
    if is_blank(url) or validate_url(url.strip()) is not None:
        raise InvalidArgumentError(f"Invalid webhook URL (must start with http:// or https://): {url}")
    if fmt not in FORMATS:
        raise InvalidArgumentError(f"Unknown webhook format: {fmt} (supported: {', '.join(FORMATS)})")

    events = events or [EVENT_SWITCH]
    unknown = [e for e in events if e not in EVENTS]
    if unknown:
        raise InvalidArgumentError(f"Unknown webhook event(s): {', '.join(unknown)}")

    url = url.strip()
    target = WebhookTarget(name=name or url, url=url, events=tuple(events), format=fmt)
    targets = [t for t in load_webhooks(path) if t.name != target.name]
    targets.append(target)
    save_webhooks(targets, path)
    return target


def list_webhooks(path: Path | None = None) -> list[WebhookTarget]:
    return load_webhooks(path)


def remove_webhook(name: str, path: Path | None = None) -> bool:
    """Remove a webhook by name; returns False if it was not registered."""
    targets = load_webhooks(path)
    remaining = [t for t in targets if t.name != name]
    if len(remaining) == len(targets):
        return False
    save_webhooks(remaining, path)
    return True


def _base_url(profile: Profile) -> str | None:
    env = profile.config.get("env")
    if isinstance(env, dict) and env.get("ANTHROPIC_BASE_URL"):
        return str(env["ANTHROPIC_BASE_URL"])
    url = profile.config.get("url")
    return str(url) if url else None


def build_switch_message(previous: Profile | None, current: Profile) -> str:
    """Human-readable switch notification with time, from/to and base URL."""
    lines = [
        "[ccswitch] Profile switched",
        f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
    ]
    if previous is not None:
        lines.append(f"From: {previous.name} [{previous.platform}]")
    lines.append(f"To: {current.name} [{current.platform}]")

    model = current.config.get("model")
    if model:
        lines.append(f"Model: {model}")

    base_url = _base_url(current)
    if base_url:
        lines.append(f"Base URL: {base_url}")

    return "\n".join(lines)


def build_event_message(event: str, previous: Profile | None, current: Profile | None) -> str:
    """Message text for any event."""
    if event == EVENT_SWITCH and current is not None:
        return build_switch_message(previous, current)

    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    if event == EVENT_ADD and current is not None:
        return f"[ccswitch] Profile added\nTime: {timestamp}\nName: {current.name} [{current.platform}]"
    if event == EVENT_DELETE and previous is not None:
        return f"[ccswitch] Profile deleted\nTime: {timestamp}\nName: {previous.name} [{previous.platform}]"
    return f"[ccswitch] {event}\nTime: {timestamp}"


def build_payload(
    message: str,
    fmt: str,
    previous: Profile | None = None,
    current: Profile | None = None,
) -> dict[str, Any]:
    """Wrap message text in the body shape a webhook format expects."""
    if fmt == "feishu":
        return {"msg_type": "text", "content": {"text": message}}
    if fmt == "dingtalk":
        return {"msgtype": "text", "text": {"content": message}}
    if fmt == "slack":
        return {"text": message}
    return {
        "text": message,
        "timestamp": datetime.now().isoformat(),
        "previous": previous.name if previous else None,
        "current": current.name if current else None,
    }


def send_webhook(target: WebhookTarget, payload: dict[str, Any]) -> bool:
    """POST a JSON payload, retrying with linear backoff.

    ABOUTME: Any 2xx response is success
    ABOUTME: Waits retry_delay * attempt between attempts
    ABOUTME: ${VAR} references in the URL are expanded at send time

    Raises:
        RemoteError: If every attempt failed
    """
    url = expand_env_vars(target.url)
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    last_error = ""

    for attempt in range(1, target.retries + 1):
        request = urllib.request.Request(
            url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(request, timeout=target.timeout) as response:
                if 200 <= response.status < 300:
                    return True
                last_error = f"HTTP {response.status}"
        except urllib.error.HTTPError as e:
            last_error = f"HTTP {e.code}: {e.reason}"
        except urllib.error.URLError as e:
            last_error = f"Connection failed: {e.reason}"
        except (TimeoutError, OSError) as e:
            last_error = f"Request failed: {e}"

        logger.debug(f"Webhook '{target.name}' attempt {attempt}/{target.retries} failed: {last_error}")
        if attempt < target.retries:
            time.sleep(target.retry_delay * attempt)

    raise RemoteError(f"Webhook '{target.name}' failed after {target.retries} attempt(s): {last_error}")


@dataclass
class Notifier:
    """Fans event notifications out to every matching webhook.

    ABOUTME: Endpoints are called in parallel and all are awaited before returning
    ABOUTME: notify() never raises; failures are logged
    """
    path: Path | None = None
    max_workers: int = 4
    results: dict[str, bool] = field(default_factory=dict)

    def targets_for(self, event: str) -> list[WebhookTarget]:
        return [t for t in load_webhooks(self.path) if t.enabled and event in t.events]

    def _deliver(self, target: WebhookTarget, payload: dict[str, Any]) -> bool:
        try:
            return send_webhook(target, payload)
        except RemoteError as e:
            logger.warning(str(e))
            return False
        except Exception as e:
            logger.warning(f"Webhook '{target.name}' failed: {e}")
            return False

    def notify(self, event: str, previous: Profile | None = None, current: Profile | None = None) -> bool:
        """Send event to subscribed webhooks.

        Returns:
            True if any endpoint succeeded or none is registered
        """
        try:
            targets = self.targets_for(event)
        except Exception as e:
            logger.warning(f"Failed to load webhooks: {e}")
            return False

        self.results = {}
        if not targets:
            return True

        message = build_event_message(event, previous, current)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(targets))) as pool:
            futures = {
                t.name: pool.submit(self._deliver, t, build_payload(message, t.format, previous, current))
                for t in targets
            }
            for name, future in futures.items():
                self.results[name] = future.result()

        for name, ok in self.results.items():
            if ok:
                logger.info(f"Webhook '{name}' delivered")
        return any(self.results.values())
