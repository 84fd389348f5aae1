# ABOUTME: WebDAV mirror for the profile store, Claude settings and CLAUDE.md.
# ABOUTME: Config lives in ~/.claude/webdav.json; the password is never uploaded in clear.
import io
import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import httpx
from webdav4.client import Client, ClientError, ResourceAlreadyExists, ResourceNotFound

from ccswitch.config import write_text_atomic
from ccswitch.models import RemoteError
from ccswitch.utils.env import expand_env_vars

logger = logging.getLogger(__name__)

WEBDAV_FILENAME = "webdav.json"
DEFAULT_REMOTE_PATH = "/claude-configs/"

# ABOUTME: Placeholder stored remotely instead of the real password
MASKED_PASSWORD = "***masked***"


@dataclass(frozen=True)
class MirrorConfig:
    """Connection settings for the WebDAV mirror."""
    url: str = ""
    username: str = ""
    password: str = ""
    remote_path: str = DEFAULT_REMOTE_PATH

    def is_complete(self) -> bool:
        return bool(self.url and self.username and self.password)

    def redacted(self) -> "MirrorConfig":
        """Copy safe to upload: password replaced by a placeholder."""
        return replace(self, password=MASKED_PASSWORD)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "username": self.username,
            "password": self.password,
            "remote_path": self.remote_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], expand: bool = True) -> "MirrorConfig":
        """Build from webdav.json content.

        ABOUTME: Accepts the older camelCase remotePath key
        ABOUTME: ${VAR} references are expanded when expand is True
        """
        def value(key: str, default: str = "") -> str:
            raw = data.get(key)
            if not isinstance(raw, str):
                return default
            return expand_env_vars(raw) if expand else raw

        remote_path = value("remote_path") or value("remotePath") or DEFAULT_REMOTE_PATH
        return cls(
            url=value("url"),
            username=value("username"),
            password=value("password"),
            remote_path=remote_path,
        )


@dataclass(frozen=True)
class SyncFile:
    """A local file mirrored under a remote name."""
    name: str
    path: Path


@dataclass
class MirrorReport:
    """Outcome of an upload or download.

    ABOUTME: Per-file, best-effort; a failure never stops the remaining files
    """
    transferred: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def get_webdav_path() -> Path:
    """Return ~/.claude/webdav.json (resolved at call time)."""
    return Path.home() / ".claude" / WEBDAV_FILENAME


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read WebDAV config {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def load_mirror_config(path: Path | None = None, expand: bool = True) -> MirrorConfig:
    """Load webdav.json; an empty config when absent or malformed."""
    return MirrorConfig.from_dict(_read_json(path or get_webdav_path()), expand=expand)


def save_mirror_config(config: MirrorConfig, path: Path | None = None) -> None:
    path = path or get_webdav_path()
    write_text_atomic(path, json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n")


def default_sync_files(config_dir: Path) -> tuple[SyncFile, ...]:
    """Files mirrored by default, relative to the Claude config directory."""
    return (
        SyncFile("apiConfigs.json", config_dir / "apiConfigs.json"),
        SyncFile("settings.json", config_dir / "settings.json"),
        SyncFile("CLAUDE.md", config_dir / "CLAUDE.md"),
    )


def with_extra_files(files: tuple[SyncFile, ...], *extra: SyncFile) -> tuple[SyncFile, ...]:
    """New file tuple with extra entries appended (names already present are skipped)."""
    names = {f.name for f in files}
    return files + tuple(f for f in extra if f.name not in names)


class WebDAVClient:
    """Access to the mirror collection on a WebDAV server, via webdav4.

    ABOUTME: Paths are relative to the configured URL, under remote_path
    ABOUTME: All failures surface as RemoteError
    """

    def __init__(self, config: MirrorConfig, timeout: float = 30, client: Client | None = None) -> None:
        self.config = config
        self.remote_dir = config.remote_path.strip("/")
        self._client = client or Client(
            config.url,
            auth=(config.username, config.password),
            timeout=timeout,
        )

    def _path(self, name: str) -> str:
        return f"{self.remote_dir}/{name}" if self.remote_dir else name

    def ensure_remote_dir(self) -> None:
        """Create the remote collection; an existing one is fine."""
        if not self.remote_dir:
            return
        try:
            self._client.mkdir(self.remote_dir)
        except ResourceAlreadyExists:
            return
        except (ClientError, httpx.HTTPError) as e:
            raise RemoteError(f"Failed to create remote directory {self.config.remote_path}: {e}") from e

    def put(self, name: str, content: bytes) -> None:
        try:
            self._client.upload_fileobj(io.BytesIO(content), self._path(name), overwrite=True)
        except (ClientError, httpx.HTTPError) as e:
            raise RemoteError(f"Failed to upload {name}: {e}") from e

    def get(self, name: str) -> bytes | None:
        """Download a file; None if it does not exist remotely."""
        buffer = io.BytesIO()
        try:
            self._client.download_fileobj(self._path(name), buffer)
        except ResourceNotFound:
            return None
        except (ClientError, httpx.HTTPError) as e:
            raise RemoteError(f"Failed to download {name}: {e}") from e
        return buffer.getvalue()

    def list(self) -> list[str]:
        """Names of the files in the remote collection (sub-collections left out)."""
        try:
            entries = self._client.ls(self.remote_dir or "/", detail=True)
        except ResourceNotFound:
            return []
        except (ClientError, httpx.HTTPError) as e:
            raise RemoteError(f"Failed to list {self.config.remote_path}: {e}") from e

        return [
            entry["name"].rstrip("/").rsplit("/", 1)[-1]
            for entry in entries
            if entry.get("type") != "directory"
        ]


def _upload_content(file: SyncFile) -> bytes:
    """Bytes to upload; the mirror's own config goes up redacted."""
    if file.name == WEBDAV_FILENAME:
        redacted = MirrorConfig.from_dict(_read_json(file.path), expand=False).redacted()
        return (json.dumps(redacted.to_dict(), indent=2, ensure_ascii=False) + "\n").encode("utf-8")
    return file.path.read_bytes()


def upload_files(
    config: MirrorConfig,
    files: tuple[SyncFile, ...],
    client: WebDAVClient | None = None,
) -> MirrorReport:
    """Upload each existing local file.

    Raises:
        RemoteError: If the remote directory cannot be created
    """
    client = client or WebDAVClient(config)
    report = MirrorReport()
    client.ensure_remote_dir()

    for file in files:
        if not file.path.exists():
            logger.info(f"{file.name} does not exist, skipping upload")
            report.skipped.append(file.name)
            continue
        try:
            client.put(file.name, _upload_content(file))
            report.transferred.append(file.name)
        except (OSError, RemoteError) as e:
            logger.warning(f"Upload of {file.name} failed: {e}")
            report.errors.append(f"{file.name}: {e}")

    return report


def _apply_download(file: SyncFile, content: bytes) -> None:
    if file.name == WEBDAV_FILENAME:
        data = json.loads(content.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Remote {WEBDAV_FILENAME} is not a JSON object")
        remote = MirrorConfig.from_dict(data, expand=False)
        local = MirrorConfig.from_dict(_read_json(file.path), expand=False)
        if remote.password == MASKED_PASSWORD or not remote.password:
            remote = replace(remote, password=local.password)
        save_mirror_config(remote, file.path)
        return
    write_text_atomic(file.path, content.decode("utf-8"))


def download_files(
    config: MirrorConfig,
    files: tuple[SyncFile, ...],
    client: WebDAVClient | None = None,
) -> MirrorReport:
    """Download each file and write it locally; missing remote files are skipped."""
    client = client or WebDAVClient(config)
    report = MirrorReport()

    for file in files:
        try:
            content = client.get(file.name)
            if content is None:
                logger.info(f"{file.name} not found remotely, skipping")
                report.skipped.append(file.name)
                continue
            _apply_download(file, content)
            report.transferred.append(file.name)
        except (OSError, ValueError, RemoteError) as e:
            logger.warning(f"Download of {file.name} failed: {e}")
            report.errors.append(f"{file.name}: {e}")

    return report
