# Codex CLI platform adapter
import copy
import json
import logging
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from ccswitch.config import write_text_atomic
from ccswitch.models import Profile
from ccswitch.platforms.base import BaseAdapter, read_json_file

logger = logging.getLogger(__name__)

# ABOUTME: Provider id written into config.toml
PROVIDER_ID = "ccs"
DEFAULT_MODEL = "gpt-5.1-codex"

# ABOUTME: Key field inside auth.json
API_KEY_FIELD = "OPENAI_API_KEY"


def render_config_template(alias: str, url: str) -> dict[str, Any]:
    """Build the config.toml document for a provider alias and base URL.

    ABOUTME: Rendered on every activation so template changes apply to old profiles
    """
    return {
        "model_provider": PROVIDER_ID,
        "model": DEFAULT_MODEL,
        "preferred_auth_method": "apikey",
        "disable_response_storage": True,
        "network_access": "enabled",
        "model_providers": {
            PROVIDER_ID: {
                "name": alias,
                "base_url": url,
                "wire_api": "responses",
                "requires_openai_auth": True,
            },
        },
    }


def merge_config_toml(existing: dict[str, Any], rendered: dict[str, Any]) -> dict[str, Any]:
    """Overlay the rendered template on an existing config.toml document.

    ABOUTME: Template top-level keys and the ccs provider table win
    ABOUTME: Other tables (mcp_servers, other providers, profiles) are preserved
    ABOUTME: Returns new dict (doesn't mutate inputs)
    """
    merged = copy.deepcopy(existing)

    for key, value in rendered.items():
        if key == "model_providers":
            continue
        merged[key] = value

    providers = merged.get("model_providers")
    if not isinstance(providers, dict):
        providers = {}
    providers = dict(providers)
    providers[PROVIDER_ID] = dict(rendered["model_providers"][PROVIDER_ID])
    providers[PROVIDER_ID].pop("env_key", None)
    merged["model_providers"] = providers

    return merged


class CodexAdapter(BaseAdapter):
    """Adapter for Codex CLI (~/.codex/config.toml + ~/.codex/auth.json).

    ABOUTME: Stores only {key, url}; native files are generated on activation
    ABOUTME: Current profile is detected from the key in auth.json
    """

    platform_name = "codex"
    label = "Codex"
    key_prefix = "sk-"

    def __init__(
        self,
        config_dir: Path | None = None,
        store_path: Path | None = None,
        backup_dir: Path | None = None,
    ) -> None:
        """Initialize adapter with optional custom paths.

        ABOUTME: Defaults to ~/.codex if not provided
        """
        super().__init__(
            config_dir if config_dir else Path.home() / ".codex",
            store_path=store_path,
            backup_dir=backup_dir,
        )

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.toml"

    @property
    def auth_file(self) -> Path:
        return self.config_dir / "auth.json"

    def build_payload(self, key: str, url: str) -> dict[str, Any]:
        return {"key": key, "url": url}

    def read_config_toml(self) -> dict[str, Any]:
        """Parse config.toml.

        ABOUTME: Returns empty dict if config doesn't exist
        ABOUTME: Raises ValueError for invalid TOML
        """
        if not self.config_file.exists():
            return {}

        try:
            with open(self.config_file, "rb") as f:
                return tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {self.config_file}: {e}") from e

    def _credentials(self, profile: Profile) -> tuple[Any, Any]:
        """(key, url) of a profile, including the pre-unified layout."""
        config = profile.config
        key = config.get("key")
        url = config.get("url")

        auth_content = config.get("authContent")
        if not key and isinstance(auth_content, dict):
            key = auth_content.get(API_KEY_FIELD)

        config_content = config.get("configContent")
        if not url and isinstance(config_content, str):
            try:
                providers = tomli.loads(config_content).get("model_providers", {})
            except tomli.TOMLDecodeError:
                providers = {}
            for provider in providers.values():
                if isinstance(provider, dict) and provider.get("base_url"):
                    url = provider["base_url"]
                    break

        return key, url

    def activate_config(self, profile: Profile) -> bool:
        """Write config.toml and auth.json for the profile.

        ABOUTME: config.toml is merged so unrelated sections survive
        ABOUTME: auth.json is regenerated from the stored key
        ABOUTME: Both documents are rendered before anything is written
        ABOUTME: An unparseable config.toml is backed up and regenerated from the template
        ABOUTME: If auth.json cannot be written, config.toml is restored to its old content
        """
        try:
            key, url = self._credentials(profile)
            if not key or not url:
                raise ValueError(f"Profile '{profile.name}' has no API key or URL")

            try:
                existing = self.read_config_toml()
            except ValueError as e:
                logger.warning(f"{e}; regenerating config.toml")
                existing = {}

            merged = merge_config_toml(existing, render_config_template(profile.name, url))
            toml_content = tomli_w.dumps(merged)
            auth_content = json.dumps({API_KEY_FIELD: key}, indent=2) + "\n"

            self.ensure_config_dir()
            self._backup(self.config_file, "codex-config")
            self._backup(self.auth_file, "codex-auth")

            previous_config = self.config_file.read_bytes() if self.config_file.exists() else None
            write_text_atomic(self.config_file, toml_content)
            try:
                write_text_atomic(self.auth_file, auth_content)
            except OSError:
                self._restore_config(previous_config)
                raise
            return True
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to activate Codex profile '{profile.name}': {e}")
            return False

    def _restore_config(self, content: bytes | None) -> None:
        """Put config.toml back as it was before a failed activation."""
        try:
            if content is None:
                self.config_file.unlink(missing_ok=True)
            else:
                self.config_file.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to restore {self.config_file}: {e}")

    def identity_fields(self, profile: Profile) -> tuple[str, ...] | None:
        key, _url = self._credentials(profile)
        return (key,) if key else None

    def read_live_identity(self) -> tuple[str, ...] | None:
        """Key from auth.json; None unless both native files exist."""
        if not self.config_file.exists() or not self.auth_file.exists():
            return None

        try:
            auth = read_json_file(self.auth_file)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {self.auth_file}: {e}")
            return None

        key = auth.get(API_KEY_FIELD)
        return (key,) if key else None

    def clear_activation(self) -> bool:
        """Delete config.toml and auth.json outright."""
        ok = True
        for path in (self.config_file, self.auth_file):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Failed to remove {path}: {e}")
                ok = False
        return ok

    def summary_fields(self, profile: Profile) -> tuple[Any, Any]:
        return self._credentials(profile)
