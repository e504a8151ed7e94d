# Gemini CLI platform adapter
import logging
import os
from pathlib import Path
from typing import Any

from ccswitch.errors import ConfigError, FileIOError
from ccswitch.models import AppType
from ccswitch.settings import AppSettings
from ccswitch.utils.envfile import parse_env_file, serialize_env_file
from ccswitch.utils.fileio import read_text_file, write_text_file

logger = logging.getLogger(__name__)

# ABOUTME: Required once any env value is set; an empty env means OAuth login
API_KEY_VAR = "GEMINI_API_KEY"


def env_from_settings(settings: Any) -> dict[str, str]:
    """Extract string env values from a Gemini payload; other values are dropped."""
    env = settings.get("env") if isinstance(settings, dict) else None
    if not isinstance(env, dict):
        return {}
    return {key: value for key, value in env.items() if isinstance(value, str)}


class GeminiAdapter:
    """Adapter for Gemini CLI (~/.gemini/.env).

    ABOUTME: Settings payload shape: {"env": {"KEY": "VALUE", ...}}
    ABOUTME: MCP projection is not supported for this client and is a no-op
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    @property
    def app(self) -> AppType:
        return "gemini"

    @property
    def name(self) -> str:
        """Human-readable platform name."""
        return "Gemini CLI"

    @property
    def env_path(self) -> Path:
        return self._settings.gemini_env_path

    @property
    def live_paths(self) -> list[Path]:
        return [self.env_path]

    def live_exists(self) -> bool:
        return self.env_path.exists()

    def validate_settings(self, provider_id: str, settings: Any) -> None:
        """env must be an object; a non-empty env must carry GEMINI_API_KEY.

        Raises:
            ConfigError: On the first violation
        """
        if not isinstance(settings, dict):
            raise ConfigError(f"Gemini configuration of provider {provider_id} must be a JSON object")
        if "env" in settings and not isinstance(settings["env"], dict):
            raise ConfigError(f"Gemini config of provider {provider_id} is invalid: env must be an object")

        env = env_from_settings(settings)
        if env and API_KEY_VAR not in env:
            raise ConfigError(
                f"Gemini config of provider {provider_id} is missing required field: {API_KEY_VAR}"
            )

    def read_live(self) -> Any:
        """Read .env into {"env": {...}}.

        Raises:
            ConfigError: If the file doesn't exist
        """
        if not self.live_exists():
            raise ConfigError(f"Gemini .env file is missing: {self.env_path}")
        return {"env": parse_env_file(read_text_file(self.env_path))}

    def write_live(self, settings: Any) -> None:
        """Write sorted KEY=VALUE lines to .env.

        ABOUTME: On POSIX the directory is restricted to 0700 and the file to 0600
        """
        write_text_file(self.env_path, serialize_env_file(env_from_settings(settings)))

        if os.name != "posix":
            return
        try:
            os.chmod(self.env_path.parent, 0o700)
            os.chmod(self.env_path, 0o600)
        except OSError as e:
            raise FileIOError(self.env_path, e) from e

    def read_mcp_servers(self) -> dict[str, Any]:
        logger.debug("Gemini MCP import is not supported, nothing to read")
        return {}

    def write_mcp_servers(self, servers: dict[str, dict[str, Any]]) -> None:
        logger.debug(f"Gemini MCP projection is not supported, ignoring {len(servers)} server(s)")
