# App settings: per-client directory overrides and live path resolution
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ccswitch.config import get_config_dir
from ccswitch.errors import AppError
from ccswitch.models import AppType
from ccswitch.utils.fileio import read_json_file, write_json_file

logger = logging.getLogger(__name__)

# ABOUTME: Settings file name inside the config directory
SETTINGS_FILE_NAME = "settings.json"

# ABOUTME: settings.json key for each client's directory override
_OVERRIDE_KEYS: dict[str, str] = {
    "claude": "claudeConfigDir",
    "codex": "codexConfigDir",
    "gemini": "geminiConfigDir",
}


def _expand(value: str | None) -> Path | None:
    if value is None or not value.strip():
        return None
    return Path(value.strip()).expanduser()


@dataclass
class AppSettings:
    """Where each client keeps its live files.

    ABOUTME: Empty override means the client's default under the home directory
    ABOUTME: Unknown keys in settings.json are preserved on save
    """
    claude_config_dir: str | None = None
    codex_config_dir: str | None = None
    gemini_config_dir: str | None = None
    home: Path = field(default_factory=Path.home)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], home: Path | None = None) -> "AppSettings":
        def text(key: str) -> str | None:
            value = data.get(key)
            return value if isinstance(value, str) else None

        return cls(
            claude_config_dir=text("claudeConfigDir"),
            codex_config_dir=text("codexConfigDir"),
            gemini_config_dir=text("geminiConfigDir"),
            home=home or Path.home(),
            extra={k: v for k, v in data.items() if k not in _OVERRIDE_KEYS.values()},
        )

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.extra)
        for app, key in _OVERRIDE_KEYS.items():
            value = getattr(self, f"{app}_config_dir")
            if value:
                result[key] = value
        return result

    def override_dir(self, app: AppType) -> Path | None:
        return _expand(getattr(self, f"{app}_config_dir"))

    def app_dir(self, app: AppType) -> Path:
        """Base directory of a client's live files.

        Examples:
            >>> AppSettings(home=Path("/home/u")).app_dir("codex")
            PosixPath('/home/u/.codex')
        """
        return self.override_dir(app) or self.home / f".{app}"

    @property
    def claude_settings_path(self) -> Path:
        return self.app_dir("claude") / "settings.json"

    @property
    def claude_mcp_path(self) -> Path:
        """~/.claude.json, or <override>/.claude.json when overridden."""
        override = self.override_dir("claude")
        if override is not None:
            return override / ".claude.json"
        return self.home / ".claude.json"

    @property
    def codex_auth_path(self) -> Path:
        return self.app_dir("codex") / "auth.json"

    @property
    def codex_config_path(self) -> Path:
        return self.app_dir("codex") / "config.toml"

    @property
    def gemini_env_path(self) -> Path:
        return self.app_dir("gemini") / ".env"


def get_settings_path(config_dir: Path | None = None) -> Path:
    return (config_dir or get_config_dir()) / SETTINGS_FILE_NAME


def load_settings(config_dir: Path | None = None, home: Path | None = None) -> AppSettings:
    """Load settings.json.

    ABOUTME: Missing file -> defaults; unreadable or malformed file -> defaults with a warning
    """
    path = get_settings_path(config_dir)
    if not path.exists():
        return AppSettings(home=home or Path.home())

    try:
        data = read_json_file(path)
    except AppError as e:
        logger.warning(f"Ignoring unreadable settings file: {e}")
        return AppSettings(home=home or Path.home())

    if not isinstance(data, dict):
        logger.warning(f"Ignoring settings file {path}: expected a JSON object")
        return AppSettings(home=home or Path.home())

    return AppSettings.from_dict(data, home=home)


def save_settings(settings: AppSettings, config_dir: Path | None = None) -> None:
    write_json_file(get_settings_path(config_dir), settings.to_dict())
