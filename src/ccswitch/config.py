# SSOT configuration loading and saving for ccswitch
import logging
import os
from pathlib import Path
from typing import Any

from ccswitch.errors import ConfigError, FileIOError, LegacyConfigError
from ccswitch.models import CURRENT_VERSION, ConfigRoot
from ccswitch.utils.backup import MAX_BACKUPS, create_backup
from ccswitch.utils.fileio import read_json_file, write_json_file

logger = logging.getLogger(__name__)

# ABOUTME: Environment variable overriding the config directory (used by tests and CI)
CONFIG_DIR_ENV = "CC_SWITCH_CONFIG_DIR"

# ABOUTME: Default config directory in user's home
CONFIG_DIR = Path.home() / ".cc-switch"

# ABOUTME: SSOT file name inside the config directory
CONFIG_FILE_NAME = "config.json"


def get_config_dir() -> Path:
    """Return the ccswitch config directory.

    ABOUTME: Honors CC_SWITCH_CONFIG_DIR, otherwise ~/.cc-switch
    ABOUTME: Directory may not exist yet - use ensure_config_dir() first
    """
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return CONFIG_DIR


def get_config_path(config_dir: Path | None = None) -> Path:
    """Return the path to the SSOT file.

    Returns:
        <config-dir>/config.json
    """
    return (config_dir or get_config_dir()) / CONFIG_FILE_NAME


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Create config directory if it doesn't exist.

    Returns:
        Path to config directory (guaranteed to exist)
    """
    directory = config_dir or get_config_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def is_legacy_layout(data: dict[str, Any]) -> bool:
    """Detect the retired v1 layout: top-level `providers` map plus string `current`."""
    return isinstance(data.get("providers"), dict) and isinstance(data.get("current"), str)


def parse_config(data: Any, path: Path) -> ConfigRoot:
    """Validate a decoded SSOT document and build the model.

    ABOUTME: Legacy v1 documents are rejected, never migrated
    ABOUTME: Any version other than 2 is rejected

    Raises:
        LegacyConfigError: For the v1 layout
        ConfigError: For a non-object document or unsupported version
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    if is_legacy_layout(data):
        raise LegacyConfigError(path)

    version = data.get("version", CURRENT_VERSION)
    if version != CURRENT_VERSION:
        raise ConfigError(
            f"Unsupported config version {version!r} in {path} (expected {CURRENT_VERSION})"
        )

    try:
        return ConfigRoot.from_dict(data)
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e


def load_config(path: Path) -> ConfigRoot:
    """Load the SSOT from disk.

    ABOUTME: A missing file yields a fresh v2 root with all three clients and empty MCP maps
    ABOUTME: Fail-fast on parse errors with clear error messages

    Args:
        path: Path to config.json

    Returns:
        Parsed ConfigRoot

    Raises:
        JsonParseError: If the JSON syntax is invalid
        LegacyConfigError: If the file uses the v1 layout
        ConfigError: If the version is unsupported
    """
    if not path.exists():
        logger.debug(f"No config at {path}, starting with an empty one")
        return ConfigRoot()

    data = read_json_file(path)
    return parse_config(data, path)


def save_config(path: Path, root: ConfigRoot, max_backups: int = MAX_BACKUPS) -> None:
    """Save the SSOT to disk.

    ABOUTME: Backs up the previous file first; a failed backup is logged, not fatal
    ABOUTME: The write itself is atomic and its failure is raised

    Raises:
        FileIOError: If the config file cannot be written
    """
    try:
        create_backup(path, max_backups)
    except FileIOError as e:
        logger.warning(f"Failed to back up {path} before saving: {e}")

    write_json_file(path, root.to_dict())
