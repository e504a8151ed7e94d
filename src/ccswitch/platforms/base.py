# Platform adapter base utilities
import logging
from pathlib import Path
from typing import Any

from ccswitch.errors import ConfigError
from ccswitch.utils.fileio import read_json_file, write_json_file

logger = logging.getLogger(__name__)

# ABOUTME: Key holding the server map in JSON-based client files
MCP_SERVERS_KEY = "mcpServers"


def read_json_object(path: Path) -> dict[str, Any]:
    """Read a JSON file that must hold an object.

    ABOUTME: Returns empty dict if file doesn't exist
    ABOUTME: Raises JsonParseError for invalid JSON, ConfigError for non-object JSON
    """
    if not path.exists():
        return {}

    data = read_json_file(path)
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return data


def read_mcp_servers_block(path: Path, key: str = MCP_SERVERS_KEY) -> dict[str, Any]:
    """Return the server map stored under `key` (empty when absent or not an object)."""
    servers = read_json_object(path).get(key)
    if not isinstance(servers, dict):
        return {}
    return servers


def write_mcp_servers_block(
    path: Path,
    servers: dict[str, dict[str, Any]],
    key: str = MCP_SERVERS_KEY,
) -> bool:
    """Replace the whole server map under `key`, keeping every other key.

    ABOUTME: The client owns this sub-structure exclusively, so a full overwrite is safe
    ABOUTME: A missing file with nothing to project is left missing
    ABOUTME: Skips the write when the block already holds exactly these servers

    Returns:
        True if the file was written
    """
    if not path.exists() and not servers:
        logger.debug(f"{path} does not exist and no servers are enabled, skipping")
        return False

    data = read_json_object(path)
    if path.exists() and data.get(key) == servers:
        logger.debug(f"{key} in {path} already up to date")
        return False

    data[key] = servers
    write_json_file(path, data)
    return True
