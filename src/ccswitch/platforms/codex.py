# Codex CLI platform adapter
import logging
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.items import Table

from ccswitch.errors import AppError, ConfigError, McpValidationError, TomlParseError
from ccswitch.models import AppType
from ccswitch.platforms.base import read_json_object
from ccswitch.settings import AppSettings
from ccswitch.utils.fileio import delete_file, read_text_file, write_json_file, write_text_file
from ccswitch.utils.toml_edit import (
    load_toml_values,
    parse_document,
    server_spec_to_table,
    table_to_server_spec,
    validate_toml_text,
)

logger = logging.getLogger(__name__)

# ABOUTME: Flat top-level server table, the default location
FLAT_TABLE_KEY = "mcp_servers"

# ABOUTME: Older nested location: [mcp.servers.<id>]
NESTED_PARENT_KEY = "mcp"
NESTED_TABLE_KEY = "servers"


def _plain(item: Any) -> Any:
    """Strip tomlkit layout information for value comparison."""
    return item.unwrap() if hasattr(item, "unwrap") else item


def build_servers_table(servers: dict[str, dict[str, Any]]) -> Table:
    """Build the server super-table with one sub-table per id, sorted by id."""
    table = tomlkit.table(is_super_table=True)
    for server_id in sorted(servers):
        table.add(server_id, server_spec_to_table(server_id, servers[server_id]))
    return table


def project_servers_into_document(
    doc: tomlkit.TOMLDocument,
    servers: dict[str, dict[str, Any]],
) -> bool:
    """Rebuild the MCP server table inside a parsed config.toml.

    ABOUTME: Uses [mcp.servers] only when it is the sole existing location, else [mcp_servers]
    ABOUTME: The other location is removed; an empty server set removes the table entirely
    ABOUTME: A table whose values already match is left untouched, so reruns are byte-identical
    ABOUTME: Everything outside the server table keeps its comments and ordering

    Returns:
        True if the document changed
    """
    has_flat = FLAT_TABLE_KEY in doc
    parent = doc.get(NESTED_PARENT_KEY)
    nested_parent = parent if isinstance(parent, dict) and NESTED_TABLE_KEY in parent else None

    desired = build_servers_table(servers) if servers else None
    changed = False

    if nested_parent is not None and not has_flat:
        if desired is None:
            del nested_parent[NESTED_TABLE_KEY]
            if not nested_parent:
                del doc[NESTED_PARENT_KEY]
            return True
        if _plain(nested_parent[NESTED_TABLE_KEY]) != desired.unwrap():
            nested_parent[NESTED_TABLE_KEY] = desired
            changed = True
        return changed

    if nested_parent is not None:
        del nested_parent[NESTED_TABLE_KEY]
        if not nested_parent:
            del doc[NESTED_PARENT_KEY]
        changed = True

    if desired is None:
        if has_flat:
            del doc[FLAT_TABLE_KEY]
            changed = True
    elif not has_flat or _plain(doc[FLAT_TABLE_KEY]) != desired.unwrap():
        doc[FLAT_TABLE_KEY] = desired
        changed = True

    return changed


class CodexAdapter:
    """Adapter for Codex CLI (~/.codex/auth.json + ~/.codex/config.toml).

    ABOUTME: Settings payload shape: {"auth": {...}, "config": "<config.toml text>" | null}
    ABOUTME: Uses snake_case mcp_servers key (not mcpServers)
    ABOUTME: config.toml is edited through tomlkit so unrelated content survives
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    @property
    def app(self) -> AppType:
        return "codex"

    @property
    def name(self) -> str:
        """Human-readable platform name."""
        return "Codex CLI"

    @property
    def auth_path(self) -> Path:
        return self._settings.codex_auth_path

    @property
    def config_path(self) -> Path:
        return self._settings.codex_config_path

    @property
    def live_paths(self) -> list[Path]:
        return [self.auth_path, self.config_path]

    def live_exists(self) -> bool:
        """auth.json decides; config.toml alone is not a provider configuration."""
        return self.auth_path.exists()

    def validate_settings(self, provider_id: str, settings: Any) -> None:
        """Check the Codex payload shape.

        ABOUTME: auth must be an object; config must be a string or null
        ABOUTME: A config string must parse as TOML

        Raises:
            ConfigError: On the first violation
        """
        if not isinstance(settings, dict):
            raise ConfigError(f"Codex configuration of provider {provider_id} must be a JSON object")

        if "auth" not in settings:
            raise ConfigError(f"Provider {provider_id} is missing auth configuration")
        if not isinstance(settings["auth"], dict):
            raise ConfigError(f"Provider {provider_id} auth configuration must be a JSON object")

        config_text = settings.get("config")
        if config_text is not None and not isinstance(config_text, str):
            raise ConfigError(f"Codex config field of provider {provider_id} must be a string")
        if isinstance(config_text, str):
            try:
                validate_toml_text(config_text)
            except TomlParseError as e:
                raise ConfigError(f"Codex config of provider {provider_id} is invalid: {e}") from e

    def _read_config_text(self) -> str:
        if not self.config_path.exists():
            return ""
        return read_text_file(self.config_path)

    def read_live(self) -> Any:
        """Read auth.json and config.toml back into payload shape.

        Raises:
            ConfigError: If auth.json doesn't exist
            TomlParseError: If config.toml is not valid TOML
        """
        if not self.live_exists():
            raise ConfigError(f"Codex configuration missing: {self.auth_path} not found")

        auth = read_json_object(self.auth_path)
        config_text = self._read_config_text()
        validate_toml_text(config_text, self.config_path)
        return {"auth": auth, "config": config_text}

    def write_live(self, settings: Any) -> None:
        """Write auth.json, then config.toml.

        ABOUTME: config.toml text is validated before anything is written
        ABOUTME: If config.toml cannot be written, the previous auth.json is put back

        Raises:
            TomlParseError: If the config text is not valid TOML
            FileIOError: If a file cannot be written
        """
        auth = settings.get("auth") or {}
        config_text = settings.get("config") or ""
        validate_toml_text(config_text)

        previous_auth = read_text_file(self.auth_path) if self.auth_path.exists() else None
        write_json_file(self.auth_path, auth)
        try:
            write_text_file(self.config_path, config_text)
        except AppError:
            if previous_auth is not None:
                write_text_file(self.auth_path, previous_auth)
            else:
                delete_file(self.auth_path)
            raise

    def read_mcp_servers(self) -> dict[str, Any]:
        """Collect servers from [mcp_servers] and [mcp.servers].

        ABOUTME: The flat table wins when an id appears in both
        ABOUTME: Unknown server types are skipped
        """
        if not self.config_path.exists():
            return {}

        data = load_toml_values(self._read_config_text(), self.config_path)
        tables: dict[str, Any] = {}
        nested = data.get(NESTED_PARENT_KEY)
        if isinstance(nested, dict) and isinstance(nested.get(NESTED_TABLE_KEY), dict):
            tables.update(nested[NESTED_TABLE_KEY])
        if isinstance(data.get(FLAT_TABLE_KEY), dict):
            tables.update(data[FLAT_TABLE_KEY])

        servers: dict[str, Any] = {}
        for server_id, table in tables.items():
            if not isinstance(table, dict):
                logger.warning(f"Skipping Codex MCP server '{server_id}': not a table")
                continue
            try:
                spec = table_to_server_spec(server_id, table)
            except McpValidationError as e:
                logger.warning(f"Skipping invalid Codex MCP server '{server_id}': {e}")
                continue
            if spec is not None:
                servers[server_id] = spec
        return servers

    def write_mcp_servers(self, servers: dict[str, dict[str, Any]]) -> None:
        """Project the enabled servers into config.toml.

        Raises:
            TomlParseError: If config.toml exists but is not valid TOML (the file is left as is)
        """
        text = self._read_config_text()
        doc = parse_document(text, self.config_path)
        if not project_servers_into_document(doc, servers):
            logger.debug(f"MCP servers in {self.config_path} already up to date")
            return

        write_text_file(self.config_path, tomlkit.dumps(doc))
        logger.debug(f"Projected {len(servers)} MCP server(s) into {self.config_path}")
