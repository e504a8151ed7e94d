# MCP projection and server management
import copy
import logging
from typing import Any

from ccswitch.errors import InvalidInputError, McpValidationError
from ccswitch.models import AppType, ConfigRoot, LiveAdapter, McpConfig
from ccswitch.normalize import normalize_server_keys
from ccswitch.platforms import get_adapter
from ccswitch.settings import AppSettings
from ccswitch.store import ConfigStore
from ccswitch.utils.validation import validate_mcp_entry, validate_server_spec

logger = logging.getLogger(__name__)


def collect_enabled_servers(mcp: McpConfig) -> dict[str, dict[str, Any]]:
    """Return {id: server-spec} for enabled entries, sorted by id.

    ABOUTME: Entries without a server object are skipped
    """
    enabled: dict[str, dict[str, Any]] = {}
    for server_id in sorted(mcp.servers):
        entry = mcp.servers[server_id]
        if not isinstance(entry, dict) or entry.get("enabled") is not True:
            continue
        spec = entry.get("server")
        if not isinstance(spec, dict):
            logger.warning(f"MCP entry '{server_id}' has no server definition, skipping")
            continue
        enabled[server_id] = copy.deepcopy(spec)
    return enabled


def project_enabled(root: ConfigRoot, app: AppType, adapter: LiveAdapter) -> None:
    """Write the client's enabled server set into its live file.

    ABOUTME: Claude replaces mcpServers, Codex rebuilds one TOML table, Gemini does nothing
    """
    servers = collect_enabled_servers(root.mcp_for(app))
    adapter.write_mcp_servers(servers)


def import_from_live(root: ConfigRoot, app: AppType, adapter: LiveAdapter) -> int:
    """Pull server definitions found in the live file into the SSOT.

    ABOUTME: Invalid definitions are skipped with a warning; the batch continues
    ABOUTME: Known ids only get enabled = true; nothing else about them is overwritten
    ABOUTME: New ids become entries enabled for this client

    Returns:
        Number of entries created or changed
    """
    servers = root.mcp_for(app).servers
    changed = 0
    for server_id, spec in adapter.read_mcp_servers().items():
        try:
            validate_server_spec(spec)
        except McpValidationError as e:
            logger.warning(f"Skipping invalid MCP server '{server_id}': {e}")
            continue

        existing = servers.get(server_id)
        if isinstance(existing, dict):
            if existing.get("enabled") is not True:
                existing["enabled"] = True
                changed += 1
                logger.info(f"Enabled MCP server '{server_id}' for {app}")
            continue

        servers[server_id] = {
            "id": server_id,
            "name": server_id,
            "enabled": True,
            "server": spec,
        }
        changed += 1
        logger.info(f"Imported MCP server '{server_id}' from {adapter.name}")

    return changed


def _require_id(server_id: str) -> str:
    if not server_id.strip():
        raise InvalidInputError("MCP server id must not be empty")
    return server_id


class McpService:
    """MCP operations over one ConfigStore.

    ABOUTME: Every mutation runs under the store's write lock, live file I/O included
    ABOUTME: Changes are projected to the client's live file, then persisted
    """

    def __init__(self, store: ConfigStore, settings: AppSettings | None = None) -> None:
        self.store = store
        self.settings = settings or AppSettings()

    def adapter(self, app: AppType) -> LiveAdapter:
        return get_adapter(app, self.settings)

    def get_servers(self, app: AppType) -> dict[str, Any]:
        """Return a copy of the client's entries, repairing keys first."""
        with self.store.writing() as root:
            servers = root.mcp_for(app).servers
            if normalize_server_keys(servers):
                self.store.persist()
            return copy.deepcopy(servers)

    def upsert_server(self, app: AppType, server_id: str, entry: dict[str, Any]) -> bool:
        """Create or replace an entry and re-project.

        Returns:
            True if the entry was newly created

        Raises:
            InvalidInputError: If server_id is blank
            McpValidationError: If the entry is invalid or its id disagrees with server_id
        """
        _require_id(server_id)
        validate_mcp_entry(entry)

        value = copy.deepcopy(entry)
        if "id" in value:
            if not isinstance(value["id"], str):
                raise McpValidationError("MCP server id must be a string")
            if value["id"] != server_id:
                raise McpValidationError(
                    f"MCP entry id '{value['id']}' does not match the id argument '{server_id}'"
                )
        else:
            value["id"] = server_id

        with self.store.writing() as root:
            servers = root.mcp_for(app).servers
            normalize_server_keys(servers)
            created = server_id not in servers
            servers[server_id] = value
            project_enabled(root, app, self.adapter(app))
            self.store.persist()

        logger.info(f"{'Added' if created else 'Updated'} MCP server '{server_id}' for {app}")
        return created

    def delete_server(self, app: AppType, server_id: str) -> bool:
        """Remove an entry and re-project. Returns False if it did not exist."""
        _require_id(server_id)
        with self.store.writing() as root:
            servers = root.mcp_for(app).servers
            normalize_server_keys(servers)
            if servers.pop(server_id, None) is None:
                return False
            project_enabled(root, app, self.adapter(app))
            self.store.persist()
        logger.info(f"Deleted MCP server '{server_id}' for {app}")
        return True

    def set_enabled(self, app: AppType, server_id: str, enabled: bool) -> bool:
        """Toggle an entry for the client and re-project. Returns False if it did not exist."""
        _require_id(server_id)
        with self.store.writing() as root:
            servers = root.mcp_for(app).servers
            normalize_server_keys(servers)
            entry = servers.get(server_id)
            if entry is None:
                return False
            if not isinstance(entry, dict):
                raise McpValidationError(f"MCP entry '{server_id}' must be a JSON object")
            entry["enabled"] = enabled
            project_enabled(root, app, self.adapter(app))
            self.store.persist()
        return True

    def sync_enabled(self, app: AppType) -> None:
        """Re-project the enabled set without changing the SSOT (besides key repair)."""
        with self.store.writing() as root:
            repaired = normalize_server_keys(root.mcp_for(app).servers)
            project_enabled(root, app, self.adapter(app))
            if repaired:
                self.store.persist()

    def import_from_live(self, app: AppType) -> int:
        """Import definitions from the client's live file; persists only when something changed."""
        with self.store.writing() as root:
            repaired = normalize_server_keys(root.mcp_for(app).servers)
            changed = import_from_live(root, app, self.adapter(app))
            if changed or repaired:
                self.store.persist()
        return changed
