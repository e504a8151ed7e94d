# Claude Code platform adapter
import copy
import logging
from pathlib import Path
from typing import Any

from ccswitch.errors import ConfigError
from ccswitch.models import AppType
from ccswitch.platforms.base import read_json_object, read_mcp_servers_block, write_mcp_servers_block
from ccswitch.settings import AppSettings
from ccswitch.utils.fileio import write_json_file

logger = logging.getLogger(__name__)

# ABOUTME: Retired env key folded into the per-tier model keys on write
LEGACY_SMALL_FAST_KEY = "ANTHROPIC_SMALL_FAST_MODEL"
MODEL_KEY = "ANTHROPIC_MODEL"
HAIKU_KEY = "ANTHROPIC_DEFAULT_HAIKU_MODEL"
SONNET_KEY = "ANTHROPIC_DEFAULT_SONNET_MODEL"
OPUS_KEY = "ANTHROPIC_DEFAULT_OPUS_MODEL"


def normalize_claude_models(settings: Any) -> bool:
    """Fold the legacy small/fast model key into the per-tier keys, in place.

    ABOUTME: Existing tier keys always win
    ABOUTME: Haiku falls back to small/fast then ANTHROPIC_MODEL; Sonnet/Opus the other way round
    ABOUTME: The legacy key is removed afterwards

    Returns:
        True if the payload changed

    Examples:
        >>> s = {"env": {"ANTHROPIC_SMALL_FAST_MODEL": "haiku-x"}}
        >>> normalize_claude_models(s)
        True
        >>> sorted(s["env"])
        ['ANTHROPIC_DEFAULT_HAIKU_MODEL', 'ANTHROPIC_DEFAULT_OPUS_MODEL', 'ANTHROPIC_DEFAULT_SONNET_MODEL']
    """
    if not isinstance(settings, dict):
        return False
    env = settings.get("env")
    if not isinstance(env, dict):
        return False

    def text(key: str) -> str | None:
        value = env.get(key)
        return value if isinstance(value, str) else None

    model = text(MODEL_KEY)
    small_fast = text(LEGACY_SMALL_FAST_KEY)
    fallbacks = {
        HAIKU_KEY: (small_fast, model),
        SONNET_KEY: (model, small_fast),
        OPUS_KEY: (model, small_fast),
    }

    changed = False
    for key, candidates in fallbacks.items():
        if key in env:
            continue
        value = next((c for c in candidates if c is not None), None)
        if value is not None:
            env[key] = value
            changed = True

    if LEGACY_SMALL_FAST_KEY in env:
        del env[LEGACY_SMALL_FAST_KEY]
        changed = True

    return changed


class ClaudeAdapter:
    """Adapter for Claude Code.

    ABOUTME: Provider live file is ~/.claude/settings.json, owned wholesale on switch
    ABOUTME: MCP live file is ~/.claude.json; only its mcpServers key is touched
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    @property
    def app(self) -> AppType:
        return "claude"

    @property
    def name(self) -> str:
        """Human-readable platform name."""
        return "Claude Code"

    @property
    def settings_path(self) -> Path:
        return self._settings.claude_settings_path

    @property
    def mcp_path(self) -> Path:
        return self._settings.claude_mcp_path

    @property
    def live_paths(self) -> list[Path]:
        return [self.settings_path]

    def live_exists(self) -> bool:
        return self.settings_path.exists()

    def validate_settings(self, provider_id: str, settings: Any) -> None:
        """Claude settings must be a JSON object.

        Raises:
            ConfigError: If the payload is not an object
        """
        if not isinstance(settings, dict):
            raise ConfigError(f"Claude configuration of provider {provider_id} must be a JSON object")

    def read_live(self) -> Any:
        """Read settings.json exactly as stored on disk.

        Raises:
            ConfigError: If the file doesn't exist
        """
        if not self.live_exists():
            raise ConfigError(f"Claude settings file is missing: {self.settings_path}")
        return read_json_object(self.settings_path)

    def write_live(self, settings: Any) -> None:
        """Overwrite settings.json with the payload.

        ABOUTME: Model keys are normalized on a copy; the caller's payload is not touched
        ABOUTME: Keys are sorted, so the read-back may differ in ordering from the payload
        """
        payload = copy.deepcopy(settings)
        if normalize_claude_models(payload):
            logger.debug("Normalized Claude model keys before writing settings.json")
        write_json_file(self.settings_path, payload, sort_keys=True)

    def read_mcp_servers(self) -> dict[str, Any]:
        """Return the mcpServers map of ~/.claude.json."""
        return read_mcp_servers_block(self.mcp_path)

    def write_mcp_servers(self, servers: dict[str, dict[str, Any]]) -> None:
        """Replace mcpServers in ~/.claude.json with the enabled set."""
        if write_mcp_servers_block(self.mcp_path, servers):
            logger.debug(f"Projected {len(servers)} MCP server(s) into {self.mcp_path}")
