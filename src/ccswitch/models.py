# Core data models for ccswitch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

from ccswitch.errors import InvalidInputError

# ABOUTME: Client identifiers, also the SSOT partition keys
AppType = Literal["claude", "codex", "gemini"]
APP_TYPES: tuple[AppType, ...] = ("claude", "codex", "gemini")

# ABOUTME: The only SSOT schema generation accepted on load
CURRENT_VERSION = 2

ServerType = Literal["stdio", "http", "sse"]


def parse_app_type(value: str) -> AppType:
    """Normalize a client identifier.

    ABOUTME: Case-insensitive, surrounding whitespace ignored

    Raises:
        InvalidInputError: If the identifier is not a known client
    """
    normalized = value.strip().lower()
    for app in APP_TYPES:
        if normalized == app:
            return app
    raise InvalidInputError(
        f"Unsupported app id: '{normalized}'. Allowed: {', '.join(APP_TYPES)}."
    )


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _string_map(value: Any) -> dict[str, str]:
    """Keep only the string entries of an object; anything else yields {}."""
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str)}


@dataclass(frozen=True)
class MCPServer:
    """Typed view of one MCP server-spec.

    ABOUTME: Uses frozen dataclass to prevent accidental mutation
    ABOUTME: Fields beyond the core ones travel in `extra` so nothing is lost
    ABOUTME: Supports stdio and URL-based (http/sse) server types
    """
    name: str
    type: ServerType
    command: str | None = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
    url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_spec(cls, name: str, spec: dict[str, Any]) -> "MCPServer":
        """Build from a JSON server-spec; a missing type means stdio."""
        server_type = spec.get("type") or "stdio"
        core = {"type", "command", "args", "env", "cwd", "url", "headers"}
        return cls(
            name=name,
            type=server_type,
            command=_text(spec.get("command")),
            args=[a for a in _list(spec.get("args")) if isinstance(a, str)],
            env=_string_map(spec.get("env")),
            cwd=_text(spec.get("cwd")),
            url=_text(spec.get("url")),
            headers=_string_map(spec.get("headers")),
            extra={k: v for k, v in spec.items() if k not in core},
        )

    def to_spec(self) -> dict[str, Any]:
        """Convert back to the JSON server-spec shape, omitting empty fields."""
        spec: dict[str, Any] = {"type": self.type}
        if self.type == "stdio":
            spec["command"] = self.command or ""
            if self.args:
                spec["args"] = list(self.args)
            if self.cwd:
                spec["cwd"] = self.cwd
            if self.env:
                spec["env"] = dict(self.env)
        else:
            spec["url"] = self.url or ""
            if self.headers:
                spec["headers"] = dict(self.headers)
        for key, value in self.extra.items():
            spec.setdefault(key, value)
        return spec


@dataclass
class CustomEndpoint:
    """A previously used endpoint URL with first-seen/last-used times (ms)."""
    url: str
    added_at: int
    last_used: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomEndpoint":
        return cls(
            url=data.get("url", ""),
            added_at=int(data.get("addedAt", 0)),
            last_used=data.get("lastUsed"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"url": self.url, "addedAt": self.added_at}
        if self.last_used is not None:
            result["lastUsed"] = self.last_used
        return result


@dataclass
class ProviderMeta:
    custom_endpoints: dict[str, CustomEndpoint] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderMeta":
        endpoints = {
            url: CustomEndpoint.from_dict(ep)
            for url, ep in (data.get("custom_endpoints") or {}).items()
        }
        extra = {k: v for k, v in data.items() if k != "custom_endpoints"}
        return cls(custom_endpoints=endpoints, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.extra)
        if self.custom_endpoints:
            result["custom_endpoints"] = {
                url: ep.to_dict() for url, ep in self.custom_endpoints.items()
            }
        return result


# ABOUTME: SSOT field names for Provider attributes (camelCase on disk)
_PROVIDER_FIELDS = {
    "website_url": "websiteUrl",
    "category": "category",
    "created_at": "createdAt",
    "sort_index": "sortIndex",
    "notes": "notes",
}


@dataclass
class Provider:
    """A named bundle of credentials/endpoint settings for one client.

    ABOUTME: settings_config is schemaless; its shape is checked only when written live
    ABOUTME: Unknown SSOT keys are kept in `extra` for forward compatibility
    """
    id: str
    name: str
    settings_config: Any = field(default_factory=dict)
    website_url: str | None = None
    category: str | None = None
    created_at: int | None = None
    sort_index: int | None = None
    notes: str | None = None
    meta: ProviderMeta | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, provider_id: str, data: dict[str, Any]) -> "Provider":
        known = {"id", "name", "settingsConfig", "meta", *_PROVIDER_FIELDS.values()}
        meta = data.get("meta")
        return cls(
            id=data.get("id") or provider_id,
            name=data.get("name") or provider_id,
            settings_config=data.get("settingsConfig", {}),
            website_url=data.get("websiteUrl"),
            category=data.get("category"),
            created_at=data.get("createdAt"),
            sort_index=data.get("sortIndex"),
            notes=data.get("notes"),
            meta=ProviderMeta.from_dict(meta) if isinstance(meta, dict) else None,
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "settingsConfig": self.settings_config,
        }
        for attr, key in _PROVIDER_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        if self.meta is not None:
            result["meta"] = self.meta.to_dict()
        for key, value in self.extra.items():
            result.setdefault(key, value)
        return result


@dataclass
class ProviderManager:
    """Providers of one client plus the id of the selected one ("" = none)."""
    current: str = ""
    providers: dict[str, Provider] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderManager":
        providers = {
            pid: Provider.from_dict(pid, pdata)
            for pid, pdata in (data.get("providers") or {}).items()
            if isinstance(pdata, dict)
        }
        return cls(current=data.get("current") or "", providers=providers)

    def to_dict(self) -> dict[str, Any]:
        return {
            "providers": {pid: p.to_dict() for pid, p in self.providers.items()},
            "current": self.current,
        }


@dataclass
class McpConfig:
    """MCP server entries of one client, keyed by server id.

    ABOUTME: Entries stay raw JSON objects; Normalization Repair fixes id/key drift
    """
    servers: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "McpConfig":
        return cls(servers=dict(data.get("servers") or {}))

    def to_dict(self) -> dict[str, Any]:
        return {"servers": self.servers}


@dataclass
class McpRoot:
    claude: McpConfig = field(default_factory=McpConfig)
    codex: McpConfig = field(default_factory=McpConfig)
    gemini: McpConfig = field(default_factory=McpConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "McpRoot":
        def part(app: str) -> McpConfig:
            value = data.get(app)
            return McpConfig.from_dict(value) if isinstance(value, dict) else McpConfig()

        return cls(
            claude=part("claude"),
            codex=part("codex"),
            gemini=part("gemini"),
            extra={k: v for k, v in data.items() if k not in APP_TYPES},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {app: getattr(self, app).to_dict() for app in APP_TYPES}
        for key, value in self.extra.items():
            result.setdefault(key, value)
        return result


def _default_apps() -> dict[str, ProviderManager]:
    return {app: ProviderManager() for app in APP_TYPES}


@dataclass
class ConfigRoot:
    """The SSOT document.

    ABOUTME: One ProviderManager per client plus the per-client MCP partition
    ABOUTME: Top-level keys this engine does not own are preserved in `extra`
    """
    version: int = CURRENT_VERSION
    apps: dict[str, ProviderManager] = field(default_factory=_default_apps)
    mcp: McpRoot = field(default_factory=McpRoot)
    extra: dict[str, Any] = field(default_factory=dict)

    def get_manager(self, app: AppType) -> ProviderManager:
        """Return the client's manager, creating an empty one if missing."""
        if app not in self.apps:
            self.apps[app] = ProviderManager()
        return self.apps[app]

    def mcp_for(self, app: AppType) -> McpConfig:
        return getattr(self.mcp, app)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfigRoot":
        apps = _default_apps()
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in ("version", "mcp"):
                continue
            if key in APP_TYPES and isinstance(value, dict):
                apps[key] = ProviderManager.from_dict(value)
            else:
                extra[key] = value
        mcp = data.get("mcp")
        return cls(
            version=int(data.get("version", CURRENT_VERSION)),
            apps=apps,
            mcp=McpRoot.from_dict(mcp) if isinstance(mcp, dict) else McpRoot(),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"version": self.version}
        for app, manager in self.apps.items():
            result[app] = manager.to_dict()
        result["mcp"] = self.mcp.to_dict()
        for key, value in self.extra.items():
            result.setdefault(key, value)
        return result


@runtime_checkable
class LiveAdapter(Protocol):
    """Protocol for per-client live file codecs.

    ABOUTME: Defines interface all platform adapters must implement
    ABOUTME: Uses @runtime_checkable for isinstance() support
    """

    @property
    def app(self) -> AppType:
        """Client identifier this adapter serves."""
        ...

    @property
    def name(self) -> str:
        """Human-readable platform name."""
        ...

    @property
    def live_paths(self) -> list[Path]:
        """Files that together form the provider live configuration."""
        ...

    def live_exists(self) -> bool:
        """Whether the provider live configuration is present on disk."""
        ...

    def validate_settings(self, provider_id: str, settings: Any) -> None:
        """Check a settings payload against this client's shape contract."""
        ...

    def read_live(self) -> Any:
        """Read the live configuration back in settings-payload shape."""
        ...

    def write_live(self, settings: Any) -> None:
        """Replace the live configuration with a settings payload."""
        ...

    def read_mcp_servers(self) -> dict[str, Any]:
        """Load server definitions currently present in the live file."""
        ...

    def write_mcp_servers(self, servers: dict[str, dict[str, Any]]) -> None:
        """Project the enabled server set into the live file."""
        ...
