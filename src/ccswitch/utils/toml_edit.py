# TOML helpers for the Codex config.toml
import logging
from pathlib import Path
from typing import Any

import tomli
import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Table

from ccswitch.errors import McpValidationError, TomlParseError
from ccswitch.models import MCPServer

logger = logging.getLogger(__name__)

# ABOUTME: Keys written explicitly per server type; everything else is carried as an extra field
STDIO_CORE_FIELDS = ("type", "command", "args", "env", "cwd")
URL_CORE_FIELDS = ("type", "url", "http_headers", "headers")


def validate_toml_text(text: str, path: Path | None = None) -> None:
    """Check that text parses as TOML.

    ABOUTME: Uses tomli for a strict, read-only parse
    ABOUTME: Empty text is valid (an empty config.toml)

    Raises:
        TomlParseError: If the text is not valid TOML
    """
    if not text.strip():
        return
    try:
        tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise TomlParseError(path, e) from e


def load_toml_values(text: str, path: Path | None = None) -> dict[str, Any]:
    """Parse TOML into plain Python values (no layout information)."""
    if not text.strip():
        return {}
    try:
        return tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise TomlParseError(path, e) from e


def parse_document(text: str, path: Path | None = None) -> tomlkit.TOMLDocument:
    """Parse TOML into a format-preserving document.

    ABOUTME: Comments, whitespace and key order survive a parse/dumps round trip
    ABOUTME: Invalid TOML is a hard error; callers must not overwrite such a file

    Raises:
        TomlParseError: If the text is not valid TOML
    """
    if not text.strip():
        return tomlkit.document()
    try:
        return tomlkit.parse(text)
    except TOMLKitError as e:
        raise TomlParseError(path, e) from e


def _to_toml_value(value: Any, field_name: str) -> Any | None:
    """Convert an extra JSON field to something TOML can hold.

    ABOUTME: Scalars pass through, scalar lists become arrays, string maps inline tables
    ABOUTME: null, nested structures and mixed lists are skipped with a log line
    """
    if isinstance(value, (str, bool, int, float)):
        return value

    if isinstance(value, list):
        if value and all(isinstance(v, (str, bool, int, float)) for v in value):
            return tomlkit.item(list(value))
        logger.warning(f"Skipping field '{field_name}': unsupported array contents")
        return None

    if isinstance(value, dict):
        if value and all(isinstance(v, str) for v in value.values()):
            inline = tomlkit.inline_table()
            inline.update(value)
            return inline
        logger.warning(f"Skipping field '{field_name}': object values must all be strings")
        return None

    logger.debug(f"Skipping field '{field_name}': TOML has no null")
    return None


def _string_map(data: dict[str, str]) -> Any:
    inline = tomlkit.inline_table()
    inline.update(data)
    return inline


def server_spec_to_table(server_id: str, spec: dict[str, Any]) -> Table:
    """Convert a JSON server-spec to a Codex [mcp_servers.<id>] table.

    ABOUTME: stdio -> type, command, args, cwd, env
    ABOUTME: http/sse -> type, url, http_headers
    ABOUTME: Extra fields are carried through when TOML can represent them

    Example output:
        [mcp_servers.github]
        type = "stdio"
        command = "npx"
        args = ["-y", "@modelcontextprotocol/server-github"]
        env = { GITHUB_TOKEN = "ghp_xxxx" }
    """
    server = MCPServer.from_spec(server_id, spec)
    table = tomlkit.table()
    table.add("type", server.type)

    if server.type == "stdio":
        core_fields = STDIO_CORE_FIELDS
        table.add("command", server.command or "")
        if server.args:
            table.add("args", tomlkit.item(list(server.args)))
        if server.cwd and server.cwd.strip():
            table.add("cwd", server.cwd)
        if server.env:
            table.add("env", _string_map(server.env))
    else:
        core_fields = URL_CORE_FIELDS
        table.add("url", server.url or "")
        if server.headers:
            table.add("http_headers", _string_map(server.headers))

    for key, value in server.extra.items():
        if key in core_fields:
            continue
        converted = _to_toml_value(value, key)
        if converted is not None:
            table.add(key, converted)

    return table


def _array_field(server_id: str, table: dict[str, Any], key: str) -> list[Any]:
    value = table.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise McpValidationError(f"Codex MCP server '{server_id}': {key} must be an array")
    return value


def _table_field(server_id: str, table: dict[str, Any], key: str) -> dict[str, Any]:
    value = table.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise McpValidationError(f"Codex MCP server '{server_id}': {key} must be a table")
    return value


def table_to_server_spec(server_id: str, table: dict[str, Any]) -> dict[str, Any] | None:
    """Convert a plain (tomli-parsed) Codex server table to a JSON server-spec.

    ABOUTME: Accepts `headers` as an alias of `http_headers`
    ABOUTME: Returns None for unknown server types

    Raises:
        McpValidationError: If args is not an array or env/headers is not a table
    """
    server_type = table.get("type", "stdio")

    if server_type == "stdio":
        core_fields = STDIO_CORE_FIELDS
        spec: dict[str, Any] = {"type": "stdio"}
        if isinstance(table.get("command"), str):
            spec["command"] = table["command"]
        args = [a for a in _array_field(server_id, table, "args") if isinstance(a, str)]
        if args:
            spec["args"] = args
        cwd = table.get("cwd")
        if isinstance(cwd, str) and cwd.strip():
            spec["cwd"] = cwd
        env = {k: v for k, v in _table_field(server_id, table, "env").items() if isinstance(v, str)}
        if env:
            spec["env"] = env
    elif server_type in ("http", "sse"):
        core_fields = URL_CORE_FIELDS
        spec = {"type": server_type}
        if isinstance(table.get("url"), str):
            spec["url"] = table["url"]
        header_key = "http_headers" if "http_headers" in table else "headers"
        raw_headers = _table_field(server_id, table, header_key)
        headers = {k: v for k, v in raw_headers.items() if isinstance(v, str)}
        if headers:
            spec["headers"] = headers
    else:
        logger.warning(f"Skipping Codex MCP server '{server_id}' with unknown type '{server_type}'")
        return None

    for key, value in table.items():
        if key in core_fields:
            continue
        if isinstance(value, (str, bool, int, float)):
            spec[key] = value
        elif isinstance(value, list) and all(isinstance(v, (str, bool, int, float)) for v in value):
            spec[key] = list(value)
        elif isinstance(value, dict) and all(isinstance(v, str) for v in value.values()):
            spec[key] = dict(value)
        else:
            logger.debug(f"Skipping field '{key}' of Codex MCP server '{server_id}'")

    return spec
