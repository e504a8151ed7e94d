# ABOUTME: Validation utilities for MCP server entries and server-specs
# ABOUTME: Same checks apply to new entries and to definitions imported from live files
from typing import Any

from ccswitch.errors import McpValidationError

# ABOUTME: Server types that connect by URL rather than by spawning a process
URL_SERVER_TYPES = ("http", "sse")

# ABOUTME: Optional display metadata that must be strings when present
ENTRY_STRING_FIELDS = ("name", "description", "homepage", "docs")


def _check_string_map(spec: dict[str, Any], key: str) -> None:
    value = spec.get(key)
    if value is None:
        return
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        raise McpValidationError(f"MCP server {key} must be an object of strings")


def validate_server_spec(spec: Any) -> None:
    """Validate one MCP server-spec.

    ABOUTME: A missing type means stdio
    ABOUTME: stdio requires a non-blank command, http/sse a non-blank url
    ABOUTME: args must be a list of strings; env and headers objects of strings

    Args:
        spec: Server-spec as stored in the SSOT or read from a live file

    Raises:
        McpValidationError: If the spec is unusable

    Examples:
        >>> validate_server_spec({"type": "stdio", "command": "npx"})
        >>> validate_server_spec({"type": "http", "url": ""})
        Traceback (most recent call last):
        ...
        ccswitch.errors.McpValidationError: http MCP server is missing the url field
    """
    if not isinstance(spec, dict):
        raise McpValidationError("MCP server definition must be a JSON object")

    server_type = spec.get("type", "stdio")
    if server_type == "stdio":
        command = spec.get("command")
        if not isinstance(command, str) or not command.strip():
            raise McpValidationError("stdio MCP server is missing the command field")
        args = spec.get("args")
        if args is not None and (
            not isinstance(args, list) or not all(isinstance(a, str) for a in args)
        ):
            raise McpValidationError("MCP server args must be a list of strings")
        cwd = spec.get("cwd")
        if cwd is not None and not isinstance(cwd, str):
            raise McpValidationError("MCP server cwd must be a string")
        _check_string_map(spec, "env")
    elif server_type in URL_SERVER_TYPES:
        url = spec.get("url")
        if not isinstance(url, str) or not url.strip():
            raise McpValidationError(f"{server_type} MCP server is missing the url field")
        _check_string_map(spec, "headers")
    else:
        raise McpValidationError(
            f"MCP server type must be 'stdio', 'http' or 'sse' (got {server_type!r})"
        )


def validate_mcp_entry(entry: Any) -> None:
    """Validate a full SSOT server entry (spec plus display metadata).

    Raises:
        McpValidationError: On the first problem found
    """
    if not isinstance(entry, dict):
        raise McpValidationError("MCP server entry must be a JSON object")

    if "server" not in entry:
        raise McpValidationError("MCP server entry is missing the server field")
    validate_server_spec(entry["server"])

    for key in ENTRY_STRING_FIELDS:
        if key in entry and not isinstance(entry[key], str):
            raise McpValidationError(f"MCP server {key} must be a string")

    tags = entry.get("tags")
    if tags is not None:
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise McpValidationError("MCP server tags must be a list of strings")

    if "enabled" in entry and not isinstance(entry["enabled"], bool):
        raise McpValidationError("MCP server enabled must be a boolean")
