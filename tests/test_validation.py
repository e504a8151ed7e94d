# Tests for MCP server validation utilities
import pytest

from ccswitch.errors import McpValidationError
from ccswitch.utils.validation import validate_mcp_entry, validate_server_spec


class TestValidateServerSpec:
    """Tests for validate_server_spec function."""

    def test_valid_stdio(self):
        """A stdio spec with a command passes."""
        validate_server_spec({"type": "stdio", "command": "npx", "args": ["-y", "pkg"]})

    def test_missing_type_means_stdio(self):
        """Type defaults to stdio."""
        validate_server_spec({"command": "uvx"})
        with pytest.raises(McpValidationError, match="command"):
            validate_server_spec({"args": ["x"]})

    @pytest.mark.parametrize("command", ["", "   ", None, 42])
    def test_stdio_requires_non_blank_command(self, command):
        """Empty, blank or non-string commands are rejected."""
        with pytest.raises(McpValidationError, match="command"):
            validate_server_spec({"type": "stdio", "command": command})

    @pytest.mark.parametrize("server_type", ["http", "sse"])
    def test_url_types_require_url(self, server_type):
        """http and sse servers need a non-blank url."""
        validate_server_spec({"type": server_type, "url": "https://mcp.example.com"})
        with pytest.raises(McpValidationError, match="url"):
            validate_server_spec({"type": server_type, "url": "  "})

    def test_unknown_type_rejected(self):
        """Only stdio, http and sse are accepted."""
        with pytest.raises(McpValidationError, match="type"):
            validate_server_spec({"type": "websocket", "url": "ws://x"})

    @pytest.mark.parametrize("field, value", [
        ("args", "npx -y"),
        ("args", ["-y", 1]),
        ("env", ["A"]),
        ("env", {"PORT": 8080}),
        ("cwd", 3),
    ])
    def test_stdio_field_types(self, field, value):
        """args, env and cwd must have the right shape."""
        with pytest.raises(McpValidationError, match=field):
            validate_server_spec({"command": "npx", field: value})

    @pytest.mark.parametrize("headers", ["oops", ["A"], {"X-Retry": 3}])
    def test_headers_must_be_string_object(self, headers):
        """URL server headers must map strings to strings."""
        with pytest.raises(McpValidationError, match="headers"):
            validate_server_spec({"type": "http", "url": "https://x", "headers": headers})

    def test_non_object_rejected(self):
        """Specs must be JSON objects."""
        with pytest.raises(McpValidationError):
            validate_server_spec(["npx"])


class TestValidateMcpEntry:
    """Tests for validate_mcp_entry function."""

    def test_valid_entry(self):
        """A complete entry passes."""
        validate_mcp_entry({
            "id": "fetch",
            "name": "Fetch",
            "enabled": True,
            "server": {"type": "stdio", "command": "uvx", "args": ["mcp-server-fetch"]},
            "description": "Fetch web pages",
            "homepage": "https://example.com",
            "docs": "https://example.com/docs",
            "tags": ["web", "http"],
        })

    def test_server_required(self):
        """An entry without a server spec is rejected."""
        with pytest.raises(McpValidationError, match="server"):
            validate_mcp_entry({"id": "x", "enabled": True})

    def test_invalid_server_spec(self):
        """The embedded spec is validated too."""
        with pytest.raises(McpValidationError, match="command"):
            validate_mcp_entry({"server": {"type": "stdio", "command": ""}})

    def test_metadata_must_be_strings(self):
        """Display metadata must be strings."""
        with pytest.raises(McpValidationError, match="description"):
            validate_mcp_entry({"server": {"command": "x"}, "description": 1})

    def test_tags_must_be_string_list(self):
        """Tags must be a list of strings."""
        with pytest.raises(McpValidationError, match="tags"):
            validate_mcp_entry({"server": {"command": "x"}, "tags": "web"})
        with pytest.raises(McpValidationError, match="tags"):
            validate_mcp_entry({"server": {"command": "x"}, "tags": ["web", 1]})

    def test_enabled_must_be_bool(self):
        """enabled must be a boolean."""
        with pytest.raises(McpValidationError, match="enabled"):
            validate_mcp_entry({"server": {"command": "x"}, "enabled": "yes"})
