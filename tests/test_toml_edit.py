# Tests for TOML helpers (tomlkit document editing, tomli validation)
import pytest
import tomlkit

from ccswitch.errors import McpValidationError, TomlParseError
from ccswitch.utils.toml_edit import (
    parse_document,
    server_spec_to_table,
    table_to_server_spec,
    validate_toml_text,
)


def _render(server_id: str, spec: dict) -> str:
    doc = tomlkit.document()
    servers = tomlkit.table(is_super_table=True)
    servers.add(server_id, server_spec_to_table(server_id, spec))
    doc.add("mcp_servers", servers)
    return tomlkit.dumps(doc)


def test_stdio_table_fields() -> None:
    """stdio servers get type, command, args, cwd and an inline env table."""
    content = _render("github", {
        "type": "stdio",
        "command": "npx",
        "args": ["-y", "@modelcontextprotocol/server-github"],
        "cwd": "/work",
        "env": {"GITHUB_TOKEN": "ghp_xxxx"},
    })

    assert "[mcp_servers.github]" in content
    assert 'type = "stdio"' in content
    assert 'command = "npx"' in content
    assert 'args = ["-y", "@modelcontextprotocol/server-github"]' in content
    assert 'cwd = "/work"' in content
    assert 'env = {GITHUB_TOKEN = "ghp_xxxx"}' in content


def test_http_table_uses_http_headers() -> None:
    """URL servers write headers as http_headers."""
    content = _render("remote", {
        "type": "http",
        "url": "https://mcp.example.com",
        "headers": {"Authorization": "Bearer t"},
    })

    assert 'url = "https://mcp.example.com"' in content
    assert 'http_headers = {Authorization = "Bearer t"}' in content
    assert "command" not in content


def test_missing_type_defaults_to_stdio() -> None:
    """A spec without type is written as stdio."""
    table = server_spec_to_table("x", {"command": "uvx"})
    assert table["type"] == "stdio"


def test_extra_fields_carried() -> None:
    """Scalar, array and string-map extras survive; unsupported ones are dropped."""
    table = server_spec_to_table("x", {
        "command": "uvx",
        "startup_timeout_sec": 30,
        "enabled_tools": ["read", "write"],
        "nested": {"a": {"b": 1}},
        "nothing": None,
    })
    plain = table.unwrap()

    assert plain["startup_timeout_sec"] == 30
    assert plain["enabled_tools"] == ["read", "write"]
    assert "nested" not in plain
    assert "nothing" not in plain


def test_table_to_spec_stdio() -> None:
    """Plain TOML tables convert back to JSON specs."""
    spec = table_to_server_spec("fs", {
        "command": "npx",
        "args": ["-y", "server-filesystem"],
        "env": {"ROOT": "/projects"},
    })
    assert spec == {
        "type": "stdio",
        "command": "npx",
        "args": ["-y", "server-filesystem"],
        "env": {"ROOT": "/projects"},
    }


def test_table_to_spec_accepts_headers_alias() -> None:
    """Both http_headers and headers are read."""
    assert table_to_server_spec("a", {"type": "http", "url": "u", "http_headers": {"K": "v"}}) == {
        "type": "http", "url": "u", "headers": {"K": "v"},
    }
    assert table_to_server_spec("b", {"type": "sse", "url": "u", "headers": {"K": "v"}}) == {
        "type": "sse", "url": "u", "headers": {"K": "v"},
    }


def test_table_to_spec_unknown_type() -> None:
    """Unknown types are skipped."""
    assert table_to_server_spec("x", {"type": "grpc", "url": "u"}) is None


def test_validate_toml_text() -> None:
    """Valid and empty TOML pass; broken TOML raises TomlParseError."""
    validate_toml_text('model = "gpt-5"\n')
    validate_toml_text("")
    with pytest.raises(TomlParseError):
        validate_toml_text("model = ")


def test_parse_document_preserves_comments() -> None:
    """Documents round-trip byte-for-byte."""
    text = '# my settings\nmodel = "gpt-5"  # inline\n\n[profiles.fast]\nmodel = "o4-mini"\n'
    assert tomlkit.dumps(parse_document(text)) == text


def test_parse_document_invalid() -> None:
    """Invalid TOML is a hard error."""
    with pytest.raises(TomlParseError):
        parse_document("[unclosed")


@pytest.mark.parametrize("table", [
    {"command": "x", "env": "oops"},
    {"command": "x", "args": "-y"},
    {"type": "http", "url": "u", "http_headers": "oops"},
    {"type": "sse", "url": "u", "headers": ["K"]},
])
def test_table_to_spec_wrong_typed_fields(table) -> None:
    """Hand-edited tables with wrongly typed core fields are rejected."""
    with pytest.raises(McpValidationError):
        table_to_server_spec("bad", table)
