# ABOUTME: Tests for the ccswitch command line
# ABOUTME: Commands run in-process against a temporary home and config directory
import json
import subprocess
import sys
from pathlib import Path

import pytest

from ccswitch.cli import EXIT_CONFIG_ERROR, EXIT_FATAL, EXIT_PARTIAL, EXIT_SUCCESS, main

CONFIG = {
    "version": 2,
    "claude": {
        "providers": {
            "work": {"id": "work", "name": "Work", "settingsConfig": {"env": {"ANTHROPIC_AUTH_TOKEN": "w"}}},
            "home": {"id": "home", "name": "Home", "settingsConfig": {"env": {"ANTHROPIC_AUTH_TOKEN": "h"}},
                     "sortIndex": 0},
        },
        "current": "work",
    },
    "codex": {"providers": {}, "current": ""},
    "gemini": {"providers": {}, "current": ""},
    "mcp": {"claude": {"servers": {
        "fetch": {"id": "fetch", "enabled": False, "server": {"type": "stdio", "command": "uvx"}},
    }}},
}


@pytest.fixture
def config_dir(tmp_path: Path, home: Path, monkeypatch) -> Path:
    """Config directory seeded with two Claude providers; HOME points at the temp home."""
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("CC_SWITCH_CONFIG_DIR", raising=False)
    path = tmp_path / "cc-switch"
    path.mkdir()
    (path / "config.json").write_text(json.dumps(CONFIG))
    return path


def run(config_dir: Path, *args: str) -> int:
    return main(["--config-dir", str(config_dir), *args])


def test_no_command_prints_help(capsys):
    """Without a command the help text is shown."""
    assert main([]) == EXIT_SUCCESS
    assert "usage" in capsys.readouterr().out.lower()


def test_providers_lists_and_marks_current(config_dir: Path, capsys):
    """Providers are ordered by sort index and the current one is starred."""
    assert run(config_dir, "providers", "claude") == EXIT_SUCCESS

    out = capsys.readouterr().out
    assert out.index("home") < out.index("work")
    assert "* work  (Work)" in out
    assert "Total: 2 provider(s)" in out


def test_providers_empty(config_dir: Path, capsys):
    assert run(config_dir, "providers", "codex") == EXIT_SUCCESS
    assert "No codex providers configured" in capsys.readouterr().out


def test_current_accepts_any_case(config_dir: Path, capsys):
    """App ids are case-insensitive."""
    assert run(config_dir, "current", " Claude ") == EXIT_SUCCESS
    assert capsys.readouterr().out.strip() == "work"


def test_unknown_app(config_dir: Path, capsys):
    """An unsupported app id is a config error."""
    assert run(config_dir, "current", "cursor") == EXIT_CONFIG_ERROR
    assert "Unsupported app id" in capsys.readouterr().out


def test_switch(config_dir: Path, home: Path):
    """switch writes the live file and persists the new current provider."""
    assert run(config_dir, "switch", "claude", "home") == EXIT_SUCCESS

    live = json.loads((home / ".claude" / "settings.json").read_text())
    assert live == {"env": {"ANTHROPIC_AUTH_TOKEN": "h"}}
    data = json.loads((config_dir / "config.json").read_text())
    assert data["claude"]["current"] == "home"
    assert len(list((config_dir / "backups").iterdir())) == 1


def test_switch_unknown_provider(config_dir: Path, capsys):
    """Unknown providers exit with a config error."""
    assert run(config_dir, "switch", "claude", "ghost") == EXIT_CONFIG_ERROR
    assert "Provider not found: ghost" in capsys.readouterr().out


def test_legacy_config_rejected(config_dir: Path, capsys):
    """A v1 config file is refused with remediation steps."""
    (config_dir / "config.json").write_text(json.dumps({"providers": {}, "current": ""}))

    assert run(config_dir, "providers", "claude") == EXIT_CONFIG_ERROR
    assert "legacy v1 config" in capsys.readouterr().out


def test_mcp_enable_and_list(config_dir: Path, home: Path, capsys):
    """enable projects the server into ~/.claude.json; list shows its state."""
    assert run(config_dir, "mcp", "enable", "claude", "fetch") == EXIT_SUCCESS
    assert json.loads((home / ".claude.json").read_text())["mcpServers"] == {
        "fetch": {"type": "stdio", "command": "uvx"}
    }

    capsys.readouterr()
    assert run(config_dir, "mcp", "list", "claude") == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "fetch [enabled]" in out
    assert "command: uvx" in out


def test_mcp_disable_unknown(config_dir: Path, capsys):
    assert run(config_dir, "mcp", "disable", "claude", "nope") == EXIT_CONFIG_ERROR
    assert "not found" in capsys.readouterr().out


def test_mcp_sync_all(config_dir: Path, capsys):
    """Syncing every client reports each one."""
    assert run(config_dir, "mcp", "sync") == EXIT_SUCCESS

    out = capsys.readouterr().out
    assert "Sync complete: 3/3 clients updated" in out


def test_mcp_sync_partial_failure(config_dir: Path, home: Path, capsys):
    """One broken live file gives a partial-success exit code."""
    codex_dir = home / ".codex"
    codex_dir.mkdir()
    (codex_dir / "config.toml").write_text("[broken")
    config = dict(CONFIG)
    config["mcp"] = {"codex": {"servers": {
        "fetch": {"id": "fetch", "enabled": True, "server": {"type": "stdio", "command": "uvx"}},
    }}}
    (config_dir / "config.json").write_text(json.dumps(config))

    assert run(config_dir, "mcp", "sync") == EXIT_PARTIAL
    assert "codex - failed" in capsys.readouterr().out


def test_mcp_import(config_dir: Path, home: Path, capsys):
    """Servers found in the live file are imported."""
    (home / ".claude.json").write_text(json.dumps({"mcpServers": {
        "remote": {"type": "http", "url": "https://mcp.example.com"},
    }}))

    assert run(config_dir, "mcp", "import", "claude") == EXIT_SUCCESS
    assert "Imported 1 MCP server change(s) from claude" in capsys.readouterr().out

    data = json.loads((config_dir / "config.json").read_text())
    assert data["mcp"]["claude"]["servers"]["remote"]["enabled"] is True


def test_import_live(tmp_path: Path, home: Path, monkeypatch, capsys):
    """import-live seeds a 'default' provider from settings.json."""
    monkeypatch.setenv("HOME", str(home))
    (home / ".claude").mkdir()
    (home / ".claude" / "settings.json").write_text(json.dumps({"env": {"K": "v"}}))
    config_dir = tmp_path / "fresh"

    assert run(config_dir, "import-live", "claude") == EXIT_SUCCESS
    data = json.loads((config_dir / "config.json").read_text())
    assert data["claude"]["current"] == "default"


def test_import_live_missing_file(tmp_path: Path, home: Path, monkeypatch, capsys):
    """No live file to import from is an error."""
    monkeypatch.setenv("HOME", str(home))

    assert run(tmp_path / "fresh", "import-live", "codex") == EXIT_CONFIG_ERROR
    assert "auth.json" in capsys.readouterr().out


def test_export_import_and_backup(config_dir: Path, tmp_path: Path, capsys):
    """Export, re-import and manual backups round through the CLI."""
    exported = tmp_path / "exported.json"
    assert run(config_dir, "export", str(exported)) == EXIT_SUCCESS
    assert json.loads(exported.read_text())["claude"]["current"] == "work"

    assert run(config_dir, "import", str(exported)) == EXIT_SUCCESS
    assert "Previous config backed up as backup_" in capsys.readouterr().out

    assert run(config_dir, "backup") == EXIT_SUCCESS
    assert "Created backup backup_" in capsys.readouterr().out
    assert len(list((config_dir / "backups").iterdir())) == 2


def test_paths(config_dir: Path, home: Path, capsys):
    """Every client's live files are listed with an existence marker."""
    (home / ".gemini").mkdir()
    (home / ".gemini" / ".env").write_text("GEMINI_API_KEY=k\n")

    assert run(config_dir, "paths") == EXIT_SUCCESS

    out = capsys.readouterr().out
    assert f"Config: {config_dir / 'config.json'}" in out
    assert "Codex CLI (codex):" in out
    assert f"✓ {home / '.gemini' / '.env'}" in out
    assert f"✗ {home / '.claude' / 'settings.json'}" in out


def test_import_missing_file_is_fatal(config_dir: Path, tmp_path: Path, capsys):
    """A missing import source surfaces as an IO error."""
    assert run(config_dir, "import", str(tmp_path / "nope.json")) == EXIT_FATAL
    assert "IO error" in capsys.readouterr().out


def test_backup_without_config(tmp_path: Path, home: Path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(home))
    assert run(tmp_path / "empty", "backup") == EXIT_SUCCESS
    assert "nothing to back up" in capsys.readouterr().out


class TestCliSubprocess:
    """Run the CLI as a module the way users do."""

    def test_version_output(self):
        """--version prints the program name and version."""
        result = subprocess.run(
            [sys.executable, "-m", "ccswitch", "--version"],
            capture_output=True,
            text=True,
            timeout=10
        )

        assert result.returncode == 0
        assert result.stdout.startswith("ccswitch v")

    def test_help_output(self):
        result = subprocess.run(
            [sys.executable, "-m", "ccswitch", "--help"],
            capture_output=True,
            text=True,
            timeout=10
        )

        assert result.returncode == 0
        assert "switch" in result.stdout
