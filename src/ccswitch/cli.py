# CLI interface for ccswitch
import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from ccswitch import __version__
from ccswitch.config import get_config_dir, get_config_path
from ccswitch.errors import AppError, ProviderNotFoundError
from ccswitch.mcp import McpService
from ccswitch.models import APP_TYPES, AppType, parse_app_type
from ccswitch.platforms import get_all_platforms
from ccswitch.providers import ProviderService
from ccswitch.settings import AppSettings, load_settings
from ccswitch.store import ConfigStore
from ccswitch.transfer import export_config_to_path, import_config_from_path
from ccswitch.utils.backup import create_backup

logger = logging.getLogger(__name__)

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


class Context:
    """Store and services for one CLI invocation."""

    def __init__(self, config_dir: Path) -> None:
        self.config_dir = config_dir
        self.config_path = get_config_path(config_dir)
        self.settings: AppSettings = load_settings(config_dir)
        self.store = ConfigStore.load(self.config_path)
        self.providers = ProviderService(self.store, self.settings)
        self.mcp = McpService(self.store, self.settings)


def _app(args: argparse.Namespace) -> AppType:
    return parse_app_type(args.app)


def cmd_providers(ctx: Context, args: argparse.Namespace) -> int:
    """List providers of one client, marking the current one."""
    app = _app(args)
    providers = ctx.providers.list_providers(app)
    current = ctx.providers.current(app)

    if not providers:
        print(f"No {app} providers configured")
        return EXIT_SUCCESS

    ordered = sorted(
        providers.values(),
        key=lambda p: (p.sort_index if p.sort_index is not None else sys.maxsize, p.id),
    )
    for provider in ordered:
        marker = "*" if provider.id == current else " "
        print(f"{marker} {provider.id}  ({provider.name})")

    print()
    print(f"Total: {len(providers)} provider(s)")
    return EXIT_SUCCESS


def cmd_current(ctx: Context, args: argparse.Namespace) -> int:
    app = _app(args)
    current = ctx.providers.current(app)
    print(current or f"No current {app} provider")
    return EXIT_SUCCESS


def cmd_switch(ctx: Context, args: argparse.Namespace) -> int:
    """Switch a client to another provider."""
    app = _app(args)
    ctx.providers.switch(app, args.provider_id)
    print(f"Switched {app} to '{args.provider_id}'")
    return EXIT_SUCCESS


def cmd_import_live(ctx: Context, args: argparse.Namespace) -> int:
    """Create a 'default' provider from the client's live file."""
    app = _app(args)
    if ctx.providers.import_default_config(app):
        print(f"Imported live {app} config as provider 'default'")
    else:
        print(f"{app} already has providers, nothing imported")
    return EXIT_SUCCESS


def cmd_mcp_list(ctx: Context, args: argparse.Namespace) -> int:
    app = _app(args)
    servers = ctx.mcp.get_servers(app)

    print(f"MCP Servers for {app}:")
    print()
    for server_id in sorted(servers):
        entry = servers[server_id]
        spec = entry.get("server") or {}
        state = "enabled" if entry.get("enabled") else "disabled"
        print(f"  {server_id} [{state}]")
        server_type = spec.get("type", "stdio")
        print(f"    type: {server_type}")
        if server_type == "stdio":
            print(f"    command: {spec.get('command', '')}")
            if spec.get("args"):
                print(f"    args: {' '.join(str(a) for a in spec['args'])}")
        else:
            print(f"    url: {spec.get('url', '')}")
        print()

    print(f"Total: {len(servers)} server(s)")
    return EXIT_SUCCESS


def cmd_mcp_toggle(ctx: Context, args: argparse.Namespace) -> int:
    app = _app(args)
    enabled = args.mcp_command == "enable"
    if not ctx.mcp.set_enabled(app, args.server_id, enabled):
        print(f"Error: MCP server '{args.server_id}' not found for {app}")
        return EXIT_CONFIG_ERROR
    print(f"{'Enabled' if enabled else 'Disabled'} MCP server '{args.server_id}' for {app}")
    return EXIT_SUCCESS


def cmd_mcp_sync(ctx: Context, args: argparse.Namespace) -> int:
    """Project enabled servers into one client, or all clients when no app is given."""
    apps: list[AppType] = [_app(args)] if args.app else list(APP_TYPES)

    failed: list[str] = []
    for app in apps:
        try:
            ctx.mcp.sync_enabled(app)
            print(f"  {app} - synced")
        except AppError as e:
            print(f"  {app} - failed: {e}")
            failed.append(app)

    print()
    print(f"Sync complete: {len(apps) - len(failed)}/{len(apps)} clients updated")
    if failed and len(failed) < len(apps):
        return EXIT_PARTIAL
    return EXIT_FATAL if failed else EXIT_SUCCESS


def cmd_mcp_import(ctx: Context, args: argparse.Namespace) -> int:
    app = _app(args)
    count = ctx.mcp.import_from_live(app)
    print(f"Imported {count} MCP server change(s) from {app}")
    return EXIT_SUCCESS


def cmd_paths(ctx: Context, args: argparse.Namespace) -> int:
    """Show where each client's live files are resolved, and whether they exist."""
    print(f"Config: {ctx.config_path}")
    print()
    for adapter in get_all_platforms(ctx.settings):
        print(f"{adapter.name} ({adapter.app}):")
        for path in adapter.live_paths:
            marker = "✓" if path.exists() else "✗"
            print(f"  {marker} {path}")
    return EXIT_SUCCESS


def cmd_export(ctx: Context, args: argparse.Namespace) -> int:
    target = Path(args.path).expanduser()
    export_config_to_path(ctx.store, target)
    print(f"Exported config to {target}")
    return EXIT_SUCCESS


def cmd_import(ctx: Context, args: argparse.Namespace) -> int:
    source = Path(args.path).expanduser()
    backup_id = import_config_from_path(ctx.store, source, ctx.settings)
    print(f"Imported config from {source}")
    if backup_id:
        print(f"Previous config backed up as {backup_id}")
    return EXIT_SUCCESS


def cmd_backup(ctx: Context, args: argparse.Namespace) -> int:
    backup_id = create_backup(ctx.config_path, ctx.store.max_backups)
    if not backup_id:
        print(f"No config file at {ctx.config_path}, nothing to back up")
    else:
        print(f"Created backup {backup_id}")
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccswitch",
        description="Switch provider profiles and MCP servers for Claude Code, Codex and Gemini CLI",
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"ccswitch v{__version__}"
    )
    parser.add_argument(
        "--config-dir",
        help="Config directory (default: $CC_SWITCH_CONFIG_DIR or ~/.cc-switch)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    providers_parser = subparsers.add_parser("providers", help="List providers of a client")
    providers_parser.add_argument("app", help="claude, codex or gemini")
    providers_parser.set_defaults(handler=cmd_providers)

    current_parser = subparsers.add_parser("current", help="Show the current provider of a client")
    current_parser.add_argument("app", help="claude, codex or gemini")
    current_parser.set_defaults(handler=cmd_current)

    switch_parser = subparsers.add_parser("switch", help="Switch a client to another provider")
    switch_parser.add_argument("app", help="claude, codex or gemini")
    switch_parser.add_argument("provider_id", help="Provider to activate")
    switch_parser.set_defaults(handler=cmd_switch)

    import_live_parser = subparsers.add_parser(
        "import-live",
        help="Create a 'default' provider from the client's live config"
    )
    import_live_parser.add_argument("app", help="claude, codex or gemini")
    import_live_parser.set_defaults(handler=cmd_import_live)

    # mcp command group
    mcp_parser = subparsers.add_parser("mcp", help="Manage MCP servers")
    mcp_sub = mcp_parser.add_subparsers(dest="mcp_command", help="MCP commands")

    mcp_list = mcp_sub.add_parser("list", help="List MCP servers of a client")
    mcp_list.add_argument("app", help="claude, codex or gemini")
    mcp_list.set_defaults(handler=cmd_mcp_list)

    for name, help_text in (("enable", "Enable an MCP server"), ("disable", "Disable an MCP server")):
        toggle = mcp_sub.add_parser(name, help=help_text)
        toggle.add_argument("app", help="claude, codex or gemini")
        toggle.add_argument("server_id", help="MCP server id")
        toggle.set_defaults(handler=cmd_mcp_toggle)

    mcp_sync = mcp_sub.add_parser("sync", help="Write enabled MCP servers to live config")
    mcp_sync.add_argument("app", nargs="?", help="claude, codex or gemini (default: all)")
    mcp_sync.set_defaults(handler=cmd_mcp_sync)

    mcp_import = mcp_sub.add_parser("import", help="Import MCP servers from live config")
    mcp_import.add_argument("app", help="claude, codex or gemini")
    mcp_import.set_defaults(handler=cmd_mcp_import)

    paths_parser = subparsers.add_parser("paths", help="Show live config file locations")
    paths_parser.set_defaults(handler=cmd_paths)

    export_parser = subparsers.add_parser("export", help="Export config.json to a file")
    export_parser.add_argument("path", help="Destination file")
    export_parser.set_defaults(handler=cmd_export)

    import_parser = subparsers.add_parser("import", help="Replace config.json with a file")
    import_parser.add_argument("path", help="Source file")
    import_parser.set_defaults(handler=cmd_import)

    backup_parser = subparsers.add_parser("backup", help="Back up config.json now")
    backup_parser.set_defaults(handler=cmd_backup)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Maps engine errors to exit codes; returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    handler: Callable[[Context, argparse.Namespace], int] | None = getattr(args, "handler", None)
    if handler is None:
        # No command specified, show help
        parser.print_help()
        return EXIT_SUCCESS

    try:
        config_dir = Path(args.config_dir).expanduser() if args.config_dir else get_config_dir()
        ctx = Context(config_dir)
        return handler(ctx, args)
    except (ValueError, ProviderNotFoundError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except AppError as e:
        print(f"Error: {e}")
        return EXIT_FATAL
    except OSError as e:
        logger.debug("Unhandled filesystem error", exc_info=True)
        print(f"Fatal error: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
