# ABOUTME: Utility modules for ccswitch
# ABOUTME: Exports backup, file I/O, .env, TOML and validation helpers

from ccswitch.utils.backup import MAX_BACKUPS, cleanup_old_backups, create_backup, get_backup_dir
from ccswitch.utils.envfile import parse_env_file, serialize_env_file
from ccswitch.utils.fileio import read_json_file, write_json_file, write_text_file
from ccswitch.utils.toml_edit import server_spec_to_table, table_to_server_spec, validate_toml_text
from ccswitch.utils.validation import validate_mcp_entry, validate_server_spec

__all__ = [
    "MAX_BACKUPS",
    "create_backup",
    "cleanup_old_backups",
    "get_backup_dir",
    "parse_env_file",
    "serialize_env_file",
    "read_json_file",
    "write_json_file",
    "write_text_file",
    "server_spec_to_table",
    "table_to_server_spec",
    "validate_toml_text",
    "validate_mcp_entry",
    "validate_server_spec",
]
