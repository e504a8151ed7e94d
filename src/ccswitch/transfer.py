# SSOT export and import-from-file
import logging
from pathlib import Path

from ccswitch.config import parse_config
from ccswitch.mcp import project_enabled
from ccswitch.models import APP_TYPES, ConfigRoot
from ccswitch.platforms import get_adapter
from ccswitch.settings import AppSettings
from ccswitch.store import ConfigStore
from ccswitch.utils.backup import create_backup
from ccswitch.utils.fileio import read_json_file, read_text_file, write_json_file, write_text_file

logger = logging.getLogger(__name__)


def export_config_to_path(store: ConfigStore, target: Path) -> None:
    """Write the current SSOT document to target.

    Raises:
        FileIOError: If target cannot be written
    """
    with store.reading() as root:
        write_json_file(target, root.to_dict())
    logger.info(f"Exported config to {target}")


def sync_current_providers_to_live(root: ConfigRoot, settings: AppSettings) -> None:
    """Write every client's current provider to its live file and re-project MCP.

    ABOUTME: Clients without a current provider, or whose current id is dangling, are skipped
    ABOUTME: Each provider payload is refreshed from the read-back, like a switch
    """
    for app in APP_TYPES:
        manager = root.get_manager(app)
        if not manager.current:
            continue
        provider = manager.providers.get(manager.current)
        if provider is None:
            logger.warning(
                f"Current {app} provider '{manager.current}' does not exist, skipping live sync"
            )
            continue

        adapter = get_adapter(app, settings)
        adapter.validate_settings(provider.id, provider.settings_config)
        adapter.write_live(provider.settings_config)
        project_enabled(root, app, adapter)
        provider.settings_config = adapter.read_live()


def import_config_from_path(
    store: ConfigStore,
    source: Path,
    settings: AppSettings | None = None,
) -> str:
    """Replace the SSOT with the document at source.

    ABOUTME: The file is validated first (legacy layout and version included)
    ABOUTME: The existing SSOT is backed up, then overwritten with the imported content
    ABOUTME: Afterwards every client's live files are brought in line with the new SSOT

    Returns:
        Backup id of the replaced SSOT ("" if there was none)

    Raises:
        JsonParseError: If source is not valid JSON
        LegacyConfigError: If source uses the v1 layout
        ConfigError: If source has an unsupported version or a current provider fails its shape check
    """
    settings = settings or AppSettings()
    content = read_text_file(source)
    new_root = parse_config(read_json_file(source), source)

    with store.writing():
        backup_id = create_backup(store.path, store.max_backups)
        write_text_file(store.path, content)
        store.replace_root(new_root)
        sync_current_providers_to_live(new_root, settings)
        # store the read-back payloads without backing up the imported file again
        write_json_file(store.path, new_root.to_dict())

    logger.info(f"Imported config from {source} (backup: {backup_id or 'none'})")
    return backup_id
