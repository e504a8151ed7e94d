# ABOUTME: Backup utilities for the SSOT config file.
# ABOUTME: Handles timestamped backups with automatic retention cleanup (keep last 10).
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

from ccswitch.errors import FileIOError

logger = logging.getLogger(__name__)

# ABOUTME: Retention limit for files in the backups/ directory
MAX_BACKUPS = 10

# ABOUTME: Matches backup_{YYYYMMDD}_{HHMMSS}[_{n}].json; anything else in the dir is ignored
BACKUP_PATTERN = re.compile(r"^backup_\d{8}_\d{6}(?:_\d+)?\.json$")


def get_backup_dir(config_path: Path) -> Path:
    """Get the backup directory for a config file.

    ABOUTME: Returns a `backups/` sibling of the config file
    ABOUTME: Does not create the directory

    Examples:
        >>> get_backup_dir(Path("/home/user/.cc-switch/config.json"))
        PosixPath('/home/user/.cc-switch/backups')
    """
    return config_path.parent / "backups"


def create_backup(config_path: Path, max_backups: int = MAX_BACKUPS) -> str:
    """Create a timestamped backup of the config file.

    ABOUTME: Backup format: backup_{YYYYMMDD}_{HHMMSS}.json
    ABOUTME: A second backup within the same second gets a _{n} suffix
    ABOUTME: Copies content only, so the backup's mtime is the time of the backup

    Args:
        config_path: File to back up
        max_backups: How many backups to retain afterwards

    Returns:
        Backup id (file stem), or "" if config_path doesn't exist

    Raises:
        FileIOError: If the backup cannot be written

    Examples:
        >>> create_backup(Path("~/.cc-switch/config.json").expanduser())
        'backup_20261017_143022'
    """
    if not config_path.exists():
        return ""

    backup_dir = get_backup_dir(config_path)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    backup_id = f"backup_{timestamp}"
    suffix = 0
    while (backup_dir / f"{backup_id}.json").exists():
        suffix += 1
        backup_id = f"backup_{timestamp}_{suffix:03d}"

    backup_path = backup_dir / f"{backup_id}.json"
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(config_path, backup_path)
    except OSError as e:
        raise FileIOError(backup_path, e) from e

    cleanup_old_backups(backup_dir, max_backups)
    logger.debug(f"Created backup {backup_path}")

    return backup_id


def cleanup_old_backups(backup_dir: Path, max_backups: int = MAX_BACKUPS) -> list[Path]:
    """Remove old backup files, keeping only the most recent ones.

    ABOUTME: Orders by modification time, then name, oldest first
    ABOUTME: Logs warnings on errors but does not raise exceptions

    Args:
        backup_dir: Directory containing backup files
        max_backups: Maximum backups to keep (0 disables pruning)

    Returns:
        List of paths that were deleted
    """
    deleted_files: list[Path] = []

    if max_backups <= 0 or not backup_dir.exists():
        return deleted_files

    backups: list[tuple[int, str, Path]] = []
    for file_path in backup_dir.iterdir():
        if not file_path.is_file() or not BACKUP_PATTERN.match(file_path.name):
            continue
        try:
            mtime = file_path.stat().st_mtime_ns
        except OSError:
            continue
        backups.append((mtime, file_path.name, file_path))

    if len(backups) <= max_backups:
        return deleted_files

    backups.sort()
    for _mtime, _name, file_path in backups[: len(backups) - max_backups]:
        try:
            file_path.unlink()
            deleted_files.append(file_path)
            logger.debug(f"Deleted old backup: {file_path}")
        except OSError as e:
            logger.warning(f"Failed to delete old backup {file_path}: {e}")

    return deleted_files
