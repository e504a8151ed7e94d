# ABOUTME: Tests for backup utilities.
# ABOUTME: Covers create_backup, get_backup_dir, and cleanup_old_backups functions.
import os
import re
from pathlib import Path

import pytest

from ccswitch.errors import FileIOError
from ccswitch.utils.backup import (
    BACKUP_PATTERN,
    MAX_BACKUPS,
    cleanup_old_backups,
    create_backup,
    get_backup_dir,
)


class TestGetBackupDir:
    """Tests for get_backup_dir function."""

    def test_backup_dir_is_sibling_of_config(self, tmp_path):
        """Backups live in a backups/ directory next to the config file."""
        config = tmp_path / "config.json"
        assert get_backup_dir(config) == tmp_path / "backups"

    def test_does_not_create_directory(self, tmp_path):
        """Resolving the path has no side effects."""
        get_backup_dir(tmp_path / "config.json")
        assert not (tmp_path / "backups").exists()


class TestCreateBackup:
    """Tests for create_backup function."""

    def test_missing_source_returns_empty_id(self, tmp_path):
        """No file, no backup."""
        assert create_backup(tmp_path / "config.json") == ""
        assert not (tmp_path / "backups").exists()

    def test_creates_backup_file(self, tmp_path):
        """Test that backup file is created with the source content."""
        source = tmp_path / "config.json"
        source.write_text('{"version": 2}')

        backup_id = create_backup(source)

        backup_path = tmp_path / "backups" / f"{backup_id}.json"
        assert backup_path.exists()
        assert backup_path.read_text() == '{"version": 2}'

    def test_backup_id_format(self, tmp_path):
        """Backup ids look like backup_YYYYMMDD_HHMMSS."""
        source = tmp_path / "config.json"
        source.write_text("{}")

        backup_id = create_backup(source)

        assert re.match(r"^backup_\d{8}_\d{6}$", backup_id)

    def test_same_second_backups_get_suffix(self, tmp_path):
        """Two backups in quick succession never overwrite each other."""
        source = tmp_path / "config.json"
        source.write_text("{}")

        ids = {create_backup(source) for _ in range(3)}

        assert len(ids) == 3
        assert len(list((tmp_path / "backups").iterdir())) == 3
        for backup_id in ids:
            assert BACKUP_PATTERN.match(f"{backup_id}.json")

    def test_backup_has_fresh_mtime(self, tmp_path):
        """Backups are plain copies; the source's old mtime is not carried over."""
        source = tmp_path / "config.json"
        source.write_text("{}")
        os.utime(source, (1_000_000, 1_000_000))

        backup_id = create_backup(source)

        backup_path = tmp_path / "backups" / f"{backup_id}.json"
        assert backup_path.stat().st_mtime > 1_000_000

    def test_unwritable_backup_dir_raises(self, tmp_path):
        """A file squatting on the backups/ path surfaces as FileIOError."""
        source = tmp_path / "config.json"
        source.write_text("{}")
        (tmp_path / "backups").write_text("not a directory")

        with pytest.raises(FileIOError):
            create_backup(source)

    def test_retention_keeps_ten_most_recent(self, tmp_path):
        """15 backups of a growing file leave exactly the 10 newest."""
        source = tmp_path / "config.json"
        created = []
        for i in range(15):
            source.write_text("x" * (i + 1))
            created.append(create_backup(source))

        backup_dir = tmp_path / "backups"
        remaining = sorted(p.stem for p in backup_dir.iterdir())

        assert len(remaining) == MAX_BACKUPS
        assert set(remaining) == set(created[-10:])
        newest = backup_dir / f"{created[-1]}.json"
        assert newest.read_text() == "x" * 15


class TestCleanupOldBackups:
    """Tests for cleanup_old_backups function."""

    def _make_backups(self, backup_dir: Path, count: int) -> list[Path]:
        backup_dir.mkdir(parents=True, exist_ok=True)
        paths = []
        for i in range(count):
            path = backup_dir / f"backup_20260101_0000{i:02d}.json"
            path.write_text("{}")
            os.utime(path, (1_700_000_000 + i, 1_700_000_000 + i))
            paths.append(path)
        return paths

    def test_no_cleanup_when_under_limit(self, tmp_path):
        """Nothing is deleted while under the limit."""
        backup_dir = tmp_path / "backups"
        self._make_backups(backup_dir, 5)

        deleted = cleanup_old_backups(backup_dir, max_backups=10)

        assert deleted == []
        assert len(list(backup_dir.iterdir())) == 5

    def test_deletes_oldest_by_mtime(self, tmp_path):
        """Oldest files go first."""
        backup_dir = tmp_path / "backups"
        paths = self._make_backups(backup_dir, 12)

        deleted = cleanup_old_backups(backup_dir, max_backups=10)

        assert deleted == paths[:2]
        assert not paths[0].exists()
        assert paths[2].exists()

    def test_mtime_wins_over_name(self, tmp_path):
        """A file with a newer name but older mtime is pruned first."""
        backup_dir = tmp_path / "backups"
        paths = self._make_backups(backup_dir, 3)
        os.utime(paths[2], (1_600_000_000, 1_600_000_000))

        deleted = cleanup_old_backups(backup_dir, max_backups=2)

        assert deleted == [paths[2]]

    def test_ignores_non_matching_files(self, tmp_path):
        """Files that aren't backups are never counted or deleted."""
        backup_dir = tmp_path / "backups"
        self._make_backups(backup_dir, 3)
        notes = backup_dir / "notes.txt"
        notes.write_text("keep me")
        os.utime(notes, (1, 1))

        deleted = cleanup_old_backups(backup_dir, max_backups=2)

        assert len(deleted) == 1
        assert notes.exists()

    def test_missing_directory(self, tmp_path):
        """A missing directory is not an error."""
        assert cleanup_old_backups(tmp_path / "nope") == []
