# In-memory SSOT holder guarded by a reader/writer lock
import copy
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

from ccswitch.config import load_config, save_config
from ccswitch.errors import LockError
from ccswitch.models import ConfigRoot
from ccswitch.utils.backup import MAX_BACKUPS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RWLock:
    """Reader/writer lock with writer preference.

    ABOUTME: Many readers or one writer; the writer thread may re-enter and also read
    ABOUTME: A reader trying to become a writer raises LockError instead of deadlocking
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer: int | None = None
        self._writer_depth = 0
        self._writers_waiting = 0
        self._local = threading.local()

    def _held_reads(self) -> int:
        return getattr(self._local, "reads", 0)

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._local.reads = self._held_reads() + 1
                return
            while self._writer is not None or (self._writers_waiting and not self._held_reads()):
                self._cond.wait()
            self._readers += 1
            self._local.reads = self._held_reads() + 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._held_reads() <= 0:
                raise LockError("release_read() called without holding the read lock")
            self._local.reads = self._held_reads() - 1
            if self._writer == me:
                return
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._writer_depth += 1
                return
            if self._held_reads():
                raise LockError("Cannot upgrade a read lock to a write lock")
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers > 0:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = me
            self._writer_depth = 1

    def release_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer != me:
                raise LockError("release_write() called by a thread not holding the write lock")
            self._writer_depth -= 1
            if self._writer_depth == 0:
                self._writer = None
                self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class ConfigStore:
    """Owns the SSOT for one process.

    ABOUTME: Constructed once and passed to every service; tests build one per tmp_path
    ABOUTME: Mutations run under the write lock, including the live file I/O they trigger
    ABOUTME: persist() backs up the previous file before the atomic write

    Example:
        >>> store = ConfigStore.load(Path("~/.cc-switch/config.json").expanduser())
        >>> with store.writing() as root:
        ...     root.get_manager("claude").current = "work"
        ...     store.persist()
    """

    def __init__(self, path: Path, root: ConfigRoot | None = None, max_backups: int = MAX_BACKUPS):
        self.path = path
        self.max_backups = max_backups
        self._root = root if root is not None else ConfigRoot()
        self._lock = RWLock()

    @classmethod
    def load(cls, path: Path, max_backups: int = MAX_BACKUPS) -> "ConfigStore":
        """Load the SSOT from path (missing file -> default root).

        Raises:
            LegacyConfigError: If the file uses the v1 layout
            ConfigError: If the version is unsupported
            JsonParseError: If the file is not valid JSON
        """
        return cls(path, load_config(path), max_backups)

    def read(self) -> ConfigRoot:
        """Deep-copied snapshot; changes to it never reach the store."""
        with self._lock.read_locked():
            return copy.deepcopy(self._root)

    @contextmanager
    def reading(self) -> Iterator[ConfigRoot]:
        """Hold the read lock while inspecting the live root. Do not mutate it."""
        with self._lock.read_locked():
            yield self._root

    @contextmanager
    def writing(self) -> Iterator[ConfigRoot]:
        """Hold the write lock for a whole read-modify-write sequence."""
        with self._lock.write_locked():
            yield self._root

    def mutate(self, fn: Callable[[ConfigRoot], T]) -> T:
        """Apply fn to the root under the write lock and return its result."""
        with self._lock.write_locked():
            return fn(self._root)

    def replace_root(self, root: ConfigRoot) -> None:
        with self._lock.write_locked():
            self._root = root

    def persist(self) -> None:
        """Write the current root to disk.

        Raises:
            FileIOError: If the config file cannot be written
        """
        with self._lock.read_locked():
            save_config(self.path, self._root, self.max_backups)
        logger.debug(f"Persisted config to {self.path}")
