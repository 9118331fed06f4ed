"""Public change watcher: watch-set operations and the notification pipeline."""

import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

from .classifier import ChangeClassifier
from .config import WatcherConfig
from .debounce import DebounceCoalescer, DebounceTimer
from .exceptions import WatchError
from .fs_watcher import PathObserver, WatchdogPathObserver
from .ignore_filter import IgnoreFilter
from .models import ChangeType
from .signals import Signal
from .snapshot_cache import SnapshotCache
from .watch_set import WatchSetManager

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
TimerFactory = Callable[[Callable[[], None]], DebounceTimer]


class FileSystemWatcher:
    """
    Watches files and directories and reports classified changes.

    Notifications from the OS primitive are filtered by the ignore
    patterns, classified against the snapshot cache, emitted immediately
    on ``file_changed``/``directory_changed`` and then coalesced onto
    ``path_changed``. Adding a path never raises: failures return False
    and are reported on ``watch_failed``.

    All state is guarded by one reentrant lock, so notifications, timer
    fires and public calls are processed one at a time.
    """

    def __init__(
        self,
        config: Optional[WatcherConfig] = None,
        observer: Optional[PathObserver] = None,
        timer_factory: Optional[TimerFactory] = None,
    ):
        """
        Initialize the watcher.

        Args:
            config: Watcher configuration
            observer: OS path-watch primitive (defaults to watchdog)
            timer_factory: Builds the shared debounce timer from its fire callback
        """
        self.config = config or WatcherConfig()
        self._lock = threading.RLock()

        self.file_changed = Signal("file_changed")
        self.directory_changed = Signal("directory_changed")
        self.path_changed = Signal("path_changed")
        self.watch_failed = Signal("watch_failed")

        self._observer = observer or WatchdogPathObserver(
            join_timeout_s=self.config.join_timeout_s
        )
        self._observer.set_callback(self.handle_notification)

        self._cache = SnapshotCache()
        self._classifier = ChangeClassifier(self._cache)
        self._ignore = IgnoreFilter(self.config.ignore_patterns)
        self._watch_set = WatchSetManager(
            self._observer,
            self._cache,
            follow_symlinks=self.config.follow_symlinks,
        )
        factory = timer_factory or (lambda callback: DebounceTimer(callback, lock=self._lock))
        self._coalescer = DebounceCoalescer(
            self.path_changed.emit,
            self.config.debounce_ms,
            factory,
        )
        self._enabled = self.config.change_detection_enabled
        self._closed = False

        logger.debug(f"Initialized with debounce interval {self.config.debounce_ms} ms")

    # Watch set

    def add_file(self, path: PathLike) -> bool:
        """
        Start watching a regular file.

        Returns:
            True if the file is watched (including when it already was)
        """
        if not path:
            logger.warning("Cannot add empty file path")
            return False
        with self._lock:
            return self._add(path, lambda: self._watch_set.add_file(path))

    def add_directory(self, path: PathLike, recursive: bool = False) -> bool:
        """
        Start watching a directory, optionally with its subdirectory tree.

        Returns:
            True if the directory is watched (including when it already was)
        """
        if not path:
            logger.warning("Cannot add empty directory path")
            return False
        with self._lock:
            return self._add(path, lambda: self._watch_set.add_directory(path, recursive))

    def _add(self, path: PathLike, operation: Callable[[], bool]) -> bool:
        try:
            operation()
        except WatchError as e:
            logger.warning(f"{e.reason}: {e.path}")
            self.watch_failed.emit(e.path or str(path), e.reason)
            return False
        return True

    def remove_file(self, path: PathLike) -> bool:
        """
        Stop watching a file. Removing an unwatched path succeeds.

        Returns:
            False for an empty path or if the OS primitive refused
        """
        if not path:
            return False
        with self._lock:
            return self._remove(lambda: self._watch_set.remove_file(path))

    def remove_directory(self, path: PathLike) -> bool:
        """
        Stop watching a directory, and its tree if it was added recursively.

        Returns:
            False for an empty path or if the OS primitive refused
        """
        if not path:
            return False
        with self._lock:
            return self._remove(lambda: self._watch_set.remove_directory(path))

    def _remove(self, operation: Callable[[], List[str]]) -> bool:
        try:
            removed = operation()
        except WatchError as e:
            logger.warning(f"{e.reason}: {e.path}")
            return False
        for removed_path in removed:
            self._coalescer.discard(removed_path)
        return True

    def watched_files(self) -> List[str]:
        with self._lock:
            return self._watch_set.watched_files()

    def watched_directories(self) -> List[str]:
        with self._lock:
            return self._watch_set.watched_directories()

    def is_watching(self, path: PathLike) -> bool:
        if not path:
            return False
        with self._lock:
            return self._watch_set.is_watching(path)

    # Configuration

    def set_debounce_interval(self, interval_ms: int) -> None:
        """Set the debounce window in milliseconds; negative values clamp to 0."""
        with self._lock:
            self.config.debounce_ms = self._coalescer.set_window(interval_ms)
            logger.debug(f"Set debounce interval to {self.config.debounce_ms} ms")

    def debounce_interval(self) -> int:
        with self._lock:
            return self._coalescer.window_ms

    def set_change_detection_enabled(self, enabled: bool) -> None:
        """
        Enable or disable processing of notifications.

        OS registrations are left untouched. Disabling stops the debounce
        timer and discards changes that were still buffered.
        """
        with self._lock:
            self._enabled = bool(enabled)
            self.config.change_detection_enabled = self._enabled
            if not self._enabled:
                dropped = self._coalescer.clear()
                if dropped:
                    logger.debug(f"Discarded {dropped} buffered change(s)")
            logger.debug(f"Change detection {'enabled' if self._enabled else 'disabled'}")

    def is_change_detection_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def add_ignore_pattern(self, pattern: str) -> None:
        with self._lock:
            if self._ignore.add(pattern):
                self.config.ignore_patterns = self._ignore.patterns()
                logger.debug(f"Added ignore pattern: {pattern}")

    def remove_ignore_pattern(self, pattern: str) -> None:
        with self._lock:
            if self._ignore.remove(pattern):
                self.config.ignore_patterns = self._ignore.patterns()
                logger.debug(f"Removed ignore pattern: {pattern}")

    def clear_ignore_patterns(self) -> None:
        with self._lock:
            self._ignore.clear()
            self.config.ignore_patterns = []
            logger.debug("Cleared all ignore patterns")

    def ignore_patterns(self) -> List[str]:
        with self._lock:
            return self._ignore.patterns()

    # Notification pipeline

    def handle_notification(self, path: PathLike) -> Optional[ChangeType]:
        """
        Process one "path touched" notification from the OS primitive.

        Args:
            path: The notified path

        Returns:
            The classified change, or None if the notification was dropped
        """
        with self._lock:
            if not self._enabled or self._closed:
                return None
            if self._ignore.should_ignore(str(path)):
                return None

            key = self._watch_set.canonical(path)
            if key is None:
                return None
            entry = self._watch_set.entry(key)
            if entry is None:
                # Released while the notification was queued.
                logger.debug(f"Dropping notification for unwatched path: {key}")
                return None

            change_type = self._classifier.classify(key)
            logger.debug(f"Changed: {key} ({change_type.value})")

            if entry.is_directory:
                self.directory_changed.emit(key, change_type)
            else:
                self.file_changed.emit(key, change_type)

            if change_type is ChangeType.DIRECTORY_DELETED:
                self._watch_set.release_deleted(key)
            elif entry.recursive:
                self._watch_set.expand(key)

            self._coalescer.submit(key, change_type)
            return change_type

    def flush(self) -> int:
        """
        Emit every buffered change now instead of waiting for the timer.

        Returns:
            Number of coalesced events emitted
        """
        with self._lock:
            return len(self._coalescer.flush())

    def pending_changes(self) -> int:
        with self._lock:
            return len(self._coalescer)

    # Lifecycle

    def close(self) -> None:
        """Stop the timer and release every OS registration."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._coalescer.clear()
            released = self._watch_set.clear()
            self._cache.clear()
        self._observer.close()
        logger.debug(f"Closed, released {released} watch(es)")

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
