"""OS path-watch primitive and its watchdog binding."""

import logging
import os
import queue
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Set

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[str], None]

_STOP = object()

_CHANGE_EVENTS = frozenset({
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
})


class PathObserver(ABC):
    """
    Registers individual paths with the operating system and reports
    "path touched" notifications.

    For a registered directory, a change to the directory itself or to
    one of its immediate children is reported as the directory path.
    No ordering or de-duplication is promised.
    """

    def __init__(self, callback: Optional[NotificationCallback] = None):
        self._callback = callback

    def set_callback(self, callback: Optional[NotificationCallback]) -> None:
        self._callback = callback

    def notify(self, path: str) -> None:
        """Deliver a notification for a registered path to the callback."""
        callback = self._callback
        if callback is not None:
            callback(path)

    @abstractmethod
    def register(self, path: str) -> bool:
        """
        Start watching a path.

        Args:
            path: Canonical absolute path of an existing file or directory

        Returns:
            True if the path is now registered
        """
        pass

    @abstractmethod
    def unregister(self, path: str) -> bool:
        """
        Stop watching a path.

        Returns:
            True if the path was registered and has been released
        """
        pass

    @abstractmethod
    def registered_paths(self) -> List[str]:
        pass

    def close(self) -> None:
        """Release every registration."""
        for path in self.registered_paths():
            self.unregister(path)


class FSEventHandler(FileSystemEventHandler):
    """
    Forwards watchdog change events to the pool's dispatch queue.

    Runs on the watchdog observer thread, which holds the observer's
    internal lock; it must not take any other lock.
    """

    def __init__(self, pool: "WatchdogPathObserver"):
        super().__init__()
        self.pool = pool

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in _CHANGE_EVENTS:
            return

        candidates = [os.fsdecode(event.src_path)]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            candidates.append(os.fsdecode(dest_path))
        self.pool.enqueue(candidates)


class WatchdogPathObserver(PathObserver):
    """
    PathObserver backed by one shared watchdog Observer.

    Directories are scheduled non-recursively on themselves; files are
    watched through a non-recursive schedule on their parent directory.
    Schedules are reference-counted across registered paths.

    Raw event paths are queued by the handler and mapped to registered
    paths on a dedicated dispatch thread, which is where the callback runs.
    """

    def __init__(
        self,
        callback: Optional[NotificationCallback] = None,
        join_timeout_s: float = 5.0,
    ):
        """
        Initialize the observer.

        Args:
            callback: Called with a registered path whenever it is touched
            join_timeout_s: Maximum time to wait for background threads on close
        """
        super().__init__(callback)
        self.join_timeout_s = join_timeout_s
        self._observer: Optional[Observer] = None
        self._dispatcher: Optional[threading.Thread] = None
        self._pending: "queue.Queue[object]" = queue.Queue()
        self._handler = FSEventHandler(self)
        # registered path -> directory scheduled on its behalf
        self._registered: Dict[str, str] = {}
        self._directories: Set[str] = set()
        self._watches: Dict[str, ObservedWatch] = {}
        self._watch_refs: Dict[str, int] = {}
        self._lock = threading.Lock()

    def _ensure_started(self) -> Observer:
        with self._lock:
            if self._observer is None:
                self._observer = Observer()
                self._observer.start()
                self._dispatcher = threading.Thread(
                    target=self._dispatch_loop, name="PathDispatcher"
                )
                self._dispatcher.daemon = True
                self._dispatcher.start()
                logger.debug("Started watchdog observer")
            return self._observer

    def register(self, path: str) -> bool:
        is_directory = os.path.isdir(path)
        watch_dir = path if is_directory else os.path.dirname(path)

        with self._lock:
            if path in self._registered:
                return True
            needs_schedule = watch_dir not in self._watches

        if needs_schedule:
            # Scheduling takes the watchdog observer lock; never hold ours around it.
            observer = self._ensure_started()
            try:
                watch = observer.schedule(self._handler, watch_dir, recursive=False)
            except OSError as e:
                logger.warning(f"watchdog refused {watch_dir}: {e}")
                return False
            with self._lock:
                self._watches.setdefault(watch_dir, watch)
                self._watch_refs.setdefault(watch_dir, 0)

        with self._lock:
            self._watch_refs[watch_dir] += 1
            self._registered[path] = watch_dir
            if is_directory:
                self._directories.add(path)
        return True

    def unregister(self, path: str) -> bool:
        with self._lock:
            watch_dir = self._registered.pop(path, None)
            if watch_dir is None:
                return False
            self._directories.discard(path)

            self._watch_refs[watch_dir] -= 1
            if self._watch_refs[watch_dir] > 0:
                return True

            del self._watch_refs[watch_dir]
            watch = self._watches.pop(watch_dir)
            observer = self._observer

        if observer is not None:
            try:
                observer.unschedule(watch)
            except (KeyError, OSError) as e:
                # The directory may already be gone along with its watch.
                logger.debug(f"Unschedule of {watch_dir} failed: {e}")
        return True

    def registered_paths(self) -> List[str]:
        with self._lock:
            return list(self._registered)

    def enqueue(self, event_paths: List[str]) -> None:
        """Queue raw event paths for the dispatch thread."""
        self._pending.put(event_paths)

    def affected_paths(self, event_paths: List[str]) -> List[str]:
        """
        Map raw event paths to the registered paths they touch.

        A registered path is affected when it is one of the event paths or,
        for a registered directory, when it is the parent of one.
        """
        affected: List[str] = []
        with self._lock:
            for event_path in event_paths:
                parent = os.path.dirname(event_path)
                if event_path in self._registered and event_path not in affected:
                    affected.append(event_path)
                if parent in self._directories and parent not in affected:
                    affected.append(parent)
        return affected

    def _dispatch_loop(self) -> None:
        logger.debug("Dispatch loop started")
        while True:
            event_paths = self._pending.get()
            if event_paths is _STOP:
                break
            for path in self.affected_paths(event_paths):
                try:
                    self.notify(path)
                except Exception as e:
                    logger.error(f"Error dispatching notification for {path}: {e}")
        logger.debug("Dispatch loop stopped")

    def close(self) -> None:
        super().close()
        with self._lock:
            observer, dispatcher = self._observer, self._dispatcher
            self._observer = None
            self._dispatcher = None
        if observer is not None:
            observer.stop()
            observer.join(timeout=self.join_timeout_s)
            logger.debug("Stopped watchdog observer")
        if dispatcher is not None:
            self._pending.put(_STOP)
            if dispatcher is not threading.current_thread():
                dispatcher.join(timeout=self.join_timeout_s)

    def __len__(self) -> int:
        with self._lock:
            return len(self._registered)
