"""
Change Watcher Package

Watches a dynamic set of files and directories and reports classified,
de-duplicated change events.

Features:
- File and directory watches, optionally recursive
- Change classification from cached path attributes:
  created, modified, deleted, permissions changed
- Immediate per-notification events plus debounced, coalesced events
- Filename glob ignore patterns
- Automatic registration of new subdirectories under recursive watches
"""

from .models import (
    ChangeType,
    EntryKind,
    WatchEntry,
    Snapshot,
    PendingChange,
    canonical_path,
)

from .config import WatcherConfig, DEFAULT_DEBOUNCE_MS

from .exceptions import (
    WatcherError,
    WatchError,
    InvalidPathError,
    PathNotFoundError,
    PathTypeError,
    RegistrationError,
)

from .signals import Signal
from .snapshot_cache import SnapshotCache
from .ignore_filter import IgnoreFilter
from .classifier import ChangeClassifier
from .fs_watcher import PathObserver, WatchdogPathObserver, FSEventHandler
from .watch_set import WatchSetManager
from .debounce import DebounceTimer, DebounceCoalescer
from .watcher import FileSystemWatcher


__all__ = [
    # Models
    "ChangeType",
    "EntryKind",
    "WatchEntry",
    "Snapshot",
    "PendingChange",
    "canonical_path",
    # Config
    "WatcherConfig",
    "DEFAULT_DEBOUNCE_MS",
    # Exceptions
    "WatcherError",
    "WatchError",
    "InvalidPathError",
    "PathNotFoundError",
    "PathTypeError",
    "RegistrationError",
    # Components
    "Signal",
    "SnapshotCache",
    "IgnoreFilter",
    "ChangeClassifier",
    "PathObserver",
    "WatchdogPathObserver",
    "FSEventHandler",
    "WatchSetManager",
    "DebounceTimer",
    "DebounceCoalescer",
    # Facade
    "FileSystemWatcher",
]

__version__ = "0.1.0"
