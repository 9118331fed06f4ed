"""Management of the set of watched files and directories."""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from .exceptions import (
    InvalidPathError,
    PathNotFoundError,
    PathTypeError,
    RegistrationError,
)
from .fs_watcher import PathObserver
from .models import EntryKind, Snapshot, WatchEntry, canonical_path
from .snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class WatchSetManager:
    """
    Owns the watch set and keeps the OS primitive in sync with it.

    Every entry is registered individually with the PathObserver and gets
    a Snapshot seeded into the cache when it joins. Directories added as
    recursive have their whole subdirectory tree registered, and re-walked
    on demand to pick up new subdirectories.
    """

    def __init__(
        self,
        observer: PathObserver,
        cache: SnapshotCache,
        follow_symlinks: bool = False,
    ):
        """
        Initialize the manager.

        Args:
            observer: OS path-watch primitive
            cache: Snapshot cache shared with the classifier
            follow_symlinks: Descend into symlinked directories when walking
        """
        self.observer = observer
        self.cache = cache
        self.follow_symlinks = follow_symlinks
        self._entries: Dict[str, WatchEntry] = {}

    @staticmethod
    def canonical(path: PathLike) -> Optional[str]:
        """Canonical form of a path, or None if it cannot be interpreted."""
        if path is None or str(path) == "":
            return None
        try:
            return canonical_path(path)
        except (OSError, ValueError, RuntimeError):
            return None

    def _validate(self, path: PathLike, kind: EntryKind) -> str:
        if path is None or str(path) == "":
            raise InvalidPathError("", "Path is empty")

        raw = str(path)
        current = Snapshot.capture(raw)
        noun = "File" if kind is EntryKind.FILE else "Directory"
        if not current.exists:
            raise PathNotFoundError(raw, f"{noun} does not exist")
        if kind is EntryKind.FILE and not current.is_file:
            raise PathTypeError(raw, "Path is not a file")
        if kind is EntryKind.DIRECTORY and not current.is_directory:
            raise PathTypeError(raw, "Path is not a directory")

        key = self.canonical(raw)
        if key is None:
            raise InvalidPathError(raw, "Path cannot be resolved")
        return key

    def _register(self, path: str, kind: EntryKind, recursive: bool = False) -> bool:
        if not self.observer.register(path):
            return False
        self._entries[path] = WatchEntry(path, kind, recursive)
        self.cache.put(path, Snapshot.capture(path))
        return True

    def add_file(self, path: PathLike) -> bool:
        """
        Add a regular file to the watch set.

        Args:
            path: Path to an existing file

        Returns:
            True if the file was newly registered, False if already watched

        Raises:
            InvalidPathError: If the path is empty
            PathNotFoundError: If the path does not exist
            PathTypeError: If the path is not a regular file
            RegistrationError: If the OS primitive refuses the path
        """
        key = self._validate(path, EntryKind.FILE)
        if key in self._entries:
            logger.debug(f"File already being watched: {key}")
            return False

        if not self._register(key, EntryKind.FILE):
            raise RegistrationError(key, "Failed to add file to watcher")
        logger.debug(f"Added file: {key}")
        return True

    def add_directory(self, path: PathLike, recursive: bool = False) -> bool:
        """
        Add a directory to the watch set.

        With ``recursive`` every existing subdirectory is registered as a
        plain directory entry; only the root keeps the recursive flag.

        Returns:
            True if the directory was newly registered, False if already watched

        Raises:
            InvalidPathError: If the path is empty
            PathNotFoundError: If the path does not exist
            PathTypeError: If the path is not a directory
            RegistrationError: If the OS primitive refuses the path
        """
        key = self._validate(path, EntryKind.DIRECTORY)
        if key in self._entries:
            logger.debug(f"Directory already being watched: {key}")
            return False

        if not self._register(key, EntryKind.DIRECTORY, recursive):
            raise RegistrationError(key, "Failed to add directory to watcher")

        if recursive:
            self.expand(key)
        logger.debug(f"Added directory: {key} ({'recursive' if recursive else 'non-recursive'})")
        return True

    def _subdirectories(self, root: str) -> List[str]:
        """
        Canonical paths of every directory below root.

        A directory reached twice (through a symlink or a loop) is listed
        and descended into only once.
        """
        found = []
        seen = {root}
        for dirpath, dirnames, _ in os.walk(root, followlinks=self.follow_symlinks):
            dirnames.sort()
            kept = []
            for name in dirnames:
                subdir = os.path.join(dirpath, name)
                if not self.follow_symlinks and os.path.islink(subdir):
                    continue
                key = self.canonical(subdir)
                if key is None or key in seen:
                    continue
                seen.add(key)
                kept.append(name)
                found.append(key)
            dirnames[:] = kept
        return found

    def expand(self, path: str) -> List[str]:
        """
        Register every subdirectory of a directory that is not yet watched.

        Args:
            path: Canonical directory path

        Returns:
            Newly registered subdirectories
        """
        added = []
        if not os.path.isdir(path):
            return added

        for subdir in self._subdirectories(path):
            if subdir in self._entries:
                continue
            if self._register(subdir, EntryKind.DIRECTORY):
                added.append(subdir)
                logger.debug(f"Added subdirectory: {subdir}")
            else:
                logger.warning(f"Failed to add subdirectory to watcher: {subdir}")
        return added

    def _unregister(self, path: str) -> bool:
        if not self.observer.unregister(path):
            return False
        del self._entries[path]
        self.cache.remove(path)
        return True

    def remove_file(self, path: PathLike) -> List[str]:
        """
        Remove a file from the watch set.

        Returns:
            Paths that left the watch set (empty if the file was not watched)

        Raises:
            InvalidPathError: If the path is empty
            RegistrationError: If the OS primitive refuses to release it
        """
        key = self.canonical(path)
        if key is None:
            raise InvalidPathError(str(path or ""), "Invalid path")

        entry = self._entries.get(key)
        if entry is None or entry.kind is not EntryKind.FILE:
            return []

        if not self._unregister(key):
            raise RegistrationError(key, "Failed to remove file from watcher")
        logger.debug(f"Removed file: {key}")
        return [key]

    def remove_directory(self, path: PathLike) -> List[str]:
        """
        Remove a directory from the watch set.

        A recursive directory first releases every watched path whose string
        starts with the directory path plus a separator. The decision is made
        on the recorded watch set, not on the current disk contents.

        Returns:
            Paths that left the watch set (empty if the directory was not watched)

        Raises:
            InvalidPathError: If the path is empty
            RegistrationError: If the OS primitive refuses to release it
        """
        key = self.canonical(path)
        if key is None:
            raise InvalidPathError(str(path or ""), "Invalid path")

        entry = self._entries.get(key)
        if entry is None or entry.kind is not EntryKind.DIRECTORY:
            return []

        removed = []
        if entry.recursive:
            prefix = key.rstrip(os.sep) + os.sep
            for watched in [p for p in self._entries if p.startswith(prefix)]:
                if self._unregister(watched):
                    removed.append(watched)
                    logger.debug(f"Removed subdirectory: {watched}")
                else:
                    logger.warning(f"Failed to remove path from watcher: {watched}")

        if not self._unregister(key):
            raise RegistrationError(key, "Failed to remove directory from watcher")
        removed.append(key)
        logger.debug(f"Removed directory: {key}")
        return removed

    def release_deleted(self, path: str) -> List[str]:
        """
        Drop a directory that no longer exists on disk from the watch set.

        Watched directories below it that are gone as well are dropped too,
        so a directory recreated at the same path is registered afresh by
        the next expansion. File entries are kept.

        Args:
            path: Canonical directory path

        Returns:
            Paths that left the watch set
        """
        entry = self._entries.get(path)
        if entry is None or entry.kind is not EntryKind.DIRECTORY or os.path.isdir(path):
            return []

        prefix = path.rstrip(os.sep) + os.sep
        candidates = [path] + [
            p for p, e in self._entries.items()
            if p.startswith(prefix) and e.kind is EntryKind.DIRECTORY and not os.path.isdir(p)
        ]
        released = []
        for candidate in candidates:
            if self._unregister(candidate):
                released.append(candidate)
                logger.debug(f"Released deleted directory: {candidate}")
            else:
                logger.warning(f"Failed to remove path from watcher: {candidate}")
        return released

    def clear(self) -> int:
        """
        Unregister every watched path.

        Returns:
            Number of paths released
        """
        count = 0
        for path in list(self._entries):
            if self._unregister(path):
                count += 1
            else:
                logger.warning(f"Failed to remove path from watcher: {path}")
        return count

    def entry(self, path: PathLike) -> Optional[WatchEntry]:
        key = self.canonical(path)
        return self._entries.get(key) if key is not None else None

    def is_recursive(self, path: str) -> bool:
        entry = self._entries.get(path)
        return entry is not None and entry.recursive

    def watched_files(self) -> List[str]:
        return [p for p, e in self._entries.items() if e.kind is EntryKind.FILE]

    def watched_directories(self) -> List[str]:
        return [p for p, e in self._entries.items() if e.kind is EntryKind.DIRECTORY]

    def is_watching(self, path: PathLike) -> bool:
        return self.entry(path) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: PathLike) -> bool:
        return self.is_watching(path)
