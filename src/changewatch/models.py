"""Data models for the change watcher package."""

import os
import stat
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union


class ChangeType(Enum):
    """Kinds of change reported for a watched path."""
    FILE_CREATED = "file_created"
    FILE_MODIFIED = "file_modified"
    FILE_DELETED = "file_deleted"
    DIRECTORY_CREATED = "directory_created"
    DIRECTORY_MODIFIED = "directory_modified"
    DIRECTORY_DELETED = "directory_deleted"
    PERMISSIONS_CHANGED = "permissions_changed"
    UNKNOWN = "unknown"

    @classmethod
    def created(cls, is_directory: bool) -> "ChangeType":
        return cls.DIRECTORY_CREATED if is_directory else cls.FILE_CREATED

    @classmethod
    def modified(cls, is_directory: bool) -> "ChangeType":
        return cls.DIRECTORY_MODIFIED if is_directory else cls.FILE_MODIFIED

    @classmethod
    def deleted(cls, is_directory: bool) -> "ChangeType":
        return cls.DIRECTORY_DELETED if is_directory else cls.FILE_DELETED


class EntryKind(Enum):
    """Kind of a watch set entry."""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class WatchEntry:
    """
    One absolute path under watch.

    Attributes:
        path: Canonical absolute path
        kind: FILE or DIRECTORY
        recursive: True only for directories explicitly added as recursive;
            subdirectories discovered during a walk are plain entries
    """
    path: str
    kind: EntryKind
    recursive: bool = False

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True)
class Snapshot:
    """
    Attributes of a path at the time it was last observed.

    Attributes:
        exists: Whether the path existed
        is_directory: Whether the path was a directory
        mtime_ns: Last modification time in nanoseconds
        size: Size in bytes (always 0 for directories)
        permissions: Permission bits of the mode
        is_file: Whether the path was a regular file
    """
    exists: bool
    is_directory: bool = False
    mtime_ns: int = 0
    size: int = 0
    permissions: int = 0
    is_file: bool = False

    @classmethod
    def capture(cls, path: Union[str, Path]) -> "Snapshot":
        """
        Read the current attributes of a path.

        A path that cannot be stat'ed (missing, dangling, embedded NUL byte)
        yields a snapshot with ``exists=False``.
        """
        try:
            st = os.stat(path)
        except (OSError, ValueError):
            return cls(exists=False)

        is_directory = stat.S_ISDIR(st.st_mode)
        return cls(
            exists=True,
            is_directory=is_directory,
            mtime_ns=st.st_mtime_ns,
            size=0 if is_directory else st.st_size,
            permissions=stat.S_IMODE(st.st_mode),
            is_file=stat.S_ISREG(st.st_mode),
        )


@dataclass
class PendingChange:
    """A change waiting for the debounce window to close."""
    path: str
    change_type: ChangeType
    buffered_at: float = field(default_factory=time.time)


def canonical_path(path: Union[str, Path]) -> str:
    """Return the canonical absolute form of a path as a string."""
    return str(Path(path).resolve())
