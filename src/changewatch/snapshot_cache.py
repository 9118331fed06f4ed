"""Cache of last-observed path attributes."""

from typing import Dict, Iterator, Optional

from .models import Snapshot


class SnapshotCache:
    """
    Maps a watched path to its last observed Snapshot.

    Plain storage without validation. Owned by a single watcher and not
    shared between threads.
    """

    def __init__(self):
        self._snapshots: Dict[str, Snapshot] = {}

    def put(self, path: str, snapshot: Snapshot) -> None:
        self._snapshots[path] = snapshot

    def get(self, path: str) -> Optional[Snapshot]:
        return self._snapshots.get(path)

    def remove(self, path: str) -> bool:
        """
        Drop the snapshot for a path.

        Returns:
            True if a snapshot was present
        """
        return self._snapshots.pop(path, None) is not None

    def clear(self) -> int:
        count = len(self._snapshots)
        self._snapshots.clear()
        return count

    def __len__(self) -> int:
        return len(self._snapshots)

    def __contains__(self, path: str) -> bool:
        return path in self._snapshots

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._snapshots))
