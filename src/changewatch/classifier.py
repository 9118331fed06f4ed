"""Classification of path notifications into change kinds."""

import logging

from .models import ChangeType, Snapshot
from .snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)


class ChangeClassifier:
    """
    Derives a ChangeType by comparing a path against its cached Snapshot.

    Every classification of an existing path refreshes the cache; a
    deletion evicts it.
    """

    def __init__(self, cache: SnapshotCache):
        self.cache = cache

    def classify(self, path: str) -> ChangeType:
        """
        Classify a notification for a path.

        Checks run in a fixed order: deletion, first observation,
        permissions, modification time, size. Permissions win over a
        simultaneous content change. An existing path with no observable
        delta is still reported as modified.

        Args:
            path: Canonical path that was reported as touched

        Returns:
            The detected change type
        """
        current = Snapshot.capture(path)
        cached = self.cache.get(path)

        if not current.exists:
            if cached is not None and cached.exists:
                self.cache.remove(path)
                return ChangeType.deleted(cached.is_directory)
            logger.debug(f"Notification for unknown absent path: {path}")
            return ChangeType.UNKNOWN

        self.cache.put(path, current)

        if cached is None or not cached.exists:
            return ChangeType.created(current.is_directory)

        if current.permissions != cached.permissions:
            return ChangeType.PERMISSIONS_CHANGED

        if current.mtime_ns != cached.mtime_ns:
            return ChangeType.modified(current.is_directory)

        if not current.is_directory and current.size != cached.size:
            return ChangeType.FILE_MODIFIED

        return ChangeType.modified(current.is_directory)
