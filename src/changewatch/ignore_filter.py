"""Filename glob filtering."""

import fnmatch
import os
import re
from typing import Dict, Iterable, List, Optional, Pattern


class IgnoreFilter:
    """
    Decides whether a path should be ignored based on glob patterns.

    Only the final path component is matched, case-sensitively. ``*``
    matches any run of characters and ``?`` exactly one. Patterns keep
    their insertion order, which has no effect on matching.
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        self._patterns: Dict[str, Pattern[str]] = {}
        for pattern in patterns or ():
            self.add(pattern)

    def add(self, pattern: str) -> bool:
        """
        Add a glob pattern.

        Returns:
            True if the pattern was added, False if empty or already present
        """
        if not pattern or pattern in self._patterns:
            return False
        self._patterns[pattern] = re.compile(fnmatch.translate(pattern))
        return True

    def remove(self, pattern: str) -> bool:
        """Remove a pattern by exact string match."""
        return self._patterns.pop(pattern, None) is not None

    def clear(self) -> None:
        self._patterns.clear()

    def patterns(self) -> List[str]:
        return list(self._patterns)

    def should_ignore(self, path: str) -> bool:
        """
        Check if a path's filename matches any configured pattern.

        Args:
            path: Path to check

        Returns:
            True if the filename matches at least one pattern
        """
        if not self._patterns:
            return False

        name = os.path.basename(os.path.normpath(path))
        return any(regex.match(name) for regex in self._patterns.values())

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern: str) -> bool:
        return pattern in self._patterns
