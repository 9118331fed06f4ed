"""Configuration for the change watcher package."""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


DEFAULT_DEBOUNCE_MS = 500

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class WatcherConfig:
    """
    Configuration options for the change watcher.

    Attributes:
        debounce_ms: Quiet period before buffered changes are flushed; 0 disables buffering
        change_detection_enabled: Whether notifications are processed at all
        ignore_patterns: Filename glob patterns excluded from processing
        follow_symlinks: Whether recursive walks descend into symlinked directories
        join_timeout_s: Maximum seconds to wait for the observer thread on close
    """
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    change_detection_enabled: bool = True
    ignore_patterns: List[str] = field(default_factory=list)
    follow_symlinks: bool = False
    join_timeout_s: float = 5.0

    def __post_init__(self):
        self.debounce_ms = max(0, int(self.debounce_ms))
        patterns = []
        for pattern in self.ignore_patterns:
            if pattern and pattern not in patterns:
                patterns.append(pattern)
        self.ignore_patterns = patterns

    @classmethod
    def from_env(
        cls,
        prefix: str = "CHANGEWATCH_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "WatcherConfig":
        """
        Build a configuration from environment variables.

        Recognised variables (with the default prefix):
            CHANGEWATCH_DEBOUNCE_MS, CHANGEWATCH_CHANGE_DETECTION,
            CHANGEWATCH_IGNORE_PATTERNS (comma separated),
            CHANGEWATCH_FOLLOW_SYMLINKS

        Args:
            prefix: Variable name prefix
            environ: Mapping to read instead of os.environ

        Returns:
            Configuration with defaults for unset variables
        """
        env = os.environ if environ is None else environ
        config = cls()

        debounce = env.get(f"{prefix}DEBOUNCE_MS")
        if debounce:
            config.debounce_ms = max(0, int(debounce))

        detection = env.get(f"{prefix}CHANGE_DETECTION")
        if detection:
            config.change_detection_enabled = detection.strip().lower() in _TRUE_VALUES

        patterns = env.get(f"{prefix}IGNORE_PATTERNS")
        if patterns:
            for pattern in (p.strip() for p in patterns.split(",")):
                if pattern and pattern not in config.ignore_patterns:
                    config.ignore_patterns.append(pattern)

        follow = env.get(f"{prefix}FOLLOW_SYMLINKS")
        if follow:
            config.follow_symlinks = follow.strip().lower() in _TRUE_VALUES

        return config
