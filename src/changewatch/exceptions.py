"""Custom exceptions for the change watcher package."""


class WatcherError(Exception):
    """Base exception for all watcher errors."""
    pass


class WatchError(WatcherError):
    """A watch-set operation failed for a path."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class InvalidPathError(WatchError):
    """Path is empty or cannot be interpreted."""
    pass


class PathNotFoundError(WatchError):
    """Path does not exist on disk."""
    pass


class PathTypeError(WatchError):
    """Path exists but is not of the expected kind (file vs directory)."""
    pass


class RegistrationError(WatchError):
    """The OS watch primitive refused the path."""
    pass
