"""Subscriber channels for watcher events."""

import logging
import threading
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


class Signal:
    """
    A named list of handlers invoked in connection order.

    A handler that raises is logged and skipped so the remaining
    handlers still run.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._handlers: List[Callable[..., Any]] = []
        self._lock = threading.Lock()

    def connect(self, handler: Callable[..., Any]) -> None:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def disconnect(self, handler: Callable[..., Any]) -> bool:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
                return True
            return False

    def emit(self, *args: Any) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(*args)
            except Exception as e:
                logger.error(f"Handler {handler!r} for {self.name or 'signal'} failed: {e}")

    @property
    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers)
