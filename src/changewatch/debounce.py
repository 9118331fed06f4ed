"""Debouncing of classified changes behind one shared timer."""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from .models import ChangeType, PendingChange

logger = logging.getLogger(__name__)


class DebounceTimer:
    """
    Restartable single-shot timer.

    Each ``start`` cancels any armed timer and arms a new one. A fire that
    races with a restart or stop is discarded using a generation counter,
    so the callback only ever runs for the most recent arming. When a lock
    is supplied the generation check and the callback run while holding
    it.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        lock: Optional[threading.RLock] = None,
    ):
        self.callback = callback
        self._lock = lock or threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    def start(self, interval_ms: int) -> None:
        """(Re)start the timer to fire after ``interval_ms`` milliseconds."""
        with self._lock:
            self._cancel()
            self._generation += 1
            timer = threading.Timer(
                interval_ms / 1000.0, self._fire, args=(self._generation,)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()

    def stop(self) -> None:
        with self._lock:
            self._cancel()
            self._generation += 1

    def is_active(self) -> bool:
        with self._lock:
            return self._timer is not None

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            self.callback()


class DebounceCoalescer:
    """
    Buffers one pending change per path and flushes them together.

    With a zero window every change is emitted immediately. With a
    positive window each change overwrites the pending entry for its path
    and restarts the single shared timer, so any new change delays the
    flush of every buffered path. When the timer fires all entries are
    emitted, one per path, and the buffer is cleared.
    """

    def __init__(
        self,
        emit: Callable[[str, ChangeType], None],
        window_ms: int = 500,
        timer_factory: Optional[Callable[[Callable[[], None]], DebounceTimer]] = None,
    ):
        """
        Initialize the coalescer.

        Args:
            emit: Called with (path, change_type) for every coalesced change
            window_ms: Quiet period in milliseconds, 0 for pass-through
            timer_factory: Builds the shared timer from a fire callback
        """
        self.emit = emit
        self._window_ms = max(0, int(window_ms))
        factory = timer_factory or DebounceTimer
        self._timer = factory(self.flush)
        self._pending: Dict[str, PendingChange] = {}

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def set_window(self, window_ms: int) -> int:
        """
        Change the debounce window.

        Switching to pass-through flushes anything buffered. Changing a
        positive window while the timer runs restarts it with the new value.

        Returns:
            The effective (clamped) window
        """
        self._window_ms = max(0, int(window_ms))
        if self._window_ms == 0:
            self._timer.stop()
            self.flush()
        elif self._timer.is_active():
            self._timer.start(self._window_ms)
        return self._window_ms

    def submit(self, path: str, change_type: ChangeType) -> None:
        """Hand a classified change to the coalescer."""
        if self._window_ms == 0:
            self.emit(path, change_type)
            return

        self._pending[path] = PendingChange(path, change_type, time.time())
        self._timer.start(self._window_ms)

    def flush(self) -> List[PendingChange]:
        """
        Emit and clear every buffered change.

        Returns:
            The changes that were emitted
        """
        self._timer.stop()
        changes = list(self._pending.values())
        self._pending.clear()
        if changes:
            logger.debug(f"Flushing {len(changes)} coalesced change(s)")
        for change in changes:
            self.emit(change.path, change.change_type)
        return changes

    def discard(self, path: str) -> bool:
        """Drop the buffered change for a path without emitting it."""
        return self._pending.pop(path, None) is not None

    def clear(self) -> int:
        """Stop the timer and drop every buffered change."""
        self._timer.stop()
        count = len(self._pending)
        self._pending.clear()
        return count

    def pending(self) -> List[PendingChange]:
        return list(self._pending.values())

    def is_timer_active(self) -> bool:
        return self._timer.is_active()

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, path: str) -> bool:
        return path in self._pending
