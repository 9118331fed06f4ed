"""Shared fixtures for the change watcher tests."""

import os
from typing import Callable, List, Optional, Set

import pytest

from changewatch.config import WatcherConfig
from changewatch.fs_watcher import PathObserver
from changewatch.watcher import FileSystemWatcher


class FakePathObserver(PathObserver):
    """In-memory PathObserver; notifications are delivered by calling notify()."""

    def __init__(self, callback=None):
        super().__init__(callback)
        self.paths: Set[str] = set()
        self.refuse: Set[str] = set()
        self.refuse_unregister: Set[str] = set()
        self.register_calls: List[str] = []
        self.closed = False

    def register(self, path: str) -> bool:
        self.register_calls.append(path)
        if path in self.refuse:
            return False
        self.paths.add(path)
        return True

    def unregister(self, path: str) -> bool:
        if path in self.refuse_unregister or path not in self.paths:
            return False
        self.paths.discard(path)
        return True

    def registered_paths(self) -> List[str]:
        return sorted(self.paths)

    def close(self) -> None:
        super().close()
        self.closed = True


class ManualTimer:
    """Debounce timer that only fires when the test says so."""

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self.active = False
        self.interval_ms: Optional[int] = None
        self.starts = 0

    def start(self, interval_ms: int) -> None:
        self.active = True
        self.interval_ms = interval_ms
        self.starts += 1

    def stop(self) -> None:
        self.active = False

    def is_active(self) -> bool:
        return self.active

    def fire(self) -> None:
        assert self.active, "timer fired while not armed"
        self.active = False
        self.callback()


class Recorder:
    """Collects (path, change_type) emissions from a signal."""

    def __init__(self):
        self.events = []

    def __call__(self, *args):
        self.events.append(args)

    def __len__(self):
        return len(self.events)

    @property
    def paths(self):
        return [e[0] for e in self.events]

    @property
    def types(self):
        return [e[1] for e in self.events]


def touch_later(path, content: str = "changed", bump_ns: int = 2_000_000_000) -> None:
    """Rewrite a file and push its mtime forward so the change is observable."""
    with open(path, "w") as f:
        f.write(content)
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + bump_ns))


@pytest.fixture
def observer():
    return FakePathObserver()


@pytest.fixture
def timers():
    created: List[ManualTimer] = []

    def factory(callback):
        timer = ManualTimer(callback)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def make_watcher(observer, timers):
    """Build a FileSystemWatcher on the fake observer and manual timer."""
    watchers = []

    def _make(**config_kwargs) -> FileSystemWatcher:
        watcher = FileSystemWatcher(
            WatcherConfig(**config_kwargs),
            observer=observer,
            timer_factory=timers,
        )
        watchers.append(watcher)
        return watcher

    yield _make

    for watcher in watchers:
        watcher.close()


@pytest.fixture
def root(tmp_path):
    """Resolved temporary directory."""
    return tmp_path.resolve()
