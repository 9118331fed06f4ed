#!/usr/bin/env python3
"""
Command-line change watcher.

Usage:
    changewatch /etc/exports /srv/share --recursive
    changewatch /srv/share --debounce 1000 --ignore "*.tmp" --ignore ".*"
    python -m changewatch /srv/share
"""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import WatcherConfig
from .models import ChangeType
from .watcher import FileSystemWatcher

logger = logging.getLogger("changewatch.cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self):
        self.stop_event = threading.Event()
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.stop_event.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self.stop_event.wait(timeout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="changewatch",
        description="Watch files and directories and print classified changes.",
    )
    parser.add_argument("paths", nargs="+", help="Files or directories to watch")
    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Watch directories together with their subdirectory tree",
    )
    parser.add_argument(
        "--debounce",
        type=int,
        default=None,
        help="Debounce window in milliseconds (0 disables coalescing)",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="GLOB",
        help="Filename pattern to ignore (repeatable)",
    )
    parser.add_argument(
        "--no-immediate",
        action="store_true",
        help="Only print coalesced events",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def build_config(args: argparse.Namespace) -> WatcherConfig:
    """Environment configuration overridden by command-line flags."""
    config = WatcherConfig.from_env()
    if args.debounce is not None:
        config.debounce_ms = max(0, args.debounce)
    for pattern in args.ignore:
        if pattern and pattern not in config.ignore_patterns:
            config.ignore_patterns.append(pattern)
    return config


def format_event(kind: str, path: str, change_type: ChangeType) -> str:
    return f"{kind:<9} {change_type.value:<20} {path}"


def add_paths(watcher: FileSystemWatcher, paths: List[str], recursive: bool) -> int:
    """
    Add every path to the watcher.

    Returns:
        Number of paths that are being watched
    """
    added = 0
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            ok = watcher.add_directory(path, recursive=recursive)
        else:
            ok = watcher.add_file(path)
        if ok:
            added += 1
            logger.info(f"Watching {path.resolve()}")
    return added


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    config = build_config(args)

    with FileSystemWatcher(config) as watcher:
        watcher.watch_failed.connect(
            lambda path, reason: logger.error(f"Cannot watch {path}: {reason}")
        )
        if not args.no_immediate:
            watcher.file_changed.connect(
                lambda path, change: print(format_event("file", path, change), flush=True)
            )
            watcher.directory_changed.connect(
                lambda path, change: print(format_event("directory", path, change), flush=True)
            )
        watcher.path_changed.connect(
            lambda path, change: print(format_event("changed", path, change), flush=True)
        )

        if add_paths(watcher, args.paths, args.recursive) == 0:
            logger.error("No path could be watched")
            return 1

        shutdown = GracefulShutdown()
        logger.info(f"Watching with debounce {watcher.debounce_interval()} ms, press Ctrl+C to stop")
        while not shutdown.wait(0.5):
            pass

    logger.info("Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
