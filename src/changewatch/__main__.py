"""Allow running the watcher with ``python -m changewatch``."""

import sys

from .cli import main

sys.exit(main())
