"""Tests for the command-line entry point."""

import pytest

from changewatch.cli import add_paths, build_config, build_parser, format_event, main
from changewatch.models import ChangeType


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CHANGEWATCH_DEBOUNCE_MS",
        "CHANGEWATCH_CHANGE_DETECTION",
        "CHANGEWATCH_IGNORE_PATTERNS",
        "CHANGEWATCH_FOLLOW_SYMLINKS",
    ):
        monkeypatch.delenv(name, raising=False)


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["/srv/share"])

        assert args.paths == ["/srv/share"]
        assert args.recursive is False
        assert args.debounce is None
        assert args.ignore == []
        assert args.no_immediate is False
        assert args.verbose is False

    def test_all_flags(self):
        args = build_parser().parse_args([
            "/a", "/b", "-r", "--debounce", "250",
            "--ignore", "*.tmp", "--ignore", ".*", "--no-immediate", "-v",
        ])

        assert args.paths == ["/a", "/b"]
        assert args.recursive is True
        assert args.debounce == 250
        assert args.ignore == ["*.tmp", ".*"]
        assert args.no_immediate is True
        assert args.verbose is True

    def test_requires_a_path(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestBuildConfig:
    """Tests for merging flags over the environment."""

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("CHANGEWATCH_DEBOUNCE_MS", "900")
        monkeypatch.setenv("CHANGEWATCH_IGNORE_PATTERNS", "*.swp")
        args = build_parser().parse_args(["/a", "--debounce", "-5", "--ignore", "*.tmp"])

        config = build_config(args)

        assert config.debounce_ms == 0
        assert config.ignore_patterns == ["*.swp", "*.tmp"]

    def test_environment_used_without_flags(self, monkeypatch):
        monkeypatch.setenv("CHANGEWATCH_DEBOUNCE_MS", "900")
        args = build_parser().parse_args(["/a"])

        assert build_config(args).debounce_ms == 900


class TestFormatEvent:
    """Tests for event line formatting."""

    def test_columns(self):
        line = format_event("file", "/data/a.txt", ChangeType.FILE_MODIFIED)
        assert line == "file      file_modified        /data/a.txt"


class TestAddPaths:
    """Tests for adding command-line paths to a watcher."""

    def test_adds_files_and_directories(self, make_watcher, root):
        (root / "a.txt").write_text("a")
        (root / "d" / "sub").mkdir(parents=True)
        watcher = make_watcher()

        added = add_paths(watcher, [str(root / "a.txt"), str(root / "d")], recursive=True)

        assert added == 2
        assert watcher.watched_files() == [str(root / "a.txt")]
        assert sorted(watcher.watched_directories()) == [str(root / "d"), str(root / "d" / "sub")]

    def test_missing_path_not_counted(self, make_watcher, root):
        watcher = make_watcher()

        assert add_paths(watcher, [str(root / "missing")], recursive=False) == 0


class TestMain:
    """Tests for main()."""

    def test_returns_error_when_nothing_watchable(self, root):
        assert main([str(root / "missing")]) == 1
