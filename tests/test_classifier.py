"""Tests for classifier module."""

import os

import pytest

from changewatch.classifier import ChangeClassifier
from changewatch.models import ChangeType, Snapshot
from changewatch.snapshot_cache import SnapshotCache

from conftest import touch_later


@pytest.fixture
def cache():
    return SnapshotCache()


@pytest.fixture
def classifier(cache):
    return ChangeClassifier(cache)


class TestChangeClassifier:
    """Tests for ChangeClassifier class."""

    def test_first_observation_of_file_is_created(self, classifier, cache, tmp_path):
        path = str(tmp_path / "new.txt")
        with open(path, "w") as f:
            f.write("x")

        assert classifier.classify(path) == ChangeType.FILE_CREATED
        assert cache.get(path).exists is True

    def test_first_observation_of_directory_is_created(self, classifier, tmp_path):
        path = str(tmp_path / "sub")
        os.mkdir(path)

        assert classifier.classify(path) == ChangeType.DIRECTORY_CREATED

    def test_cached_absent_snapshot_counts_as_first_observation(self, classifier, cache, tmp_path):
        path = str(tmp_path / "later.txt")
        cache.put(path, Snapshot(exists=False))
        with open(path, "w") as f:
            f.write("x")

        assert classifier.classify(path) == ChangeType.FILE_CREATED

    def test_deleted_file(self, classifier, cache, tmp_path):
        path = str(tmp_path / "gone.txt")
        with open(path, "w") as f:
            f.write("x")
        cache.put(path, Snapshot.capture(path))
        os.remove(path)

        assert classifier.classify(path) == ChangeType.FILE_DELETED
        assert path not in cache

    def test_deleted_directory_uses_cached_kind(self, classifier, cache, tmp_path):
        path = str(tmp_path / "sub")
        os.mkdir(path)
        cache.put(path, Snapshot.capture(path))
        os.rmdir(path)

        assert classifier.classify(path) == ChangeType.DIRECTORY_DELETED

    def test_second_notification_after_delete_is_unknown(self, classifier, cache, tmp_path):
        path = str(tmp_path / "gone.txt")
        with open(path, "w") as f:
            f.write("x")
        cache.put(path, Snapshot.capture(path))
        os.remove(path)

        assert classifier.classify(path) == ChangeType.FILE_DELETED
        assert classifier.classify(path) == ChangeType.UNKNOWN

    def test_never_seen_absent_path_is_unknown(self, classifier, cache, tmp_path):
        path = str(tmp_path / "never.txt")

        assert classifier.classify(path) == ChangeType.UNKNOWN
        assert len(cache) == 0

    def test_modified_file(self, classifier, cache, tmp_path):
        path = str(tmp_path / "file.txt")
        with open(path, "w") as f:
            f.write("original")
        cache.put(path, Snapshot.capture(path))

        touch_later(path, "changed content")

        assert classifier.classify(path) == ChangeType.FILE_MODIFIED

    def test_modified_refreshes_cache(self, classifier, cache, tmp_path):
        path = str(tmp_path / "file.txt")
        with open(path, "w") as f:
            f.write("original")
        cache.put(path, Snapshot.capture(path))
        touch_later(path, "changed content")

        classifier.classify(path)

        assert cache.get(path) == Snapshot.capture(path)

    def test_size_change_with_same_mtime(self, classifier, cache, tmp_path):
        path = str(tmp_path / "file.txt")
        with open(path, "w") as f:
            f.write("abc")
        before = Snapshot.capture(path)
        cache.put(path, before)

        with open(path, "w") as f:
            f.write("abcdef")
        st = os.stat(path)
        os.utime(path, ns=(st.st_atime_ns, before.mtime_ns))

        assert classifier.classify(path) == ChangeType.FILE_MODIFIED

    def test_permissions_change(self, classifier, cache, tmp_path):
        path = str(tmp_path / "file.txt")
        with open(path, "w") as f:
            f.write("x")
        os.chmod(path, 0o644)
        cache.put(path, Snapshot.capture(path))

        os.chmod(path, 0o600)

        assert classifier.classify(path) == ChangeType.PERMISSIONS_CHANGED

    def test_permissions_win_over_content_change(self, classifier, cache, tmp_path):
        path = str(tmp_path / "file.txt")
        with open(path, "w") as f:
            f.write("x")
        os.chmod(path, 0o644)
        cache.put(path, Snapshot.capture(path))

        touch_later(path, "longer content")
        os.chmod(path, 0o600)

        assert classifier.classify(path) == ChangeType.PERMISSIONS_CHANGED

    def test_directory_mtime_change(self, classifier, cache, tmp_path):
        path = str(tmp_path / "sub")
        os.mkdir(path)
        cache.put(path, Snapshot.capture(path))

        st = os.stat(path)
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 2_000_000_000))

        assert classifier.classify(path) == ChangeType.DIRECTORY_MODIFIED

    def test_no_observable_delta_falls_back_to_modified(self, classifier, cache, tmp_path):
        file_path = str(tmp_path / "file.txt")
        with open(file_path, "w") as f:
            f.write("x")
        dir_path = str(tmp_path / "sub")
        os.mkdir(dir_path)
        cache.put(file_path, Snapshot.capture(file_path))
        cache.put(dir_path, Snapshot.capture(dir_path))

        assert classifier.classify(file_path) == ChangeType.FILE_MODIFIED
        assert classifier.classify(dir_path) == ChangeType.DIRECTORY_MODIFIED
