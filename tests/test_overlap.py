"""Tests for the overlap guard."""

import hashlib
import pytest
from unittest.mock import patch
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from scheduler import OverlapGuard, GuardStorageUnwritable


@pytest.fixture
def guard(tmp_path):
    return OverlapGuard(str(tmp_path / "locks"))


class TestOverlapGuard:
    """Test lock marker handling."""

    def test_acquire_release_cycle(self, guard):
        assert guard.try_acquire(0) is True
        assert guard.try_acquire(0) is False
        guard.release(0)
        assert guard.try_acquire(0) is True

    def test_tasks_do_not_share_markers(self, guard):
        assert guard.try_acquire(0) is True
        assert guard.try_acquire(1) is True
        assert guard.marker_path(0) != guard.marker_path(1)

    def test_marker_name_and_content(self, guard, tmp_path):
        guard.try_acquire(3)
        expected = hashlib.md5(b"scheduler_task_3").hexdigest() + ".lock"
        path = tmp_path / "locks" / expected
        assert guard.marker_path(3) == path
        assert path.read_text().isdigit()
        assert guard.is_held(3) is True

    def test_creates_missing_directory(self, guard, tmp_path):
        assert not (tmp_path / "locks").exists()
        guard.try_acquire(0)
        assert (tmp_path / "locks").is_dir()

    def test_release_without_marker(self, guard):
        guard.release(5)
        assert guard.is_held(5) is False

    def test_unwritable_directory(self, guard):
        with patch("scheduler.overlap.os.access", return_value=False):
            with pytest.raises(GuardStorageUnwritable):
                guard.try_acquire(0)

    def test_marker_from_another_process_blocks(self, guard, tmp_path):
        (tmp_path / "locks").mkdir()
        guard.marker_path(2).write_text("1700000000")
        assert guard.try_acquire(2) is False

    def test_clear(self, guard):
        guard.try_acquire(0)
        guard.try_acquire(1)
        assert guard.clear() == 2
        assert guard.is_held(0) is False
        assert guard.try_acquire(0) is True

    def test_clear_missing_directory(self, guard):
        assert guard.clear() == 0

    def test_failed_write_removes_marker(self, guard):
        with patch("scheduler.overlap.os.fdopen", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                guard.try_acquire(0)
        assert guard.is_held(0) is False
        assert guard.try_acquire(0) is True
