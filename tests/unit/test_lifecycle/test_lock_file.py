"""
Unit tests for PID lock files.

Liveness is injected through the ``is_running`` argument so that "another
live process" and "a dead process" can be simulated without real children.
"""

import os
from unittest.mock import patch

import pytest

from procctl.config import set_config_path
from procctl.lifecycle import LockFile, acquire_lock, release_lock
from procctl.validation import LockContention, ValidationError

OTHER_PID = 424242


def alive(*pids):
    """Liveness check that reports only ``pids`` as running."""
    return lambda pid: pid in pids


@pytest.fixture
def lock_path(tmp_path):
    return tmp_path / "app.lock"


@pytest.mark.unit
class TestAcquire:
    """Lock acquisition and stale-lock reclaim."""

    def test_fresh_path_writes_own_pid(self, lock_path):
        lock = LockFile(lock_path)

        assert lock.acquire() is True
        assert lock_path.read_text().strip() == str(os.getpid())
        assert lock.holder_pid() == os.getpid()

    def test_second_acquirer_fails_while_holder_alive(self, lock_path):
        first = LockFile(lock_path, pid=OTHER_PID, is_running=alive(OTHER_PID))
        second = LockFile(lock_path, pid=OTHER_PID + 1, is_running=alive(OTHER_PID))

        assert first.acquire() is True
        assert second.acquire() is False
        assert lock_path.read_text().strip() == str(OTHER_PID)

    def test_same_process_cannot_acquire_twice(self, lock_path):
        lock = LockFile(lock_path)

        assert lock.acquire() is True
        assert lock.acquire() is False

    def test_stale_lock_is_reclaimed(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, is_running=alive())

        assert lock.is_stale() is True
        assert lock.acquire() is True
        assert lock_path.read_text().strip() == str(os.getpid())

    @pytest.mark.parametrize("content", ["", "not-a-pid", "  \n", "-5"])
    def test_unreadable_holder_is_stale(self, lock_path, content):
        lock_path.write_text(content)
        lock = LockFile(lock_path, pid=77, is_running=lambda pid: pid > 0)

        assert lock.acquire() is True
        assert lock_path.read_text().strip() == "77"

    def test_unwritable_location_returns_false(self, tmp_path):
        lock = LockFile(tmp_path / "missing-dir" / "app.lock")

        assert lock.acquire() is False

    @pytest.mark.parametrize("path", ["", "   ", None])
    def test_empty_path_rejected(self, path):
        with pytest.raises(ValidationError):
            LockFile(path)


@pytest.mark.unit
class TestExclusiveAcquire:
    """O_CREAT | O_EXCL creation."""

    def test_fresh_path(self, lock_path):
        lock = LockFile(lock_path, exclusive=True)

        assert lock.acquire() is True
        assert lock.holder_pid() == os.getpid()

    def test_live_holder_blocks(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, exclusive=True, is_running=alive(OTHER_PID))

        assert lock.acquire() is False

    def test_file_recreated_by_a_racer_is_not_overwritten(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, pid=99, exclusive=True, is_running=alive())

        # The stale file is "removed", but a racing acquirer recreates it first
        with patch.object(LockFile, "_reclaim", return_value=True):
            assert lock.acquire() is False

        assert lock_path.read_text().strip() == str(OTHER_PID)

    def test_only_one_of_two_reclaimers_wins(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        first = LockFile(lock_path, pid=111, exclusive=True, is_running=alive())
        results = {}

        def judge_stale_holder(pid):
            # While the second acquirer is deciding the holder is dead, the
            # first one reclaims the same stale lock and takes it
            if pid == OTHER_PID and "first" not in results:
                results["first"] = first.acquire()
            return pid == 111

        second = LockFile(lock_path, pid=222, exclusive=True, is_running=judge_stale_holder)

        assert second.acquire() is False
        assert results["first"] is True
        assert lock_path.read_text().strip() == "111"

    def test_reclaim_leaves_no_files_behind(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, pid=99, exclusive=True, is_running=alive())

        assert lock.acquire() is True
        assert [p.name for p in lock_path.parent.iterdir()] == [lock_path.name]
        assert lock.holder_pid() == 99

    def test_stale_lock_removed_by_someone_else(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")

        def holder_vanishes(pid):
            lock_path.unlink()
            return False

        lock = LockFile(lock_path, pid=99, exclusive=True, is_running=holder_vanishes)

        assert lock.acquire() is True
        assert lock.holder_pid() == 99

    def test_non_exclusive_overwrites_in_the_same_race(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, pid=99, is_running=alive())

        with patch.object(LockFile, "_remove"):
            assert lock.acquire() is True

        assert lock_path.read_text().strip() == "99"


@pytest.mark.unit
class TestRelease:
    """Best-effort release."""

    def test_release_then_acquire_always_succeeds(self, lock_path):
        holder = LockFile(lock_path, pid=OTHER_PID, is_running=alive(OTHER_PID))
        contender = LockFile(lock_path, pid=55, is_running=alive(OTHER_PID))
        assert holder.acquire() is True

        contender.release()

        assert lock_path.exists() is False
        assert contender.acquire() is True

    def test_release_missing_file_is_silent(self, lock_path):
        LockFile(lock_path).release()
        assert not lock_path.exists()

    def test_release_unlink_error_is_silent(self, lock_path):
        lock_path.write_text("1\n")
        with patch("pathlib.Path.unlink", side_effect=PermissionError("denied")):
            LockFile(lock_path).release()
        assert lock_path.exists()


@pytest.mark.unit
class TestHoldAndRetry:
    """Context manager and retrying acquisition."""

    def test_hold_releases_on_exit(self, lock_path):
        with LockFile(lock_path).hold() as lock:
            assert lock.is_held()
        assert not lock_path.exists()

    def test_hold_releases_on_error(self, lock_path):
        with pytest.raises(RuntimeError):
            with LockFile(lock_path).hold():
                raise RuntimeError("work failed")
        assert not lock_path.exists()

    def test_hold_raises_contention(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, is_running=alive(OTHER_PID))

        with pytest.raises(LockContention) as exc_info:
            with lock.hold():
                pass

        assert exc_info.value.holder_pid == OTHER_PID
        assert exc_info.value.path == lock_path
        assert lock_path.exists()

    def test_retry_succeeds_once_holder_exits(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        checks = iter([True, True, False])
        lock = LockFile(lock_path, pid=55, is_running=lambda pid: next(checks))
        sleeps = []

        assert lock.acquire_with_retry(attempts=5, delay=0.5, sleep=sleeps.append) is True
        assert sleeps == [0.5, 0.5]
        assert lock.holder_pid() == 55

    def test_retry_gives_up(self, lock_path):
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, is_running=alive(OTHER_PID))
        sleeps = []

        assert lock.acquire_with_retry(attempts=3, delay=0.25, sleep=sleeps.append) is False
        assert sleeps == [0.25, 0.25]

    def test_retry_defaults_come_from_config(self, lock_path, config_file):
        set_config_path(config_file)
        lock_path.write_text(f"{OTHER_PID}\n")
        lock = LockFile(lock_path, is_running=alive(OTHER_PID))
        sleeps = []

        assert lock.acquire_with_retry(sleep=sleeps.append) is False
        # [lock] retries = 4, retry_delay = 0.2 in the sample config
        assert sleeps == [0.2, 0.2, 0.2]


@pytest.mark.unit
class TestLockLocation:
    """Lock paths built by name."""

    def test_explicit_directory(self, tmp_path):
        lock = LockFile.in_directory("svc.lock", tmp_path)
        assert lock.path == tmp_path / "svc.lock"

    def test_configured_directory(self, config_file):
        set_config_path(config_file)
        lock = LockFile.in_directory("svc.lock")
        assert lock.path == config_file.parent / "locks" / "svc.lock"

    def test_temp_directory_fallback(self, app_config, tmp_path):
        with patch("procctl.lifecycle.lock_file.get_config", return_value=app_config), \
                patch("procctl.lifecycle.lock_file.tempfile.gettempdir", return_value=str(tmp_path)):
            lock = LockFile.in_directory("svc.lock")
        assert lock.path == tmp_path / "svc.lock"


@pytest.mark.unit
class TestModuleFunctions:
    """acquire_lock / release_lock."""

    def test_acquire_and_release(self, lock_path):
        assert acquire_lock(lock_path) is True
        assert acquire_lock(lock_path) is False
        release_lock(lock_path)
        assert acquire_lock(lock_path) is True
        release_lock(lock_path)
        assert not lock_path.exists()

    def test_release_empty_path_is_silent(self):
        release_lock("")
