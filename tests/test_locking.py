from __future__ import annotations

import os
from pathlib import Path

import pytest

from revertfeed.locking import LockUnavailableError, SingleInstanceLock, lock_path


def test_lock_records_the_owner(tmp_path: Path) -> None:
    with SingleInstanceLock("revert-feed", lock_dir=tmp_path) as lock:
        assert lock.held
        assert lock.path == tmp_path / "revert-feed.lock"
        assert lock.owner_pid() == os.getpid()
    assert not lock.held
    assert lock.owner_pid() is None


def test_second_holder_learns_the_owner(tmp_path: Path) -> None:
    with SingleInstanceLock("revert-feed", lock_dir=tmp_path):
        with pytest.raises(LockUnavailableError) as excinfo:
            SingleInstanceLock("revert-feed", lock_dir=tmp_path).acquire()
    assert excinfo.value.owner_pid == os.getpid()
    assert excinfo.value.path == tmp_path / "revert-feed.lock"


def test_lock_can_be_taken_again_after_release(tmp_path: Path) -> None:
    lock = SingleInstanceLock("revert-feed", lock_dir=tmp_path)
    lock.acquire()
    lock.release()
    lock.release()
    with SingleInstanceLock("revert-feed", lock_dir=tmp_path) as again:
        assert again.held


def test_unsafe_names_map_to_one_path(tmp_path: Path) -> None:
    assert lock_path("revert feed/en", tmp_path) == tmp_path / "revert_feed_en.lock"
    assert lock_path("..", tmp_path) == tmp_path / "revertfeed.lock"
    with SingleInstanceLock("revert feed/en", lock_dir=tmp_path) as lock:
        assert SingleInstanceLock("revert feed/en", lock_dir=tmp_path).owner_pid() == os.getpid()
        assert lock.path.name == "revert_feed_en.lock"


def test_owner_of_missing_lock(tmp_path: Path) -> None:
    assert SingleInstanceLock("nothing", lock_dir=tmp_path).owner_pid() is None
