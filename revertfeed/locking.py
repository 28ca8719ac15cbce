# -*- coding: utf-8 -*-
from __future__ import annotations

import fcntl
import os
import re
from pathlib import Path
from typing import TextIO

from .paths import LOCK_DIR, ensure_dir

UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]")


def lock_path(lock_name: str, lock_dir: Path | None = None) -> Path:
    safe_name = UNSAFE_NAME_RE.sub("_", lock_name).strip("._") or "revertfeed"
    return (lock_dir or LOCK_DIR) / f"{safe_name}.lock"


def read_owner_pid(path: Path) -> int | None:
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return int(raw) if raw.isdigit() else None


class LockUnavailableError(RuntimeError):
    """Another feed process holds the lock."""

    def __init__(self, path: Path, owner_pid: int | None) -> None:
        super().__init__(f"{path} is held by pid {owner_pid if owner_pid is not None else 'unknown'}")
        self.path = path
        self.owner_pid = owner_pid


class SingleInstanceLock:
    """
    Exclusive non-blocking `flock` held for the life of one feed process.

    Two feeds on the same stream would post every revert twice. While the lock
    is held the file contains the owner's pid; it is emptied on release.
    """

    def __init__(self, lock_name: str, lock_dir: Path | None = None) -> None:
        self.path = lock_path(lock_name, lock_dir)
        self._handle: TextIO | None = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def owner_pid(self) -> int | None:
        return read_owner_pid(self.path)

    def acquire(self) -> None:
        ensure_dir(self.path.parent)
        handle = self.path.open("a+", encoding="utf-8")
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            handle.close()
            raise LockUnavailableError(self.path, self.owner_pid()) from exc

        handle.seek(0)
        handle.truncate()
        handle.write(f"{os.getpid()}\n")
        handle.flush()
        self._handle = handle

    def release(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            handle.seek(0)
            handle.truncate()
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        finally:
            handle.close()

    def __enter__(self) -> SingleInstanceLock:
        self.acquire()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.release()
