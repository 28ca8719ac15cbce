# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import signal
import threading
import time
from collections.abc import Callable
from pathlib import Path
from types import FrameType

from .env import get_bool_env
from .paths import KILL_SWITCH_FILE

LOGGER = logging.getLogger(__name__)

KILL_SWITCH_CHECK_SECONDS = 5.0


def dry_run_enabled() -> bool:
    return get_bool_env("REVERTFEED_DRY_RUN", False)


def kill_switch_enabled(path: Path = KILL_SWITCH_FILE) -> bool:
    return path.exists()


class StopSignal:
    """Tells the feed to stop consuming events.

    Set by SIGINT/SIGTERM, by `stop()`, or by the kill switch file, which is
    polled at most every `check_interval` seconds. A second signal raises
    KeyboardInterrupt. The page refresher is stopped by the task, not here.
    """

    def __init__(
        self,
        kill_switch: Path | None = KILL_SWITCH_FILE,
        check_interval: float = KILL_SWITCH_CHECK_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self.kill_switch = kill_switch
        self.check_interval = check_interval
        self._clock = clock
        self._next_check = 0.0
        self.reason = ""

    def stop(self, reason: str = "requested") -> None:
        if not self._event.is_set():
            self.reason = reason
            LOGGER.info("Stop requested: %s", reason)
        self._event.set()

    def is_set(self) -> bool:
        if self._event.is_set():
            return True
        if self.kill_switch is not None:
            now = self._clock()
            if now >= self._next_check:
                self._next_check = now + self.check_interval
                if kill_switch_enabled(self.kill_switch):
                    self.stop("kill switch")
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        self._event.wait(timeout)
        return self.is_set()

    def _handle_signal(self, signum: int, _frame: FrameType | None) -> None:
        # A second signal means the graceful stop is not enough.
        if self._event.is_set():
            raise KeyboardInterrupt
        self.stop(signal.Signals(signum).name)

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGTERM, self._handle_signal)
