# -*- coding: utf-8 -*-
from __future__ import annotations

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
LOG_DIR = ROOT_DIR / "logs"
BOT_LOG_FILE = LOG_DIR / "revertfeed.log"
LOCK_DIR = LOG_DIR / "locks"
CONTROL_DIR = ROOT_DIR / "control"
KILL_SWITCH_FILE = CONTROL_DIR / "kill.switch"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
