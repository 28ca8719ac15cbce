# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .env import get_env, get_int_env
from .paths import BOT_LOG_FILE

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
SERVER_LOGGER = logging.getLogger("revertfeed.server")
# SUCCESS is the level name used in run reports; it is logged at INFO.
LEVEL_ALIASES = {"SUCCESS": logging.INFO}


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or "INFO").strip().upper()
    if name in LEVEL_ALIASES:
        return LEVEL_ALIASES[name]
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_root_logging(logger_name: str, level: str | None = None, log_file: Path | None = None) -> logging.Logger:
    """Console plus rotating file logging, configured once per process."""
    root = logging.getLogger()
    root.setLevel(_resolve_level(level or get_env("REVERTFEED_LOG_LEVEL", "INFO")))
    if getattr(root, "_revertfeed_configured", False):
        return logging.getLogger(logger_name)

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    target = log_file or Path(get_env("REVERTFEED_LOG_FILE", str(BOT_LOG_FILE)) or str(BOT_LOG_FILE))
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            target,
            maxBytes=max(get_int_env("REVERTFEED_LOG_MAX_BYTES", 5_000_000), 10_000),
            backupCount=max(get_int_env("REVERTFEED_LOG_BACKUPS", 5), 1),
            encoding="utf-8",
        )
    except OSError as exc:
        root.warning("File logging disabled (%s): %s", target, exc)
    else:
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # pywikibot and urllib3 are chatty at INFO.
    logging.getLogger("pywiki").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    root._revertfeed_configured = True  # type: ignore[attr-defined]
    return logging.getLogger(logger_name)


def _format_context(context: dict[str, object] | None) -> str:
    if not context:
        return ""
    parts = []
    for key, value in context.items():
        text = str(value).replace("\n", " ")
        if " " in text or not text:
            text = repr(text)
        parts.append(f"{key}={text}")
    return " " + " ".join(parts)


def log_server_action(
    action: str,
    *,
    script_name: str,
    level: str = "INFO",
    context: dict[str, object] | None = None,
) -> None:
    """One structured line per pipeline decision: `script action key=value ...`."""
    SERVER_LOGGER.log(_resolve_level(level), "%s %s%s", script_name, action, _format_context(context))
