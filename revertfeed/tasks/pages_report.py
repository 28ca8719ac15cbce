# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import time

from revertfeed.env import load_dotenv
from revertfeed.files import write_lines
from revertfeed.logging_setup import configure_root_logging, log_server_action
from revertfeed.models import SetupError
from revertfeed.pages import MonitoredPages, load_initial_pages
from revertfeed.paths import LOG_DIR, ROOT_DIR
from revertfeed.settings import FeedSettings
from revertfeed.tasks.revert_feed import build_page_source
from revertfeed.wiki import prepare_runtime

LOGGER = logging.getLogger(__name__)

SNAPSHOT_FILE = LOG_DIR / "monitored_pages.txt"


def run() -> int:
    started = time.monotonic()
    script_name = "pages_report.py"
    load_dotenv()
    configure_root_logging(logger_name=script_name)
    prepare_runtime(ROOT_DIR)
    settings = FeedSettings.from_env()

    pages = MonitoredPages()
    try:
        total = load_initial_pages(build_page_source(settings), pages)
    except SetupError as exc:
        LOGGER.error("Page list unavailable: %s", exc)
        log_server_action("pages_report_failed", script_name=script_name, level="ERROR", context={"error": exc})
        return 1

    # The snapshot can be fed back through REVERTFEED_PAGES_FILE for offline runs.
    write_lines(SNAPSHOT_FILE, sorted(pages.snapshot()))
    log_server_action(
        "pages_report",
        script_name=script_name,
        level="SUCCESS",
        context={
            "index_page": settings.index_page,
            "pages": total,
            "snapshot": SNAPSHOT_FILE,
            "duration_seconds": round(time.monotonic() - started, 2),
        },
    )
    return 0


def main() -> int:
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
