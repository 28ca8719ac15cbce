# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from revertfeed.discord import build_alert_channel, build_publisher
from revertfeed.env import load_dotenv
from revertfeed.locking import LockUnavailableError, SingleInstanceLock
from revertfeed.logging_setup import configure_root_logging, log_server_action
from revertfeed.models import SetupError
from revertfeed.pages import FilePageSource, MonitoredPages, PageRefresher, PageSource, load_initial_pages
from revertfeed.paths import ROOT_DIR
from revertfeed.pipeline import build_feed
from revertfeed.settings import FeedSettings
from revertfeed.stream import RecentChangeStream
from revertfeed.task_control import StopSignal
from revertfeed.wiki import WikiLinksPageSource, connect_site, prepare_runtime

LOGGER = logging.getLogger(__name__)

LOCK_NAME = "revert-feed"


def build_page_source(settings: FeedSettings) -> PageSource:
    if settings.pages_file is not None:
        LOGGER.info("Monitored pages read from %s", settings.pages_file)
        return FilePageSource(settings.pages_file)
    try:
        site = connect_site(lang=settings.site_lang, family=settings.site_family, login=settings.login)
    except Exception as exc:
        raise SetupError(f"unable to connect to {settings.site_lang}.{settings.site_family}: {exc}") from exc
    return WikiLinksPageSource(site, settings.index_page)


def run() -> int:
    started = time.monotonic()
    script_name = "revert_feed.py"
    load_dotenv()
    configure_root_logging(logger_name=script_name)
    prepare_runtime(ROOT_DIR)
    settings = FeedSettings.from_env()
    alerts = build_alert_channel(settings, script_name)

    LOGGER.info("Bot starting (%s)...", datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT"))
    try:
        with SingleInstanceLock(LOCK_NAME):
            try:
                publisher = build_publisher(settings)
                pages = MonitoredPages()
                stop_event = StopSignal()
                feed = build_feed(settings, pages, publisher, stop_event=stop_event)
                page_source = build_page_source(settings)
                load_initial_pages(page_source, pages)
            except SetupError as exc:
                LOGGER.error("Startup aborted: %s", exc)
                log_server_action("run_setup_failed", script_name=script_name, level="CRITICAL", context={"error": exc})
                alerts.send(f"Startup aborted: {exc}", level="CRITICAL")
                return 1

            stop_event.install_signal_handlers()
            refresher = PageRefresher(page_source, pages, interval_seconds=settings.refresh_seconds)
            refresher.start()
            stream = RecentChangeStream(wiki=settings.target_wiki, stop_event=stop_event)
            log_server_action(
                "run_start",
                script_name=script_name,
                context={"wiki": settings.target_wiki, "pages": len(pages), "dry_run": int(settings.dry_run)},
            )
            try:
                stats = feed.run(stream)
            finally:
                refresher.stop()

            duration = time.monotonic() - started
            report = {
                **stats.as_dict(),
                "stream_errors": stream.errors,
                "refresh_failures": refresher.failures,
                "duration_seconds": round(duration, 2),
            }
            log_server_action("run_end", script_name=script_name, level="SUCCESS", context=report)
            alerts.send(
                f"Feed stopped ({stop_event.reason or 'stream ended'})",
                level="WARNING" if stats.publish_failures else "SUCCESS",
                fields=report,
            )
            return 0
    except LockUnavailableError as exc:
        LOGGER.warning("Execution skipped: revert feed already running (pid %s)", exc.owner_pid)
        return 0


def main() -> int:
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
