#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import os
import time

from revertfeed.discord import build_alert_channel
from revertfeed.env import load_dotenv
from revertfeed.logging_setup import configure_root_logging, log_server_action
from revertfeed.settings import FeedSettings
from revertfeed.tasks import pages_report, revert_feed

LOGGER = logging.getLogger("run_bot")

TASKS = {
    "revert-feed": revert_feed.main,
    "pages-report": pages_report.main,
}


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a revertfeed task")
    parser.add_argument("task", choices=sorted(TASKS.keys()), help="Task name to run")
    parser.add_argument("--dry-run", action="store_true", help="Log notifications instead of publishing them")
    args = parser.parse_args()
    task_name = args.task
    if args.dry_run:
        os.environ["REVERTFEED_DRY_RUN"] = "1"

    started = time.monotonic()
    load_dotenv()
    configure_root_logging(logger_name="run_bot.py")
    try:
        exit_code = int(TASKS[task_name]())
    except Exception as exc:
        duration = time.monotonic() - started
        LOGGER.exception("Task %s crashed", task_name)
        log_server_action(
            "task_runner_exception",
            script_name="run_bot.py",
            level="CRITICAL",
            context={"task": task_name, "error": str(exc)[:300], "duration_seconds": round(duration, 2)},
        )
        build_alert_channel(FeedSettings.from_env(), "run_bot.py").send(
            f"Task {task_name} crashed: {exc}",
            level="CRITICAL",
            fields={"task": task_name},
        )
        return 1

    level = "SUCCESS" if exit_code == 0 else "WARNING"
    log_server_action(
        "task_runner_exit",
        script_name="run_bot.py",
        level=level,
        context={"task": task_name, "exit_code": exit_code, "duration_seconds": round(time.monotonic() - started, 2)},
    )
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
