# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

from .files import read_title_set
from .models import SetupError

LOGGER = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 600.0
INDEX_PAGE = "User:Zoomiebot/WPTC Indexer/Complete"


class PageSource(Protocol):
    def fetch_titles(self) -> set[str]:
        ...


class MonitoredPages:
    """Titles whose reverts are reported.

    Readers always see one complete snapshot: `replace` builds a new frozenset
    and swaps the reference, it never mutates the current one.
    """

    def __init__(self, titles: Iterable[str] = (), clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._titles: frozenset[str] = frozenset(titles)
        self.refreshed_at: float | None = None

    def __contains__(self, title: object) -> bool:
        return title in self._titles

    def __len__(self) -> int:
        return len(self._titles)

    def snapshot(self) -> frozenset[str]:
        return self._titles

    def replace(self, titles: Iterable[str]) -> None:
        self._titles = frozenset(titles)
        self.refreshed_at = self._clock()


class FilePageSource:
    def __init__(self, path: Path) -> None:
        self.path = path

    def fetch_titles(self) -> set[str]:
        if not self.path.exists():
            raise FileNotFoundError(self.path)
        return {title.replace("_", " ") for title in read_title_set(self.path)}


def load_initial_pages(source: PageSource, pages: MonitoredPages) -> int:
    LOGGER.info("Getting pages...")
    try:
        titles = source.fetch_titles()
    except Exception as exc:
        raise SetupError(f"unable to fetch the monitored page list: {exc}") from exc
    if not titles:
        raise SetupError("the monitored page list is empty")
    pages.replace(titles)
    LOGGER.info("Pages received, found %s.", len(pages))
    return len(pages)


class PageRefresher:
    """Replace the monitored page set on a fixed interval in a daemon thread.

    A failed refresh keeps the previous snapshot. An empty answer is treated as
    a failure too, since it would silence the feed until the next cycle.
    """

    def __init__(
        self,
        source: PageSource,
        pages: MonitoredPages,
        interval_seconds: float = DEFAULT_REFRESH_SECONDS,
    ) -> None:
        self.source = source
        self.pages = pages
        self.interval_seconds = max(float(interval_seconds), 1.0)
        self.failures = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def refresh_once(self) -> bool:
        LOGGER.info("Getting pages...")
        try:
            titles = self.source.fetch_titles()
        except Exception as exc:
            self.failures += 1
            LOGGER.warning("Page list refresh failed, keeping %s pages: %s", len(self.pages), exc)
            return False
        if not titles:
            self.failures += 1
            LOGGER.warning("Page list refresh returned no pages, keeping %s pages", len(self.pages))
            return False
        self.pages.replace(titles)
        LOGGER.info("Pages received, found %s.", len(self.pages))
        return True

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.refresh_once()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name="page-refresher", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
