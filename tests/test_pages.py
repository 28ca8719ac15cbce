from __future__ import annotations

from pathlib import Path

import pytest

from revertfeed.models import SetupError
from revertfeed.pages import FilePageSource, MonitoredPages, PageRefresher, load_initial_pages


class StaticSource:
    def __init__(self, *answers: set[str] | Exception) -> None:
        self.answers = list(answers)
        self.calls = 0

    def fetch_titles(self) -> set[str]:
        self.calls += 1
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        return set(answer)


def test_replace_swaps_the_whole_snapshot() -> None:
    pages = MonitoredPages(["A", "B"], clock=lambda: 42.0)
    before = pages.snapshot()
    pages.replace(["C"])
    assert before == frozenset({"A", "B"})
    assert pages.snapshot() == frozenset({"C"})
    assert "C" in pages and "A" not in pages
    assert len(pages) == 1
    assert pages.refreshed_at == 42.0


def test_new_set_has_no_refresh_time() -> None:
    assert MonitoredPages().refreshed_at is None


def test_file_source_reads_titles(tmp_path: Path) -> None:
    path = tmp_path / "pages.txt"
    path.write_text("# tropical cyclones\nHurricane_Katrina\n\nTropical Storm Allison\n", encoding="utf-8")
    assert FilePageSource(path).fetch_titles() == {"Hurricane Katrina", "Tropical Storm Allison"}


def test_file_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        FilePageSource(tmp_path / "missing.txt").fetch_titles()


def test_initial_load_fills_the_set() -> None:
    pages = MonitoredPages()
    assert load_initial_pages(StaticSource({"A", "B"}), pages) == 2
    assert pages.snapshot() == frozenset({"A", "B"})


@pytest.mark.parametrize("answer", [set(), OSError("index unreachable")])
def test_initial_load_failure_is_fatal(answer: set[str] | Exception) -> None:
    pages = MonitoredPages()
    with pytest.raises(SetupError):
        load_initial_pages(StaticSource(answer), pages)
    assert len(pages) == 0


def test_missing_file_aborts_startup(tmp_path: Path) -> None:
    with pytest.raises(SetupError):
        load_initial_pages(FilePageSource(tmp_path / "missing.txt"), MonitoredPages())


def test_refresh_replaces_pages() -> None:
    pages = MonitoredPages(["A"])
    refresher = PageRefresher(StaticSource({"B", "C"}), pages)
    assert refresher.refresh_once() is True
    assert pages.snapshot() == frozenset({"B", "C"})
    assert refresher.failures == 0


@pytest.mark.parametrize("answer", [set(), RuntimeError("api down")])
def test_failed_refresh_keeps_previous_pages(answer: set[str] | Exception) -> None:
    pages = MonitoredPages(["A"])
    refresher = PageRefresher(StaticSource(answer), pages)
    assert refresher.refresh_once() is False
    assert pages.snapshot() == frozenset({"A"})
    assert refresher.failures == 1


def test_refresh_recovers_after_failure() -> None:
    pages = MonitoredPages(["A"])
    refresher = PageRefresher(StaticSource(RuntimeError("api down"), {"D"}), pages)
    assert refresher.refresh_once() is False
    assert refresher.refresh_once() is True
    assert pages.snapshot() == frozenset({"D"})


def test_interval_has_a_floor() -> None:
    assert PageRefresher(StaticSource({"A"}), MonitoredPages(), interval_seconds=0).interval_seconds == 1.0


def test_refresher_thread_stops() -> None:
    refresher = PageRefresher(StaticSource({"A"}), MonitoredPages(), interval_seconds=60)
    refresher.start()
    assert refresher._thread is not None and refresher._thread.is_alive()
    thread = refresher._thread
    refresher.stop(timeout=5.0)
    assert not thread.is_alive()
    assert refresher._thread is None
