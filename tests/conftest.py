from __future__ import annotations

from typing import Any, Callable

import pytest

from revertfeed.models import ChangeEvent, EventType

MONITORED_TITLE = "Hurricane Katrina"
ROLLBACK_SUMMARY = "Reverted 1 edit by Foo (talk) to last version by Bar (talk): unsourced claim"


@pytest.fixture
def make_event() -> Callable[..., ChangeEvent]:
    def _make(**overrides: Any) -> ChangeEvent:
        values: dict[str, Any] = {
            "wiki_id": "enwiki",
            "event_type": EventType.EDIT,
            "title": MONITORED_TITLE,
            "editor_name": "Bar",
            "raw_comment": ROLLBACK_SUMMARY,
            "revision_id": 12345,
            "parsed_comment": None,
        }
        values.update(overrides)
        if values["parsed_comment"] is None and "parsed_comment" not in overrides:
            values["parsed_comment"] = values["raw_comment"]
        return ChangeEvent(**values)

    return _make


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        record: dict[str, Any] = {
            "wiki": "enwiki",
            "type": "edit",
            "title": MONITORED_TITLE,
            "user": "Bar",
            "comment": ROLLBACK_SUMMARY,
            "parsedcomment": ROLLBACK_SUMMARY,
            "revision": {"old": 12300, "new": 12345},
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def monitored() -> frozenset[str]:
    return frozenset({MONITORED_TITLE, "Tropical Storm Allison"})
