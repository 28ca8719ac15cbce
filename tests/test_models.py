from __future__ import annotations

from typing import Any, Callable

import pytest

from revertfeed.models import ChangeEvent, EventType, MalformedEvent

MakeRecord = Callable[..., dict[str, Any]]


def test_edit_record_is_parsed(make_record: MakeRecord) -> None:
    event = ChangeEvent.from_stream(make_record(parsedcomment="<b>rendered</b>"))
    assert event.wiki_id == "enwiki"
    assert event.event_type is EventType.EDIT
    assert event.title == "Hurricane Katrina"
    assert event.editor_name == "Bar"
    assert event.revision_id == 12345
    assert event.parsed_comment == "<b>rendered</b>"


def test_missing_rendered_summary_is_allowed(make_record: MakeRecord) -> None:
    record = make_record()
    del record["parsedcomment"]
    assert ChangeEvent.from_stream(record).parsed_comment is None


@pytest.mark.parametrize("event_type", ["log", "categorize", "new", None])
def test_other_types_need_no_revision(make_record: MakeRecord, event_type: str | None) -> None:
    record = make_record(type=event_type)
    del record["revision"]
    event = ChangeEvent.from_stream(record)
    assert event.event_type is EventType.OTHER
    assert event.revision_id == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"wiki": None},
        {"title": 42},
        {"user": None},
        {"comment": None},
        {"revision": None},
        {"revision": {"old": 1}},
        {"revision": {"new": "12345"}},
        {"revision": {"new": True}},
    ],
)
def test_incomplete_edit_is_malformed(make_record: MakeRecord, overrides: dict[str, Any]) -> None:
    with pytest.raises(MalformedEvent):
        ChangeEvent.from_stream(make_record(**overrides))


def test_non_mapping_is_malformed() -> None:
    with pytest.raises(MalformedEvent):
        ChangeEvent.from_stream(["enwiki", "edit"])  # type: ignore[arg-type]
