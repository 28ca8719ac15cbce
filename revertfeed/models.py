# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union


class RevertFeedError(Exception):
    """Base class for errors raised by the revert feed."""


class MalformedEvent(RevertFeedError):
    """A stream record is missing a field or carries one of the wrong type."""


class NormalizationFailure(RevertFeedError):
    """The rendered summary could not be turned into plain text."""


class PublishFailure(RevertFeedError):
    """The publisher could not deliver a notification."""


class SetupError(RevertFeedError):
    """Startup cannot continue (no page list, no publisher, ...)."""


class EventType(str, Enum):
    EDIT = "edit"
    OTHER = "other"

    @classmethod
    def from_stream(cls, value: object) -> EventType:
        return cls.EDIT if value == cls.EDIT.value else cls.OTHER


def _require_str(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str):
        raise MalformedEvent(f"field {key!r} missing or not a string")
    return value


def _require_revision(record: Mapping[str, Any]) -> int:
    revision = record.get("revision")
    if not isinstance(revision, Mapping):
        raise MalformedEvent("field 'revision' missing")
    value = revision.get("new")
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedEvent("field 'revision.new' missing or not an integer")
    return value


@dataclass(frozen=True)
class ChangeEvent:
    wiki_id: str
    event_type: EventType
    title: str
    editor_name: str
    raw_comment: str
    revision_id: int
    parsed_comment: str | None = None

    @classmethod
    def from_stream(cls, record: Mapping[str, Any]) -> ChangeEvent:
        """Build an event from a `mediawiki.recentchange` record.

        Non-edit records (log entries, categorizations) carry no
        `revision.new`, so only `wiki`, `type` and `title` are required for them.
        """
        if not isinstance(record, Mapping):
            raise MalformedEvent(f"expected a mapping, got {type(record).__name__}")
        wiki_id = _require_str(record, "wiki")
        event_type = EventType.from_stream(record.get("type"))
        title = _require_str(record, "title")
        if event_type is not EventType.EDIT:
            return cls(
                wiki_id=wiki_id,
                event_type=event_type,
                title=title,
                editor_name=str(record.get("user") or ""),
                raw_comment=str(record.get("comment") or ""),
                revision_id=0,
            )

        parsed = record.get("parsedcomment")
        return cls(
            wiki_id=wiki_id,
            event_type=event_type,
            title=title,
            editor_name=_require_str(record, "user"),
            raw_comment=_require_str(record, "comment"),
            revision_id=_require_revision(record),
            parsed_comment=parsed if isinstance(parsed, str) else None,
        )


@dataclass(frozen=True)
class NotQualifying:
    cause: str = ""


@dataclass(frozen=True)
class Qualifying:
    editor_name: str
    title: str
    revision_id: int
    reason: str


ClassificationResult = Union[NotQualifying, Qualifying]


@dataclass(frozen=True)
class NotificationMessage:
    text: str
    revision_id: int
