# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any

from .classifier import RevertClassifier, build_classifier
from .discord import Publisher
from .formatter import NotificationFormatter
from .logging_setup import log_server_action
from .models import ChangeEvent, MalformedEvent, NotificationMessage, Qualifying
from .pages import MonitoredPages
from .settings import FeedSettings
from .task_control import StopSignal

LOGGER = logging.getLogger(__name__)

SCRIPT_NAME = "revert_feed"


@dataclass
class FeedStats:
    seen: int = 0
    malformed: int = 0
    qualifying: int = 0
    published: int = 0
    publish_failures: int = 0
    errors: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class RevertFeed:
    """Filter, classify, format and publish stream records one at a time.

    No per-event failure escapes `handle`: malformed records, classifier or
    formatter errors and publish failures are logged and the next record is
    processed. Delivery is at most once per process.
    """

    def __init__(
        self,
        classifier: RevertClassifier,
        formatter: NotificationFormatter,
        pages: MonitoredPages,
        publisher: Publisher,
        stop_event: StopSignal | None = None,
    ) -> None:
        self.classifier = classifier
        self.formatter = formatter
        self.pages = pages
        self.publisher = publisher
        self.stop_event = stop_event or StopSignal(kill_switch=None)
        self.stats = FeedStats()

    def handle(self, record: Mapping[str, Any]) -> NotificationMessage | None:
        self.stats.seen += 1
        try:
            event = ChangeEvent.from_stream(record)
        except MalformedEvent as exc:
            self.stats.malformed += 1
            log_server_action("skip_malformed", script_name=SCRIPT_NAME, level="DEBUG", context={"error": exc})
            return None

        # One snapshot per event; a refresh in between cannot change the answer.
        monitored = self.pages.snapshot()
        if not self.classifier.passes_prefilter(event, monitored):
            return None

        try:
            result = self.classifier.classify(event, monitored)
            if not isinstance(result, Qualifying):
                log_server_action(
                    "skip_not_qualifying",
                    script_name=SCRIPT_NAME,
                    level="DEBUG",
                    context={"revid": event.revision_id, "title": event.title, "cause": result.cause},
                )
                return None
            LOGGER.info("Found new edit by %s (%s): %s", event.editor_name, event.revision_id, event.raw_comment)
            message = self.formatter.format(result)
        except Exception as exc:
            self.stats.errors += 1
            LOGGER.exception("Skipping revision %s on %s: %s", event.revision_id, event.title, exc)
            return None

        self.stats.qualifying += 1
        self._publish(message)
        return message

    def _publish(self, message: NotificationMessage) -> None:
        try:
            self.publisher.publish(message.text)
        except Exception as exc:
            self.stats.publish_failures += 1
            log_server_action(
                "publish_failed",
                script_name=SCRIPT_NAME,
                level="WARNING",
                context={"revid": message.revision_id, "error": str(exc)[:300]},
            )
            return
        self.stats.published += 1
        log_server_action("published", script_name=SCRIPT_NAME, context={"revid": message.revision_id})

    def run(self, records: Iterable[Mapping[str, Any]]) -> FeedStats:
        for record in records:
            if self.stop_event.is_set():
                break
            self.handle(record)
        return self.stats


def build_feed(
    settings: FeedSettings,
    pages: MonitoredPages,
    publisher: Publisher,
    stop_event: StopSignal | None = None,
) -> RevertFeed:
    classifier = build_classifier(
        target_wiki=settings.target_wiki,
        exempt_marker=settings.exempt_marker,
        exempt_editors=settings.exempt_editors,
    )
    formatter = NotificationFormatter(
        limit=settings.message_limit,
        diff_url=settings.diff_url,
        link_length=settings.link_length,
    )
    return RevertFeed(classifier, formatter, pages, publisher, stop_event=stop_event)
