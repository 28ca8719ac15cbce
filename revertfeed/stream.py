# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from pywikibot.comms.eventstreams import EventStreams

from .task_control import StopSignal

LOGGER = logging.getLogger(__name__)

STREAM_NAME = "recentchange"
RECONNECT_DELAY_SECONDS = 5.0
MAX_RECONNECT_DELAY_SECONDS = 120.0
READ_TIMEOUT_SECONDS = 30.0


class StreamStopped(Exception):
    """Raised from inside the stream filters once a stop is requested."""


class RecentChangeStream:
    """Records from the Wikimedia `recentchange` stream.

    pywikibot's EventStreams already retries dropped connections; this wrapper
    only restarts the whole stream when iteration itself fails, backing off
    between attempts.

    EventStreams applies the `wiki`/`type` filter on the client, so a quiet
    wiki can go a long time without yielding anything. The stop flag is
    therefore checked by a filter that sees every record of the firehose,
    and the read timeout bounds the wait on a silent connection.
    """

    def __init__(
        self,
        wiki: str,
        stop_event: StopSignal,
        event_type: str = "edit",
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        read_timeout: float = READ_TIMEOUT_SECONDS,
    ) -> None:
        self.wiki = wiki
        self.event_type = event_type
        self.stop_event = stop_event
        self.reconnect_delay = reconnect_delay
        self.read_timeout = read_timeout
        self.errors = 0

    def _check_stop(self, _data: dict[str, Any]) -> bool:
        if self.stop_event.is_set():
            raise StreamStopped(self.stop_event.reason)
        return True

    def _open(self) -> EventStreams:
        stream = EventStreams(streams=STREAM_NAME, timeout=self.read_timeout)
        # Registered first so it runs before the filters that drop records.
        stream.register_filter(self._check_stop, ftype="all")
        stream.register_filter(wiki=self.wiki, type=self.event_type)
        return stream

    def __iter__(self) -> Iterator[dict[str, Any]]:
        delay = self.reconnect_delay
        while not self.stop_event.is_set():
            try:
                stream = self._open()
                LOGGER.info("Listening!")
                for record in stream:
                    delay = self.reconnect_delay
                    yield record
                    if self.stop_event.is_set():
                        return
            except StreamStopped:
                LOGGER.info("Stream closed: %s", self.stop_event.reason)
                return
            except Exception as exc:
                self.errors += 1
                LOGGER.warning("An error occurred with the stream! %s", exc)
            if self.stop_event.wait(delay):
                return
            delay = min(delay * 2, MAX_RECONNECT_DELAY_SECONDS)
