# -*- coding: utf-8 -*-
from __future__ import annotations

import hashlib
import logging
import time
from collections import deque
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

import requests

from .models import PublishFailure, SetupError
from .settings import FeedSettings

LOGGER = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 2000
MAX_EMBED_DESCRIPTION = 4096
WEBHOOK_PREFIXES = (
    "https://discord.com/api/webhooks/",
    "https://ptb.discord.com/api/webhooks/",
    "https://canary.discord.com/api/webhooks/",
)
DRY_RUN_KEEP = 50
RETRYABLE_STATUS = {429, 500, 502, 503, 504}
LEVEL_COLORS = {
    "INFO": 3447003,
    "SUCCESS": 5763719,
    "WARNING": 15105570,
    "ERROR": 15158332,
    "CRITICAL": 15158332,
}


class Publisher(Protocol):
    def publish(self, text: str) -> None:
        ...


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _truncate(value: object, max_size: int) -> str:
    text = "" if value is None else str(value)
    return text[:max_size]


def _is_webhook_placeholder(url: str) -> bool:
    marker = url.strip().lower()
    return any(token in marker for token in ("your_webhook_here", "<webhook>", "example.com"))


def is_webhook_valid(url: str | None) -> bool:
    if not url:
        return False
    return url.strip().lower().startswith(WEBHOOK_PREFIXES)


def clean_webhook(raw_value: str | None, field_name: str) -> str | None:
    if not raw_value:
        return None
    value = raw_value.strip()
    if not value:
        return None
    if _is_webhook_placeholder(value):
        LOGGER.warning("%s is still a placeholder and will be ignored", field_name)
        return None
    if not is_webhook_valid(value):
        LOGGER.warning("%s is not a valid Discord webhook URL and will be ignored", field_name)
        return None
    return value


class DiscordWebhook:
    """Blocking webhook client shared by the feed publisher and the alert channel."""

    def __init__(
        self,
        url: str,
        timeout: float = 12.0,
        max_retries: int = 2,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.url = url
        self.timeout = max(float(timeout), 3.0)
        self.max_retries = max(int(max_retries), 0)
        self.session = session or requests.Session()
        self._sleep = sleep

    def _retry_after(self, response: requests.Response) -> float | None:
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        try:
            return max(float(payload.get("retry_after")), 0.5)
        except (TypeError, ValueError):
            return None

    def post(self, payload: dict[str, Any]) -> None:
        """POST one payload; retries only rate limits and gateway errors.

        Raises PublishFailure once attempts are exhausted.
        """
        last_error = "unknown_error"
        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.post(self.url, json=payload, timeout=self.timeout)
            except requests.RequestException as exc:
                last_error = f"request_error: {exc}"
                if attempt < self.max_retries:
                    self._sleep(min(1.5**attempt, 8.0))
                    continue
                raise PublishFailure(last_error) from exc

            if 200 <= response.status_code < 300:
                return

            body_preview = _truncate((response.text or "").replace("\n", " "), 300)
            last_error = f"http_{response.status_code}: {body_preview}"
            if response.status_code in RETRYABLE_STATUS and attempt < self.max_retries:
                retry_after = self._retry_after(response)
                self._sleep(retry_after if retry_after is not None else min(1.5**attempt, 8.0))
                continue
            raise PublishFailure(last_error)

        raise PublishFailure(last_error)


class DiscordWebhookPublisher:
    """Posts each notification as the plain content of one webhook message.

    The same text posted twice within `dedupe_window_seconds` is dropped: the
    stream can redeliver an event after a reconnect.
    """

    def __init__(
        self,
        webhook: DiscordWebhook,
        dedupe_window_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.webhook = webhook
        self.dedupe_window_seconds = max(float(dedupe_window_seconds), 0.0)
        self._clock = clock
        self._recent: dict[str, float] = {}

    def _is_duplicate(self, text: str) -> bool:
        if self.dedupe_window_seconds <= 0:
            return False
        now = self._clock()
        for key, expires_at in list(self._recent.items()):
            if expires_at <= now:
                del self._recent[key]
        fingerprint = hashlib.sha256(text.encode("utf-8")).hexdigest()
        if fingerprint in self._recent:
            return True
        self._recent[fingerprint] = now + self.dedupe_window_seconds
        return False

    def publish(self, text: str) -> None:
        if self._is_duplicate(text):
            LOGGER.info("Duplicate notification dropped")
            return
        self.webhook.post({"content": _truncate(text, MAX_CONTENT_LENGTH), "allowed_mentions": {"parse": []}})


class DryRunPublisher:
    """Logs notifications instead of posting them; keeps only the latest few."""

    def __init__(self, keep: int = DRY_RUN_KEEP) -> None:
        self.published: deque[str] = deque(maxlen=max(int(keep), 1))

    def publish(self, text: str) -> None:
        self.published.append(text)
        LOGGER.warning("Dry run, not published: %s", text)


class AlertChannel:
    """Operational messages (startup failures, run reports) for maintainers."""

    def __init__(self, webhook: DiscordWebhook | None, script_name: str) -> None:
        self.webhook = webhook
        self.script_name = script_name

    def send(self, message: str, level: str = "INFO", fields: dict[str, object] | None = None) -> bool:
        if self.webhook is None:
            return False
        normalized = (level or "INFO").upper()
        embed: dict[str, Any] = {
            "title": f"{self.script_name} | {normalized}",
            "description": _truncate(message, MAX_EMBED_DESCRIPTION),
            "color": LEVEL_COLORS.get(normalized, LEVEL_COLORS["INFO"]),
            "timestamp": _utc_now_iso(),
        }
        if fields:
            embed["fields"] = [
                {"name": _truncate(key, 256), "value": _truncate(value, 1024) or "-", "inline": True}
                for key, value in list(fields.items())[:10]
            ]
        try:
            self.webhook.post({"embeds": [embed]})
        except PublishFailure as exc:
            LOGGER.warning("Alert webhook failed for %s (%s): %s", self.script_name, normalized, exc)
            return False
        return True


def build_publisher(settings: FeedSettings) -> Publisher:
    if settings.dry_run:
        LOGGER.warning("Dry run enabled: notifications are only logged")
        return DryRunPublisher()
    url = clean_webhook(settings.feed_webhook, "DISCORD_WEBHOOK_FEED")
    if url is None:
        raise SetupError("DISCORD_WEBHOOK_FEED is not configured")
    webhook = DiscordWebhook(url, timeout=settings.webhook_timeout, max_retries=settings.webhook_max_retries)
    return DiscordWebhookPublisher(webhook)


def build_alert_channel(settings: FeedSettings, script_name: str) -> AlertChannel:
    url = clean_webhook(settings.alert_webhook, "DISCORD_WEBHOOK_ERRORS")
    webhook = DiscordWebhook(url, timeout=settings.webhook_timeout, max_retries=0) if url else None
    return AlertChannel(webhook, script_name)
