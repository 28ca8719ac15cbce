# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .classifier import EXEMPT_EDITORS, EXEMPT_MARKER, TARGET_WIKI
from .env import get_bool_env, get_csv_env, get_env, get_float_env, get_int_env, get_optional_int_env
from .formatter import DIFF_URL, MESSAGE_LIMIT
from .pages import DEFAULT_REFRESH_SECONDS, INDEX_PAGE
from .paths import ROOT_DIR
from .task_control import dry_run_enabled


@dataclass(frozen=True)
class FeedSettings:
    target_wiki: str = TARGET_WIKI
    site_lang: str = "en"
    site_family: str = "wikipedia"
    login: bool = False
    index_page: str = INDEX_PAGE
    pages_file: Path | None = None
    refresh_seconds: float = DEFAULT_REFRESH_SECONDS
    exempt_marker: str = EXEMPT_MARKER
    exempt_editors: tuple[str, ...] = field(default_factory=lambda: tuple(sorted(EXEMPT_EDITORS)))
    message_limit: int = MESSAGE_LIMIT
    link_length: int | None = None
    diff_url: str = DIFF_URL
    feed_webhook: str | None = None
    alert_webhook: str | None = None
    webhook_timeout: float = 12.0
    webhook_max_retries: int = 2
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> FeedSettings:
        pages_file_raw = (get_env("REVERTFEED_PAGES_FILE") or "").strip()
        pages_file = None
        if pages_file_raw:
            pages_file = Path(pages_file_raw).expanduser()
            if not pages_file.is_absolute():
                pages_file = ROOT_DIR / pages_file
        return cls(
            target_wiki=(get_env("REVERTFEED_TARGET_WIKI") or TARGET_WIKI).strip(),
            site_lang=(get_env("REVERTFEED_SITE_LANG") or "en").strip(),
            site_family=(get_env("REVERTFEED_SITE_FAMILY") or "wikipedia").strip(),
            login=get_bool_env("REVERTFEED_LOGIN", False),
            index_page=(get_env("REVERTFEED_INDEX_PAGE") or INDEX_PAGE).strip(),
            pages_file=pages_file,
            refresh_seconds=max(get_float_env("REVERTFEED_REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS), 30.0),
            exempt_marker=get_env("REVERTFEED_EXEMPT_MARKER", EXEMPT_MARKER) or "",
            exempt_editors=tuple(get_csv_env("REVERTFEED_EXEMPT_USERS", sorted(EXEMPT_EDITORS))),
            message_limit=max(get_int_env("REVERTFEED_MESSAGE_LIMIT", MESSAGE_LIMIT), 1),
            link_length=get_optional_int_env("REVERTFEED_LINK_LENGTH"),
            diff_url=(get_env("REVERTFEED_DIFF_URL") or DIFF_URL).strip(),
            feed_webhook=get_env("DISCORD_WEBHOOK_FEED"),
            alert_webhook=get_env("DISCORD_WEBHOOK_ERRORS"),
            webhook_timeout=get_float_env("DISCORD_TIMEOUT_SECONDS", 12.0),
            webhook_max_retries=get_int_env("DISCORD_MAX_RETRIES", 2),
            dry_run=dry_run_enabled(),
        )
