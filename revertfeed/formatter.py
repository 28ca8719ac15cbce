# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass

from .models import NotificationMessage, Qualifying, SetupError

MESSAGE_LIMIT = 280
DIFF_URL = "https://en.wikipedia.org/wiki/Special:Diff/{diff}"
MESSAGE_TEXT = 'New revert by {user} on "{title}": "{summary}" {link}'
MESSAGE_TEXT_EMPTY = 'New revert by {user} on "{title}" with no given reason. {link}'
LINK_FILLER = "-"
# Widest revision id the limit check allows for when links are counted as rendered.
SAMPLE_REVISION_ID = 10**12 - 1


@dataclass(frozen=True)
class NotificationFormatter:
    """Render qualifying reverts into messages that never exceed `limit` characters.

    `link_length` is the length the publisher counts for the link. Leave it unset
    to count the link exactly as rendered; set it when the feed shortens links to
    a fixed size. The link itself is always emitted in full, so the title is
    shortened first and the editor name last. A limit too small to hold the
    templates, the link and one reason character is rejected on construction.
    """

    limit: int = MESSAGE_LIMIT
    diff_url: str = DIFF_URL
    text_template: str = MESSAGE_TEXT
    empty_template: str = MESSAGE_TEXT_EMPTY
    link_length: int | None = None

    def __post_init__(self) -> None:
        link = self.link_for(SAMPLE_REVISION_ID)
        minimum = max(
            self._fixed_length(self.text_template, "", "", link) + 1,
            self._fixed_length(self.empty_template, "", "", link),
        )
        if minimum > self.limit:
            raise SetupError(f"message limit {self.limit} is below the {minimum} characters of templates and link")

    def link_for(self, revision_id: int) -> str:
        return self.diff_url.format(diff=revision_id)

    def _filler(self, link: str) -> str:
        length = self.link_length if self.link_length is not None else len(link)
        return LINK_FILLER * length

    def _fixed_length(self, template: str, user: str, title: str, link: str) -> int:
        return len(template.format(user=user, title=title, summary="", link=self._filler(link)))

    def _fit(self, template: str, user: str, title: str, link: str, reserve: int) -> tuple[str, str]:
        # Leave at least `reserve` characters once the fixed parts are in.
        overflow = self._fixed_length(template, user, title, link) + reserve - self.limit
        if overflow <= 0:
            return user, title
        cut = min(overflow, len(title))
        title = title[: len(title) - cut]
        overflow -= cut
        if overflow > 0:
            user = user[: max(len(user) - overflow, 0)]
        return user, title

    def reason_budget(self, result: Qualifying) -> int:
        link = self.link_for(result.revision_id)
        return self.limit - self._fixed_length(self.text_template, result.editor_name, result.title, link)

    def format(self, result: Qualifying) -> NotificationMessage:
        link = self.link_for(result.revision_id)

        if not result.reason:
            user, title = self._fit(self.empty_template, result.editor_name, result.title, link, reserve=0)
            text = self.empty_template.format(user=user, title=title, link=link)
            return NotificationMessage(text=text, revision_id=result.revision_id)

        user, title = self._fit(self.text_template, result.editor_name, result.title, link, reserve=1)
        budget = self.limit - self._fixed_length(self.text_template, user, title, link)
        summary = result.reason[: max(budget, 0)]
        text = self.text_template.format(user=user, title=title, summary=summary, link=link)
        return NotificationMessage(text=text, revision_id=result.revision_id)
