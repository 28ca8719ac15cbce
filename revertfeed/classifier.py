# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import re
from collections.abc import Container, Iterable
from dataclasses import dataclass, field

from .models import ChangeEvent, ClassificationResult, EventType, NotQualifying, Qualifying
from .normalize import normalize_summary
from .patterns import REVERT_PATTERNS, RevertPattern, matching_pattern, strip_all

LOGGER = logging.getLogger(__name__)

TARGET_WIKI = "enwiki"
# Huggle tags its own summaries; those reverts are already actioned.
EXEMPT_MARKER = "([[WP:HG|HG]])"
EXEMPT_EDITORS = frozenset({"ClueBot NG"})
# Matches on the raw comment, so a quoted reason mentioning "rvv" is rejected too.
VANDALISM_KEYWORD_RE = re.compile(r"rv[vd]|vand(alism)?", flags=re.IGNORECASE)


@dataclass(frozen=True)
class RevertClassifier:
    target_wiki: str = TARGET_WIKI
    exempt_marker: str = EXEMPT_MARKER
    exempt_editors: frozenset[str] = EXEMPT_EDITORS
    patterns: tuple[RevertPattern, ...] = field(default=REVERT_PATTERNS)
    keyword_re: re.Pattern[str] = field(default=VANDALISM_KEYWORD_RE)

    def passes_prefilter(self, event: ChangeEvent, monitored_pages: Container[str]) -> bool:
        return (
            event.event_type is EventType.EDIT
            and event.wiki_id == self.target_wiki
            and event.title in monitored_pages
        )

    def is_exempt(self, event: ChangeEvent) -> bool:
        if self.exempt_marker and self.exempt_marker in event.raw_comment:
            return True
        return event.editor_name in self.exempt_editors

    def eligible_patterns(self, raw_comment: str) -> tuple[RevertPattern, ...]:
        if self.keyword_re.search(raw_comment):
            return tuple(pattern for pattern in self.patterns if not pattern.gated)
        return self.patterns

    def classify(self, event: ChangeEvent, monitored_pages: Container[str]) -> ClassificationResult:
        if event.event_type is not EventType.EDIT:
            return NotQualifying("not_an_edit")
        if event.wiki_id != self.target_wiki:
            return NotQualifying("other_wiki")
        if event.title not in monitored_pages:
            return NotQualifying("unmonitored_page")
        if self.is_exempt(event):
            return NotQualifying("exempt")

        patterns = self.eligible_patterns(event.raw_comment)
        if not patterns:
            return NotQualifying("vandalism_keyword")

        summary = normalize_summary(event.parsed_comment, event.raw_comment)
        matched = matching_pattern(summary, patterns)
        if matched is None:
            return NotQualifying("no_revert_signature")

        LOGGER.debug("Revert signature %s on %s (%s)", matched.id, event.title, event.revision_id)
        return Qualifying(
            editor_name=event.editor_name,
            title=event.title,
            revision_id=event.revision_id,
            reason=strip_all(summary, self.patterns),
        )


def build_classifier(
    target_wiki: str = TARGET_WIKI,
    exempt_marker: str = EXEMPT_MARKER,
    exempt_editors: Iterable[str] = EXEMPT_EDITORS,
    patterns: Iterable[RevertPattern] = REVERT_PATTERNS,
) -> RevertClassifier:
    return RevertClassifier(
        target_wiki=target_wiki,
        exempt_marker=exempt_marker,
        exempt_editors=frozenset(exempt_editors),
        patterns=tuple(patterns),
    )


def classify(event: ChangeEvent, monitored_pages: Container[str]) -> ClassificationResult:
    return RevertClassifier().classify(event, monitored_pages)
