# -*- coding: utf-8 -*-
"""Edit summary signatures left by revert tools.

Every matcher is anchored at the start of the summary: tool boilerplate quoted
in the middle of a human reason must never count as a revert signature.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class RevertPattern:
    id: str
    matcher: re.Pattern[str]
    # Gated patterns only count when the raw comment is free of vandalism keywords.
    gated: bool = True


REVERT_PATTERNS: tuple[RevertPattern, ...] = (
    RevertPattern(
        id="rollback",
        matcher=re.compile(r"^Reverted \d+ edits? by .+? \(talk\) to last version by .+? \(talk\)(?:: ?)?"),
    ),
    RevertPattern(
        id="undo",
        matcher=re.compile(r"^Undid revision .+? by .+? \(talk\)(?:: ?| )?"),
    ),
    RevertPattern(
        id="redwarn",
        matcher=re.compile(r"^Reverting edit\(s\) by .+? to rev\. \d+ by .+?(?:: ?|$)"),
    ),
    RevertPattern(
        id="twinkle",
        matcher=re.compile(r"^Reverted \d+ edits? by .+? \(talk\)(?:: ?|$)"),
    ),
)

TALK_LINK_RE = re.compile(r" ?\(talk\)")


def matching_pattern(text: str, patterns: Iterable[RevertPattern] = REVERT_PATTERNS) -> RevertPattern | None:
    for pattern in patterns:
        if pattern.matcher.match(text):
            return pattern
    return None


def classify_prefix(text: str, patterns: Iterable[RevertPattern] = REVERT_PATTERNS) -> bool:
    return matching_pattern(text, patterns) is not None


def _strip_once(text: str, patterns: Iterable[RevertPattern]) -> str:
    for pattern in patterns:
        text = pattern.matcher.sub("", text, count=1)
    return TALK_LINK_RE.sub("", text).strip()


def strip_all(text: str, patterns: Iterable[RevertPattern] = REVERT_PATTERNS) -> str:
    """Remove every tool signature and leftover "(talk)" link text.

    Non-matching patterns are no-ops, so all of them run in order on every pass.
    Passes repeat until the text is stable; each effective pass shortens the
    text, so the loop ends and a second call returns its input unchanged.
    """
    ordered = tuple(patterns)
    current = text
    while True:
        stripped = _strip_once(current, ordered)
        if stripped == current:
            return stripped
        current = stripped
