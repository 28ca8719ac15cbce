from __future__ import annotations

import re

import pytest

from revertfeed.patterns import REVERT_PATTERNS, RevertPattern, classify_prefix, matching_pattern, strip_all

SUMMARIES = [
    "Reverted 1 edit by Foo (talk) to last version by Bar (talk): unsourced claim",
    "Reverted 3 edits by Foo (talk) to last version by Bar (talk)",
    "Undid revision 12345 by Foo (talk)",
    "Undid revision 12345 by Foo (talk) not an improvement",
    "Reverting edit(s) by Foo (talk) to rev. 1234 by Bar: unsourced",
    "Reverted 2 edits by Foo (talk): copyright violation",
    "Reverted 1 edit by A (talk): Reverting edit(s) by B to rev. 2 by C: real reason",
    "Copyedit (talk) for flow",
    "",
    "   ",
]


def test_library_order_is_fixed() -> None:
    assert [pattern.id for pattern in REVERT_PATTERNS] == ["rollback", "undo", "redwarn", "twinkle"]
    assert all(pattern.gated for pattern in REVERT_PATTERNS)


@pytest.mark.parametrize(
    ("summary", "pattern_id"),
    [
        ("Reverted 1 edit by Foo (talk) to last version by Bar (talk)", "rollback"),
        ("Undid revision 12345 by Foo (talk)", "undo"),
        ("Reverting edit(s) by Foo (talk) to rev. 1234 by Bar: unsourced", "redwarn"),
        ("Reverted 2 edits by Foo (talk): spam", "twinkle"),
    ],
)
def test_each_tool_signature_is_recognized(summary: str, pattern_id: str) -> None:
    assert classify_prefix(summary)
    matched = matching_pattern(summary)
    assert matched is not None
    assert matched.id == pattern_id


def test_signature_must_start_the_summary() -> None:
    assert not classify_prefix("per talk page, Undid revision 12345 by Foo (talk)")
    assert not classify_prefix(" Undid revision 12345 by Foo (talk)")
    assert not classify_prefix("Fixed typo")


def test_strip_rollback_keeps_reason() -> None:
    summary = "Reverted 1 edit by Foo (talk) to last version by Bar (talk): unsourced claim"
    assert strip_all(summary) == "unsourced claim"


def test_strip_undo_without_reason_is_empty() -> None:
    assert strip_all("Undid revision 12345 by Foo (talk)") == ""


def test_strip_undo_with_reason() -> None:
    assert strip_all("Undid revision 12345 by Foo (talk) not an improvement") == "not an improvement"


def test_strip_redwarn_and_twinkle() -> None:
    assert strip_all("Reverting edit(s) by Foo (talk) to rev. 1234 by Bar: unsourced") == "unsourced"
    assert strip_all("Reverted 2 edits by Foo (talk): copyright violation") == "copyright violation"


def test_strip_removes_leftover_talk_links() -> None:
    assert strip_all("Copyedit (talk) for flow") == "Copyedit for flow"


def test_strip_handles_chained_signatures() -> None:
    summary = "Reverted 1 edit by A (talk): Reverting edit(s) by B to rev. 2 by C: real reason"
    assert strip_all(summary) == "real reason"


@pytest.mark.parametrize("summary", SUMMARIES)
def test_strip_all_is_idempotent(summary: str) -> None:
    once = strip_all(summary)
    assert strip_all(once) == once


def test_custom_patterns_extend_the_library() -> None:
    custom = RevertPattern(id="custom", matcher=re.compile(r"^Rv per \S+: "), gated=False)
    patterns = REVERT_PATTERNS + (custom,)
    assert classify_prefix("Rv per WP:BLP: unsourced", patterns)
    assert not classify_prefix("Rv per WP:BLP: unsourced")
    assert strip_all("Rv per WP:BLP: unsourced", patterns) == "unsourced"
