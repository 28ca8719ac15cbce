# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

import mwparserfromhell
from bs4 import BeautifulSoup

from .models import NormalizationFailure

LOGGER = logging.getLogger(__name__)


def html_to_text(html: str) -> str:
    """Text content of an engine-rendered summary (`parsedcomment`).

    Tags are dropped and entities resolved; text nodes are joined without any
    added separator so casing, punctuation and spacing stay exactly as shown.
    """
    try:
        return BeautifulSoup(html, "html.parser").get_text()
    except Exception as exc:
        raise NormalizationFailure(f"unparseable summary markup: {exc}") from exc


def wikitext_to_text(wikitext: str) -> str:
    try:
        return mwparserfromhell.parse(wikitext).strip_code(normalize=True, collapse=False)
    except Exception as exc:
        raise NormalizationFailure(f"unparseable summary wikitext: {exc}") from exc


def normalize_summary(parsed_comment: str | None, raw_comment: str) -> str:
    if parsed_comment is not None:
        try:
            return html_to_text(parsed_comment)
        except NormalizationFailure as exc:
            # Markup left in place would hide the "(talk)" anchors; use the wikitext.
            LOGGER.warning("Rendered summary unusable, falling back to wikitext: %s", exc)

    try:
        return wikitext_to_text(raw_comment)
    except NormalizationFailure as exc:
        LOGGER.warning("Summary kept as-is: %s", exc)
        return raw_comment
