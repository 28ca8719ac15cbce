# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import os
from pathlib import Path

import pywikibot

from .pages import INDEX_PAGE

LOGGER = logging.getLogger(__name__)


def prepare_runtime(workdir: Path) -> None:
    workdir.mkdir(parents=True, exist_ok=True)
    os.chdir(workdir)


def connect_site(lang: str = "en", family: str = "wikipedia", login: bool = False) -> pywikibot.Site:
    site = pywikibot.Site(lang, family)
    if login:
        site.login()
        LOGGER.info("Logged in to %s as %s", site, site.user())
    return site


class WikiLinksPageSource:
    """Monitored titles are the pages linked from an index page on the wiki."""

    def __init__(self, site: pywikibot.Site, index_title: str = INDEX_PAGE) -> None:
        self.site = site
        self.index_title = index_title

    def fetch_titles(self) -> set[str]:
        index = pywikibot.Page(self.site, self.index_title)
        # linkedPages() follows API continuation itself.
        return {page.title() for page in index.linkedPages()}
