# -*- coding: utf-8 -*-
# Series landing page -> ordered, deduplicated chapter links.

from __future__ import annotations

import logging
import pathlib
import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .chapter_list import save_chapter_list, unique_preserve
from .config import Settings
from .models import ChapterLink

LOG = logging.getLogger("mangapdf.discover")

TITLE_SEGMENT = "/title/"
CHAPTER_RE = re.compile(r"ch_(\d+(?:\.\d+)?)", re.I)

COLLECT_HREFS_JS = "els => els.map(a => a.href)"


def chapter_number(url: str) -> Decimal:
    m = CHAPTER_RE.search(url or "")
    if not m:
        return Decimal(0)
    try:
        return Decimal(m.group(1))
    except InvalidOperation:
        return Decimal(0)


def is_chapter_link(url: str) -> bool:
    return bool(url) and TITLE_SEGMENT in url and CHAPTER_RE.search(url) is not None


def with_query_param(url: str, param: str) -> str:
    """Set ``key=value`` on the URL query, keeping any other parameters."""
    key, _, value = param.partition("=")
    p = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(p.query, keep_blank_values=True) if k != key]
    query.append((key, value))
    return urlunparse(p._replace(query=urlencode(query)))


def order_chapter_links(links: List[str], listing_param: Optional[str] = None) -> List[ChapterLink]:
    matching = unique_preserve(u for u in links if is_chapter_link(u))
    ordered = sorted(matching, key=chapter_number)
    if listing_param:
        ordered = unique_preserve(with_query_param(u, listing_param) for u in ordered)
    return ordered


async def discover_chapter_links(
    page: Page, series_url: str, settings: Settings
) -> List[ChapterLink]:
    LOG.info("Navigating to %s", series_url)
    try:
        await page.goto(
            series_url,
            wait_until=settings.discover_wait_until,
            timeout=settings.nav_timeout_ms,
        )
        hrefs = await page.eval_on_selector_all("a[href]", COLLECT_HREFS_JS)
    except PlaywrightError as exc:
        LOG.warning("Could not load series page %s: %s", series_url, exc)
        return []

    links = order_chapter_links(list(hrefs or []), settings.listing_param)
    if not links:
        LOG.warning("No chapter links found on %s", series_url)
    else:
        LOG.info("Found %d chapter links", len(links))
    return links


async def discover_and_save(
    page: Page, series_url: str, settings: Settings, output: Optional[pathlib.Path] = None
) -> List[ChapterLink]:
    links = await discover_chapter_links(page, series_url, settings)
    save_chapter_list(output or settings.chapter_list_path, links)
    return links
