# -*- coding: utf-8 -*-
"""Readiness gate: trigger lazy-loaded images and wait for the reader content.

Scrolling runs on a fixed schedule. It does not stop early when images finish
loading; it stops once the scrolled distance covers the page height, then
waits a settle delay for in-flight requests.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import Settings
from .errors import ReadinessTimeout

LOG = logging.getLogger("mangapdf.readiness")

SCROLL_BY_JS = "(step) => { window.scrollBy(0, step); }"
SCROLL_HEIGHT_JS = "() => document.body.scrollHeight"


async def poll_until(
    step: Callable[[], Awaitable[None]],
    condition: Callable[[], Awaitable[bool]],
    interval: float,
    timeout: float,
) -> bool:
    """Run ``step`` then check ``condition`` every ``interval`` seconds.

    Returns True as soon as the condition holds, False once ``timeout``
    seconds have elapsed without it holding.
    """
    end = time.monotonic() + timeout
    while True:
        await step()
        if await condition():
            return True
        if time.monotonic() >= end:
            return False
        await asyncio.sleep(interval)


async def scroll_to_bottom(
    page: Page,
    step_px: int,
    interval: float,
    settle: float,
    max_duration: float,
) -> int:
    """Scroll down ``step_px`` per tick until the page height is covered."""
    state = {"scrolled": 0}

    async def _scroll():
        await page.evaluate(SCROLL_BY_JS, step_px)
        state["scrolled"] += step_px

    async def _covered() -> bool:
        height = await page.evaluate(SCROLL_HEIGHT_JS)
        return state["scrolled"] >= int(height or 0)

    done = await poll_until(_scroll, _covered, interval, max_duration)
    if not done:
        LOG.debug("Scroll cap of %.1fs reached after %dpx", max_duration, state["scrolled"])
    await asyncio.sleep(settle)
    return state["scrolled"]


def image_selector(content_selector: str) -> str:
    return f":is({content_selector}) img[src]"


async def wait_for_images(page: Page, content_selector: str, timeout: float) -> None:
    selector = image_selector(content_selector)
    try:
        await page.wait_for_selector(selector, state="attached", timeout=timeout * 1000)
    except PlaywrightTimeoutError as exc:
        raise ReadinessTimeout(
            f"No image appeared in {content_selector!r} within {timeout:.0f}s",
            url=page.url,
        ) from exc


async def ensure_ready(page: Page, settings: Settings) -> None:
    scrolled = await scroll_to_bottom(
        page,
        step_px=settings.scroll_step_px,
        interval=settings.scroll_interval_s,
        settle=settings.scroll_settle_s,
        max_duration=settings.scroll_max_s,
    )
    LOG.debug("Scrolled %dpx on %s", scrolled, page.url)
    await wait_for_images(page, settings.content_selector, settings.ready_timeout_s)
