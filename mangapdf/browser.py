# -*- coding: utf-8 -*-
# Shared Chromium page for a whole run.

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from playwright.async_api import BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from .config import Settings
from .errors import BrowserLaunchError

LOG = logging.getLogger("mangapdf.browser")


@contextlib.asynccontextmanager
async def open_browser(settings: Settings) -> AsyncIterator[Page]:
    """Yield one page; browser, context and page are closed on every exit path."""
    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=settings.headless)
        except PlaywrightError as exc:
            raise BrowserLaunchError(f"Could not launch Chromium: {exc}") from exc
        try:
            ctx: BrowserContext = await browser.new_context(user_agent=settings.user_agent)
            page = await ctx.new_page()
        except PlaywrightError as exc:
            await browser.close()
            raise BrowserLaunchError(f"Could not open a browser page: {exc}") from exc

        LOG.debug("Browser ready (headless=%s)", settings.headless)
        try:
            yield page
        finally:
            with contextlib.suppress(PlaywrightError):
                await page.close()
            with contextlib.suppress(PlaywrightError):
                await ctx.close()
            await browser.close()
            LOG.debug("Browser closed")
