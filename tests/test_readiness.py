"""Tests for the readiness gate."""

import asyncio

import pytest

from mangapdf.errors import ReadinessTimeout
from mangapdf.readiness import (
    ensure_ready,
    image_selector,
    poll_until,
    scroll_to_bottom,
    wait_for_images,
)
from tests.fakes import FakeChapterPage, run_in_chromium

URL = "https://example/title/x/ch_1"


def test_poll_until_returns_when_condition_holds():
    calls = {"step": 0}

    async def step():
        calls["step"] += 1

    async def condition():
        return calls["step"] >= 3

    assert asyncio.run(poll_until(step, condition, interval=0, timeout=5)) is True
    assert calls["step"] == 3


def test_poll_until_gives_up_after_timeout():
    async def step():
        return None

    async def condition():
        return False

    assert asyncio.run(poll_until(step, condition, interval=0.01, timeout=0.05)) is False


def test_scroll_covers_full_page_height():
    page = FakeChapterPage({URL: {}}, scroll_height=1000)

    scrolled = asyncio.run(scroll_to_bottom(page, step_px=200, interval=0, settle=0, max_duration=5))

    assert scrolled == 1000
    assert page.scrolled == 1000


def test_scroll_stops_at_first_step_past_height():
    page = FakeChapterPage({URL: {}}, scroll_height=450)

    scrolled = asyncio.run(scroll_to_bottom(page, step_px=200, interval=0, settle=0, max_duration=5))

    assert scrolled == 600


def test_wait_for_images_raises_readiness_timeout():
    page = FakeChapterPage({URL: {"ready": False}})
    asyncio.run(page.goto(URL))

    with pytest.raises(ReadinessTimeout) as excinfo:
        asyncio.run(wait_for_images(page, "body", timeout=0.1))

    assert excinfo.value.url == URL


def test_ensure_ready_scrolls_then_waits(settings):
    page = FakeChapterPage({URL: {}}, scroll_height=400)
    asyncio.run(page.goto(URL))

    asyncio.run(ensure_ready(page, settings))

    assert page.scrolled == 400


def test_image_selector_scopes_every_container():
    assert image_selector("#a, #b") == ":is(#a, #b) img[src]"


def test_image_selector_with_selector_list_matches_only_images():
    markup = '<div id="a"><p>text</p></div><div id="b"><img src="https://cdn/1.jpg"></div>'

    async def action(page):
        return await page.eval_on_selector_all(
            image_selector("#a, #b"), "els => els.map(e => e.tagName)"
        )

    assert run_in_chromium(markup, action) == ["IMG"]


def test_wait_for_images_ignores_container_without_images():
    markup = '<div id="a"><p>text</p></div>'

    async def action(page):
        await wait_for_images(page, "#a, #b", timeout=0.2)

    with pytest.raises(ReadinessTimeout):
        run_in_chromium(markup, action)
