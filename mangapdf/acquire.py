# -*- coding: utf-8 -*-
# Image download with signature validation.

from __future__ import annotations

import contextlib
import logging
import pathlib
from typing import Protocol

from playwright.async_api import APIRequestContext
from playwright.async_api import Error as PlaywrightError

from .errors import DownloadError, InvalidImageFormat
from .models import ImageFormat, ImageRef, LocalImageFile

LOG = logging.getLogger("mangapdf.acquire")

ACCEPT_IMAGES = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"

# A URL announcing one of these must really carry JPEG or PNG bytes.
STRICT_FORMATS = (ImageFormat.JPEG, ImageFormat.PNG)


class ImageFetcher(Protocol):
    async def fetch(self, url: str, referer: str) -> bytes:
        ...


class PlaywrightFetcher:
    """Fetches through the browser context so cookies and headers match the page."""

    def __init__(self, request: APIRequestContext, user_agent: str, timeout_ms: int):
        self.request = request
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms

    async def fetch(self, url: str, referer: str) -> bytes:
        try:
            resp = await self.request.get(
                url,
                headers={
                    "Referer": referer,
                    "Accept": ACCEPT_IMAGES,
                    "User-Agent": self.user_agent,
                },
                timeout=self.timeout_ms,
            )
        except PlaywrightError as exc:
            raise DownloadError(f"Transport error: {exc}", url=url) from exc
        try:
            if not resp.ok:
                raise DownloadError(
                    f"HTTP {resp.status} {resp.status_text}".strip(), url=url, status=resp.status
                )
            return await resp.body()
        except PlaywrightError as exc:
            raise DownloadError(f"Could not read response body: {exc}", url=url) from exc
        finally:
            with contextlib.suppress(PlaywrightError):
                await resp.dispose()


def page_path(chapter_dir: pathlib.Path, ordinal: int, fmt: ImageFormat) -> pathlib.Path:
    return chapter_dir / f"page_{ordinal:03d}.{fmt.extension}"


def check_signature(ref: ImageRef, data: bytes) -> ImageFormat:
    actual = ImageFormat.sniff(data)
    if actual is ImageFormat.UNKNOWN:
        raise InvalidImageFormat(
            "Payload matches no known image signature",
            url=ref.source_url,
            chapter_index=ref.job.index,
            image_index=ref.ordinal,
        )
    if ref.detected_format in STRICT_FORMATS and actual not in STRICT_FORMATS:
        raise InvalidImageFormat(
            f"Expected JPEG/PNG, got {actual.value}",
            url=ref.source_url,
            chapter_index=ref.job.index,
            image_index=ref.ordinal,
        )
    return actual


async def acquire_image(
    fetcher: ImageFetcher, ref: ImageRef, chapter_dir: pathlib.Path, referer: str
) -> LocalImageFile:
    try:
        data = await fetcher.fetch(ref.source_url, referer)
    except DownloadError as exc:
        exc.chapter_index = ref.job.index
        exc.image_index = ref.ordinal
        raise
    fmt = check_signature(ref, data)

    chapter_dir.mkdir(parents=True, exist_ok=True)
    fp = page_path(chapter_dir, ref.ordinal, fmt)
    fp.write_bytes(data)
    LOG.debug("Saved %s (%d bytes)", fp, len(data))
    return LocalImageFile(ref=ref, path=fp, byte_length=len(data), validated=True, format=fmt)
