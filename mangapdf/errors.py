# -*- coding: utf-8 -*-
"""Error taxonomy for the chapter acquisition pipeline.

Image-level errors (DownloadError, InvalidImageFormat, EmbeddingError) are
contained per image. Chapter-level errors (NavigationError, ReadinessTimeout)
feed the retry loop. AssemblyIOError fails a single chapter. Only
BrowserLaunchError stops the whole run.
"""

from __future__ import annotations

from typing import Optional


class MangaPdfError(Exception):
    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        chapter_index: Optional[int] = None,
        image_index: Optional[int] = None,
        attempt: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.url = url
        self.chapter_index = chapter_index
        self.image_index = image_index
        self.attempt = attempt

    def __str__(self) -> str:
        ctx = []
        if self.chapter_index is not None:
            ctx.append(f"chapter={self.chapter_index}")
        if self.attempt is not None:
            ctx.append(f"attempt={self.attempt}")
        if self.image_index is not None:
            ctx.append(f"image={self.image_index}")
        if self.url:
            ctx.append(f"url={self.url}")
        if not ctx:
            return self.message
        return f"{self.message} ({', '.join(ctx)})"


class NavigationError(MangaPdfError):
    """The chapter page failed to load."""


class ReadinessTimeout(MangaPdfError):
    """Expected content never appeared within the readiness bound."""


class DownloadError(MangaPdfError):
    """Image fetch returned a non-success status or the transport failed."""

    def __init__(self, message: str, *, status: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status


class InvalidImageFormat(MangaPdfError):
    """Payload bytes do not match a known image signature."""


class EmbeddingError(MangaPdfError):
    """Transcode or embed step failed for one image."""


class AssemblyIOError(MangaPdfError):
    """The chapter document could not be serialized or written."""


class BrowserLaunchError(MangaPdfError):
    """The shared browser could not be started."""


__all__ = [
    "MangaPdfError",
    "NavigationError",
    "ReadinessTimeout",
    "DownloadError",
    "InvalidImageFormat",
    "EmbeddingError",
    "AssemblyIOError",
    "BrowserLaunchError",
]
