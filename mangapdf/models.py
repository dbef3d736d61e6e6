# -*- coding: utf-8 -*-
# Data model shared by the pipeline stages.

from __future__ import annotations

import enum
import pathlib
import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

ChapterLink = str

IMG_EXT_RE = re.compile(r"\.(jpg|jpeg|png|webp)$", re.I)

JPEG_MAGIC = b"\xff\xd8"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class ImageFormat(enum.Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    UNKNOWN = "unknown"

    @property
    def extension(self) -> str:
        return {
            ImageFormat.JPEG: "jpg",
            ImageFormat.PNG: "png",
            ImageFormat.WEBP: "webp",
        }.get(self, "bin")

    @classmethod
    def from_url(cls, url: str) -> "ImageFormat":
        m = IMG_EXT_RE.search(urlparse(url or "").path)
        if not m:
            return cls.UNKNOWN
        ext = m.group(1).lower()
        if ext in ("jpg", "jpeg"):
            return cls.JPEG
        return cls(ext)

    @classmethod
    def sniff(cls, data: bytes) -> "ImageFormat":
        if data[:2] == JPEG_MAGIC:
            return cls.JPEG
        if data[:8] == PNG_MAGIC:
            return cls.PNG
        if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
            return cls.WEBP
        return cls.UNKNOWN


class ChapterStatus(enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    SKIPPED_NO_IMAGES = "skipped_no_images"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (
            ChapterStatus.SUCCEEDED,
            ChapterStatus.SKIPPED_NO_IMAGES,
            ChapterStatus.FAILED,
        )


@dataclass
class ChapterJob:
    index: int
    source_url: ChapterLink
    attempt_count: int = 0
    status: ChapterStatus = ChapterStatus.PENDING
    label: Optional[str] = None
    document_path: Optional[pathlib.Path] = None
    images_found: int = 0
    pages_embedded: int = 0
    last_error: str = ""

    def start_attempt(self) -> int:
        self._transition(ChapterStatus.IN_PROGRESS)
        self.attempt_count += 1
        return self.attempt_count

    def finish(self, status: ChapterStatus, message: str = "") -> None:
        if not status.terminal:
            raise ValueError(f"{status} is not a terminal status")
        self._transition(status)
        if message:
            self.last_error = message

    def _transition(self, status: ChapterStatus) -> None:
        if self.status.terminal:
            raise RuntimeError(
                f"Chapter {self.index} already finished as {self.status.value}"
            )
        self.status = status


@dataclass
class ImageRef:
    job: ChapterJob = field(repr=False, compare=False)
    ordinal: int
    source_url: str
    detected_format: ImageFormat = ImageFormat.UNKNOWN


@dataclass
class LocalImageFile:
    ref: ImageRef
    path: pathlib.Path
    byte_length: int
    validated: bool
    format: ImageFormat = ImageFormat.UNKNOWN
