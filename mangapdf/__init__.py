# -*- coding: utf-8 -*-
# Chapter image acquisition and per-chapter PDF assembly.

from .config import Settings, load_settings
from .models import ChapterJob, ChapterStatus, ImageFormat, ImageRef, LocalImageFile
from .naming import sanitize_label

__version__ = "0.1.0"

__all__ = [
    "ChapterJob",
    "ChapterStatus",
    "ImageFormat",
    "ImageRef",
    "LocalImageFile",
    "Settings",
    "load_settings",
    "sanitize_label",
]
