# -*- coding: utf-8 -*-
# Runtime settings: module defaults, overridable from .env / MANGAPDF_* variables.

from __future__ import annotations

import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .naming import NAMING_POLICIES, POSITIONAL

LOG = logging.getLogger("mangapdf.config")

ENV_PREFIX = "MANGAPDF_"

# ===== Paths =====
CHAPTER_LIST_PATH = "chapters.txt"
IMAGES_DIR = "chapters"
PDF_DIR = "pdf-output"
LOG_DIR = "logs"

# ===== Browser =====
HEADLESS = True
NAV_WAIT_UNTIL = "domcontentloaded"
DISCOVER_WAIT_UNTIL = "networkidle"
NAV_TIMEOUT_MS = 60_000
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124 Safari/537.36"
)

# ===== Readiness =====
SCROLL_STEP_PX = 200
SCROLL_INTERVAL_S = 0.1
SCROLL_SETTLE_S = 2.0
SCROLL_MAX_S = 120.0
READY_TIMEOUT_S = 30.0

# ===== Page layout =====
CONTENT_SELECTOR = "body"
COMMENT_SELECTOR = "[name='comment-post']"

# ===== Retries / downloads =====
MAX_ATTEMPTS = 2
RETRY_BACKOFF_S = 2.0
IMAGE_TIMEOUT_MS = 90_000


@dataclass(frozen=True)
class Settings:
    chapter_list_path: pathlib.Path = pathlib.Path(CHAPTER_LIST_PATH)
    images_dir: pathlib.Path = pathlib.Path(IMAGES_DIR)
    pdf_dir: pathlib.Path = pathlib.Path(PDF_DIR)
    log_dir: pathlib.Path = pathlib.Path(LOG_DIR)
    log_level: str = "INFO"

    headless: bool = HEADLESS
    nav_wait_until: str = NAV_WAIT_UNTIL
    discover_wait_until: str = DISCOVER_WAIT_UNTIL
    nav_timeout_ms: int = NAV_TIMEOUT_MS
    user_agent: str = USER_AGENT

    scroll_step_px: int = SCROLL_STEP_PX
    scroll_interval_s: float = SCROLL_INTERVAL_S
    scroll_settle_s: float = SCROLL_SETTLE_S
    scroll_max_s: float = SCROLL_MAX_S
    ready_timeout_s: float = READY_TIMEOUT_S

    content_selector: str = CONTENT_SELECTOR
    comment_selector: str = COMMENT_SELECTOR

    max_attempts: int = MAX_ATTEMPTS
    retry_backoff_s: float = RETRY_BACKOFF_S
    image_timeout_ms: int = IMAGE_TIMEOUT_MS

    naming_policy: str = POSITIONAL
    listing_param: Optional[str] = None


def _env(name: str) -> str:
    return os.getenv(ENV_PREFIX + name, "").strip()


def _env_path(name: str, default: str) -> pathlib.Path:
    return pathlib.Path(_env(name) or default).expanduser()


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name).lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


def _env_number(name: str, default, cast):
    raw = _env(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        LOG.warning("Ignoring invalid %s%s=%r; using %s.", ENV_PREFIX, name, raw, default)
        return default


def load_settings(env_file: Optional[pathlib.Path] = None) -> Settings:
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    policy = _env("NAMING_POLICY").lower() or POSITIONAL
    if policy not in NAMING_POLICIES:
        LOG.warning("Unknown naming policy %r; using %s.", policy, POSITIONAL)
        policy = POSITIONAL

    return Settings(
        chapter_list_path=_env_path("CHAPTER_LIST", CHAPTER_LIST_PATH),
        images_dir=_env_path("IMAGES_DIR", IMAGES_DIR),
        pdf_dir=_env_path("PDF_DIR", PDF_DIR),
        log_dir=_env_path("LOG_DIR", LOG_DIR),
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        headless=_env_bool("HEADLESS", HEADLESS),
        nav_wait_until=_env("NAV_WAIT_UNTIL") or NAV_WAIT_UNTIL,
        nav_timeout_ms=_env_number("NAV_TIMEOUT_MS", NAV_TIMEOUT_MS, int),
        scroll_step_px=_env_number("SCROLL_STEP_PX", SCROLL_STEP_PX, int),
        scroll_interval_s=_env_number("SCROLL_INTERVAL_S", SCROLL_INTERVAL_S, float),
        scroll_settle_s=_env_number("SCROLL_SETTLE_S", SCROLL_SETTLE_S, float),
        scroll_max_s=_env_number("SCROLL_MAX_S", SCROLL_MAX_S, float),
        ready_timeout_s=_env_number("READY_TIMEOUT_S", READY_TIMEOUT_S, float),
        content_selector=_env("CONTENT_SELECTOR") or CONTENT_SELECTOR,
        comment_selector=_env("COMMENT_SELECTOR") or COMMENT_SELECTOR,
        max_attempts=max(1, _env_number("MAX_ATTEMPTS", MAX_ATTEMPTS, int)),
        retry_backoff_s=_env_number("RETRY_BACKOFF_S", RETRY_BACKOFF_S, float),
        image_timeout_ms=_env_number("IMAGE_TIMEOUT_MS", IMAGE_TIMEOUT_MS, int),
        naming_policy=policy,
        listing_param=_env("LISTING_PARAM") or None,
    )
