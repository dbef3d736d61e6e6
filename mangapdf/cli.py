#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Console entry points.

  mangapdf-discover <series_url>   write the chapter list file
  mangapdf-chapter <chapter_url>   build the PDF for one chapter
  mangapdf-run                     build PDFs for every chapter in the list file
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import pathlib
from logging.handlers import RotatingFileHandler
from typing import Optional, Sequence

from .browser import open_browser
from .config import Settings, load_settings
from .discover import discover_and_save
from .errors import BrowserLaunchError
from .pipeline import RunSummary, run_batch, run_single

LOG = logging.getLogger("mangapdf.cli")


def setup_logging(settings: Settings) -> None:
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    root = logging.getLogger()
    root.setLevel(logging.INFO)

    for noisy in ("asyncio", "PIL", "img2pdf"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("mangapdf").setLevel(logging.DEBUG)

    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        ch = logging.StreamHandler()
        ch.setLevel(getattr(logging, settings.log_level, logging.INFO))
        ch.setFormatter(fmt)
        root.addHandler(ch)

    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOG.warning("Log directory %s unavailable, file logging disabled: %s", settings.log_dir, exc)
        return
    log_path = settings.log_dir / "mangapdf.log"
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == str(log_path.resolve()):
            return
    file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(fmt)
    file_handler.addFilter(logging.Filter("mangapdf"))
    root.addHandler(file_handler)


def _run(coro) -> int:
    try:
        summary: RunSummary = asyncio.run(coro)
    except BrowserLaunchError as exc:
        LOG.error("%s", exc)
        return 1
    except FileNotFoundError as exc:
        LOG.error("Chapter list not found: %s", exc.filename)
        return 1
    print(
        f"Finished: {summary.succeeded} succeeded, {summary.skipped} skipped, "
        f"{summary.failed} failed of {summary.total} chapters"
    )
    return 0


async def _discover(settings: Settings, series_url: str, output: pathlib.Path) -> list:
    async with open_browser(settings) as page:
        return await discover_and_save(page, series_url, settings, output)


def discover_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="mangapdf-discover", description="Collect chapter links from a series page."
    )
    parser.add_argument("series_url", help="URL of the series landing page")
    parser.add_argument("--output", type=pathlib.Path, default=None, help="Chapter list file to write")
    parser.add_argument(
        "--listing-param",
        default=None,
        help="Query parameter appended to every chapter link, e.g. style=list",
    )
    args = parser.parse_args(argv)

    settings = load_settings()
    if args.listing_param:
        settings = dataclasses.replace(settings, listing_param=args.listing_param)
    setup_logging(settings)

    output = args.output or settings.chapter_list_path
    try:
        links = asyncio.run(_discover(settings, args.series_url, output))
    except BrowserLaunchError as exc:
        LOG.error("%s", exc)
        return 1
    print(f"Saved {len(links)} chapter links to {output}")
    return 0


def chapter_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="mangapdf-chapter", description="Download one chapter and build its PDF."
    )
    parser.add_argument("chapter_url", help="URL of the chapter page")
    args = parser.parse_args(argv)

    settings = load_settings()
    setup_logging(settings)
    return _run(run_single(settings, args.chapter_url))


def run_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="mangapdf-run",
        description="Build one PDF per chapter listed in the chapter list file.",
    )
    parser.parse_args(argv)

    settings = load_settings()
    setup_logging(settings)
    return _run(run_batch(settings))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(run_main())
