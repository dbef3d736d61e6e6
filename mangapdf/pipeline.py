# -*- coding: utf-8 -*-
"""Chapter retry orchestration and the batch loop.

Each chapter goes Pending -> InProgress -> Succeeded | SkippedNoImages | Failed.
Navigation, readiness and extraction errors are retried up to
``Settings.max_attempts``; image-level errors only drop that image; nothing
short of a browser launch failure stops the batch.
"""

from __future__ import annotations

import asyncio
import logging
import pathlib
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from .acquire import ImageFetcher, PlaywrightFetcher, acquire_image
from .browser import open_browser
from .chapter_list import load_chapter_list
from .config import Settings
from .document import ChapterDocument
from .errors import (
    AssemblyIOError,
    DownloadError,
    EmbeddingError,
    InvalidImageFormat,
    NavigationError,
)
from .extract import extract_image_refs
from .models import ChapterJob, ChapterLink, ChapterStatus, ImageRef
from .naming import ChapterNamer
from .readiness import ensure_ready

LOG = logging.getLogger("mangapdf.pipeline")


@dataclass
class RunContext:
    page: Page
    settings: Settings
    fetcher: ImageFetcher
    jobs: List[ChapterJob] = field(default_factory=list)
    namer: Optional[ChapterNamer] = None

    def __post_init__(self):
        if self.namer is None:
            self.namer = ChapterNamer(self.settings.naming_policy)


@dataclass
class RunSummary:
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    failed_chapters: List[Tuple[int, str]] = field(default_factory=list)
    documents: List[pathlib.Path] = field(default_factory=list)


def make_jobs(links: Sequence[ChapterLink]) -> List[ChapterJob]:
    return [ChapterJob(index=i, source_url=url) for i, url in enumerate(links, start=1)]


async def navigate(page: Page, job: ChapterJob, settings: Settings) -> None:
    try:
        resp = await page.goto(
            job.source_url,
            wait_until=settings.nav_wait_until,
            timeout=settings.nav_timeout_ms,
        )
    except PlaywrightError as exc:
        raise NavigationError(
            f"Navigation failed: {exc}",
            url=job.source_url,
            chapter_index=job.index,
            attempt=job.attempt_count,
        ) from exc
    if resp is not None and not resp.ok:
        raise NavigationError(
            f"HTTP {resp.status}",
            url=job.source_url,
            chapter_index=job.index,
            attempt=job.attempt_count,
        )


async def read_title(page: Page) -> Optional[str]:
    try:
        return await page.title()
    except PlaywrightError as exc:
        LOG.debug("Could not read page title: %s", exc)
        return None


async def load_chapter(run: RunContext, job: ChapterJob) -> Tuple[List[ImageRef], Optional[str]]:
    """Navigate, wait for readiness and extract; one attempt."""
    s = run.settings
    await navigate(run.page, job, s)
    await ensure_ready(run.page, s)
    refs = await extract_image_refs(run.page, job, s.content_selector, s.comment_selector)
    title = await read_title(run.page)
    return refs, title


async def assemble_chapter(run: RunContext, job: ChapterJob, refs: List[ImageRef]) -> None:
    s = run.settings
    chapter_dir = s.images_dir / job.label
    doc = ChapterDocument(job.label)
    referer = run.page.url

    bar = tqdm(total=len(refs), ncols=80, desc=f"Chapter {job.index}", file=sys.stdout)
    try:
        for ref in refs:
            LOG.debug("Chapter %d: image %d/%d %s", job.index, ref.ordinal, len(refs), ref.source_url)
            try:
                local = await acquire_image(run.fetcher, ref, chapter_dir, referer)
                doc.add_image(local)
            except (DownloadError, InvalidImageFormat, EmbeddingError) as exc:
                LOG.warning("Skipping image: %s", exc)
            finally:
                bar.update(1)
    finally:
        bar.close()

    job.pages_embedded = len(doc)
    if not len(doc):
        LOG.warning(
            "Chapter %d: none of %d images could be embedded; no PDF written (%s)",
            job.index,
            len(refs),
            job.source_url,
        )
        return

    out_pdf = s.pdf_dir / f"{job.label}.pdf"
    job.document_path = doc.save(out_pdf)
    LOG.info(
        "Chapter %d: PDF saved to %s (%d/%d pages)", job.index, out_pdf, len(doc), len(refs)
    )


async def process_chapter(run: RunContext, job: ChapterJob) -> ChapterJob:
    max_attempts = max(1, run.settings.max_attempts)

    while True:
        attempt = job.start_attempt()
        try:
            refs, title = await load_chapter(run, job)
            break
        except Exception as exc:
            job.last_error = str(exc)
            if attempt >= max_attempts:
                LOG.error(
                    "Chapter %d failed after %d attempts: %s (%s)",
                    job.index,
                    attempt,
                    exc,
                    job.source_url,
                )
                job.finish(ChapterStatus.FAILED)
                return job
            LOG.warning(
                "Chapter %d attempt %d/%d failed: %s", job.index, attempt, max_attempts, exc
            )
            await asyncio.sleep(run.settings.retry_backoff_s * attempt)

    job.images_found = len(refs)
    LOG.info("Chapter %d: found %d images", job.index, len(refs))
    if not refs:
        LOG.warning("No images found for chapter %d. Skipping (%s)", job.index, job.source_url)
        job.finish(ChapterStatus.SKIPPED_NO_IMAGES)
        return job

    job.label = run.namer.label_for(job.index, title)
    try:
        await assemble_chapter(run, job, refs)
    except AssemblyIOError as exc:
        LOG.error("Chapter %d: %s", job.index, exc)
        job.finish(ChapterStatus.FAILED, str(exc))
        return job

    job.finish(ChapterStatus.SUCCEEDED)
    return job


def summarize(jobs: Sequence[ChapterJob]) -> RunSummary:
    summary = RunSummary(total=len(jobs))
    for job in jobs:
        if job.status is ChapterStatus.SUCCEEDED:
            summary.succeeded += 1
            if job.document_path:
                summary.documents.append(job.document_path)
        elif job.status is ChapterStatus.SKIPPED_NO_IMAGES:
            summary.skipped += 1
        elif job.status is ChapterStatus.FAILED:
            summary.failed += 1
            summary.failed_chapters.append((job.index, job.source_url))
    return summary


async def run_chapters(run: RunContext) -> RunSummary:
    with logging_redirect_tqdm():
        for job in run.jobs:
            LOG.info("Processing chapter %d: %s", job.index, job.source_url)
            try:
                await process_chapter(run, job)
            except Exception:
                LOG.exception("Unexpected error in chapter %d (%s)", job.index, job.source_url)
                if not job.status.terminal:
                    job.finish(ChapterStatus.FAILED, "unexpected error")

    summary = summarize(run.jobs)
    LOG.info(
        "Done: %d chapters, %d succeeded, %d skipped, %d failed",
        summary.total,
        summary.succeeded,
        summary.skipped,
        summary.failed,
    )
    for index, url in summary.failed_chapters:
        LOG.info("  failed: chapter %d %s", index, url)
    return summary


async def run_links(settings: Settings, links: Sequence[ChapterLink]) -> RunSummary:
    async with open_browser(settings) as page:
        fetcher = PlaywrightFetcher(
            page.context.request, settings.user_agent, settings.image_timeout_ms
        )
        run = RunContext(page=page, settings=settings, fetcher=fetcher, jobs=make_jobs(links))
        return await run_chapters(run)


async def run_batch(settings: Settings) -> RunSummary:
    links = load_chapter_list(settings.chapter_list_path)
    LOG.info("Loaded %d chapters from %s", len(links), settings.chapter_list_path)
    return await run_links(settings, links)


async def run_single(settings: Settings, chapter_url: str) -> RunSummary:
    return await run_links(settings, [chapter_url])
