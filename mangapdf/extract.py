# -*- coding: utf-8 -*-
# Image references from a loaded chapter page, in DOM order.

from __future__ import annotations

import logging
from typing import List, Set
from urllib.parse import urljoin

from playwright.async_api import Page

from .models import ChapterJob, ImageFormat, ImageRef

LOG = logging.getLogger("mangapdf.extract")

# Images nested anywhere under a comment block are excluded (closest() walks
# the whole ancestor chain).
COLLECT_IMAGES_JS = r"""
({contentSel, commentSel}) => {
  const out = [];
  const containers = Array.from(document.querySelectorAll(contentSel));
  for (const c of containers) {
    for (const img of Array.from(c.querySelectorAll('img'))) {
      if (commentSel && img.closest(commentSel)) continue;
      const src = img.getAttribute('src');
      if (src) out.push(src);
    }
  }
  return out;
}
"""


def abs_url(u: str, base: str) -> str:
    if not u:
        return ""
    u = u.strip()
    if u.startswith("//"):
        return "https:" + u
    if u.startswith("http"):
        return u
    return urljoin(base, u)


def has_image_extension(url: str) -> bool:
    return ImageFormat.from_url(url) is not ImageFormat.UNKNOWN


def build_image_refs(job: ChapterJob, sources: List[str], base_url: str) -> List[ImageRef]:
    refs: List[ImageRef] = []
    seen: Set[str] = set()
    for raw in sources:
        url = abs_url(raw, base_url)
        if not url or url in seen or not has_image_extension(url):
            continue
        seen.add(url)
        refs.append(
            ImageRef(
                job=job,
                ordinal=len(refs) + 1,
                source_url=url,
                detected_format=ImageFormat.from_url(url),
            )
        )
    return refs


async def extract_image_refs(
    page: Page, job: ChapterJob, content_selector: str, comment_selector: str
) -> List[ImageRef]:
    sources = await page.evaluate(
        COLLECT_IMAGES_JS,
        {"contentSel": content_selector, "commentSel": comment_selector},
    )
    refs = build_image_refs(job, list(sources or []), page.url)
    LOG.debug(
        "Chapter %d: %d candidate src, %d kept", job.index, len(sources or []), len(refs)
    )
    return refs


__all__ = ["COLLECT_IMAGES_JS", "build_image_refs", "extract_image_refs"]
