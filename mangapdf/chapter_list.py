# -*- coding: utf-8 -*-
# Chapter list file: the handoff between discovery and the batch run.

from __future__ import annotations

import logging
import pathlib
from typing import Iterable, List, Set

from .models import ChapterLink

LOG = logging.getLogger("mangapdf.chapter_list")


def unique_preserve(items: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    out: List[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def load_chapter_list(path: pathlib.Path) -> List[ChapterLink]:
    """Read one URL per line; blank lines are ignored, duplicates dropped."""
    text = pathlib.Path(path).read_text(encoding="utf-8")
    lines = [line.strip() for line in text.splitlines()]
    links = [line for line in lines if line]
    unique = unique_preserve(links)
    if len(unique) != len(links):
        LOG.warning(
            "Dropped %d duplicate link(s) from %s", len(links) - len(unique), path
        )
    return unique


def save_chapter_list(path: pathlib.Path, links: Iterable[ChapterLink]) -> pathlib.Path:
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    unique = unique_preserve(link.strip() for link in links)
    body = "\n".join(unique)
    if unique:
        body += "\n"
    path.write_text(body, encoding="utf-8")
    LOG.info("Saved %d chapter links to %s", len(unique), path)
    return path
