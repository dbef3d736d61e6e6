# -*- coding: utf-8 -*-
# Filesystem-safe chapter labels and the naming policies that produce them.

from __future__ import annotations

import re
from typing import Optional, Set

MAX_LABEL_LENGTH = 80

ILLEGAL_CHARS_RE = re.compile(r'[\\/*?:"<>|\x00-\x1f\x7f]+')
WHITESPACE_RE = re.compile(r"\s+")

POSITIONAL = "positional"
TITLE = "title"
NAMING_POLICIES = (POSITIONAL, TITLE)


def positional_label(position: int) -> str:
    return f"chapter_{position}"


def sanitize_label(raw: Optional[str], position: int, max_length: int = MAX_LABEL_LENGTH) -> str:
    """Turn a raw chapter label into a token usable as a file and directory name.

    Illegal filename characters are removed, whitespace runs become a single
    underscore and the result is capped at ``max_length`` characters. An
    empty result falls back to ``chapter_<position>``.
    """
    s = WHITESPACE_RE.sub(" ", raw or "")
    s = ILLEGAL_CHARS_RE.sub("", s).strip()
    s = WHITESPACE_RE.sub("_", s)
    s = s[:max_length].strip("_. ")
    return s or positional_label(position)


class ChapterNamer:
    """Picks a unique label per chapter for the duration of one run."""

    def __init__(self, policy: str = POSITIONAL, max_length: int = MAX_LABEL_LENGTH):
        if policy not in NAMING_POLICIES:
            raise ValueError(f"Unknown naming policy {policy!r}; expected one of {NAMING_POLICIES}")
        self.policy = policy
        self.max_length = max_length
        self._used: Set[str] = set()

    def label_for(self, position: int, title: Optional[str] = None) -> str:
        if self.policy == TITLE:
            label = sanitize_label(title, position, self.max_length)
        else:
            label = positional_label(position)
        base, candidate, n = label, label, 1
        while candidate in self._used:
            suffix = f"_{position}" if n == 1 else f"_{position}_{n}"
            candidate = base[: self.max_length - len(suffix)] + suffix
            n += 1
        self._used.add(candidate)
        return candidate
