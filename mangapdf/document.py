# -*- coding: utf-8 -*-
"""Chapter PDF assembly.

Pages are accumulated one image at a time. Each page is exactly the pixel
size of its image (one PDF point per pixel) with the image drawn at the
origin, and pages keep the ordinal order of the extracted references no
matter which images were skipped on the way.
"""

from __future__ import annotations

import io
import logging
import os
import pathlib
from dataclasses import dataclass
from typing import List

import img2pdf
import pikepdf
from PIL import Image

from .errors import AssemblyIOError, EmbeddingError
from .models import LocalImageFile

LOG = logging.getLogger("mangapdf.document")

PAGE_LAYOUT = img2pdf.get_fixed_dpi_layout_fun((72, 72))
NATIVE_FORMATS = ("JPEG", "PNG")
NATIVE_PNG_MODES = ("1", "L", "RGB", "P")


@dataclass
class EmbeddedPage:
    ordinal: int
    width: int
    height: int
    data: bytes
    transcoded: bool = False


def _has_alpha(im: Image.Image) -> bool:
    return im.mode in ("RGBA", "LA", "PA") or (im.mode == "P" and "transparency" in im.info)


def to_png(im: Image.Image) -> bytes:
    """Flatten onto white if needed and re-encode as RGB PNG."""
    if _has_alpha(im):
        rgba = im.convert("RGBA")
        flat = Image.new("RGB", rgba.size, (255, 255, 255))
        flat.paste(rgba, mask=rgba.split()[3])
    else:
        flat = im.convert("RGB")
    out = io.BytesIO()
    flat.save(out, format="PNG")
    return out.getvalue()


def embeddable_bytes(data: bytes):
    """Return (bytes, width, height, transcoded) ready for img2pdf."""
    with Image.open(io.BytesIO(data)) as im:
        im.load()
        width, height = im.size
        native = im.format in NATIVE_FORMATS and not _has_alpha(im)
        if native and im.format == "PNG" and im.mode not in NATIVE_PNG_MODES:
            native = False
        if native:
            return data, width, height, False
        return to_png(im), width, height, True


class ChapterDocument:
    def __init__(self, label: str):
        self.label = label
        self.pages: List[EmbeddedPage] = []

    def __len__(self) -> int:
        return len(self.pages)

    def add_image(self, local: LocalImageFile) -> EmbeddedPage:
        ordinal = local.ref.ordinal
        try:
            data = local.path.read_bytes()
            payload, width, height, transcoded = embeddable_bytes(data)
            # img2pdf rejects what it cannot embed; check per page so a bad
            # image never poisons the final conversion.
            img2pdf.convert(payload, layout_fun=PAGE_LAYOUT)
        except Exception as exc:
            raise EmbeddingError(
                f"Could not embed {local.path.name}: {exc}",
                url=local.ref.source_url,
                chapter_index=local.ref.job.index,
                image_index=ordinal,
            ) from exc

        page = EmbeddedPage(ordinal, width, height, payload, transcoded)
        self.pages.append(page)
        self.pages.sort(key=lambda p: p.ordinal)
        if transcoded:
            LOG.debug("Transcoded page %d of %s to PNG", ordinal, self.label)
        return page

    def to_bytes(self) -> bytes:
        return img2pdf.convert([p.data for p in self.pages], layout_fun=PAGE_LAYOUT)

    def save(self, path: pathlib.Path) -> pathlib.Path:
        if not self.pages:
            raise ValueError(f"Refusing to write empty document {self.label}")
        path = pathlib.Path(path)
        part = path.with_name(path.name + ".part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            part.write_bytes(self.to_bytes())
            count = pdf_page_count(part)
            if count != len(self.pages):
                raise AssemblyIOError(
                    f"Written PDF has {count} pages, expected {len(self.pages)}", url=str(path)
                )
            os.replace(part, path)
        except AssemblyIOError:
            part.unlink(missing_ok=True)
            raise
        except Exception as exc:
            part.unlink(missing_ok=True)
            raise AssemblyIOError(f"Could not write {path}: {exc}", url=str(path)) from exc
        return path


def pdf_page_count(pdf_path: pathlib.Path) -> int:
    with pikepdf.open(pdf_path) as pdf:
        return len(pdf.pages)
