"""PDF loading — thin wrapper around PyMuPDF page extraction."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import fitz  # PyMuPDF

from ragdoc.ingestion.layout import Glyph, extract_page_text


def page_glyphs(page: fitz.Page) -> list[Glyph]:
    """Return every character on *page* with its bounding box.

    PyMuPDF's own block grouping is ignored; layout is re-derived from the
    glyphs by :mod:`ragdoc.ingestion.layout`.
    """
    glyphs: list[Glyph] = []
    raw = page.get_text("rawdict")
    for block in raw.get("blocks", []):
        if block.get("type") != 0:  # images
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                for char in span.get("chars", []):
                    x0, y0, x1, y1 = char["bbox"]
                    glyphs.append(Glyph(char["c"], x0, y0, x1, y1))
    return glyphs


def iter_pdf_pages(path: str | Path) -> Iterator[tuple[int, str]]:
    """Yield ``(page_number, page_text)`` for each page of the PDF at *path*.

    Page numbers are 1-based.  The file stays open only while iterating.
    """
    with fitz.open(str(path)) as pdf:
        for index, page in enumerate(pdf):
            yield index + 1, extract_page_text(page_glyphs(page))
