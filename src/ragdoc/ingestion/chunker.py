"""Paragraph-bounded text chunking.

Chunk size is measured in *estimated tokens*: one token per four
characters, rounded up.  The same estimate bounds every chunk, so a
chunk of ``max_tokens`` never exceeds ``4 * max_tokens`` characters.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from langchain_text_splitters import RecursiveCharacterTextSplitter

DEFAULT_MAX_TOKENS = 200
CHARS_PER_TOKEN = 4
PARAGRAPH_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def estimate_tokens(text: str) -> int:
    """Return the estimated token count of *text*."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def build_splitter(max_tokens: int = DEFAULT_MAX_TOKENS) -> RecursiveCharacterTextSplitter:
    """Return a splitter that prefers paragraph, then line, sentence and word boundaries."""
    if max_tokens <= 0:
        raise ValueError(f"max_tokens must be positive, got {max_tokens}")
    return RecursiveCharacterTextSplitter(
        chunk_size=max_tokens,
        chunk_overlap=0,
        length_function=estimate_tokens,
        separators=PARAGRAPH_SEPARATORS,
    )


def split_page_text(
    page_text: str,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    *,
    splitter: RecursiveCharacterTextSplitter | None = None,
) -> list[str]:
    """Split one page's text into chunks of at most *max_tokens*.

    Short adjacent paragraphs are merged up to the bound; whitespace-only
    pieces are dropped.

    Parameters
    ----------
    page_text:
        Paragraphs separated by blank lines.
    max_tokens:
        Upper bound on :func:`estimate_tokens` per chunk.
    splitter:
        Pre-built splitter to reuse across pages.

    Returns
    -------
    list[str]
        Non-empty chunk texts in page order.
    """
    if not page_text.strip():
        return []
    splitter = splitter or build_splitter(max_tokens)
    return [chunk for chunk in splitter.split_text(page_text) if chunk.strip()]


def split_pages(
    pages: Iterable[tuple[int, str]],
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> list[tuple[int, int, str]]:
    """Chunk ``(page_number, page_text)`` pairs.

    Returns ``(page_number, index_on_page, text)`` triples in page order.
    """
    splitter = build_splitter(max_tokens)
    chunks: list[tuple[int, int, str]] = []
    for page_number, text in pages:
        for index, chunk in enumerate(split_page_text(text, splitter=splitter)):
            chunks.append((page_number, index, chunk))
    return chunks
