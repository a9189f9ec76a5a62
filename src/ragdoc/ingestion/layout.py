"""Layout analysis for one PDF page.

Turns positioned glyphs into page text in four steps:

1. **Words** — glyphs on the same row are linked to their nearest
   right-hand neighbour when the gap between them is small relative to
   the glyph height.  Whitespace glyphs always end a word.
2. **Segments** — words on the same row are joined into text segments,
   split wherever the gap is wide enough to be a column gutter.
3. **Blocks** — each segment is linked to its nearest horizontally
   overlapping segment below it when the vertical gap is small
   (bounding-box clustering); connected segments form a block.
4. **Page text** — blocks in reading order, each block's lines joined by
   single spaces and blocks separated by a blank line.

Coordinates use the PyMuPDF convention: origin top-left, ``y`` grows
downward.  Everything here is pure Python so it can be tested without a
PDF on disk.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple, Protocol, TypeVar

# Max glyph gap inside a word, as a fraction of glyph height.
WORD_GAP_RATIO = 0.15
# Min gap between two segments on one row (column gutter), as a fraction of height.
SEGMENT_GAP_RATIO = 1.0
# Max vertical gap between two lines of one block, as a fraction of height.
BLOCK_GAP_RATIO = 0.8
# Max vertical-centre offset for two boxes to share a row, as a fraction of height.
ROW_TOLERANCE_RATIO = 0.5

_MIN_HEIGHT = 1e-3

BLOCK_SEPARATOR = "\n\n"


class _Box(Protocol):
    @property
    def x0(self) -> float: ...
    @property
    def y0(self) -> float: ...
    @property
    def x1(self) -> float: ...
    @property
    def y1(self) -> float: ...


B = TypeVar("B", bound=_Box)


class Glyph(NamedTuple):
    """One positioned character."""

    text: str
    x0: float
    y0: float
    x1: float
    y1: float


class Word(NamedTuple):
    """A run of glyphs (or, for segments, of words) with its bounding box."""

    text: str
    x0: float
    y0: float
    x1: float
    y1: float


class TextBlock(NamedTuple):
    """A cluster of text lines that belong together on the page."""

    lines: tuple[str, ...]
    x0: float
    y0: float
    x1: float
    y1: float
    line_height: float

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------


def _height(box: _Box) -> float:
    return max(box.y1 - box.y0, _MIN_HEIGHT)


def _center_y(box: _Box) -> float:
    return (box.y0 + box.y1) / 2


def _merge(text: str, boxes: Sequence[_Box]) -> Word:
    return Word(
        text=text,
        x0=min(b.x0 for b in boxes),
        y0=min(b.y0 for b in boxes),
        x1=max(b.x1 for b in boxes),
        y1=max(b.y1 for b in boxes),
    )


def _horizontal_overlap(a: _Box, b: _Box) -> float:
    return min(a.x1, b.x1) - max(a.x0, b.x0)


def _group_rows(boxes: Sequence[B]) -> list[list[B]]:
    """Group *boxes* into rows by vertical centre, top to bottom, each row left to right."""
    rows: list[list[B]] = []
    centers: list[float] = []
    for box in sorted(boxes, key=lambda b: (_center_y(b), b.x0)):
        if rows:
            row = rows[-1]
            row_center = centers[-1] / len(row)
            tolerance = ROW_TOLERANCE_RATIO * min(_height(row[0]), _height(box))
            if abs(_center_y(box) - row_center) <= tolerance:
                row.append(box)
                centers[-1] += _center_y(box)
                continue
        rows.append([box])
        centers.append(_center_y(box))
    return [sorted(row, key=lambda b: b.x0) for row in rows]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def group_words(glyphs: Sequence[Glyph]) -> list[Word]:
    """Group *glyphs* into words, in row-major reading order."""
    words: list[Word] = []

    def flush(current: list[Glyph]) -> None:
        if current:
            words.append(_merge("".join(g.text for g in current), current))

    for row in _group_rows([g for g in glyphs if g.text]):
        current: list[Glyph] = []
        for glyph in row:
            if glyph.text.isspace():
                flush(current)
                current = []
                continue
            if current:
                prev = current[-1]
                gap = glyph.x0 - prev.x1
                if gap > WORD_GAP_RATIO * max(_height(prev), _height(glyph)):
                    flush(current)
                    current = []
            current.append(glyph)
        flush(current)
    return words


def group_segments(words: Sequence[Word]) -> list[Word]:
    """Join same-row *words* into segments, splitting at column gutters."""
    segments: list[Word] = []

    def flush(current: list[Word]) -> None:
        if current:
            segments.append(_merge(" ".join(w.text for w in current), current))

    for row in _group_rows(words):
        current: list[Word] = []
        for word in row:
            if current:
                prev = current[-1]
                gap = word.x0 - prev.x1
                if gap > SEGMENT_GAP_RATIO * max(_height(prev), _height(word)):
                    flush(current)
                    current = []
            current.append(word)
        flush(current)
    return segments


def group_blocks(words: Sequence[Word]) -> list[TextBlock]:
    """Cluster *words* into text blocks, returned in reading order."""
    segments = group_segments(words)
    parent = list(range(len(segments)))

    def find(i: int) -> int:
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for i, upper in enumerate(segments):
        nearest: int | None = None
        nearest_gap = 0.0
        for j, lower in enumerate(segments):
            if j == i or _center_y(lower) <= _center_y(upper):
                continue
            if _horizontal_overlap(upper, lower) <= 0:
                continue
            gap = lower.y0 - upper.y1
            if nearest is None or gap < nearest_gap or (
                gap == nearest_gap and lower.x0 < segments[nearest].x0
            ):
                nearest, nearest_gap = j, gap
        if nearest is not None and nearest_gap <= BLOCK_GAP_RATIO * max(
            _height(upper), _height(segments[nearest])
        ):
            parent[find(nearest)] = find(i)

    clusters: dict[int, list[Word]] = {}
    for i, segment in enumerate(segments):
        clusters.setdefault(find(i), []).append(segment)

    blocks: list[TextBlock] = []
    for members in clusters.values():
        members.sort(key=lambda s: (_center_y(s), s.x0))
        box = _merge("", members)
        blocks.append(
            TextBlock(
                lines=tuple(s.text for s in members),
                x0=box.x0,
                y0=box.y0,
                x1=box.x1,
                y1=box.y1,
                line_height=_height(members[0]),
            )
        )
    return _reading_order(blocks)


def _reading_order(blocks: list[TextBlock]) -> list[TextBlock]:
    """Order blocks top to bottom; blocks starting on the same row go left to right."""
    remaining = sorted(blocks, key=lambda b: (b.y0, b.x0))
    ordered: list[TextBlock] = []
    while remaining:
        top = remaining[0]
        row = [b for b in remaining if b.y0 - top.y0 <= top.line_height]
        rest = [b for b in remaining if b.y0 - top.y0 > top.line_height]
        ordered.extend(sorted(row, key=lambda b: b.x0))
        remaining = rest
    return ordered


def blocks_to_page_text(blocks: Sequence[TextBlock]) -> str:
    """Join *blocks* into page text: line breaks become spaces, blocks are paragraphs."""
    paragraphs = (" ".join(block.text.split()) for block in blocks)
    return BLOCK_SEPARATOR.join(p for p in paragraphs if p)


def extract_page_text(glyphs: Sequence[Glyph]) -> str:
    """Run the full glyph → page-text analysis."""
    return blocks_to_page_text(group_blocks(group_words(glyphs)))
