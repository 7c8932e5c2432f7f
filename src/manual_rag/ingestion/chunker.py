"""Overlap-aware text chunking."""

from __future__ import annotations

import re

# Boundary markers tried in priority order; the first one found in the
# back half of the window wins, even if a later marker sits closer to the cut.
BREAK_POINTS: tuple[str, ...] = (". ", "。", "\n", "、", ", ")

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 200
DEFAULT_MIN_LENGTH = 50

_WHITESPACE_RE = re.compile(r"\s+")
_NEWLINES_RE = re.compile(r"\n+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to a single space and trim the result."""
    text = _WHITESPACE_RE.sub(" ", text)
    text = _NEWLINES_RE.sub("\n", text)
    return text.strip()


def _find_break(text: str, start: int, end: int, chunk_size: int) -> int:
    for marker in BREAK_POINTS:
        # last occurrence beginning at or before ``end``
        idx = text.rfind(marker, 0, end + len(marker))
        if idx > start + chunk_size / 2:
            return idx + len(marker)
    return end


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> list[str]:
    """Split *text* into overlapping chunks for embedding.

    Parameters
    ----------
    text:
        Raw extracted text; it is normalized before splitting.
    chunk_size:
        Target number of characters per chunk. A chunk may run a few
        characters past this when its boundary marker straddles the cut.
    overlap:
        Number of characters each chunk shares with its predecessor.
    min_length:
        Chunks of this length or shorter are dropped as noise. A document
        that fits in a single chunk is returned whole regardless.

    Returns
    -------
    list[str]
        Chunks in document order. Empty when the text holds no content.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if not 0 <= overlap < chunk_size:
        raise ValueError(f"overlap ({overlap}) must be >= 0 and < chunk_size ({chunk_size})")

    cleaned = normalize_text(text)
    if not cleaned:
        return []
    if len(cleaned) <= chunk_size:
        return [cleaned]

    length = len(cleaned)
    chunks: list[str] = []
    start = 0
    while start < length:
        end = start + chunk_size
        if end < length:
            end = _find_break(cleaned, start, end, chunk_size)
            # with overlap above half the chunk size a snapped boundary can
            # move the window backwards; keep the raw cut in that case
            if end - overlap <= start:
                end = start + chunk_size

        chunks.append(cleaned[start:end].strip())
        start = end - overlap

        if start >= length - overlap:
            break

    return [chunk for chunk in chunks if len(chunk) > min_length]
