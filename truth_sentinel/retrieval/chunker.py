"""Sentence-aligned overlapping chunking for the local reference corpus.

Text is walked in windows of ``chunk_size`` characters. Each window end is
snapped back to the nearest sentence terminator or newline, unless that
point lies in the first half of the window. The next window starts
``overlap`` characters before the previous end. Chunks shorter than
``min_chunk_chars`` after trimming are dropped.
"""

from truth_sentinel.retrieval.schemas import MIN_CHUNK_CHARS

SENTENCE_BREAKS = (".", "!", "?", "\n")


def _snap_point(text: str, start: int, end: int, chunk_size: int) -> int:
    """Return the window end, snapped to a sentence break when one is close enough."""
    break_point = max(text.rfind(mark, start, end) for mark in SENTENCE_BREAKS)
    if break_point > start + chunk_size // 2:
        return break_point + 1
    return end


def chunk_spans(
    text: str,
    chunk_size: int = 500,
    overlap: int = 100,
) -> list[tuple[int, int]]:
    """Return untrimmed ``(start, end)`` offsets of every window over ``text``.

    Consecutive spans overlap and together cover the whole text.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if not 0 <= overlap < chunk_size:
        raise ValueError("overlap must be in [0, chunk_size)")

    spans: list[tuple[int, int]] = []
    length = len(text)
    start = 0

    while start < length:
        end = min(start + chunk_size, length)
        if end < length:
            end = _snap_point(text, start, end, chunk_size)
        spans.append((start, end))
        if end >= length:
            break
        start = max(end - overlap, start + 1)

    return spans


def chunk_text(
    text: str,
    chunk_size: int = 500,
    overlap: int = 100,
    min_chunk_chars: int = MIN_CHUNK_CHARS,
) -> list[str]:
    """Split ``text`` into trimmed chunks of at least ``min_chunk_chars`` characters."""
    chunks = []
    for start, end in chunk_spans(text, chunk_size, overlap):
        chunk = text[start:end].strip()
        if len(chunk) >= min_chunk_chars:
            chunks.append(chunk)
    return chunks
