"""
Document chunking for the review loop.

Splits extracted plain text into fixed-size character windows that overlap
by a fixed amount, so a clause cut at one window boundary is seen whole by
the next window.
"""
import math
import logging
from typing import Iterator, List

from legal_review.exceptions import ChunkingError
from legal_review.models import TextWindow

logger = logging.getLogger(__name__)


def validate_sizes(window_size: int, overlap_size: int) -> None:
    """Raise ChunkingError unless 0 <= overlap_size < window_size."""
    if window_size <= 0:
        raise ChunkingError(f"window_size must be positive, got {window_size}")
    if overlap_size < 0:
        raise ChunkingError(f"overlap_size must not be negative, got {overlap_size}")
    if overlap_size >= window_size:
        raise ChunkingError(
            f"overlap_size ({overlap_size}) must be smaller than window_size ({window_size})"
        )


def iter_windows(text: str, window_size: int, overlap_size: int) -> Iterator[TextWindow]:
    validate_sizes(window_size, overlap_size)
    step = window_size - overlap_size
    length = len(text)
    start = 0
    while True:
        end = min(start + window_size, length)
        yield TextWindow(start_offset=start, text=text[start:end])
        if end >= length:
            return
        start += step


def split_text(text: str, window_size: int, overlap_size: int) -> List[TextWindow]:
    """
    Split text into overlapping windows.

    Args:
        text: Full document text
        window_size: Maximum characters per window
        overlap_size: Characters shared with the previous window

    Returns:
        Windows in document order. Text no longer than window_size gives
        exactly one window.
    """
    windows = list(iter_windows(text, window_size, overlap_size))
    logger.info(f"Chunked text, original_length: {len(text)}, window: {window_size}, "
                f"overlap: {overlap_size}, chunks: {len(windows)}")
    return windows


def expected_chunk_count(length: int, window_size: int, overlap_size: int) -> int:
    validate_sizes(window_size, overlap_size)
    return max(1, math.ceil((length - overlap_size) / (window_size - overlap_size)))
