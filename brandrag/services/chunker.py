"""Fixed-size overlapping character windows for guideline text.

Consecutive windows overlap by ``overlap`` characters so that a sentence
straddling a boundary is fully contained in at least one chunk.  Offsets are
recorded against the original text; each chunk's text is the trimmed slice.
"""

from __future__ import annotations

import structlog

from brandrag.models.rag import ChunkSpan

logger = structlog.get_logger(logger_name=__name__)


class TextChunker:
    """Splits text into windows of ``chunk_size`` characters.

    The start offset advances by ``chunk_size - overlap`` each step, and the
    last window is the first one that reaches the end of the text.  Stateless
    and deterministic: the same text always yields the same boundaries.

    Parameters
    ----------
    chunk_size:
        Window length in characters (default 1000).
    overlap:
        Characters shared by consecutive windows (default 150).  Must be
        smaller than *chunk_size*, otherwise the window would never advance.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 150) -> None:
        if chunk_size <= 0:
            msg = f"chunk_size must be positive, got {chunk_size}"
            raise ValueError(msg)
        if overlap < 0:
            msg = f"overlap must be non-negative, got {overlap}"
            raise ValueError(msg)
        if overlap >= chunk_size:
            msg = f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
            raise ValueError(msg)
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    def chunk(self, text: str) -> list[ChunkSpan]:
        """Split *text* into ordered :class:`ChunkSpan` windows.

        Empty input returns an empty list; text no longer than
        ``chunk_size`` returns exactly one span.
        """
        if not text:
            return []

        step = self._chunk_size - self._overlap
        length = len(text)
        spans: list[ChunkSpan] = []
        start = 0
        while start < length:
            end = min(start + self._chunk_size, length)
            spans.append(ChunkSpan(text=text[start:end].strip(), start_offset=start, end_offset=end))
            if end == length:
                break
            start += step

        logger.debug(
            "chunking_complete",
            num_chunks=len(spans),
            text_length=length,
            chunk_size=self._chunk_size,
            overlap=self._overlap,
        )
        return spans


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 150) -> list[ChunkSpan]:
    """Functional shorthand for ``TextChunker(chunk_size, overlap).chunk(text)``."""
    return TextChunker(chunk_size=chunk_size, overlap=overlap).chunk(text)
