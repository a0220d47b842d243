"""Boundary-aware text segmentation for size-limited channels.

This module provides the TextSegmenter that splits message text into chunks
no longer than a channel's character limit, preferring natural boundaries:

1. Paragraph breaks (``\\n\\n``) in the last 30% of the window
2. Line breaks (``\\n``) in the last 40%
3. Sentence endings (``.``, ``!``, ``?`` followed by whitespace) in the last 50%
4. Word boundaries (spaces) in the last 20%
5. Hard cut at the limit (last resort)

Fenced code blocks are kept whole whenever they fit. A block larger than the
limit is split by whole body lines, and every piece is re-wrapped in the
original delimiters so each chunk stays a closed code block on its own.

Architecture:
    Segmentation is a pure function of (text, limit): no I/O, no state kept
    between calls. Lengths are counted in characters (code points).
"""

from __future__ import annotations

from .fences import FenceSegment, split_fenced_segments, split_lines

# Window starts, as a percentage of the search window
PARAGRAPH_SEARCH_START = 70
LINE_SEARCH_START = 60
SENTENCE_SEARCH_START = 50
WORD_SEARCH_START = 80

SENTENCE_TERMINATORS = frozenset(".!?")


def _find_boundary(text: str, limit: int) -> int | None:
    """Best natural split position in ``text[:limit]``, or None if there is none."""
    start = limit * PARAGRAPH_SEARCH_START // 100
    idx = text.rfind("\n\n", start, limit)
    if idx != -1:
        return idx + 2  # newlines stay with the first chunk

    start = limit * LINE_SEARCH_START // 100
    idx = text.rfind("\n", start, limit)
    if idx != -1:
        return idx + 1

    # "Mr." followed by a letter is not a sentence end
    start = limit * SENTENCE_SEARCH_START // 100
    for i in range(limit - 1, start - 1, -1):
        if text[i] in SENTENCE_TERMINATORS and (i + 1 >= len(text) or text[i + 1].isspace()):
            return i + 1

    start = limit * WORD_SEARCH_START // 100
    idx = text.rfind(" ", start, limit)
    if idx != -1:
        return idx + 1

    return None


def find_split_point(text: str, limit: int) -> int:
    """Find where to split ``text`` so the first part is at most ``limit`` long.

    Args:
        text: Text to split
        limit: Maximum length of the first part

    Returns:
        Split index; ``limit`` itself when no natural boundary exists
    """
    if limit >= len(text):
        return len(text)
    boundary = _find_boundary(text, limit)
    return limit if boundary is None else boundary


def _hard_cut(line: str, budget: int) -> list[str]:
    """Cut an oversized code line into pieces of at most ``budget`` chars.

    Each piece ends with a newline so the closing delimiter that follows it
    stays on its own line.
    """
    has_newline = line.endswith("\n")
    content = line[:-1] if has_newline else line
    step = budget - 1
    pieces = [content[i : i + step] + "\n" for i in range(0, len(content), step)]
    if not has_newline:
        pieces[-1] = pieces[-1][:-1]
    return pieces


def split_fence(fence: FenceSegment, limit: int) -> list[str]:
    """Split an oversized fenced block into independently closed blocks.

    Args:
        fence: The fenced block
        limit: Channel character limit

    Returns:
        Fenced chunks, each re-wrapped with the original delimiters. A block
        whose delimiters alone leave no room for content is returned whole.
    """
    if len(fence) <= limit:
        return [fence.text]

    budget = limit - fence.overhead
    if budget < 2:
        return [fence.text]

    pieces: list[str] = []
    buffer = ""
    for line in split_lines(fence.body):
        if len(line) > budget:
            if buffer:
                pieces.append(buffer)
            cuts = _hard_cut(line, budget)
            pieces.extend(cuts[:-1])
            buffer = cuts[-1]
            continue

        if buffer and len(buffer) + len(line) > budget:
            pieces.append(buffer)
            buffer = ""
        buffer += line
    if buffer:
        pieces.append(buffer)

    return [fence.open + piece + fence.close for piece in pieces]


class _ChunkBuffer:
    """Greedy accumulator for chunks being assembled."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.chunks: list[str] = []
        self.current = ""

    def flush(self) -> None:
        out = self.current.rstrip(" ")
        if out:
            self.chunks.append(out)
        self.current = ""

    def append_text(self, text: str) -> None:
        remaining = text
        while remaining:
            room = self.limit - len(self.current)
            if room <= 0:
                self.flush()
                continue
            if len(remaining) <= room:
                self.current += remaining
                return

            boundary = _find_boundary(remaining, room)
            if boundary is None and self.current:
                # Retry against a fresh chunk before cutting mid-word
                self.flush()
                continue

            split_at = room if boundary is None else boundary
            self.current += remaining[:split_at].rstrip(" ")
            self.flush()
            remaining = remaining[split_at:].lstrip(" ")

    def append_fence(self, fence: FenceSegment) -> None:
        if len(fence) > self.limit:
            if self.current:
                self.flush()
            for piece in split_fence(fence, self.limit):
                out = piece.rstrip(" ")
                if out:
                    self.chunks.append(out)
            return

        if self.current and len(self.current) + len(fence) > self.limit:
            self.flush()
        self.current += fence.text


def chunk_text(text: str, limit: int) -> list[str]:
    """Split text into chunks that fit within ``limit`` characters.

    Args:
        text: Message text
        limit: Channel character limit; ``<= 0`` disables chunking

    Returns:
        Ordered chunks. Empty text yields no chunks; text already within the
        limit (or a non-positive limit) yields the text unchanged.
    """
    if not text:
        return []
    if limit <= 0 or len(text) <= limit:
        return [text]

    buffer = _ChunkBuffer(limit)
    for segment in split_fenced_segments(text):
        if isinstance(segment, FenceSegment):
            buffer.append_fence(segment)
        else:
            buffer.append_text(segment.text)
    buffer.flush()
    return buffer.chunks


class TextSegmenter:
    """Segmenter bound to one channel's character limit.

    Example:
        >>> segmenter = TextSegmenter(limit=2000)
        >>> chunks = segmenter.segment(reply_text)
    """

    def __init__(self, limit: int) -> None:
        """Initialize segmenter.

        Args:
            limit: Channel character limit; ``<= 0`` disables chunking
        """
        self._limit = limit

    @property
    def limit(self) -> int:
        return self._limit

    def segment(self, text: str) -> list[str]:
        """Split text into chunks within this segmenter's limit."""
        return chunk_text(text, self._limit)
