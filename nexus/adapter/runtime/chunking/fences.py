"""Fenced code block detection.

This module partitions text into alternating plain-text and fenced segments
so the segmenter can keep code blocks intact, or re-fence them when a single
block is larger than the channel limit.

A fence opens on a line whose content (after leading spaces/tabs) starts with
a run of three or more identical backticks or tildes, and closes on a line
starting with at least as many of the same character. A fence still open at
end of input is closed with a synthesized delimiter.
"""

from __future__ import annotations

from dataclasses import dataclass

FENCE_CHARS = ("`", "~")
MIN_FENCE_LENGTH = 3


@dataclass(frozen=True)
class TextSegment:
    """Plain text outside any fenced block."""

    text: str


@dataclass(frozen=True)
class FenceSegment:
    """Fenced code block split into its delimiter lines and body.

    Attributes:
        open: Opening delimiter line, including its newline
        body: Lines between the delimiters, newlines included
        close: Closing delimiter line (synthesized for unterminated fences)
    """

    open: str
    body: str
    close: str

    @property
    def text(self) -> str:
        """Full block text."""
        return self.open + self.body + self.close

    @property
    def overhead(self) -> int:
        """Characters taken by the delimiters alone."""
        return len(self.open) + len(self.close)

    def __len__(self) -> int:
        return len(self.open) + len(self.body) + len(self.close)


Segment = TextSegment | FenceSegment


def _strip_line(line: str) -> str:
    return line.rstrip("\r\n").lstrip(" \t")


def _run_length(text: str, char: str) -> int:
    return len(text) - len(text.lstrip(char))


def parse_fence_delimiter(line: str) -> tuple[str, int] | None:
    """Parse a fence opening delimiter.

    Args:
        line: A single line, with or without its trailing newline

    Returns:
        ``(fence_char, run_length)`` if the line opens a fence, None otherwise
    """
    trimmed = _strip_line(line)
    if not trimmed or trimmed[0] not in FENCE_CHARS:
        return None
    char = trimmed[0]
    length = _run_length(trimmed, char)
    if length < MIN_FENCE_LENGTH:
        return None
    return char, length


def is_fence_close(line: str, fence_char: str, fence_length: int) -> bool:
    """Check whether a line closes a fence opened with ``fence_length`` chars.

    Closing runs longer than the opener are accepted.
    """
    if fence_length < MIN_FENCE_LENGTH:
        return False
    return _run_length(_strip_line(line), fence_char) >= fence_length


def split_lines(text: str) -> list[str]:
    """Split text on ``\\n`` only, each line keeping its trailing newline."""
    lines: list[str] = []
    start = 0
    while start < len(text):
        end = text.find("\n", start)
        if end == -1:
            lines.append(text[start:])
            break
        lines.append(text[start : end + 1])
        start = end + 1
    return lines


def split_fenced_segments(text: str) -> list[Segment]:
    """Partition text into plain and fenced segments, in order.

    Concatenating the segment texts reproduces the input, except that an
    unterminated fence gains a synthesized closing delimiter.

    Args:
        text: Raw message text

    Returns:
        Ordered list of TextSegment and FenceSegment
    """
    segments: list[Segment] = []
    pending_start = 0
    position = 0

    fence_char = ""
    fence_length = 0
    fence_start = -1
    open_end = 0

    for line in split_lines(text):
        line_start = position
        position += len(line)

        if fence_start < 0:
            delimiter = parse_fence_delimiter(line)
            if delimiter is None:
                continue
            if line_start > pending_start:
                segments.append(TextSegment(text[pending_start:line_start]))
            fence_char, fence_length = delimiter
            fence_start = line_start
            open_end = position
            continue

        if is_fence_close(line, fence_char, fence_length):
            segments.append(
                FenceSegment(
                    open=text[fence_start:open_end],
                    body=text[open_end:line_start],
                    close=line,
                )
            )
            fence_start = -1
            pending_start = position

    if fence_start >= 0:
        delimiter = fence_char * max(MIN_FENCE_LENGTH, fence_length)
        # Keep the synthesized delimiter on its own line
        prefix = "" if text.endswith("\n") else "\n"
        segments.append(
            FenceSegment(
                open=text[fence_start:open_end],
                body=text[open_end:],
                close=f"{prefix}{delimiter}\n",
            )
        )
    elif pending_start < len(text):
        segments.append(TextSegment(text[pending_start:]))

    return segments
