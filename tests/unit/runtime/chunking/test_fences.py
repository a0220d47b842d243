"""Unit tests for fenced code block detection."""

from __future__ import annotations

from nexus.adapter.runtime.chunking import (
    FenceSegment,
    TextSegment,
    is_fence_close,
    parse_fence_delimiter,
    split_fenced_segments,
)
from nexus.adapter.runtime.chunking.fences import split_lines


class TestParseFenceDelimiter:
    """Test fence opener detection."""

    def test_backtick_fence_with_language(self):
        assert parse_fence_delimiter("```python\n") == ("`", 3)

    def test_tilde_fence(self):
        assert parse_fence_delimiter("~~~~") == ("~", 4)

    def test_indented_fence(self):
        assert parse_fence_delimiter("  \t```") == ("`", 3)

    def test_too_short_run_is_not_a_fence(self):
        assert parse_fence_delimiter("``code``") is None

    def test_plain_line_is_not_a_fence(self):
        assert parse_fence_delimiter("hello ```") is None
        assert parse_fence_delimiter("") is None


class TestIsFenceClose:
    """Test fence closer matching."""

    def test_same_length_closes(self):
        assert is_fence_close("```\n", "`", 3)

    def test_longer_run_closes(self):
        assert is_fence_close("`````", "`", 3)

    def test_shorter_run_does_not_close(self):
        assert not is_fence_close("```", "`", 4)

    def test_other_fence_char_does_not_close(self):
        assert not is_fence_close("~~~", "`", 3)


class TestSplitLines:
    def test_keeps_newlines(self):
        assert split_lines("a\nb\n\nc") == ["a\n", "b\n", "\n", "c"]

    def test_carriage_return_stays_in_line(self):
        assert split_lines("a\r\nb") == ["a\r\n", "b"]

    def test_empty(self):
        assert split_lines("") == []


class TestSplitFencedSegments:
    """Test partitioning into plain and fenced segments."""

    def test_plain_text_only(self):
        assert split_fenced_segments("just text\nmore") == [TextSegment("just text\nmore")]

    def test_fence_between_text(self):
        text = "before\n```js\nx = 1\n```\nafter"
        segments = split_fenced_segments(text)

        assert segments == [
            TextSegment("before\n"),
            FenceSegment(open="```js\n", body="x = 1\n", close="```\n"),
            TextSegment("after"),
        ]
        assert "".join(s.text for s in segments) == text

    def test_unterminated_fence_gets_synthesized_close(self):
        segments = split_fenced_segments("text\n```\ncode")

        assert segments == [
            TextSegment("text\n"),
            FenceSegment(open="```\n", body="code", close="\n```\n"),
        ]

    def test_unterminated_fence_ending_in_newline(self):
        segments = split_fenced_segments("~~~~\ncode\n")

        assert segments == [FenceSegment(open="~~~~\n", body="code\n", close="~~~~\n")]

    def test_shorter_run_inside_longer_fence_is_body(self):
        text = "````\na\n```\nb\n`````\n"
        segments = split_fenced_segments(text)

        assert len(segments) == 1
        fence = segments[0]
        assert isinstance(fence, FenceSegment)
        assert fence.body == "a\n```\nb\n"
        assert fence.close == "`````\n"

    def test_tilde_does_not_close_backtick_fence(self):
        segments = split_fenced_segments("```\n~~~\n```")

        assert segments == [FenceSegment(open="```\n", body="~~~\n", close="```")]

    def test_fence_overhead_and_length(self):
        fence = FenceSegment(open="```\n", body="abc\n", close="```\n")
        assert fence.overhead == 8
        assert len(fence) == 12
        assert fence.text == "```\nabc\n```\n"
