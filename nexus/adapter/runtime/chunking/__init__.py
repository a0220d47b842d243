"""Message chunking for size-limited channels.

This module splits outbound text into channel-sized chunks without breaking
paragraphs, sentences or fenced code blocks, and coordinates sending those
chunks through a platform-specific send function.

Architecture:
    The chunking layer consists of:
    - fences.py: Fenced code block detection (plain/fenced segments)
    - segmenter.py: Boundary-aware splitting (chunk_text, TextSegmenter)
    - coordinator.py: Per-chunk delivery with partial-progress reporting
    - telemetry.py: Structured logging for deliveries
"""

from __future__ import annotations

from .coordinator import DeliveryCoordinator, SendFunc, classify_send_error, send_with_chunking
from .fences import (
    FenceSegment,
    Segment,
    TextSegment,
    is_fence_close,
    parse_fence_delimiter,
    split_fenced_segments,
)
from .segmenter import TextSegmenter, chunk_text, find_split_point, split_fence

__all__ = [
    "DeliveryCoordinator",
    "FenceSegment",
    "Segment",
    "SendFunc",
    "TextSegment",
    "TextSegmenter",
    "chunk_text",
    "classify_send_error",
    "find_split_point",
    "is_fence_close",
    "parse_fence_delimiter",
    "send_with_chunking",
    "split_fence",
    "split_fenced_segments",
]
