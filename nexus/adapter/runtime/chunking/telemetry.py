"""Structured logging for chunked delivery.

This module provides telemetry hooks for the delivery coordinator, emitting
structured log records (event name as message, fields in ``extra``) so hosts
can route them to any log pipeline. All records go through the standard
logging module and therefore to stderr, never to the protocol stream.
"""

from __future__ import annotations

import logging

from ...models.delivery import DeliveryResult

logger = logging.getLogger(__name__)


def log_chunk_plan(
    *,
    total_chunks: int,
    total_chars: int,
    limit: int,
    log: logging.Logger | None = None,
) -> None:
    """Log the chunk plan for a delivery.

    Args:
        total_chunks: Number of chunks the text was split into
        total_chars: Length of the original text
        limit: Channel character limit
        log: Logger to use (defaults to this module's logger)
    """
    (log or logger).debug(
        "chunk_plan_created",
        extra={
            "total_chunks": total_chunks,
            "total_chars": total_chars,
            "limit": limit,
        },
    )


def log_chunk_sent(
    *,
    chunk_index: int,
    chars: int,
    message_id: str,
    latency_ms: float | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Log a successfully delivered chunk.

    Args:
        chunk_index: Zero-based index of the chunk
        chars: Length of the chunk
        message_id: Platform identifier returned by the send function
        latency_ms: Send latency in milliseconds (optional)
        log: Logger to use (defaults to this module's logger)
    """
    (log or logger).debug(
        "chunk_sent",
        extra={
            "chunk_index": chunk_index,
            "chars": chars,
            "message_id": message_id,
            "latency_ms": latency_ms,
        },
    )


def log_chunk_send_failed(
    *,
    chunk_index: int,
    error_type: str,
    error_message: str,
    log: logging.Logger | None = None,
) -> None:
    """Log a chunk that failed to send.

    Args:
        chunk_index: Zero-based index of the failed chunk
        error_type: Delivery error classification (e.g., "network")
        error_message: Error message
        log: Logger to use (defaults to this module's logger)
    """
    (log or logger).error(
        "chunk_send_failed",
        extra={
            "chunk_index": chunk_index,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_delivery_complete(
    *,
    result: DeliveryResult,
    total_chunks: int,
    total_latency_ms: float | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Log the outcome of a chunked delivery.

    Args:
        result: DeliveryResult returned to the caller
        total_chunks: Number of chunks planned
        total_latency_ms: Total latency in milliseconds (optional)
        log: Logger to use (defaults to this module's logger)
    """
    (log or logger).info(
        "delivery_complete",
        extra={
            "success": result.success,
            "chunks_sent": result.chunks_sent,
            "total_chunks": total_chunks,
            "total_chars": result.total_chars,
            "error_type": result.error.type.value if result.error else None,
            "total_latency_ms": total_latency_ms,
        },
    )
