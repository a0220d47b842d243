"""Chunked delivery coordination.

This module provides the DeliveryCoordinator that wraps a platform-specific
"send one message" function with automatic chunking: the text is segmented,
each chunk is sent in order, and the per-chunk message ids are assembled into
a single DeliveryResult.

The coordinator never retries. On the first failure it stops and reports
exactly how many chunks went out, so the caller can resume from the first
unsent chunk if it wants to.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from time import perf_counter

from ...core.enums import DeliveryErrorType
from ...core.exceptions import DeliveryFailure
from ...models.delivery import DeliveryError, DeliveryResult
from ...utils.aio import maybe_await
from .segmenter import chunk_text
from .telemetry import (
    log_chunk_plan,
    log_chunk_send_failed,
    log_chunk_sent,
    log_delivery_complete,
)

SendFunc = Callable[[str], Awaitable[str]] | Callable[[str], str]


def classify_send_error(error: Exception) -> DeliveryError:
    """Map an exception raised by a send function to a DeliveryError.

    DeliveryFailure subclasses carry their own classification; anything else
    is a retryable network failure.
    """
    if isinstance(error, DeliveryFailure):
        return error.to_delivery_error()
    return DeliveryError(
        type=DeliveryErrorType.NETWORK,
        message=str(error) or type(error).__name__,
        retry=True,
    )


class DeliveryCoordinator:
    """Sends text through a per-chunk send function.

    Example:
        >>> coordinator = DeliveryCoordinator(limit=2000)
        >>> result = await coordinator.send(req.text, discord.send_message)
    """

    def __init__(self, limit: int, *, logger: logging.Logger | None = None) -> None:
        """Initialize coordinator.

        Args:
            limit: Channel character limit (``<= 0`` disables chunking)
            logger: Logger for delivery telemetry (defaults to module logger)
        """
        self._limit = limit
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    async def send(self, text: str, send_one: SendFunc) -> DeliveryResult:
        """Segment ``text`` and send every chunk in order.

        Args:
            text: Message text
            send_one: Sync or async function sending one chunk and returning
                the platform message id

        Returns:
            DeliveryResult; on failure ``chunks_sent`` and ``message_ids``
            describe the chunks delivered before the failing one
        """
        total_chars = len(text) if text else 0
        chunks = chunk_text(text, self._limit)
        if not chunks:
            return DeliveryResult.failure(
                DeliveryError(
                    type=DeliveryErrorType.CONTENT_REJECTED,
                    message="empty message",
                    retry=False,
                ),
                total_chars=total_chars,
            )

        log_chunk_plan(
            total_chunks=len(chunks),
            total_chars=total_chars,
            limit=self._limit,
            log=self._logger,
        )

        started = perf_counter()
        message_ids: list[str] = []
        for index, chunk in enumerate(chunks):
            chunk_start = perf_counter()
            try:
                message_id = await self._send_chunk(send_one, chunk)
            except Exception as e:
                error = classify_send_error(e)
                log_chunk_send_failed(
                    chunk_index=index,
                    error_type=error.type.value,
                    error_message=error.message,
                    log=self._logger,
                )
                return self._finish(
                    DeliveryResult.failure(error, message_ids=message_ids, total_chars=total_chars),
                    total_chunks=len(chunks),
                    started=started,
                )

            message_ids.append(message_id)
            log_chunk_sent(
                chunk_index=index,
                chars=len(chunk),
                message_id=message_id,
                latency_ms=(perf_counter() - chunk_start) * 1000.0,
                log=self._logger,
            )

        return self._finish(
            DeliveryResult(
                success=True,
                message_ids=message_ids,
                chunks_sent=len(chunks),
                total_chars=total_chars,
            ),
            total_chunks=len(chunks),
            started=started,
        )

    @staticmethod
    async def _send_chunk(send_one: SendFunc, chunk: str) -> str:
        message_id = await maybe_await(send_one(chunk))
        return str(message_id)

    def _finish(
        self, result: DeliveryResult, *, total_chunks: int, started: float
    ) -> DeliveryResult:
        log_delivery_complete(
            result=result,
            total_chunks=total_chunks,
            total_latency_ms=(perf_counter() - started) * 1000.0,
            log=self._logger,
        )
        return result


async def send_with_chunking(
    text: str,
    limit: int,
    send_one: SendFunc,
    *,
    logger: logging.Logger | None = None,
) -> DeliveryResult:
    """Send ``text`` in chunks of at most ``limit`` characters.

    Example:
        >>> result = await send_with_chunking(req.text, 2000, api.send_message)
    """
    return await DeliveryCoordinator(limit, logger=logger).send(text, send_one)
