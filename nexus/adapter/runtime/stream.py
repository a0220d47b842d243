"""Streaming-delivery dispatcher.

During a ``stream`` command the runtime pipes StreamEvent records to the
adapter one JSON object per line. The StreamDispatcher reads those lines,
routes each event to the matching handler and reports handler failures back
on the output stream as ``delivery_error`` status records.

Architecture:
    lines (AsyncIterable[str]) -> parse_stream_event -> dispatch -> handler
                                        |                    |
                                  log + skip           delivery_error status

    Loop rules:
    - cancellation is checked before each line and while waiting for one
    - blank lines are skipped
    - a malformed line (bad JSON, not an object, invalid fields) is logged
      and skipped
    - unknown event types are logged at debug level and ignored
    - a handler exception never stops the loop

See Also:
    - AdapterStreamStatus: Status records handlers emit via emit_stream_status
    - CancellationSignal: Shared stop signal
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from ..core.enums import StreamEventType
from ..core.exceptions import ProtocolError
from ..io.jsonl import decode_json_line
from ..models.stream import AdapterStreamStatus, StreamEvent
from ..utils.aio import maybe_await
from .cancellation import CancellationSignal

StreamHandler = Callable[[StreamEvent], Awaitable[None]] | Callable[[StreamEvent], None]


class StatusWriter(Protocol):
    """Anything that can write a protocol record (JSONLWriter in production)."""

    def write(self, record: AdapterStreamStatus) -> None: ...


@dataclass
class StreamHandlers:
    """Callbacks for each streaming event kind.

    Every callback is optional and may be sync or async. Missing callbacks
    make the corresponding events no-ops.

    Attributes:
        on_start: stream_start (create the platform message)
        on_token: token (buffer and periodically update the message)
        on_tool_status: tool_status (optional activity indicator)
        on_reasoning: reasoning (optional display of thinking tokens)
        on_end: stream_end (finalize and report delivery)
        on_error: stream_error (handle partial delivery)
    """

    on_start: StreamHandler | None = None
    on_token: StreamHandler | None = None
    on_tool_status: StreamHandler | None = None
    on_reasoning: StreamHandler | None = None
    on_end: StreamHandler | None = None
    on_error: StreamHandler | None = None


def emit_stream_status(writer: StatusWriter, status: AdapterStreamStatus) -> None:
    """Report delivery progress to the runtime."""
    writer.write(status)


def parse_stream_event(line: str) -> StreamEvent:
    """Parse one input line into a StreamEvent.

    Raises:
        ProtocolError: If the line is not a JSON object or fails validation
    """
    data = decode_json_line(line)
    try:
        return StreamEvent.model_validate(data)
    except ValidationError as e:
        raise ProtocolError(f"invalid stream event: {e}") from e


async def _next_line(iterator: AsyncIterator[str]) -> str | None:
    try:
        return await anext(iterator)
    except StopAsyncIteration:
        return None


class StreamDispatcher:
    """Routes StreamEvents from a line stream to StreamHandlers."""

    def __init__(
        self,
        handlers: StreamHandlers,
        writer: StatusWriter,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            handlers: Event callbacks
            writer: Destination for delivery_error status records
            logger: Logger for dispatcher diagnostics (defaults to module logger)
        """
        self._handlers = handlers
        self._writer = writer
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._dispatched = 0
        self._skipped = 0
        self._handler_errors = 0

    @property
    def dispatched(self) -> int:
        """Events parsed and routed (including unknown kinds)."""
        return self._dispatched

    @property
    def skipped(self) -> int:
        """Lines dropped because they could not be parsed."""
        return self._skipped

    @property
    def handler_errors(self) -> int:
        return self._handler_errors

    async def run(self, lines: AsyncIterable[str], cancel: CancellationSignal) -> None:
        """Dispatch events until the input ends or cancellation is requested."""
        iterator = aiter(lines)
        while True:
            if cancel.cancelled:
                self._logger.info("stream shutting down (cancelled)")
                return

            cancelled, line = await cancel.race(_next_line(iterator))
            if cancelled:
                self._logger.info("stream shutting down (cancelled)")
                return
            if line is None:
                return
            if not line.strip():
                continue

            try:
                event = parse_stream_event(line)
            except ProtocolError as e:
                self._skipped += 1
                self._logger.error("stream: failed to parse event: %s", e)
                continue

            await self.dispatch(event)

    async def dispatch(self, event: StreamEvent) -> None:
        """Route one event to its handler, converting failures to status records."""
        self._dispatched += 1
        handler = self._select(event)
        if handler is None:
            return

        try:
            await maybe_await(handler(event))
        except Exception as e:
            self._handler_errors += 1
            message = str(e) or type(e).__name__
            self._logger.error("stream handler error for %s: %s", event.type, message)
            emit_stream_status(self._writer, AdapterStreamStatus.delivery_error(message))

    def _select(self, event: StreamEvent) -> StreamHandler | None:
        handlers = self._handlers
        match event.kind:
            case StreamEventType.STREAM_START:
                return handlers.on_start
            case StreamEventType.TOKEN:
                return handlers.on_token
            case StreamEventType.TOOL_STATUS:
                return handlers.on_tool_status
            case StreamEventType.REASONING:
                return handlers.on_reasoning
            case StreamEventType.STREAM_END:
                return handlers.on_end
            case StreamEventType.STREAM_ERROR:
                return handlers.on_error
            case _:
                self._logger.debug("stream: unknown event type: %s", event.type)
                return None
