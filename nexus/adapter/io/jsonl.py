"""JSON-lines reader and writer for the adapter protocol streams.

Protocol records travel one JSON object per line: NexusEvents, results and
stream status records go out on stdout, StreamEvents come in on stdin.

Architecture:
    - JSONLWriter: serializes pydantic models or plain mappings, one record
      per line, under a lock so concurrent emitters never interleave output.
      It also satisfies the async ``publish`` sink protocol.
    - read_lines: async iterator over a text stream. The blocking reads run
      on a daemon thread that feeds an asyncio.Queue, so awaiting the next
      line can be raced against cancellation and never blocks interpreter
      shutdown.
    - iter_lines: async iterator over an in-memory iterable (tests, replay).
    - decode_json_line: parses one line into a JSON object.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import threading
from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from typing import Any, TextIO

from pydantic import BaseModel

from ..core.exceptions import ProtocolError
from ..models.base import WireModel

logger = logging.getLogger(__name__)

_EOF = object()


def encode_record(record: BaseModel | Mapping[str, Any] | Sequence[Any]) -> str:
    """Serialize one protocol record to a compact JSON string (no newline)."""
    if isinstance(record, WireModel):
        payload: Any = record.to_wire()
    elif isinstance(record, BaseModel):
        payload = record.model_dump(mode="json", by_alias=True, exclude_none=True)
    elif isinstance(record, Mapping):
        payload = dict(record)
    else:
        payload = [
            item.to_wire() if isinstance(item, WireModel) else item for item in record
        ]
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def decode_json_line(line: str) -> dict[str, Any]:
    """Parse one line into a JSON object.

    Raises:
        ProtocolError: If the line is not valid JSON or not a JSON object
    """
    try:
        value = json.loads(line)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"invalid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ProtocolError(f"expected a JSON object, got {type(value).__name__}")
    return value


class JSONLWriter:
    """Thread-safe JSON-lines writer.

    Example:
        >>> writer = JSONLWriter()  # stdout
        >>> writer.write(event)
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize writer.

        Args:
            stream: Text stream to write to (defaults to ``sys.stdout`` at write time)
        """
        self._stream = stream
        self._lock = threading.Lock()
        self._records_written = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def records_written(self) -> int:
        return self._records_written

    def write(self, record: BaseModel | Mapping[str, Any] | Sequence[Any]) -> None:
        """Write one record as a single line and flush."""
        line = encode_record(record)
        with self._lock:
            stream = self.stream
            stream.write(line + "\n")
            stream.flush()
            self._records_written += 1

    async def publish(self, record: BaseModel | Mapping[str, Any]) -> None:
        """Sink-protocol alias for ``write``."""
        self.write(record)

    async def close(self) -> None:
        with self._lock:
            self.stream.flush()


def _strip_newline(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


async def read_lines(stream: TextIO | None = None) -> AsyncIterator[str]:
    """Yield lines from a blocking text stream without blocking the loop.

    Trailing newlines are stripped. Iteration ends at EOF; a read error on
    the underlying stream is logged and also ends iteration.

    Args:
        stream: Text stream to read (defaults to ``sys.stdin``)
    """
    source = stream if stream is not None else sys.stdin
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[Any] = asyncio.Queue()

    def pump() -> None:
        try:
            for raw in source:
                loop.call_soon_threadsafe(queue.put_nowait, raw)
        except (OSError, ValueError) as e:
            logger.error("input read error: %s", e)
        finally:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, _EOF)
            except RuntimeError:
                # Loop already closed
                pass

    reader = threading.Thread(target=pump, name="jsonl-reader", daemon=True)
    reader.start()

    while True:
        item = await queue.get()
        if item is _EOF:
            return
        yield _strip_newline(item)


async def iter_lines(lines: Iterable[str]) -> AsyncIterator[str]:
    """Adapt an in-memory iterable of lines to an async iterator."""
    for line in lines:
        yield _strip_newline(line)
        await asyncio.sleep(0)
