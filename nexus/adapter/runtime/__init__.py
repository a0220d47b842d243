"""Runtime loops shared by every adapter command.

Architecture:
    - chunking/: Boundary-aware text chunking and chunked delivery
    - monitor.py: Cursor-based polling monitor (PollMonitor)
    - stream.py: Streaming-delivery dispatcher (StreamDispatcher)
    - cancellation.py: Cooperative cancellation wired to SIGINT/SIGTERM
    - context.py: AdapterContext handed to command handlers
"""

from .cancellation import CancellationSignal, install_signal_handlers
from .chunking import DeliveryCoordinator, TextSegmenter, chunk_text, send_with_chunking
from .context import AdapterContext
from .monitor import (
    RETRY_FOREVER,
    FetchResult,
    MonitorState,
    PollConfig,
    PollMonitor,
    poll_monitor,
)
from .stream import (
    StreamDispatcher,
    StreamHandlers,
    emit_stream_status,
    parse_stream_event,
)

__all__ = [
    "AdapterContext",
    "CancellationSignal",
    "DeliveryCoordinator",
    "FetchResult",
    "MonitorState",
    "PollConfig",
    "PollMonitor",
    "RETRY_FOREVER",
    "StreamDispatcher",
    "StreamHandlers",
    "TextSegmenter",
    "chunk_text",
    "emit_stream_status",
    "install_signal_handlers",
    "parse_stream_event",
    "poll_monitor",
    "send_with_chunking",
]
