"""Nexus Adapter SDK - shared runtime for Nexus channel adapters.

Adapter authors write only platform-specific logic; the SDK handles CLI
parsing, JSONL protocol I/O, cancellation, event construction, boundary-aware
message chunking, polling and streaming delivery.
"""

from .api import EventBuilder, new_event
from .cli import Adapter, RunOptions, parse_date, run, run_adapter, run_adapter_async
from .config import (
    ADAPTER_CONTEXT_ENV_VAR,
    RuntimeContext,
    RuntimeCredential,
    load_runtime_context_file,
    load_runtime_context_from_env,
    require_runtime_context,
)
from .core import (
    AccountStatus,
    AdapterError,
    Capability,
    ContainerKind,
    ContentRejectedError,
    ContentType,
    DeliveryErrorType,
    DeliveryFailure,
    MonitorError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ProtocolError,
    RateLimitError,
    RuntimeContextError,
    StreamEventType,
    StreamStatusType,
    ToolStatus,
    UnsupportedCommandError,
)
from .io import JSONLWriter, read_lines
from .models import (
    AdapterAccount,
    AdapterHealth,
    AdapterInfo,
    AdapterStreamStatus,
    Attachment,
    ChannelCapabilities,
    DeliveryError,
    DeliveryResult,
    DeliveryTarget,
    NexusEvent,
    SendRequest,
    StreamEvent,
)
from .runtime import (
    RETRY_FOREVER,
    AdapterContext,
    CancellationSignal,
    DeliveryCoordinator,
    FetchResult,
    MonitorState,
    PollConfig,
    PollMonitor,
    StreamDispatcher,
    StreamHandlers,
    TextSegmenter,
    chunk_text,
    emit_stream_status,
    poll_monitor,
    send_with_chunking,
)
from .utils import configure_logging

__version__ = "0.1.0"

__all__ = [
    # Runner
    "Adapter",
    "AdapterContext",
    "RunOptions",
    "parse_date",
    "run",
    "run_adapter",
    "run_adapter_async",
    # Runtime context
    "ADAPTER_CONTEXT_ENV_VAR",
    "RuntimeContext",
    "RuntimeCredential",
    "load_runtime_context_file",
    "load_runtime_context_from_env",
    "require_runtime_context",
    # Events
    "EventBuilder",
    "new_event",
    # Chunking
    "DeliveryCoordinator",
    "TextSegmenter",
    "chunk_text",
    "send_with_chunking",
    # Polling
    "FetchResult",
    "MonitorState",
    "PollConfig",
    "PollMonitor",
    "RETRY_FOREVER",
    "poll_monitor",
    # Streaming
    "CancellationSignal",
    "StreamDispatcher",
    "StreamHandlers",
    "emit_stream_status",
    # I/O and logging
    "JSONLWriter",
    "configure_logging",
    "read_lines",
    # Models
    "AdapterAccount",
    "AdapterHealth",
    "AdapterInfo",
    "AdapterStreamStatus",
    "Attachment",
    "ChannelCapabilities",
    "DeliveryError",
    "DeliveryResult",
    "DeliveryTarget",
    "NexusEvent",
    "SendRequest",
    "StreamEvent",
    # Enums
    "AccountStatus",
    "Capability",
    "ContainerKind",
    "ContentType",
    "DeliveryErrorType",
    "StreamEventType",
    "StreamStatusType",
    "ToolStatus",
    # Exceptions
    "AdapterError",
    "ContentRejectedError",
    "DeliveryFailure",
    "MonitorError",
    "NetworkError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProtocolError",
    "RateLimitError",
    "RuntimeContextError",
    "UnsupportedCommandError",
]
