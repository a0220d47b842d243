"""Core enums and exceptions."""

from .enums import (
    AccountStatus,
    Capability,
    ContainerKind,
    ContentType,
    DeliveryErrorType,
    StreamEventType,
    StreamStatusType,
    ToolStatus,
)
from .exceptions import (
    AdapterError,
    ContentRejectedError,
    DeliveryFailure,
    MonitorError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ProtocolError,
    RateLimitError,
    RuntimeContextError,
    UnsupportedCommandError,
)

__all__ = [
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
