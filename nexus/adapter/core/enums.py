"""Core enumerations for the adapter protocol.

Architecture:
    This module defines the standardized string enums shared by the wire
    models, the stream dispatcher and the CLI runner. String enums keep
    serialization trivial: every member's value is exactly what travels over
    the JSONL wire.

Key Types:
    - Capability: Commands/features an adapter declares via ``info``
    - ContentType: Kind of content carried by a NexusEvent
    - ContainerKind: Conversation scope (dm, group, channel, ...)
    - DeliveryErrorType: Classification of failed deliveries
    - StreamEventType: Inbound streaming-delivery event kinds
    - StreamStatusType: Outbound streaming-delivery status kinds
    - ToolStatus: Lifecycle of a tool call reported during streaming
    - AccountStatus: State of a configured adapter account

See Also:
    - nexus.adapter.models: Wire models using these enums
    - nexus.adapter.runtime.stream: Dispatches on StreamEventType
"""

from enum import Enum


class Capability(str, Enum):
    """Command or feature an adapter implements."""

    MONITOR = "monitor"
    SEND = "send"
    STREAM = "stream"
    BACKFILL = "backfill"
    HEALTH = "health"
    ACCOUNTS = "accounts"
    REACT = "react"
    EDIT = "edit"
    DELETE = "delete"
    POLL = "poll"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value


class ContentType(str, Enum):
    """Content carried by a normalized event."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    FILE = "file"
    REACTION = "reaction"
    MEMBERSHIP = "membership"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value


class ContainerKind(str, Enum):
    """Conversation scope an event belongs to."""

    DM = "dm"
    DIRECT = "direct"
    GROUP = "group"
    CHANNEL = "channel"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value


class DeliveryErrorType(str, Enum):
    """Classification of a failed delivery.

    Architecture:
        The classification tells the runtime whether a retry makes sense:
        RATE_LIMITED and NETWORK are transient, PERMISSION_DENIED and
        CONTENT_REJECTED need intervention, NOT_FOUND means the target is gone.
    """

    RATE_LIMITED = "rate_limited"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    CONTENT_REJECTED = "content_rejected"
    NETWORK = "network"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value

    @property
    def retryable(self) -> bool:
        """Whether errors of this type are retryable by default."""
        return self in (DeliveryErrorType.RATE_LIMITED, DeliveryErrorType.NETWORK)


class StreamEventType(str, Enum):
    """Kinds of events piped to an adapter during streaming delivery."""

    STREAM_START = "stream_start"
    TOKEN = "token"
    TOOL_STATUS = "tool_status"
    REASONING = "reasoning"
    STREAM_END = "stream_end"
    STREAM_ERROR = "stream_error"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value

    @classmethod
    def from_str(cls, value: str) -> "StreamEventType | None":
        """Get event type from string value. Returns None if no match."""
        try:
            return cls(value)
        except ValueError:
            return None


class StreamStatusType(str, Enum):
    """Kinds of status records an adapter emits during streaming delivery."""

    MESSAGE_CREATED = "message_created"
    MESSAGE_UPDATED = "message_updated"
    MESSAGE_SENT = "message_sent"
    DELIVERY_COMPLETE = "delivery_complete"
    DELIVERY_ERROR = "delivery_error"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value


class ToolStatus(str, Enum):
    """Lifecycle state of a tool call."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class AccountStatus(str, Enum):
    """State of a configured adapter account."""

    READY = "ready"
    ACTIVE = "active"
    ERROR = "error"
