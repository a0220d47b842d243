"""Streaming-delivery protocol models.

StreamEvent records are piped to the adapter's stdin during a ``stream``
command; AdapterStreamStatus records are written back on stdout to report
delivery progress.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from ..core.enums import StreamEventType, StreamStatusType
from .base import WireModel
from .delivery import DeliveryTarget


class StreamEvent(WireModel):
    """One inbound streaming event.

    ``type`` selects which payload fields are meaningful:

    - stream_start: run_id, session_label, target
    - token / reasoning: text
    - tool_status: tool_name, tool_call_id, status, summary
    - stream_end: run_id, final
    - stream_error: error, partial

    ``type`` is kept as the raw string so that events of kinds this SDK does
    not know about still parse and can be skipped; use ``kind`` to get the
    enum member.
    """

    type: str = Field(..., min_length=1)

    # stream_start
    run_id: str | None = Field(default=None, alias="runId")
    session_label: str | None = Field(default=None, alias="sessionLabel")
    target: DeliveryTarget | None = None

    # token, reasoning
    text: str | None = None

    # tool_status
    tool_name: str | None = Field(default=None, alias="toolName")
    tool_call_id: str | None = Field(default=None, alias="toolCallId")
    status: str | None = None
    summary: str | None = None

    # stream_end
    final: bool | None = None

    # stream_error
    error: str | None = None
    partial: bool | None = None

    @property
    def kind(self) -> StreamEventType | None:
        """Event kind, or None for an unrecognized type."""
        return StreamEventType.from_str(self.type)


class AdapterStreamStatus(WireModel):
    """Status record emitted by the adapter during streaming delivery."""

    type: StreamStatusType

    # message_created, message_updated, message_sent
    message_id: str | None = Field(default=None, alias="messageId")

    # message_updated
    chars: int | None = Field(default=None, ge=0)

    # message_sent
    final: bool | None = None

    # delivery_complete
    message_ids: list[str] | None = Field(default=None, alias="messageIds")

    # delivery_error
    error: str | None = None

    @field_validator("message_ids")
    @classmethod
    def validate_message_ids(cls, v: list[str] | None) -> list[str] | None:
        """Reject empty identifiers."""
        if v is not None and any(not mid for mid in v):
            raise ValueError("messageIds must not contain empty ids")
        return v

    @classmethod
    def message_created(cls, message_id: str) -> AdapterStreamStatus:
        return cls(type=StreamStatusType.MESSAGE_CREATED, message_id=message_id)

    @classmethod
    def message_updated(cls, message_id: str, chars: int) -> AdapterStreamStatus:
        return cls(type=StreamStatusType.MESSAGE_UPDATED, message_id=message_id, chars=chars)

    @classmethod
    def message_sent(cls, message_id: str, final: bool = False) -> AdapterStreamStatus:
        return cls(type=StreamStatusType.MESSAGE_SENT, message_id=message_id, final=final)

    @classmethod
    def delivery_complete(cls, message_ids: list[str]) -> AdapterStreamStatus:
        return cls(type=StreamStatusType.DELIVERY_COMPLETE, message_ids=list(message_ids))

    @classmethod
    def delivery_error(cls, error: str) -> AdapterStreamStatus:
        return cls(type=StreamStatusType.DELIVERY_ERROR, error=error)
