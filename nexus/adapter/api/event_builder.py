"""Event builder for fluent NexusEvent construction.

This module provides a fluent API for assembling NexusEvent records from
platform messages, so adapters do not construct the wire model by hand.

Architecture:
    The builder accumulates field values in a plain dict and hands them to
    the NexusEvent model in build(). Validation happens only there, through
    the model, so the builder never duplicates the protocol's rules.

Design Decisions:
    - Fluent API: every setter returns self for chaining
    - Immutable result: build() returns a frozen NexusEvent
    - Defaults: content_type "text", container_kind "dm", timestamp = now (ms)
    - Reusable: build() may be called repeatedly; later setters do not alter
      events already built

Example:
    >>> event = (new_event("imessage", "imessage:abc-def-123")
    ...     .with_timestamp(msg.date)
    ...     .with_content(msg.text)
    ...     .with_sender(msg.handle, msg.display_name)
    ...     .with_container(msg.chat_id, ContainerKind.DM)
    ...     .with_account("default")
    ...     .build())

See Also:
    - NexusEvent: The immutable event model
    - PollMonitor: Emits events built here
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Any

from ..core.enums import ContainerKind, ContentType
from ..models.events import Attachment, NexusEvent

__all__ = ["EventBuilder", "new_event"]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _to_unix_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


class EventBuilder:
    """Fluent builder for NexusEvent."""

    def __init__(self, platform: str, event_id: str) -> None:
        """Start an event.

        Args:
            platform: Platform name (e.g. "discord")
            event_id: Event id, by convention ``{platform}:{source_id}``
        """
        self._fields: dict[str, Any] = {
            "platform": platform,
            "event_id": event_id,
            "timestamp": _now_ms(),
            "content_type": ContentType.TEXT,
            "container_kind": ContainerKind.DM,
        }
        self._attachments: list[Attachment] = []
        self._metadata: dict[str, Any] = {}
        self._delivery_metadata: dict[str, Any] = {}

    def with_timestamp(self, value: datetime) -> EventBuilder:
        """Set the timestamp from a datetime (naive values are taken as UTC)."""
        self._fields["timestamp"] = _to_unix_ms(value)
        return self

    def with_timestamp_ms(self, ms: int) -> EventBuilder:
        """Set the timestamp from Unix milliseconds."""
        self._fields["timestamp"] = ms
        return self

    def with_content(self, content: str) -> EventBuilder:
        self._fields["content"] = content
        return self

    def with_content_type(self, content_type: ContentType | str) -> EventBuilder:
        """Set the content type (default "text")."""
        self._fields["content_type"] = content_type
        return self

    def with_sender(self, sender_id: str, name: str | None = None) -> EventBuilder:
        """Set the sender's platform id and optional display name."""
        self._fields["sender_id"] = sender_id
        self._fields["sender_name"] = name or None
        return self

    def with_container(
        self,
        container_id: str,
        kind: ContainerKind | str = ContainerKind.DM,
        name: str | None = None,
    ) -> EventBuilder:
        """Set the conversation (chat, channel or DM) the event belongs to."""
        self._fields["container_id"] = container_id
        self._fields["container_kind"] = kind
        self._fields["container_name"] = name or None
        return self

    def with_space(self, space_id: str, name: str | None = None) -> EventBuilder:
        """Set the enclosing space (server, workspace, guild)."""
        self._fields["space_id"] = space_id
        self._fields["space_name"] = name or None
        return self

    def with_account(self, account_id: str) -> EventBuilder:
        """Set the adapter account that received the event."""
        self._fields["account_id"] = account_id
        return self

    def with_thread(self, thread_id: str, name: str | None = None) -> EventBuilder:
        self._fields["thread_id"] = thread_id
        self._fields["thread_name"] = name or None
        return self

    def with_reply_to(self, event_id: str) -> EventBuilder:
        """Set the id of the event this one replies to."""
        self._fields["reply_to_id"] = event_id
        return self

    def with_attachment(self, attachment: Attachment) -> EventBuilder:
        """Append a media attachment."""
        self._attachments.append(attachment)
        return self

    def with_metadata(self, key: str, value: Any) -> EventBuilder:
        """Set one platform-specific metadata entry."""
        self._metadata[key] = value
        return self

    def with_delivery_metadata(self, key: str, value: Any) -> EventBuilder:
        """Set one entry needed to route a reply back to the platform."""
        self._delivery_metadata[key] = value
        return self

    def build(self) -> NexusEvent:
        """Construct the event.

        Raises:
            pydantic.ValidationError: If the accumulated fields are invalid
        """
        fields = dict(self._fields)
        if self._attachments:
            fields["attachments"] = tuple(self._attachments)
        if self._metadata:
            fields["metadata"] = dict(self._metadata)
        if self._delivery_metadata:
            fields["delivery_metadata"] = dict(self._delivery_metadata)
        return NexusEvent(**fields)


def new_event(platform: str, event_id: str) -> EventBuilder:
    """Start building an event (shorthand for ``EventBuilder(...)``)."""
    return EventBuilder(platform, event_id)
