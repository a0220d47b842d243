"""Normalized inbound event emitted by adapters."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..core.enums import ContainerKind, ContentType
from .base import WireModel


class Attachment(WireModel):
    """Media attachment on an event."""

    id: str
    filename: str
    content_type: str  # MIME type
    size_bytes: int | None = Field(default=None, ge=0)
    url: str | None = None
    path: str | None = None


class NexusEvent(WireModel):
    """Normalized event format emitted by every adapter, one per JSONL line.

    ``event_id`` follows the ``{platform}:{source_id}`` convention and
    ``timestamp`` is Unix milliseconds.
    """

    # Identity
    event_id: str = Field(..., min_length=1)
    timestamp: int

    # Content
    content: str = ""
    content_type: ContentType = ContentType.TEXT
    attachments: tuple[Attachment, ...] | None = None

    # Routing context
    platform: str
    account_id: str = ""
    sender_id: str = ""
    sender_name: str | None = None
    space_id: str | None = None
    space_name: str | None = None
    container_id: str = ""
    container_kind: ContainerKind = ContainerKind.DM
    container_name: str | None = None
    thread_id: str | None = None
    thread_name: str | None = None
    reply_to_id: str | None = None

    # Platform metadata
    metadata: dict[str, Any] | None = None
    delivery_metadata: dict[str, Any] | None = None
