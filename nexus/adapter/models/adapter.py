"""Adapter self-description, health and account models."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from ..core.enums import AccountStatus, Capability
from .base import WireModel


class ChannelCapabilities(WireModel):
    """What a channel supports, served to context assembly for the agent."""

    # Extra keys are passed through for channel-specific capabilities
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    # Text limits
    text_limit: int = Field(..., ge=0)
    caption_limit: int | None = Field(default=None, ge=0)

    # Formatting
    supports_markdown: bool = False
    markdown_flavor: str | None = None  # "standard", "discord", "telegram_html", "slack_mrkdwn"
    supports_tables: bool = False
    supports_code_blocks: bool = False

    # Features
    supports_embeds: bool = False
    supports_threads: bool = False
    supports_reactions: bool = False
    supports_polls: bool = False
    supports_buttons: bool = False
    supports_edit: bool = False
    supports_delete: bool = False
    supports_media: bool = False
    supports_voice_notes: bool = False

    # Behavioral
    supports_streaming_edit: bool = False


class AdapterInfo(WireModel):
    """Output of the ``info`` command."""

    channel: str = Field(..., min_length=1)
    name: str
    version: str
    supports: list[Capability]
    credential_service: str | None = None
    multi_account: bool = False
    channel_capabilities: ChannelCapabilities


class AdapterHealth(WireModel):
    """Output of the ``health`` command."""

    connected: bool
    account: str
    last_event_at: int | None = None  # Unix ms
    error: str | None = None
    details: dict[str, Any] | None = None


class AdapterAccount(WireModel):
    """A configured account within the adapter."""

    id: str = Field(..., min_length=1)
    display_name: str | None = None
    credential_ref: str | None = None
    status: AccountStatus = AccountStatus.READY
