"""Outbound delivery models: send requests, results and errors."""

from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from ..core.enums import DeliveryErrorType
from .base import WireModel


class DeliveryError(WireModel):
    """Why a delivery failed and whether the runtime should retry."""

    type: DeliveryErrorType
    message: str
    retry: bool = False
    retry_after_ms: int | None = Field(default=None, ge=0)
    details: dict[str, Any] | None = None


class DeliveryResult(WireModel):
    """Structured output of a ``send`` command.

    ``message_ids`` holds one platform identifier per chunk actually sent, in
    chunk order, so ``len(message_ids) == chunks_sent`` on success and on
    partial failure alike.
    """

    success: bool
    message_ids: list[str] = Field(default_factory=list)
    chunks_sent: int = Field(default=0, ge=0)
    total_chars: int | None = Field(default=None, ge=0)
    error: DeliveryError | None = None

    @model_validator(mode="after")
    def validate_progress(self) -> DeliveryResult:
        """Validate that every sent chunk has exactly one message id."""
        if len(self.message_ids) != self.chunks_sent:
            raise ValueError(
                f"message_ids has {len(self.message_ids)} entries "
                f"but chunks_sent is {self.chunks_sent}"
            )
        return self

    @classmethod
    def failure(
        cls,
        error: DeliveryError,
        *,
        message_ids: list[str] | None = None,
        total_chars: int | None = None,
    ) -> DeliveryResult:
        """Create a failed result reporting the chunks sent before the failure."""
        ids = list(message_ids or [])
        return cls(
            success=False,
            message_ids=ids,
            chunks_sent=len(ids),
            total_chars=total_chars,
            error=error,
        )


class SendRequest(WireModel):
    """Parameters of a ``send`` command invocation."""

    account: str
    to: str
    text: str | None = None
    media: str | None = None
    caption: str | None = None
    reply_to_id: str | None = None
    thread_id: str | None = None

    @model_validator(mode="after")
    def validate_payload(self) -> SendRequest:
        """Exactly one of text or media; caption only alongside media."""
        if not self.text and not self.media:
            raise ValueError("send requires text or media")
        if self.text and self.media:
            raise ValueError("send must not specify both text and media")
        if self.caption and not self.media:
            raise ValueError("caption requires media")
        return self


class DeliveryTarget(WireModel):
    """Where a streamed message should be delivered."""

    platform: str
    account_id: str
    to: str
    thread_id: str | None = None
    reply_to_id: str | None = None
