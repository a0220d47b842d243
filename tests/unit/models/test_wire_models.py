"""Unit tests for protocol wire models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from nexus.adapter.core import Capability, DeliveryErrorType, StreamEventType
from nexus.adapter.models import (
    AdapterAccount,
    AdapterHealth,
    AdapterInfo,
    AdapterStreamStatus,
    ChannelCapabilities,
    DeliveryError,
    DeliveryResult,
    SendRequest,
    StreamEvent,
)


class TestDeliveryResult:
    """Test DeliveryResult validation."""

    def test_success(self):
        result = DeliveryResult(success=True, message_ids=["m1", "m2"], chunks_sent=2)
        assert result.to_wire() == {
            "success": True,
            "message_ids": ["m1", "m2"],
            "chunks_sent": 2,
        }

    def test_ids_must_match_chunks_sent(self):
        with pytest.raises(ValidationError, match="chunks_sent"):
            DeliveryResult(success=True, message_ids=["m1"], chunks_sent=2)

    def test_failure_factory_counts_ids(self):
        error = DeliveryError(type=DeliveryErrorType.NOT_FOUND, message="no such chat")
        result = DeliveryResult.failure(error, message_ids=["m1"], total_chars=10)

        assert result.success is False
        assert result.chunks_sent == 1
        assert result.to_wire()["error"] == {
            "type": "not_found",
            "message": "no such chat",
            "retry": False,
        }

    def test_negative_retry_after_rejected(self):
        with pytest.raises(ValidationError):
            DeliveryError(type=DeliveryErrorType.RATE_LIMITED, message="x", retry_after_ms=-1)


class TestSendRequest:
    """Test SendRequest payload rules."""

    def test_text_request(self):
        request = SendRequest(account="a", to="chat:1", text="hi", reply_to_id="r1")
        assert request.to_wire() == {
            "account": "a",
            "to": "chat:1",
            "text": "hi",
            "reply_to_id": "r1",
        }

    def test_media_with_caption(self):
        request = SendRequest(account="a", to="chat:1", media="/tmp/x.png", caption="look")
        assert request.caption == "look"

    def test_requires_text_or_media(self):
        with pytest.raises(ValidationError, match="text or media"):
            SendRequest(account="a", to="chat:1")

    def test_rejects_text_and_media(self):
        with pytest.raises(ValidationError, match="both"):
            SendRequest(account="a", to="chat:1", text="hi", media="/tmp/x.png")

    def test_caption_requires_media(self):
        with pytest.raises(ValidationError, match="caption"):
            SendRequest(account="a", to="chat:1", text="hi", caption="c")


class TestStreamModels:
    def test_stream_event_aliases_on_wire(self):
        event = StreamEvent(type="stream_start", run_id="r1", session_label="main")

        assert event.kind == StreamEventType.STREAM_START
        assert event.to_wire() == {"type": "stream_start", "runId": "r1", "sessionLabel": "main"}

    def test_unknown_fields_ignored(self):
        event = StreamEvent.model_validate({"type": "token", "text": "a", "extra": 1})
        assert event.text == "a"

    @pytest.mark.parametrize(
        "status,expected",
        [
            (
                AdapterStreamStatus.message_created("m1"),
                {"type": "message_created", "messageId": "m1"},
            ),
            (
                AdapterStreamStatus.message_sent("m1", final=True),
                {"type": "message_sent", "messageId": "m1", "final": True},
            ),
            (
                AdapterStreamStatus.delivery_complete(["m1", "m2"]),
                {"type": "delivery_complete", "messageIds": ["m1", "m2"]},
            ),
            (
                AdapterStreamStatus.delivery_error("boom"),
                {"type": "delivery_error", "error": "boom"},
            ),
        ],
    )
    def test_status_factories(self, status, expected):
        assert status.to_wire() == expected

    def test_status_rejects_empty_message_id(self):
        with pytest.raises(ValidationError):
            AdapterStreamStatus.delivery_complete(["m1", ""])


class TestAdapterModels:
    def test_info_wire_shape(self):
        info = AdapterInfo(
            channel="discord",
            name="discord-adapter",
            version="1.0.0",
            supports=[Capability.MONITOR, Capability.SEND],
            multi_account=True,
            channel_capabilities=ChannelCapabilities(
                text_limit=2000, supports_markdown=True, markdown_flavor="discord"
            ),
        )

        wire = info.to_wire()

        assert wire["supports"] == ["monitor", "send"]
        assert wire["channel_capabilities"]["text_limit"] == 2000
        assert wire["channel_capabilities"]["supports_edit"] is False
        assert "credential_service" not in wire

    def test_capabilities_keep_extra_keys(self):
        caps = ChannelCapabilities(text_limit=100, supports_stickers=True)
        assert caps.to_wire()["supports_stickers"] is True

    def test_info_requires_channel(self):
        with pytest.raises(ValidationError):
            AdapterInfo(
                channel="",
                name="x",
                version="1",
                supports=[],
                channel_capabilities=ChannelCapabilities(text_limit=1),
            )

    def test_health_and_account(self):
        health = AdapterHealth(connected=False, account="a", error="token expired")
        account = AdapterAccount(id="default", display_name="Main")

        assert health.to_wire() == {"connected": False, "account": "a", "error": "token expired"}
        assert account.to_wire() == {"id": "default", "display_name": "Main", "status": "ready"}
