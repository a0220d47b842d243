"""Wire models for the adapter protocol.

Architecture:
    This module exports all Pydantic v2 models exchanged between an adapter
    and the runtime. All models are immutable (frozen=True) and serialize via
    ``to_wire()`` to the exact JSON shape written on the JSONL streams.

Model Categories:
    - Inbound events: NexusEvent, Attachment
    - Outbound delivery: SendRequest, DeliveryResult, DeliveryError, DeliveryTarget
    - Streaming: StreamEvent, AdapterStreamStatus
    - Self-description: AdapterInfo, ChannelCapabilities, AdapterHealth, AdapterAccount
"""

from .adapter import AdapterAccount, AdapterHealth, AdapterInfo, ChannelCapabilities
from .base import WireModel
from .delivery import DeliveryError, DeliveryResult, DeliveryTarget, SendRequest
from .events import Attachment, NexusEvent
from .stream import AdapterStreamStatus, StreamEvent

__all__ = [
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
    "WireModel",
]
