"""Adapter definition: the handlers an adapter binary implements."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..core.enums import Capability
from ..models.adapter import AdapterAccount, AdapterHealth, AdapterInfo
from ..models.delivery import DeliveryResult, SendRequest
from ..runtime.context import AdapterContext
from ..runtime.monitor import EmitFunc
from ..runtime.stream import StreamHandlers

InfoHandler = Callable[[], AdapterInfo | Awaitable[AdapterInfo]]
MonitorHandler = Callable[[AdapterContext, str, EmitFunc], Awaitable[None] | None]
BackfillHandler = Callable[[AdapterContext, str, datetime, EmitFunc], Awaitable[None] | None]
SendHandler = Callable[[AdapterContext, SendRequest], DeliveryResult | Awaitable[DeliveryResult]]
HealthHandler = Callable[[AdapterContext, str], AdapterHealth | Awaitable[AdapterHealth]]
AccountsHandler = Callable[
    [AdapterContext], Sequence[AdapterAccount] | Awaitable[Sequence[AdapterAccount]]
]
StreamSetup = StreamHandlers | Callable[[AdapterContext], StreamHandlers]


@dataclass(frozen=True)
class Adapter:
    """Handlers for the commands an adapter supports.

    ``info`` is required. Every other handler is optional; invoking a command
    whose handler is missing fails with "<command> not supported by this
    adapter". Handlers may be sync or async.

    Attributes:
        info: Self-description (channel, capabilities)
        monitor: ``(ctx, account, emit)``; emits live events until cancelled
        send: ``(ctx, request)`` returning a DeliveryResult
        backfill: ``(ctx, account, since, emit)``; emits history, then returns
        health: ``(ctx, account)`` returning AdapterHealth
        accounts: ``(ctx)`` returning the configured accounts
        stream: StreamHandlers, or a factory receiving the context (to reach
            ``ctx.writer`` for status records)

    Example:
        >>> adapter = Adapter(
        ...     info=describe,
        ...     monitor=poll_monitor(PollConfig(interval=10.0, fetch=fetch_new)),
        ...     send=send_message,
        ... )
        >>> run(adapter)
    """

    info: InfoHandler
    monitor: MonitorHandler | None = None
    send: SendHandler | None = None
    backfill: BackfillHandler | None = None
    health: HealthHandler | None = None
    accounts: AccountsHandler | None = None
    stream: StreamSetup | None = None

    def implemented(self) -> list[Capability]:
        """Capabilities backed by a handler."""
        pairs = [
            (Capability.MONITOR, self.monitor),
            (Capability.SEND, self.send),
            (Capability.BACKFILL, self.backfill),
            (Capability.HEALTH, self.health),
            (Capability.ACCOUNTS, self.accounts),
            (Capability.STREAM, self.stream),
        ]
        return [capability for capability, handler in pairs if handler is not None]
