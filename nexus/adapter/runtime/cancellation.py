"""Cooperative cancellation shared by the runtime loops.

A single CancellationSignal is created per adapter command and handed to the
poll monitor and the stream dispatcher. Once raised it takes priority over any
pending sleep or read; in-flight fetch and send calls are left to finish.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Awaitable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationSignal:
    """One-shot cancellation flag with interruptible waits."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Later calls are no-ops."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.debug("cancellation requested", extra={"reason": reason})

    async def wait(self) -> None:
        """Wait until cancellation is requested."""
        await self._event.wait()

    async def sleep(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds unless cancelled first.

        Returns:
            True if the sleep was interrupted by cancellation
        """
        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=max(delay, 0.0))
        except TimeoutError:
            return False
        return True

    async def race(self, awaitable: Awaitable[T]) -> tuple[bool, T | None]:
        """Await ``awaitable`` unless cancellation comes first.

        Returns:
            ``(cancelled, result)``; when cancelled the awaitable is cancelled
            too and result is None
        """
        task = asyncio.ensure_future(awaitable)
        if self._event.is_set():
            task.cancel()
            return True, None

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if task.done():
            # Result wins when both complete in the same tick
            return False, task.result()
        task.cancel()
        return True, None


def install_signal_handlers(
    cancel: CancellationSignal,
    signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
) -> None:
    """Raise ``cancel`` when the process receives SIGINT or SIGTERM.

    Must be called from inside the running event loop. Platforms without
    ``add_signal_handler`` support fall back to ``signal.signal``.
    """
    loop = asyncio.get_running_loop()
    for sig in signals:
        try:
            loop.add_signal_handler(sig, cancel.cancel, sig.name)
        except NotImplementedError:
            signal.signal(
                sig,
                lambda signum, _frame: loop.call_soon_threadsafe(
                    cancel.cancel, signal.Signals(signum).name
                ),
            )
