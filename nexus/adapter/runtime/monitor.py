"""Polling monitor for pull-based event sources.

The PollMonitor drives a cursor-advancing loop over a caller-supplied fetch
function: fetch everything newer than the cursor, emit the events, advance the
cursor, sleep, repeat. Adapters reading from a database, a REST API or a
local mail store only write the fetch function.

Architecture:
    States:
    - RUNNING: fetching and emitting
    - BACKING_OFF: sleeping after a failed fetch
    - STOPPED: loop not running (initial state, after cancellation or a
      fatal error)

    Transitions per iteration:
    - cancellation requested -> STOPPED (clean return)
    - fetch succeeded -> reset the error counter, emit events in order,
      advance the cursor unless the returned cursor is empty, sleep the
      poll interval
    - fetch failed -> count it; at the ceiling raise MonitorError, otherwise
      back off and retry with the same cursor

    Both sleeps are interruptible by the shared CancellationSignal. A fetch in
    flight is not interrupted; cancellation takes effect at the next check.

Design Decisions:
    - The consecutive-error ceiling is an optional bound: None means retry
      forever (RETRY_FOREVER); 0 is accepted with the same meaning.
    - An empty returned cursor (None, "", 0, datetime.min) means "no change".
      The monitor never rewinds.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

from ..core.exceptions import MonitorError
from ..models.events import NexusEvent
from ..utils.aio import maybe_await
from .cancellation import CancellationSignal

if TYPE_CHECKING:
    from .context import AdapterContext

RETRY_FOREVER: int | None = None


class MonitorState(str, Enum):
    """Lifecycle state of a PollMonitor."""

    RUNNING = "running"
    BACKING_OFF = "backing_off"
    STOPPED = "stopped"


class FetchResult(NamedTuple):
    """Events fetched in one poll cycle and the cursor to resume from."""

    events: Sequence[NexusEvent]
    cursor: Any = None


FetchFunc = Callable[..., Awaitable[FetchResult]] | Callable[..., FetchResult]
EmitFunc = Callable[[NexusEvent], Awaitable[None]] | Callable[[NexusEvent], None]


@dataclass(frozen=True)
class PollConfig:
    """Configuration for a PollMonitor.

    Attributes:
        interval: Seconds between polls (must be positive)
        fetch: Sync or async ``fetch(cursor)`` or ``fetch(cursor, account)``
            returning ``(events, new_cursor)``; raises on failure
        initial_cursor: Starting cursor (defaults to the current UTC time)
        error_backoff: Seconds to wait after a failed fetch (defaults to interval)
        max_consecutive_errors: Failures in a row before the monitor gives up
            (None or 0 = retry forever)
    """

    interval: float
    fetch: FetchFunc
    initial_cursor: Any = None
    error_backoff: float | None = None
    max_consecutive_errors: int | None = RETRY_FOREVER

    def __post_init__(self) -> None:
        """Validate and normalize poll configuration."""
        if not self.interval > 0:
            raise ValueError(f"PollConfig: invalid interval: {self.interval}")
        if self.error_backoff is None or not self.error_backoff > 0:
            object.__setattr__(self, "error_backoff", self.interval)
        if self.max_consecutive_errors is not None:
            if self.max_consecutive_errors < 0:
                raise ValueError("PollConfig: max_consecutive_errors cannot be negative")
            if self.max_consecutive_errors == 0:
                object.__setattr__(self, "max_consecutive_errors", RETRY_FOREVER)


def is_empty_cursor(cursor: Any) -> bool:
    """Whether a returned cursor means "no change"."""
    if cursor is None:
        return True
    if isinstance(cursor, datetime):
        return cursor.replace(tzinfo=None) == datetime.min
    return not cursor


def _accepts_account(fetch: FetchFunc) -> bool:
    """Whether ``fetch`` takes a second positional argument."""
    try:
        params = inspect.signature(fetch).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1
    return positional >= 2


class PollMonitor:
    """Cursor-advancing polling loop with bounded error backoff."""

    def __init__(self, config: PollConfig, *, logger: logging.Logger | None = None) -> None:
        """Initialize poll monitor.

        Args:
            config: Poll configuration
            logger: Logger for monitor diagnostics (defaults to module logger)
        """
        self._config = config
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._cursor = (
            config.initial_cursor if config.initial_cursor is not None else datetime.now(UTC)
        )
        self._state = MonitorState.STOPPED
        self._consecutive_errors = 0
        self._fetch_takes_account = _accepts_account(config.fetch)

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def cursor(self) -> Any:
        """Position processed so far; persist it to resume a later run."""
        return self._cursor

    @property
    def consecutive_errors(self) -> int:
        return self._consecutive_errors

    async def run(self, emit: EmitFunc, cancel: CancellationSignal, account: str = "") -> None:
        """Poll until cancelled.

        Args:
            emit: Sync or async callback receiving each fetched event, in order
            cancel: Shared cancellation signal
            account: Account id handed to two-argument fetch functions

        Raises:
            MonitorError: If fetch fails ``max_consecutive_errors`` times in a
                row (chained to the last fetch error)
        """
        config = self._config
        self._state = MonitorState.RUNNING
        try:
            while True:
                if cancel.cancelled:
                    self._logger.info("monitor shutting down (cancelled)")
                    return

                try:
                    events, new_cursor = await self._fetch(account)
                except Exception as e:
                    self._consecutive_errors += 1
                    self._logger.error(
                        "poll fetch error (%d consecutive): %s", self._consecutive_errors, e
                    )
                    if (
                        config.max_consecutive_errors is not None
                        and self._consecutive_errors >= config.max_consecutive_errors
                    ):
                        raise MonitorError(
                            f"too many consecutive errors ({self._consecutive_errors}): {e}",
                            consecutive_failures=self._consecutive_errors,
                        ) from e

                    self._state = MonitorState.BACKING_OFF
                    if await cancel.sleep(config.error_backoff):
                        self._logger.info("monitor shutting down (cancelled)")
                        return
                    self._state = MonitorState.RUNNING
                    continue

                self._consecutive_errors = 0

                for event in events:
                    await maybe_await(emit(event))
                if events:
                    self._logger.debug("emitted %d events", len(events))

                if not is_empty_cursor(new_cursor):
                    self._cursor = new_cursor

                if await cancel.sleep(config.interval):
                    self._logger.info("monitor shutting down (cancelled)")
                    return
        finally:
            self._state = MonitorState.STOPPED

    async def _fetch(self, account: str) -> FetchResult:
        if self._fetch_takes_account:
            result = self._config.fetch(self._cursor, account)
        else:
            result = self._config.fetch(self._cursor)
        events, cursor = await maybe_await(result)
        return FetchResult(list(events or []), cursor)


MonitorHandler = Callable[["AdapterContext", str, EmitFunc], Awaitable[None]]


def poll_monitor(config: PollConfig | Callable[[str], PollConfig]) -> MonitorHandler:
    """Build a ``monitor`` command handler from a poll configuration.

    Args:
        config: PollConfig, or a factory receiving the account id and returning
            one (for fetch functions that depend on the account)

    Returns:
        Handler suitable for ``Adapter.monitor``

    Example:
        >>> adapter = Adapter(
        ...     info=describe,
        ...     monitor=poll_monitor(PollConfig(interval=10.0, fetch=fetch_new_mail)),
        ... )
    """

    async def handler(ctx: AdapterContext, account: str, emit: EmitFunc) -> None:
        resolved = config if isinstance(config, PollConfig) else config(account)
        monitor = PollMonitor(resolved, logger=ctx.logger)
        await monitor.run(emit, ctx.cancel, account)

    return handler
