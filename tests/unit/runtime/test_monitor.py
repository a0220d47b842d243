"""Unit tests for the polling monitor."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from nexus.adapter.api import new_event
from nexus.adapter.core import MonitorError
from nexus.adapter.runtime import (
    RETRY_FOREVER,
    AdapterContext,
    CancellationSignal,
    FetchResult,
    MonitorState,
    PollConfig,
    PollMonitor,
    poll_monitor,
)
from nexus.adapter.runtime.monitor import is_empty_cursor


def make_event(n: int):
    return new_event("test", f"test:{n}").with_timestamp_ms(n).build()


class TestPollConfig:
    """Test PollConfig validation and defaults."""

    def test_backoff_defaults_to_interval(self):
        config = PollConfig(interval=5.0, fetch=lambda cursor: ([], None))
        assert config.error_backoff == 5.0
        assert config.max_consecutive_errors is RETRY_FOREVER

    def test_non_positive_backoff_falls_back_to_interval(self):
        config = PollConfig(interval=2.0, fetch=lambda cursor: ([], None), error_backoff=0)
        assert config.error_backoff == 2.0

    def test_zero_ceiling_means_forever(self):
        config = PollConfig(interval=1.0, fetch=lambda cursor: ([], None), max_consecutive_errors=0)
        assert config.max_consecutive_errors is None

    @pytest.mark.parametrize("interval", [0, -1.5])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError, match="invalid interval"):
            PollConfig(interval=interval, fetch=lambda cursor: ([], None))

    def test_rejects_negative_ceiling(self):
        with pytest.raises(ValueError):
            PollConfig(interval=1.0, fetch=lambda cursor: ([], None), max_consecutive_errors=-1)


class TestEmptyCursor:
    @pytest.mark.parametrize(
        "cursor", [None, "", 0, datetime.min, datetime.min.replace(tzinfo=UTC)]
    )
    def test_empty(self, cursor):
        assert is_empty_cursor(cursor)

    @pytest.mark.parametrize("cursor", ["abc", 42, datetime(2024, 1, 1, tzinfo=UTC)])
    def test_not_empty(self, cursor):
        assert not is_empty_cursor(cursor)


class TestPollMonitor:
    """Test the PollMonitor loop."""

    @pytest.mark.asyncio
    async def test_ceiling_stops_after_exactly_k_failures(self):
        calls = 0

        async def fetch(cursor):
            nonlocal calls
            calls += 1
            raise ConnectionError(f"down {calls}")

        config = PollConfig(
            interval=0.01, fetch=fetch, error_backoff=0.001, max_consecutive_errors=3
        )
        monitor = PollMonitor(config)

        with pytest.raises(MonitorError) as exc_info:
            await monitor.run(lambda event: None, CancellationSignal())

        assert calls == 3
        assert exc_info.value.consecutive_failures == 3
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert str(exc_info.value.__cause__) == "down 3"
        assert monitor.state == MonitorState.STOPPED

    @pytest.mark.asyncio
    async def test_retry_forever_keeps_polling(self):
        cancel = CancellationSignal()
        calls = 0

        def fetch(cursor):
            nonlocal calls
            calls += 1
            if calls <= 5:
                raise RuntimeError("flaky")
            cancel.cancel()
            return [], None

        config = PollConfig(interval=0.01, fetch=fetch, error_backoff=0.001)

        await PollMonitor(config).run(lambda event: None, cancel)

        assert calls == 6

    @pytest.mark.asyncio
    async def test_success_resets_error_counter(self):
        cancel = CancellationSignal()
        outcomes = ["fail", "fail", "ok", "fail", "fail", "stop"]

        def fetch(cursor):
            outcome = outcomes.pop(0)
            if outcome == "fail":
                raise RuntimeError("flaky")
            if outcome == "stop":
                cancel.cancel()
            return [], None

        config = PollConfig(
            interval=0.001, fetch=fetch, error_backoff=0.001, max_consecutive_errors=3
        )
        monitor = PollMonitor(config)

        await monitor.run(lambda event: None, cancel)

        assert outcomes == []
        assert monitor.consecutive_errors == 0

    @pytest.mark.asyncio
    async def test_cursor_advances_only_on_non_empty_cursor(self):
        cancel = CancellationSignal()
        seen: list[int] = []
        event = make_event(1)

        def fetch(cursor):
            seen.append(cursor)
            if len(seen) == 1:
                return FetchResult([event], 20)
            if len(seen) == 2:
                return FetchResult([], None)
            cancel.cancel()
            return FetchResult([], 0)

        emitted = []
        monitor = PollMonitor(PollConfig(interval=0.001, fetch=fetch, initial_cursor=10))

        await monitor.run(emitted.append, cancel)

        assert seen == [10, 20, 20]
        assert monitor.cursor == 20
        assert emitted == [event]

    @pytest.mark.asyncio
    async def test_failed_fetch_retries_same_cursor(self):
        cancel = CancellationSignal()
        seen: list[str] = []

        def fetch(cursor):
            seen.append(cursor)
            if len(seen) == 1:
                raise RuntimeError("flaky")
            cancel.cancel()
            return [], "next"

        monitor = PollMonitor(
            PollConfig(interval=0.001, fetch=fetch, initial_cursor="start", error_backoff=0.001)
        )
        await monitor.run(lambda event: None, cancel)

        assert seen == ["start", "start"]
        assert monitor.cursor == "next"

    @pytest.mark.asyncio
    async def test_events_emitted_in_order_to_async_emit(self):
        cancel = CancellationSignal()
        events = [make_event(i) for i in range(5)]
        emitted = []

        async def emit(event):
            emitted.append(event.event_id)

        def fetch(cursor):
            cancel.cancel()
            return events, "c1"

        await PollMonitor(PollConfig(interval=1.0, fetch=fetch)).run(emit, cancel)

        assert emitted == [f"test:{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_cancelled_before_start_never_fetches(self):
        cancel = CancellationSignal()
        cancel.cancel()
        calls = 0

        def fetch(cursor):
            nonlocal calls
            calls += 1
            return [], None

        await PollMonitor(PollConfig(interval=1.0, fetch=fetch)).run(lambda e: None, cancel)

        assert calls == 0

    @pytest.mark.asyncio
    async def test_cancellation_interrupts_interval_sleep(self):
        cancel = CancellationSignal()
        monitor = PollMonitor(PollConfig(interval=60.0, fetch=lambda cursor: ([], None)))

        task = asyncio.create_task(monitor.run(lambda e: None, cancel))
        await asyncio.sleep(0.01)
        assert monitor.state == MonitorState.RUNNING

        cancel.cancel("test")
        await asyncio.wait_for(task, timeout=1.0)

        assert monitor.state == MonitorState.STOPPED

    @pytest.mark.asyncio
    async def test_cancellation_interrupts_backoff(self):
        cancel = CancellationSignal()

        def fetch(cursor):
            raise RuntimeError("down")

        monitor = PollMonitor(PollConfig(interval=60.0, fetch=fetch))
        task = asyncio.create_task(monitor.run(lambda e: None, cancel))
        await asyncio.sleep(0.01)
        assert monitor.state == MonitorState.BACKING_OFF

        cancel.cancel()
        await asyncio.wait_for(task, timeout=1.0)

        assert monitor.consecutive_errors == 1

    @pytest.mark.asyncio
    async def test_two_argument_fetch_receives_account(self):
        cancel = CancellationSignal()
        accounts = []

        async def fetch(cursor, account):
            accounts.append(account)
            cancel.cancel()
            return [], None

        await PollMonitor(PollConfig(interval=1.0, fetch=fetch)).run(
            lambda e: None, cancel, account="work"
        )

        assert accounts == ["work"]

    def test_default_initial_cursor_is_now_utc(self):
        before = datetime.now(UTC)
        monitor = PollMonitor(PollConfig(interval=1.0, fetch=lambda cursor: ([], None)))

        assert monitor.cursor.tzinfo is not None
        assert before <= monitor.cursor <= datetime.now(UTC)
        assert monitor.state == MonitorState.STOPPED


class TestPollMonitorHandler:
    """Test poll_monitor handler construction."""

    @pytest.mark.asyncio
    async def test_handler_runs_until_cancelled(self):
        ctx = AdapterContext()
        event = make_event(7)

        def fetch(cursor):
            ctx.cancel.cancel()
            return [event], None

        emitted = []
        handler = poll_monitor(PollConfig(interval=1.0, fetch=fetch))
        await handler(ctx, "default", emitted.append)

        assert emitted == [event]

    @pytest.mark.asyncio
    async def test_factory_receives_account(self):
        ctx = AdapterContext()
        requested = []

        def factory(account):
            requested.append(account)

            def fetch(cursor):
                ctx.cancel.cancel()
                return [], None

            return PollConfig(interval=1.0, fetch=fetch)

        await poll_monitor(factory)(ctx, "acct-1", lambda e: None)

        assert requested == ["acct-1"]
