"""Unit tests for CancellationSignal."""

from __future__ import annotations

import asyncio
import signal

import pytest

from nexus.adapter.runtime import CancellationSignal, install_signal_handlers


class TestCancellationSignal:
    @pytest.mark.asyncio
    async def test_cancel_is_one_shot(self):
        cancel = CancellationSignal()
        assert not cancel.cancelled

        cancel.cancel("SIGTERM")
        cancel.cancel("SIGINT")

        assert cancel.cancelled
        assert cancel.reason == "SIGTERM"

    @pytest.mark.asyncio
    async def test_sleep_runs_to_completion(self):
        assert await CancellationSignal().sleep(0.001) is False

    @pytest.mark.asyncio
    async def test_sleep_returns_immediately_when_cancelled(self):
        cancel = CancellationSignal()
        cancel.cancel()

        assert await asyncio.wait_for(cancel.sleep(60), timeout=1.0) is True

    @pytest.mark.asyncio
    async def test_sleep_interrupted_by_cancel(self):
        cancel = CancellationSignal()
        asyncio.get_running_loop().call_later(0.01, cancel.cancel)

        assert await asyncio.wait_for(cancel.sleep(60), timeout=1.0) is True

    @pytest.mark.asyncio
    async def test_race_returns_result(self):
        async def work():
            return 42

        assert await CancellationSignal().race(work()) == (False, 42)

    @pytest.mark.asyncio
    async def test_race_cancels_pending_work(self):
        cancel = CancellationSignal()
        started = asyncio.Event()
        finished = False

        async def work():
            nonlocal finished
            started.set()
            await asyncio.sleep(60)
            finished = True

        asyncio.get_running_loop().call_later(0.01, cancel.cancel)
        result = await asyncio.wait_for(cancel.race(work()), timeout=1.0)

        assert result == (True, None)
        assert started.is_set()
        assert finished is False

    @pytest.mark.asyncio
    async def test_race_after_cancel_does_not_run_work(self):
        cancel = CancellationSignal()
        cancel.cancel()

        async def work():
            raise AssertionError("should not run")

        assert await cancel.race(work()) == (True, None)


class TestInstallSignalHandlers:
    @pytest.mark.asyncio
    async def test_sigterm_raises_cancellation(self):
        cancel = CancellationSignal()
        loop = asyncio.get_running_loop()
        install_signal_handlers(cancel, (signal.SIGUSR1,))
        try:
            signal.raise_signal(signal.SIGUSR1)
            assert await asyncio.wait_for(cancel.sleep(1.0), timeout=2.0) is True
            assert cancel.reason == "SIGUSR1"
        finally:
            loop.remove_signal_handler(signal.SIGUSR1)
