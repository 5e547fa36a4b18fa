"""Tests for the repeating timer."""

import asyncio

import pytest

from academy.playback.timer import RepeatingTimer, invoke_callback


class TestInvokeCallback:
    @pytest.mark.asyncio
    async def test_sync_and_async_callbacks(self) -> None:
        async def async_double(value):
            return value * 2

        assert await invoke_callback(lambda value: value + 1, 1) == 2
        assert await invoke_callback(async_double, 2) == 4
        assert await invoke_callback(None) is None


class TestRepeatingTimer:
    def test_interval_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            RepeatingTimer(0, lambda: None)

    @pytest.mark.asyncio
    async def test_fires_repeatedly_until_cancelled(self) -> None:
        calls = []
        timer = RepeatingTimer(0.02, lambda: calls.append(1))

        timer.start()
        await asyncio.sleep(0.11)
        timer.cancel()
        fired = len(calls)
        await asyncio.sleep(0.06)

        assert fired >= 3
        assert len(calls) == fired
        assert timer.active is False

    @pytest.mark.asyncio
    async def test_first_call_after_one_interval(self) -> None:
        calls = []
        timer = RepeatingTimer(0.1, lambda: calls.append(1))

        timer.start()
        await asyncio.sleep(0.03)
        timer.cancel()

        assert calls == []

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self) -> None:
        calls = []
        timer = RepeatingTimer(0.05, lambda: calls.append(1))

        timer.start()
        timer.start()
        await asyncio.sleep(0.07)
        timer.cancel()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_cancel_from_own_callback(self) -> None:
        calls = []

        def callback() -> None:
            calls.append(1)
            timer.cancel()

        timer = RepeatingTimer(0.02, callback)
        timer.start()
        await asyncio.sleep(0.1)

        assert calls == [1]
        assert timer.active is False

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_timer_running(self) -> None:
        calls = []

        def callback() -> None:
            calls.append(1)
            raise RuntimeError("boom")

        timer = RepeatingTimer(0.02, callback)
        timer.start()
        await asyncio.sleep(0.09)
        timer.cancel()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_cancel_lets_running_callback_finish(self) -> None:
        started, finished = [], []

        async def callback() -> None:
            started.append(1)
            await asyncio.sleep(0.1)
            finished.append(1)

        timer = RepeatingTimer(0.02, callback)
        timer.start()
        await asyncio.sleep(0.04)
        timer.cancel()
        await asyncio.sleep(0.3)

        assert started == [1]
        assert finished == [1]
        assert timer.active is False

    @pytest.mark.asyncio
    async def test_restart_while_old_callback_runs(self) -> None:
        finished = []

        async def callback() -> None:
            await asyncio.sleep(0.08)
            finished.append(1)

        timer = RepeatingTimer(0.02, callback)
        timer.start()
        await asyncio.sleep(0.04)
        timer.cancel()
        timer.start()
        timer.cancel()
        await asyncio.sleep(0.2)

        assert finished == [1]
        assert timer.active is False
