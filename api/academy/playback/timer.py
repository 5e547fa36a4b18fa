"""Repeating timer on the running asyncio loop."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import structlog


logger = structlog.get_logger(__name__)

Callback = Callable[..., Any | Awaitable[Any]]


async def invoke_callback(callback: Callback | None, *args: Any) -> Any:
    """Call a sync or async callback."""
    if callback is None:
        return None
    result = callback(*args)
    if inspect.isawaitable(result):
        return await result
    return result


class RepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds until cancelled.

    The first call happens one interval after ``start()``. A callback that
    raises is logged and the timer keeps running. No call starts after
    ``cancel()``; a call already running is left to finish.
    """

    def __init__(self, interval: float, callback: Callback):
        if interval <= 0:
            msg = "interval must be positive"
            raise ValueError(msg)
        self.interval = interval
        self.callback = callback
        self._task: asyncio.Task | None = None
        self._callback_task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the timer. No-op when already running."""
        if self.active:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # Only interrupt the sleep, never a callback in flight
        if task is not self._callback_task and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        task = asyncio.current_task()
        while self._task is task:
            await asyncio.sleep(self.interval)
            if self._task is not task:
                return
            self._callback_task = task
            try:
                await invoke_callback(self.callback)
            except Exception:
                logger.exception("timer_callback_failed")
            finally:
                if self._callback_task is task:
                    self._callback_task = None
