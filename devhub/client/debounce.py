import asyncio
import inspect
from typing import Any, Callable, Optional


class Debouncer:
    """
    Delay a call until no new call has arrived for `delay` seconds.

    Holds a single pending timer; every call cancels it and schedules a new
    one with the latest arguments. Coroutine callbacks are run as tasks.
    Must be called from within a running event loop.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Future] = None

    def __call__(self, *args: Any) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire, args)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def wait(self) -> None:
        """Wait for the most recently fired callback to finish."""
        if self._task is not None:
            await self._task

    def _fire(self, args: tuple) -> None:
        self._handle = None
        result = self.callback(*args)
        if inspect.isawaitable(result):
            self._task = asyncio.ensure_future(result)
