"""Cancellable delayed tasks for the single-threaded form loop.

Edit sessions never touch a global timer. Each one owns the handle returned
by ``Scheduler.call_later`` and cancels it before rescheduling. The running
form uses the asyncio loop prompt_toolkit drives; tests and headless hosts
use ``ManualScheduler`` and advance time explicitly.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Any, Callable, Protocol

__all__ = [
    "TimerHandle",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
]


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled before it fires."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Capability to run a callback once after a delay."""

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules on the running asyncio event loop.

    The loop is looked up on each call, so the scheduler can be created
    before prompt_toolkit starts its loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback, *args)


class _ManualHandle:
    __slots__ = ("when", "callback", "args", "_cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Deterministic clock: callbacks run only when time is advanced.

    Example:
        >>> scheduler = ManualScheduler()
        >>> fired = []
        >>> _ = scheduler.call_later(0.2, fired.append, "x")
        >>> _ = scheduler.advance(0.1)
        >>> fired
        []
        >>> _ = scheduler.advance(0.1)
        >>> fired
        ['x']
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._counter = itertools.count()

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> _ManualHandle:
        handle = _ManualHandle(self.now + max(delay, 0.0), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks not yet run or cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every callback that became due.

        Returns:
            Number of callbacks run
        """
        deadline = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if handle.cancelled():
                continue
            handle.callback(*handle.args)
            ran += 1
        self.now = deadline
        return ran

    def run_pending(self) -> int:
        """Run everything scheduled, however far in the future."""
        ran = 0
        while self._queue:
            ran += self.advance(max(self._queue[0][0] - self.now, 0.0))
        return ran
