"""
clock.py — Scheduling abstraction for simulated latency.

Two implementations share one interface:
  - AsyncioClock:  real time, backed by the running event loop (used by the app)
  - VirtualClock:  manual time; tests call advance() to fire due sleeps/timers

Components never call asyncio.sleep / loop.call_later directly; they take a
clock so tests can fast-forward instead of waiting on real timers.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...

    def call_later(self, seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


# ---------------------------------------------------------------------------
# Real clock
# ---------------------------------------------------------------------------

class AsyncioClock:
    """Wall-clock scheduling on the running asyncio loop."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))

    def call_later(self, seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        # Must be called from inside the loop (route handlers, lifespan)
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, seconds), callback)


# ---------------------------------------------------------------------------
# Virtual clock
# ---------------------------------------------------------------------------

class _VirtualTimer:
    __slots__ = ("deadline", "seq", "callback", "cancelled")

    def __init__(self, deadline: float, seq: int, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: "_VirtualTimer") -> bool:
        return (self.deadline, self.seq) < (other.deadline, other.seq)


class VirtualClock:
    """
    Deterministic clock. Time only moves when advance() is called.

    Timers fire in deadline order; timers with equal deadlines fire in the
    order they were scheduled. sleep() resolves a future from a timer, so the
    sleeping coroutine resumes on the next loop iteration after advance().
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._timers: list[_VirtualTimer] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, seconds: float, callback: Callable[[], None]) -> _VirtualTimer:
        timer = _VirtualTimer(self._now + max(0.0, seconds), next(self._seq), callback)
        heapq.heappush(self._timers, timer)
        return timer

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def _wake() -> None:
            if not future.done():
                future.set_result(None)

        self.call_later(seconds, _wake)
        await future

    @property
    def pending(self) -> int:
        """Number of live (not cancelled, not fired) timers."""
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move time forward and fire every timer due by the new time.
        Returns the number of callbacks fired.
        """
        target = self._now + seconds
        fired = 0
        while self._timers and self._timers[0].deadline <= target:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self._now = timer.deadline
            timer.callback()
            fired += 1
        self._now = target
        if fired:
            logger.debug("VirtualClock advanced to %.3f fired=%d", self._now, fired)
        return fired


def default_clock(clock: Optional[Clock] = None) -> Clock:
    return clock if clock is not None else AsyncioClock()
