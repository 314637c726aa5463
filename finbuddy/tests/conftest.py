"""
Shared fixtures for FinBuddy tests.

Everything time-dependent runs on a VirtualClock; nothing here waits on real
timers. Randomness comes from a fixed-seed random.Random.
"""
from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, TypeVar

import pytest

from finbuddy.cache import MemorySessionSlot
from finbuddy.clock import VirtualClock

T = TypeVar("T")


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def slot() -> MemorySessionSlot:
    return MemorySessionSlot()


@pytest.fixture
def run_on_clock(clock: VirtualClock) -> Callable[[Awaitable[T], float], Awaitable[T]]:
    """
    Run a coroutine that sleeps on the virtual clock to completion:
    start it, let it reach its sleep, advance time, then collect the result.
    """
    async def _run(coro: Awaitable[T], seconds: float) -> T:
        task = asyncio.ensure_future(coro)
        await asyncio.sleep(0)
        clock.advance(seconds)
        return await task

    return _run
