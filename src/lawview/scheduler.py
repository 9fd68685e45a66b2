"""Timer seam for debounces and timed emphasis.

The view never sleeps. Every delayed action (search debounce, tooltip hide
debounce, emphasis removal) is registered through a Scheduler and can be
cancelled through the returned handle.

    LoopScheduler    -- production: asyncio loop ``call_later``
    ManualScheduler  -- headless hosts and tests: time moves only on
                        ``advance()``
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopScheduler:
    """Schedule on an asyncio event loop (the running loop by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay, callback)


@dataclass(slots=True)
class ManualTimer:
    """Handle for a ManualScheduler entry."""

    due: float
    seq: int
    callback: Callable[[], None]
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: ManualTimer) -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class ManualScheduler:
    """Deterministic scheduler driven by explicit ``advance()`` calls."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[ManualTimer] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(
            due=self.now + max(0.0, delay), seq=next(self._seq), callback=callback,
        )
        heapq.heappush(self._queue, timer)
        return timer

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for t in self._queue if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """Move time forward, firing due timers in order. Returns fired count.

        Callbacks may schedule further timers; those fire too if they fall
        inside the advanced window.
        """
        if seconds < 0:
            raise ValueError(f"cannot advance by a negative amount: {seconds}")
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = timer.due
            timer.callback()
            fired += 1
        self.now = target
        logger.debug("advanced to t=%.3f, fired %d timer(s)", self.now, fired)
        return fired
