"""Tests for lawview.scheduler module."""
from __future__ import annotations

import asyncio

import pytest

from lawview.scheduler import LoopScheduler, ManualScheduler


class TestManualScheduler:
    def test_fires_only_when_due(self) -> None:
        sched = ManualScheduler()
        fired: list[str] = []
        sched.call_later(0.5, lambda: fired.append("a"))
        assert sched.advance(0.1) == 0
        assert fired == []
        assert sched.advance(1.0) == 1
        assert fired == ["a"]

    def test_order_by_due_then_insertion(self) -> None:
        sched = ManualScheduler()
        fired: list[str] = []
        sched.call_later(1.0, lambda: fired.append("late"))
        sched.call_later(0.5, lambda: fired.append("first"))
        sched.call_later(0.5, lambda: fired.append("second"))
        sched.advance(2.0)
        assert fired == ["first", "second", "late"]

    def test_cancel(self) -> None:
        sched = ManualScheduler()
        fired: list[int] = []
        handle = sched.call_later(0.5, lambda: fired.append(1))
        assert sched.pending == 1
        handle.cancel()
        assert sched.pending == 0
        assert sched.advance(1.0) == 0
        assert fired == []

    def test_callbacks_can_reschedule(self) -> None:
        sched = ManualScheduler()
        fired: list[float] = []

        def tick() -> None:
            fired.append(sched.now)
            if len(fired) < 3:
                sched.call_later(1.0, tick)

        sched.call_later(1.0, tick)
        assert sched.advance(10.0) == 3
        assert fired == [1.0, 2.0, 3.0]
        assert sched.now == 10.0

    def test_negative_delay_fires_on_next_advance(self) -> None:
        sched = ManualScheduler()
        fired: list[int] = []
        sched.call_later(-1.0, lambda: fired.append(1))
        assert sched.advance(0) == 1

    def test_negative_advance_rejected(self) -> None:
        with pytest.raises(ValueError):
            ManualScheduler().advance(-0.1)


class TestLoopScheduler:
    def test_uses_running_loop(self) -> None:
        async def run() -> list[int]:
            fired: list[int] = []
            LoopScheduler().call_later(0.01, lambda: fired.append(1))
            await asyncio.sleep(0.05)
            return fired

        assert asyncio.run(run()) == [1]

    def test_cancel(self) -> None:
        async def run() -> list[int]:
            fired: list[int] = []
            handle = LoopScheduler().call_later(0.01, lambda: fired.append(1))
            handle.cancel()
            await asyncio.sleep(0.05)
            return fired

        assert asyncio.run(run()) == []
