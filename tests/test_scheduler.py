"""PeriodicTask: ticks never overlap, stop is clean."""

import asyncio

import pytest

from edgewatch.pipeline import PeriodicTask


def test_slow_ticks_never_overlap():
    state = {"active": 0, "max_active": 0, "calls": 0}

    async def slow():
        state["active"] += 1
        state["calls"] += 1
        state["max_active"] = max(state["max_active"], state["active"])
        await asyncio.sleep(0.03)
        state["active"] -= 1

    async def run():
        task = PeriodicTask("slow", 0.01, slow)
        task.start()
        await asyncio.sleep(0.2)
        await task.stop()
        return task

    task = asyncio.run(run())
    assert state["calls"] >= 2
    assert state["max_active"] == 1
    assert not task.running


def test_failing_tick_does_not_stop_schedule():
    calls = []

    async def flaky():
        calls.append(1)
        raise RuntimeError("tick failed")

    async def run():
        task = PeriodicTask("flaky", 0.01, flaky)
        task.start()
        await asyncio.sleep(0.1)
        await task.stop()

    asyncio.run(run())
    assert len(calls) >= 2


def test_delayed_start_waits_one_interval():
    calls = []

    async def tick():
        calls.append(1)

    async def run():
        task = PeriodicTask("later", 10, tick, run_immediately=False)
        task.start()
        await asyncio.sleep(0.05)
        await task.stop()

    asyncio.run(run())
    assert calls == []


def test_interval_must_be_positive():
    async def noop():
        pass

    with pytest.raises(ValueError):
        PeriodicTask("bad", 0, noop)
