"""Poll orchestrator: cache swap, stale-on-failure, no overlapping cycles."""

import asyncio

from conftest import NOW, FakeSource, raw_market
from edgewatch.errors import FetchError
from edgewatch.pipeline import EdgeCache, PollOrchestrator, PollPhase


def _poller(source, **kwargs) -> PollOrchestrator:
    return PollOrchestrator(source, EdgeCache(), clock=lambda: NOW, **kwargs)


MARKETS = [
    raw_market("quiet"),
    raw_market("cat", volume="15000", liquidity="3000"),
    raw_market("ext", yes="0.97", no="0.03"),
    raw_market("half", yes="0.6", no=None),
]


def test_poll_once_populates_cache_and_publishes():
    published = []

    async def hook(state):
        published.append(state)

    poller = _poller(FakeSource(MARKETS), on_publish=hook)
    result = asyncio.run(poller.poll_once())

    assert result is not None
    assert len(result.snapshots) == 3  # "half" has no No token
    assert [e.id for e in result.edges] == ["cat", "ext"]
    assert result.poll_timestamp == NOW
    assert [e.id for e in poller.get_latest_edges()] == ["cat", "ext"]
    assert [e.id for e in poller.get_latest_edges(1)] == ["cat"]
    assert poller.get_last_poll_timestamp() == NOW
    assert len(poller.get_markets()) == 4
    assert len(published) == 1 and published[0] is poller.cache.state
    assert poller.phase == PollPhase.IDLE


def test_fetch_failure_keeps_previous_cache():
    source = FakeSource(MARKETS, FetchError("boom"))
    poller = _poller(source)
    asyncio.run(poller.poll_once())
    before = poller.cache.state

    assert asyncio.run(poller.poll_once()) is None
    assert poller.cache.state is before
    assert [e.id for e in poller.get_latest_edges()] == ["cat", "ext"]
    assert poller.failures == 1
    assert poller.phase == PollPhase.IDLE


def test_empty_cache_before_first_poll():
    poller = _poller(FakeSource(FetchError("down")))
    assert asyncio.run(poller.poll_once()) is None
    assert poller.get_latest_edges() == []
    assert poller.get_last_poll_timestamp() is None


def test_new_cycle_replaces_state_not_mutates():
    source = FakeSource(MARKETS, [raw_market("ext", yes="0.97", no="0.03")])
    poller = _poller(source)
    asyncio.run(poller.poll_once())
    first = poller.cache.state
    asyncio.run(poller.poll_once())

    assert poller.cache.state is not first
    assert [e.id for e in first.edges] == ["cat", "ext"]
    assert [e.id for e in poller.get_latest_edges()] == ["ext"]


def test_overlapping_tick_is_skipped():
    class SlowSource:
        def __init__(self):
            self.calls = 0
            self.release = asyncio.Event()

        async def fetch_raw_markets(self):
            self.calls += 1
            await self.release.wait()
            return MARKETS

    async def run():
        source = SlowSource()
        poller = _poller(source)
        first = asyncio.create_task(poller.poll_once())
        await asyncio.sleep(0)
        assert poller.phase == PollPhase.FETCHING
        skipped = await poller.poll_once()
        source.release.set()
        done = await first
        return source.calls, skipped, done

    calls, skipped, done = asyncio.run(run())
    assert calls == 1
    assert skipped is None
    assert done is not None


def test_failing_publish_hook_does_not_fail_cycle():
    async def bad_hook(state):
        raise RuntimeError("subscriber exploded")

    poller = _poller(FakeSource(MARKETS), on_publish=bad_hook)
    assert asyncio.run(poller.poll_once()) is not None
    assert len(poller.get_latest_edges()) == 2
