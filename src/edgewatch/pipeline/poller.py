"""Poll orchestrator: fetch -> detect -> swap cache -> publish."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

import structlog

from edgewatch.edges.detector import parse_snapshots, score_snapshots
from edgewatch.errors import FetchError
from edgewatch.ingestion.base import MarketSource
from edgewatch.models import EdgeResult, MarketSnapshot
from edgewatch.pipeline.cache import EdgeCache, PollState

log = structlog.get_logger(__name__)

PublishHook = Callable[[PollState], Awaitable[None]]


class PollPhase(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SCORING = "scoring"
    PUBLISHED = "published"


@dataclass(frozen=True)
class PollResult:
    snapshots: tuple[MarketSnapshot, ...]
    edges: tuple[EdgeResult, ...]
    poll_timestamp: datetime


class PollOrchestrator:
    """Runs one fetch/score/publish cycle at a time against an owned EdgeCache."""

    def __init__(
        self,
        source: MarketSource,
        cache: EdgeCache | None = None,
        on_publish: PublishHook | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.source = source
        self.cache = cache or EdgeCache()
        self._hooks: list[PublishHook] = [on_publish] if on_publish else []
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = asyncio.Lock()
        self.phase = PollPhase.IDLE
        self.failures = 0

    def add_publish_hook(self, hook: PublishHook) -> None:
        self._hooks.append(hook)

    async def poll_once(self) -> PollResult | None:
        """Run one cycle. Returns None on fetch failure or when a cycle is already running."""
        if self._lock.locked():
            log.warning("poll_skipped", reason="cycle_in_flight", phase=self.phase.value)
            return None
        async with self._lock:
            try:
                return await self._cycle()
            finally:
                self.phase = PollPhase.IDLE

    async def _cycle(self) -> PollResult | None:
        self.phase = PollPhase.FETCHING
        try:
            raw_markets = await self.source.fetch_raw_markets()
        except FetchError as e:
            self.failures += 1
            log.error("poll_fetch_failed", error=str(e), failures=self.failures)
            return None

        self.phase = PollPhase.SCORING
        now = self._clock()
        markets = tuple(m for m in raw_markets if isinstance(m, dict))
        snapshots = parse_snapshots(markets)
        edges = score_snapshots(snapshots, now)
        state = PollState(
            markets=markets,
            snapshots=tuple(snapshots),
            edges=tuple(edges),
            timestamp=now,
        )
        self.cache.replace(state)
        self.phase = PollPhase.PUBLISHED
        log.info(
            "poll_completed",
            markets=len(markets),
            scored=len(snapshots),
            edges=len(edges),
        )
        for hook in self._hooks:
            try:
                await hook(state)
            except Exception as e:
                log.warning("publish_hook_failed", error=str(e))
        return PollResult(snapshots=state.snapshots, edges=state.edges, poll_timestamp=now)

    def get_latest_edges(self, limit: int | None = None) -> list[EdgeResult]:
        return self.cache.latest_edges(limit)

    def get_last_poll_timestamp(self) -> datetime | None:
        return self.cache.last_poll_timestamp

    def get_markets(self) -> list[dict[str, Any]]:
        return list(self.cache.state.markets)
