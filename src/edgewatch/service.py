"""EdgeService - wires the poller, fan-out, sync engine and their timers."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any

import structlog

from edgewatch.config import Settings
from edgewatch.errors import ConfigurationError
from edgewatch.ingestion.base import EdgeSink, MarketSource
from edgewatch.ingestion.polymarket.gamma import GammaClient
from edgewatch.models import EdgeResult, SyncOutcome
from edgewatch.pipeline import Broadcaster, EdgeCache, PeriodicTask, PollOrchestrator, PollState
from edgewatch.sync import RateLimitState, SyncEngine
from edgewatch.sync.sinks import create_sink

log = structlog.get_logger(__name__)


def build_sync_engine(settings: Settings, sink: EdgeSink | None = None) -> SyncEngine | None:
    """Return a SyncEngine, or None when the sink is not configured (sync disabled)."""
    if sink is None:
        try:
            sink = create_sink(settings)
        except ConfigurationError as e:
            log.warning("sync_disabled", reason=str(e))
            return None
    return SyncEngine(
        sink,
        top_n=settings.sync_top_n,
        rate_limit=RateLimitState(
            step_ms=settings.sync_backoff_step_ms,
            decay_ms=settings.sync_backoff_decay_ms,
            max_delay_ms=settings.sync_max_delay_ms,
        ),
    )


class EdgeService:
    """Owns every piece of runtime state. One instance per process."""

    def __init__(
        self,
        settings: Settings,
        source: MarketSource | None = None,
        sync_engine: SyncEngine | None = None,
        enable_sync: bool = True,
    ) -> None:
        self.settings = settings
        self.source = source or GammaClient(
            base_url=settings.gamma_api_base,
            limit=settings.poll_limit,
            timeout=settings.poll_timeout_sec,
        )
        self.broadcaster = Broadcaster()
        self.poller = PollOrchestrator(self.source, EdgeCache(), on_publish=self._publish)
        if sync_engine is None and enable_sync:
            sync_engine = build_sync_engine(settings)
        self.sync_engine = sync_engine
        self._poll_task: PeriodicTask | None = None
        self._sync_task: PeriodicTask | None = None
        self._started_at = time.monotonic()

    @property
    def sync_enabled(self) -> bool:
        return self.sync_engine is not None

    async def _publish(self, state: PollState) -> None:
        reached = await self.broadcaster.publish(state.to_payload())
        log.debug("markets_update_published", subscribers=reached, edges=len(state.edges))

    async def poll_once(self):
        return await self.poller.poll_once()

    async def sync_once(self) -> SyncOutcome | None:
        """Sync the current cache. None when sync is disabled."""
        if self.sync_engine is None:
            return None
        return await self.sync_engine.sync(self.poller.get_latest_edges())

    def get_latest_edges(self, limit: int | None = None) -> list[EdgeResult]:
        return self.poller.get_latest_edges(limit)

    def get_last_poll_timestamp(self) -> datetime | None:
        return self.poller.get_last_poll_timestamp()

    def health(self) -> dict[str, Any]:
        last_update = self.get_last_poll_timestamp()
        last_sync = self.sync_engine.last_sync if self.sync_engine else None
        state = self.poller.cache.state
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - self._started_at, 1),
            "last_update": last_update.isoformat() if last_update else None,
            "last_sheets_sync": last_sync.isoformat() if last_sync else None,
            "markets_count": len(state.markets),
            "edges_count": len(state.edges),
            "subscribers": self.broadcaster.subscriber_count,
            "sync_enabled": self.sync_enabled,
        }

    async def start(self) -> None:
        """Run a first poll, then start the poll timer and, when enabled, the sync timer."""
        await self.poll_once()
        self._poll_task = PeriodicTask(
            "poll", self.settings.poll_interval_sec, self.poll_once, run_immediately=False
        )
        self._poll_task.start()
        if self.sync_engine is not None:
            self._sync_task = PeriodicTask("sync", self.settings.sync_interval_sec, self.sync_once)
            self._sync_task.start()

    async def stop(self) -> None:
        for task in (self._poll_task, self._sync_task):
            if task is not None:
                await task.stop()
        self._poll_task = self._sync_task = None
        aclose = getattr(self.source, "aclose", None)
        if aclose is not None:
            await aclose()
        close = getattr(self.sync_engine.sink, "close", None) if self.sync_engine else None
        if close is not None:
            close()
        log.info("service_stopped")
