"""Sync engine: mirror the top edges to an external sink with delta tracking and backoff.

Each call to `sync` is a full overwrite of the sink, so repeating it with the
same input leaves the sink in the same state. Price history is updated before
the write and is kept even when the write fails; the next successful sync
reports change against the last price we attempted to publish.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Sequence

import structlog

from edgewatch.errors import RateLimitError, SinkConnectError, SinkError, is_rate_limit_message
from edgewatch.ingestion.base import EdgeSink
from edgewatch.models import EdgeResult, SheetRow, SyncOutcome
from edgewatch.sync.price_history import PriceHistory
from edgewatch.sync.rate_limit import RateLimitState
from edgewatch.sync.rows import build_row

log = structlog.get_logger(__name__)

DEFAULT_TOP_N = 100


class SyncEngine:
    """Owns the sink handle, the price history and the rate limit state."""

    def __init__(
        self,
        sink: EdgeSink,
        top_n: int = DEFAULT_TOP_N,
        rate_limit: RateLimitState | None = None,
        price_history: PriceHistory | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.sink = sink
        self.top_n = top_n
        self.rate_limit = rate_limit or RateLimitState()
        self.price_history = price_history or PriceHistory()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep
        self.connected = False
        self.last_sync: datetime | None = None
        self.last_outcome: SyncOutcome | None = None

    async def connect(self) -> bool:
        if self.connected:
            return True
        try:
            await asyncio.to_thread(self.sink.connect)
        except SinkConnectError as e:
            log.error("sink_connect_failed", error=str(e))
            return False
        except Exception as e:
            log.exception("sink_connect_crashed", error=str(e))
            return False
        self.connected = True
        log.info("sink_connected", sink=type(self.sink).__name__)
        return True

    def build_rows(self, edges: Sequence[EdgeResult], updated_at: datetime) -> list[SheetRow]:
        """Format the top N edges, recording each yes price in the history."""
        rows = []
        for edge in list(edges)[: self.top_n]:
            change = self.price_history.record(edge.id, edge.yes_price)
            rows.append(build_row(edge, change, updated_at))
        return rows

    async def sync(self, edges: Sequence[EdgeResult]) -> SyncOutcome:
        if not edges:
            log.info("sync_noop", reason="no_edges")
            return self._finish(SyncOutcome.ok(0))

        if not await self.connect():
            return self._finish(SyncOutcome.failed("sink not connected"))

        delay = await self.rate_limit.wait(self._sleep)
        if delay:
            log.info("sync_throttled", delay_ms=delay)

        now = self._clock()
        rows = self.build_rows(edges, now)
        try:
            await asyncio.to_thread(self.sink.overwrite, rows)
        except SinkError as e:
            return self._finish(self._on_write_failure(e))
        except Exception as e:
            # Sink bug or unmapped library error; still reported as an outcome
            log.exception("sync_write_crashed", error=str(e))
            return self._finish(SyncOutcome.failed(str(e) or type(e).__name__))

        self.rate_limit.on_success()
        self.last_sync = now
        log.info("sync_completed", rows=len(rows), delay_ms=self.rate_limit.current_delay_ms)
        return self._finish(SyncOutcome.ok(len(rows)))

    def _on_write_failure(self, error: SinkError) -> SyncOutcome:
        rate_limited = isinstance(error, RateLimitError) or is_rate_limit_message(str(error))
        if rate_limited:
            delay = self.rate_limit.on_rate_limited()
            log.warning("sync_rate_limited", error=str(error), delay_ms=delay)
        else:
            log.error("sync_write_failed", error=str(error))
        return SyncOutcome.failed(str(error) or type(error).__name__, rate_limited=rate_limited)

    def _finish(self, outcome: SyncOutcome) -> SyncOutcome:
        self.last_outcome = outcome
        return outcome

    async def recent_rows(self, limit: int = 10) -> list[SheetRow]:
        """Read rows back from the sink. Raises SinkError when it cannot."""
        if not await self.connect():
            raise SinkConnectError("sink not connected")
        return await asyncio.to_thread(self.sink.read_rows, limit)

    def status(self) -> dict[str, Any]:
        last = self.last_outcome
        return {
            "connected": self.connected,
            "last_sync": self.last_sync.isoformat() if self.last_sync else None,
            "last_success": last.success if last else None,
            "last_error": last.reason if last and not last.success else None,
            "rows_written": last.rows_written if last else 0,
            "current_delay_ms": self.rate_limit.current_delay_ms,
            "tracked_markets": len(self.price_history),
            "top_n": self.top_n,
        }
