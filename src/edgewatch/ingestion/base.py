"""Narrow protocols for the collaborators the core calls: market source and edge sink."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from edgewatch.models import SheetRow


class MarketSource(Protocol):
    """Upstream market data (REST). Raises FetchError on any failure."""

    async def fetch_raw_markets(self) -> list[dict[str, Any]]: ...


class EdgeSink(Protocol):
    """External durable mirror of the live edges.

    Blocking by contract; the sync engine runs these calls in a worker thread.
    connect() raises SinkConnectError, overwrite() raises SinkWriteError (or
    RateLimitError when throttled).
    """

    def connect(self) -> None: ...

    def overwrite(self, rows: Sequence[SheetRow]) -> None:
        """Replace every data row with rows. No append semantics."""
        ...

    def read_rows(self, limit: int = 10) -> list[SheetRow]:
        """Return the last `limit` rows currently in the sink."""
        ...
