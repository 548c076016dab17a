"""Published poll state. Readers always see one complete cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from edgewatch.models import EdgeResult, MarketSnapshot


@dataclass(frozen=True)
class PollState:
    """Immutable result of one completed poll cycle."""

    markets: tuple[dict[str, Any], ...] = ()
    snapshots: tuple[MarketSnapshot, ...] = ()
    edges: tuple[EdgeResult, ...] = ()
    timestamp: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire shape of the `markets-update` event."""
        return {
            "markets": list(self.markets),
            "edges": [e.model_dump(mode="json") for e in self.edges],
            "lastUpdate": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass
class EdgeCache:
    """Holds the current PollState; updates replace the reference, never mutate it."""

    _state: PollState = field(default_factory=PollState)

    @property
    def state(self) -> PollState:
        return self._state

    def replace(self, state: PollState) -> None:
        self._state = state

    def latest_edges(self, limit: int | None = None) -> list[EdgeResult]:
        edges = self._state.edges
        if limit is None:
            return list(edges)
        return list(edges[: max(limit, 0)])

    @property
    def last_poll_timestamp(self) -> datetime | None:
        return self._state.timestamp
