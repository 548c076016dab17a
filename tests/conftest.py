"""Shared fixtures: frozen clock, raw market builders, fake source and sink."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

import pytest

from edgewatch.errors import FetchError, SinkConnectError
from edgewatch.models import EdgeResult, MarketSnapshot, SheetRow

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
OLD = datetime(2020, 1, 1, tzinfo=timezone.utc)


def make_snapshot(**overrides: Any) -> MarketSnapshot:
    data = {
        "id": "m1",
        "title": "Will it rain?",
        "created_at": OLD,
        "yes_price": 0.5,
        "no_price": 0.5,
        "volume_24h": 0.0,
        "liquidity": 0.0,
    }
    data.update(overrides)
    return MarketSnapshot(**data)


def make_edge(market_id: str = "m1", yes_price: float = 0.4, score: float = 15.0, **overrides: Any) -> EdgeResult:
    data = {
        "id": market_id,
        "title": f"Market {market_id}",
        "slug": f"slug-{market_id}",
        "created_at": OLD,
        "yes_price": yes_price,
        "no_price": 1 - yes_price,
        "volume_24h": 1234.5,
        "liquidity": 678.9,
        "edge_score": score,
        "edge_type": (),
        "detected_at": NOW,
    }
    data.update(overrides)
    return EdgeResult(**data)


def raw_market(
    market_id: str = "m1",
    yes: Any = "0.5",
    no: Any = "0.5",
    volume: Any = "0",
    liquidity: Any = "0",
    created_at: datetime | None = OLD,
    question: str = "Will it rain?",
) -> dict[str, Any]:
    tokens = []
    if yes is not None:
        tokens.append({"outcome": "Yes", "price": yes})
    if no is not None:
        tokens.append({"outcome": "No", "price": no})
    return {
        "id": market_id,
        "question": question,
        "slug": f"slug-{market_id}",
        "createdAt": created_at.isoformat().replace("+00:00", "Z") if created_at else None,
        "volume24hr": volume,
        "liquidity": liquidity,
        "tokens": tokens,
    }


def recent(hours: float = 10) -> datetime:
    return NOW - timedelta(hours=hours)


class FakeSource:
    """MarketSource returning queued responses; an exception in the queue is raised."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls = 0

    async def fetch_raw_markets(self) -> list[dict[str, Any]]:
        self.calls += 1
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


class FakeSink:
    """In-memory EdgeSink. Queue exceptions in `write_errors` to fail the next overwrites."""

    def __init__(self, fail_connect: bool = False) -> None:
        self.fail_connect = fail_connect
        self.connect_calls = 0
        self.rows: list[SheetRow] = []
        self.writes: list[list[SheetRow]] = []
        self.write_errors: list[Exception] = []

    def connect(self) -> None:
        self.connect_calls += 1
        if self.fail_connect:
            raise SinkConnectError("credentials rejected")

    def overwrite(self, rows: Sequence[SheetRow]) -> None:
        if self.write_errors:
            raise self.write_errors.pop(0)
        self.rows = list(rows)
        self.writes.append(list(rows))

    def read_rows(self, limit: int = 10) -> list[SheetRow]:
        return self.rows[-limit:]


@pytest.fixture
def fake_sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def fetch_error() -> FetchError:
    return FetchError("gamma unreachable")
