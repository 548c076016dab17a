"""Edge detection over a batch of raw Gamma markets."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

import structlog

from edgewatch.edges.scorer import score
from edgewatch.ingestion.polymarket.gamma import parse_snapshot
from edgewatch.models import EdgeResult, MarketSnapshot

log = structlog.get_logger(__name__)


def score_snapshots(snapshots: Iterable[MarketSnapshot], now: datetime) -> list[EdgeResult]:
    """Score snapshots, drop zero scores, sort by score descending.

    sorted() is stable, so equal scores keep their input order.
    """
    edges: list[EdgeResult] = []
    for snap in snapshots:
        edge_score, tags = score(snap, now)
        if edge_score <= 0:
            continue
        edges.append(
            EdgeResult(
                **snap.model_dump(),
                edge_score=edge_score,
                edge_type=tags,
                detected_at=now,
            )
        )
    return sorted(edges, key=lambda e: e.edge_score, reverse=True)


def parse_snapshots(raw_markets: Iterable[Any]) -> list[MarketSnapshot]:
    """Parse raw markets, silently skipping those without a Yes/No pair."""
    snapshots = []
    skipped = 0
    for raw in raw_markets:
        snap = parse_snapshot(raw)
        if snap is None:
            skipped += 1
            continue
        snapshots.append(snap)
    if skipped:
        log.debug("markets_skipped", count=skipped, reason="no_yes_no_pair")
    return snapshots


def detect_edges(raw_markets: Iterable[Any], now: datetime | None = None) -> list[EdgeResult]:
    """Return edges for raw Gamma markets, highest score first."""
    now = now or datetime.now(timezone.utc)
    return score_snapshots(parse_snapshots(raw_markets), now)
