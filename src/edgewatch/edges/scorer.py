"""Edge scoring heuristic: five independent signals summed into one score.

Everything here is pure. The only time-dependent signal (new market) takes
`now` explicitly so callers and tests control the clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from edgewatch.models import EdgeType, MarketSnapshot

MISPRICING_THRESHOLD = 0.02
EXTREME_HIGH = 0.95
EXTREME_LOW = 0.05
EXTREME_POINTS = 15.0
VOLUME_ANOMALY_MIN_VOLUME = 50_000.0
VOLUME_ANOMALY_MIN_LIQUIDITY = 10_000.0
VOLUME_ANOMALY_RATIO = 5.0
VOLUME_ANOMALY_POINTS = 20.0
CATALYST_MAX_LIQUIDITY = 5_000.0
CATALYST_MIN_VOLUME = 10_000.0
CATALYST_POINTS = 25.0
NEW_MARKET_WINDOW = timedelta(hours=48)
NEW_MARKET_POINTS = 10.0


def pricing_error(yes_price: float, no_price: float) -> float:
    """Deviation of yes + no from 1.0."""
    return abs(1.0 - (yes_price + no_price))


def _is_extreme(yes_price: float) -> bool:
    return yes_price > EXTREME_HIGH or yes_price < EXTREME_LOW


def _is_catalyst(volume_24h: float, liquidity: float) -> bool:
    return liquidity < CATALYST_MAX_LIQUIDITY and volume_24h > CATALYST_MIN_VOLUME


def _turnover_exceeds(volume_24h: float, liquidity: float) -> bool:
    if liquidity <= 0:
        return False
    return volume_24h / liquidity > VOLUME_ANOMALY_RATIO


def _is_new(created_at: datetime | None, now: datetime) -> bool:
    if created_at is None:
        return False
    return now - created_at < NEW_MARKET_WINDOW


def calculate_edge_score(snapshot: MarketSnapshot, now: datetime) -> float:
    """Sum the point contributions of every signal the snapshot triggers."""
    score = 0.0
    error = pricing_error(snapshot.yes_price, snapshot.no_price)
    if error > MISPRICING_THRESHOLD:
        score += error * 100
    if _is_extreme(snapshot.yes_price):
        score += EXTREME_POINTS
    if (
        snapshot.volume_24h > VOLUME_ANOMALY_MIN_VOLUME
        and snapshot.liquidity > VOLUME_ANOMALY_MIN_LIQUIDITY
        and _turnover_exceeds(snapshot.volume_24h, snapshot.liquidity)
    ):
        score += VOLUME_ANOMALY_POINTS
    if _is_catalyst(snapshot.volume_24h, snapshot.liquidity):
        score += CATALYST_POINTS
    if _is_new(snapshot.created_at, now):
        score += NEW_MARKET_POINTS
    return score


def determine_edge_type(snapshot: MarketSnapshot, now: datetime) -> tuple[EdgeType, ...]:
    """Tags in emission order.

    Catalyst is tagged before volume anomaly even though it is scored after.
    The volume anomaly tag has no 50k volume floor, unlike its score
    contribution, so the tag can fire without the 20 points.
    """
    tags: list[EdgeType] = []
    if pricing_error(snapshot.yes_price, snapshot.no_price) > MISPRICING_THRESHOLD:
        tags.append(EdgeType.MISPRICING)
    if _is_extreme(snapshot.yes_price):
        tags.append(EdgeType.EXTREME)
    if _is_catalyst(snapshot.volume_24h, snapshot.liquidity):
        tags.append(EdgeType.CATALYST)
    if snapshot.liquidity > VOLUME_ANOMALY_MIN_LIQUIDITY and _turnover_exceeds(
        snapshot.volume_24h, snapshot.liquidity
    ):
        tags.append(EdgeType.VOLUME_ANOMALY)
    if _is_new(snapshot.created_at, now):
        tags.append(EdgeType.NEW_MARKET)
    return tuple(tags)


def score(snapshot: MarketSnapshot, now: datetime) -> tuple[float, tuple[EdgeType, ...]]:
    """Return (edge_score, tags) for one snapshot."""
    return calculate_edge_score(snapshot, now), determine_edge_type(snapshot, now)
