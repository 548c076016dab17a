"""Sync engine: top-N export with price delta tracking and rate-limit backoff."""

from edgewatch.sync.engine import SyncEngine
from edgewatch.sync.price_history import PriceHistory, format_price_change
from edgewatch.sync.rate_limit import RateLimitState

__all__ = ["PriceHistory", "RateLimitState", "SyncEngine", "format_price_change"]
