"""Canonical schema (Pydantic) - MarketSnapshot, EdgeResult, SyncOutcome."""

from edgewatch.models.market import EdgeResult, EdgeType, MarketSnapshot
from edgewatch.models.sync import SHEET_COLUMNS, SheetRow, SyncOutcome

__all__ = [
    "MarketSnapshot",
    "EdgeResult",
    "EdgeType",
    "SheetRow",
    "SyncOutcome",
    "SHEET_COLUMNS",
]
