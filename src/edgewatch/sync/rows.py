"""EdgeResult -> SheetRow formatting."""

from __future__ import annotations

from datetime import datetime

from edgewatch.models import EdgeResult, SheetRow

POLYMARKET_EVENT_URL = "https://polymarket.com/event/{}"


def market_url(edge: EdgeResult) -> str:
    key = edge.slug or edge.id
    return POLYMARKET_EVENT_URL.format(key) if key else ""


def build_row(edge: EdgeResult, price_change: str, updated_at: datetime) -> SheetRow:
    return SheetRow(
        title=edge.title or "Untitled",
        yes_price=f"{edge.yes_price:.4f}",
        no_price=f"{edge.no_price:.4f}",
        volume_24h=f"{edge.volume_24h:.2f}",
        liquidity=f"{edge.liquidity:.2f}",
        edge_score=f"{edge.edge_score:.2f}",
        edge_type=edge.edge_type_label,
        last_updated=updated_at.isoformat(),
        price_change=price_change,
        market_id=edge.id,
        url=market_url(edge),
    )
