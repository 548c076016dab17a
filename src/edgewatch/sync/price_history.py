"""Last-synced yes price per market, used to report price change between syncs."""

from __future__ import annotations


def format_price_change(current: float, prior: float | None) -> str:
    """Percent change as "+10.00%" / "-5.00%" / "0.00%"; empty when there is no usable prior."""
    if prior is None or prior == 0:
        return ""
    change = f"{(current - prior) / prior * 100:.2f}"
    return f"+{change}%" if float(change) > 0 else f"{change}%"


class PriceHistory:
    """market_id -> last synced yes price. Entries are never removed."""

    def __init__(self) -> None:
        self._prices: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, market_id: object) -> bool:
        return market_id in self._prices

    def get(self, market_id: str) -> float | None:
        return self._prices.get(market_id)

    def record(self, market_id: str, price: float) -> str:
        """Store price and return the change against the previous value."""
        change = format_price_change(price, self._prices.get(market_id))
        self._prices[market_id] = price
        return change
