"""Polymarket Gamma API client - raw market fetch and snapshot parsing."""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from edgewatch.errors import FetchError
from edgewatch.models import MarketSnapshot

log = structlog.get_logger(__name__)

GAMMA_API_BASE = "https://gamma-api.polymarket.com"


def _float_or_none(s: Any) -> float | None:
    """Parse a numeric field; None when absent, unparseable or not finite."""
    if s is None or isinstance(s, bool):
        return None
    try:
        value = float(s)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _non_negative(s: Any) -> float:
    value = _float_or_none(s)
    if value is None or value < 0:
        return 0.0
    return value


def _json_list(value: Any) -> list[Any]:
    """Gamma encodes some list fields as JSON strings."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value:
        try:
            decoded = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return []
        return decoded if isinstance(decoded, list) else []
    return []


def _outcome_prices(raw: dict[str, Any]) -> dict[str, Any]:
    """Map outcome name -> raw price from either `tokens` or `outcomes`/`outcomePrices`."""
    tokens = raw.get("tokens")
    if isinstance(tokens, list) and tokens:
        prices: dict[str, Any] = {}
        for t in tokens:
            if isinstance(t, dict) and "outcome" in t:
                # First token per outcome wins
                prices.setdefault(str(t.get("outcome")), t.get("price"))
        return prices
    names = _json_list(raw.get("outcomes"))
    values = _json_list(raw.get("outcomePrices"))
    prices = {}
    for name, price in zip(names, values):
        prices.setdefault(str(name), price)
    return prices


def _parse_created_at(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def parse_snapshot(raw: dict[str, Any]) -> MarketSnapshot | None:
    """Convert a Gamma market object to a MarketSnapshot.

    Returns None when the market has no resolvable Yes/No pair (non-binary
    markets, missing token, unparseable price). That is an expected skip, not
    an error. Volume and liquidity default to 0 when absent or malformed.
    """
    if not isinstance(raw, dict):
        return None
    prices = _outcome_prices(raw)
    if "Yes" not in prices or "No" not in prices:
        return None
    yes_price = _float_or_none(prices["Yes"])
    no_price = _float_or_none(prices["No"])
    if yes_price is None or no_price is None:
        return None
    market_id = str(raw.get("id") or raw.get("conditionId") or raw.get("condition_id") or "")
    return MarketSnapshot(
        id=market_id,
        title=str(raw.get("question") or raw.get("title") or ""),
        slug=raw.get("slug") or None,
        created_at=_parse_created_at(raw.get("createdAt")),
        yes_price=yes_price,
        no_price=no_price,
        volume_24h=_non_negative(raw.get("volume24hr")),
        liquidity=_non_negative(raw.get("liquidity") if raw.get("liquidity") is not None else raw.get("liquidityNum")),
    )


class GammaClient:
    """Async market source backed by the Gamma `/markets` endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        limit: int = 100,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base = (base_url or GAMMA_API_BASE).rstrip("/")
        self.url = base if base.endswith("/markets") else base + "/markets"
        self.limit = limit
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def fetch_raw_markets(self) -> list[dict[str, Any]]:
        """Fetch active markets. Any transport, status or payload problem raises FetchError."""
        params = {"limit": self.limit, "active": "true", "closed": "false"}
        try:
            resp = await self._get_client().get(self.url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            raise FetchError(f"timeout fetching {self.url}") from e
        except httpx.HTTPError as e:
            raise FetchError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise FetchError(f"invalid JSON from {self.url}") from e
        if isinstance(data, dict):
            data = data.get("data", data)
        if not isinstance(data, list):
            raise FetchError(f"unexpected payload type {type(data).__name__}")
        log.debug("gamma_fetched", url=self.url, count=len(data))
        return data

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
