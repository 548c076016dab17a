"""MarketSnapshot, EdgeResult, EdgeType - canonical entities."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class EdgeType(str, Enum):
    """Classification tag attached to an edge."""

    MISPRICING = "MISPRICING"
    EXTREME = "EXTREME"
    CATALYST = "CATALYST"
    VOLUME_ANOMALY = "VOLUME_ANOMALY"
    NEW_MARKET = "NEW_MARKET"


class MarketSnapshot(BaseModel):
    """Normalized view of one binary market for a single poll."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    slug: str | None = None
    created_at: datetime | None = None
    yes_price: float
    no_price: float
    volume_24h: float = Field(0.0, ge=0)
    liquidity: float = Field(0.0, ge=0)


class EdgeResult(MarketSnapshot):
    """A scored snapshot. Never mutated after creation."""

    edge_score: float = Field(..., ge=0)
    edge_type: tuple[EdgeType, ...] = ()
    detected_at: datetime

    @computed_field
    @property
    def edge_type_label(self) -> str:
        """Tags joined in detection order, or UNKNOWN when none fired."""
        return ", ".join(t.value for t in self.edge_type) or "UNKNOWN"
