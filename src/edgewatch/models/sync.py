"""SyncOutcome, SheetRow - sync engine results and sink rows."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Header row of the mirrored sheet, in column order (A..K).
SHEET_COLUMNS: tuple[str, ...] = (
    "Market Title",
    "Yes Price",
    "No Price",
    "Volume 24h",
    "Liquidity",
    "Edge Score",
    "Edge Type",
    "Last Updated",
    "Price Change",
    "Market ID",
    "URL",
)


class SheetRow(BaseModel):
    """One sink row, already formatted as display strings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., alias="Market Title")
    yes_price: str = Field(..., alias="Yes Price")
    no_price: str = Field(..., alias="No Price")
    volume_24h: str = Field(..., alias="Volume 24h")
    liquidity: str = Field(..., alias="Liquidity")
    edge_score: str = Field(..., alias="Edge Score")
    edge_type: str = Field(..., alias="Edge Type")
    last_updated: str = Field(..., alias="Last Updated")
    price_change: str = Field("", alias="Price Change")
    market_id: str = Field(..., alias="Market ID")
    url: str = Field("", alias="URL")

    def as_list(self) -> list[str]:
        """Cell values in SHEET_COLUMNS order."""
        data = self.model_dump(by_alias=True)
        return [data[col] for col in SHEET_COLUMNS]

    @classmethod
    def from_list(cls, values: list[str]) -> SheetRow:
        padded = list(values) + [""] * (len(SHEET_COLUMNS) - len(values))
        return cls(**dict(zip(SHEET_COLUMNS, (str(v) for v in padded))))


class SyncOutcome(BaseModel):
    """Explicit result of one sync call; failures are values, not exceptions."""

    model_config = ConfigDict(frozen=True)

    success: bool
    rows_written: int = 0
    reason: str | None = None
    rate_limited: bool = False

    @classmethod
    def ok(cls, rows_written: int) -> SyncOutcome:
        return cls(success=True, rows_written=rows_written)

    @classmethod
    def failed(cls, reason: str, rate_limited: bool = False) -> SyncOutcome:
        return cls(success=False, reason=reason, rate_limited=rate_limited)
