"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from edgewatch.models import EdgeResult, SheetRow


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    uptime: float = 0.0
    last_update: str | None = None
    last_sheets_sync: str | None = None
    markets_count: int = 0
    edges_count: int = 0
    subscribers: int = 0
    sync_enabled: bool = False


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. sync_disabled")


# --- Markets / edges ---
class MarketsResponse(BaseModel):
    markets: list[dict[str, Any]]
    last_update: str | None = None


class EdgesResponse(BaseModel):
    edges: list[EdgeResult]
    total: int
    last_update: str | None = None


# --- Sync ---
class SyncStatusResponse(BaseModel):
    connected: bool
    last_sync: str | None = None
    last_success: bool | None = None
    last_error: str | None = None
    rows_written: int = 0
    current_delay_ms: int = 0
    tracked_markets: int = 0
    top_n: int = 100


class SnapshotsResponse(BaseModel):
    snapshots: list[SheetRow]
