"""FastAPI server: REST surface over the edge cache plus WebSocket fan-out."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edgewatch.api.schemas import (
    EdgesResponse,
    ErrorResponse,
    HealthResponse,
    MarketsResponse,
    SnapshotsResponse,
    SyncStatusResponse,
)
from edgewatch.config import get_settings
from edgewatch.errors import SinkError
from edgewatch.service import EdgeService

log = structlog.get_logger(__name__)

MARKETS_UPDATE = "markets-update"

# Set by run_api() so the module-level app picks up the chosen profile.
_config_profile: str | None = None


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def _iso(ts: Any) -> str | None:
    return ts.isoformat() if ts else None


def create_app(service: EdgeService | None = None, run_timers: bool = True) -> FastAPI:
    """Build the app. With run_timers=False the service is served as-is (tests, one-shot use)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        svc = service or EdgeService(get_settings(_config_profile))
        app.state.service = svc
        if run_timers:
            await svc.start()
        yield
        if run_timers:
            await svc.stop()

    app = FastAPI(title="EdgeWatch API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    def _service(request: Request) -> EdgeService:
        return request.app.state.service

    @app.get("/api/health", response_model=HealthResponse)
    def health(request: Request) -> HealthResponse:
        return HealthResponse(**_service(request).health())

    @app.get("/api/markets", response_model=MarketsResponse)
    def markets(request: Request) -> MarketsResponse:
        svc = _service(request)
        return MarketsResponse(
            markets=svc.poller.get_markets(),
            last_update=_iso(svc.get_last_poll_timestamp()),
        )

    @app.get("/api/edges", response_model=EdgesResponse)
    def edges(request: Request, limit: int = Query(50, ge=0, le=1000)) -> EdgesResponse:
        """Current edges, highest score first."""
        svc = _service(request)
        all_edges = svc.get_latest_edges()
        return EdgesResponse(
            edges=all_edges[:limit],
            total=len(all_edges),
            last_update=_iso(svc.get_last_poll_timestamp()),
        )

    @app.get(
        "/api/sync/status",
        response_model=SyncStatusResponse,
        responses={404: {"description": "Sync disabled", "model": ErrorResponse}},
    )
    def sync_status(request: Request):
        svc = _service(request)
        if svc.sync_engine is None:
            return _error_json("sync_disabled", "Sheet sync is not configured")
        return SyncStatusResponse(**svc.sync_engine.status())

    @app.get(
        "/api/sync/snapshots",
        response_model=SnapshotsResponse,
        responses={
            404: {"description": "Sync disabled", "model": ErrorResponse},
            502: {"description": "Sink unavailable", "model": ErrorResponse},
        },
    )
    async def sync_snapshots(request: Request, limit: int = Query(10, ge=1, le=1000)):
        """Rows currently in the sink (last `limit`)."""
        svc = _service(request)
        if svc.sync_engine is None:
            return _error_json("sync_disabled", "Sheet sync is not configured")
        try:
            rows = await svc.sync_engine.recent_rows(limit)
        except SinkError as e:
            return _error_json("sink_unavailable", str(e), status_code=502)
        return SnapshotsResponse(snapshots=rows)

    @app.websocket("/ws")
    async def updates(websocket: WebSocket) -> None:
        """Push markets-update on connect and after every poll cycle."""
        await websocket.accept()
        svc: EdgeService = websocket.app.state.service

        async def send(payload: dict[str, Any]) -> None:
            await websocket.send_json({"event": MARKETS_UPDATE, "data": payload})

        if svc.broadcaster.latest is None:
            await send(svc.poller.cache.state.to_payload())
        subscription = await svc.broadcaster.subscribe(send)
        log.info("client_connected", sub_id=subscription.id)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            subscription.close()
            log.info("client_disconnected", sub_id=subscription.id)

    return app


app = create_app()


def run_api(host: str = "127.0.0.1", port: int = 3690, profile: str | None = None) -> None:
    global _config_profile
    _config_profile = profile
    import uvicorn

    uvicorn.run("edgewatch.api.main:app", host=host, port=port, reload=False)
