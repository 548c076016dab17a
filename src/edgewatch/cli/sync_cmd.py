"""Sync subcommand: run, snapshots."""

from __future__ import annotations

import asyncio

import typer

from edgewatch.errors import SinkError
from edgewatch.service import EdgeService, build_sync_engine

app = typer.Typer(help="Mirror edges to the configured sink")


def _engine_or_exit(settings):
    engine = build_sync_engine(settings)
    if engine is None:
        typer.echo("Sync disabled: sink not configured.", err=True)
        raise typer.Exit(1)
    return engine


@app.command("run")
def run_sync(ctx: typer.Context) -> None:
    """Poll once and push the edges to the sink."""
    settings = ctx.obj["settings"]
    service = EdgeService(settings, sync_engine=_engine_or_exit(settings))

    async def _run():
        try:
            if await service.poll_once() is None:
                return None
            return await service.sync_once()
        finally:
            await service.stop()

    outcome = asyncio.run(_run())
    if outcome is None:
        typer.echo("Fetch failed; nothing synced.", err=True)
        raise typer.Exit(1)
    if not outcome.success:
        typer.echo(f"Sync failed: {outcome.reason}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Synced {outcome.rows_written} rows.")


@app.command("snapshots")
def snapshots(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", "-n", help="Rows to show"),
) -> None:
    """Show the rows currently in the sink."""
    engine = _engine_or_exit(ctx.obj["settings"])
    try:
        rows = asyncio.run(engine.recent_rows(limit))
    except SinkError as e:
        typer.echo(f"Sink unavailable: {e}", err=True)
        raise typer.Exit(1)
    for r in rows:
        typer.echo(f"  {r.edge_score:>7}  {r.price_change:>9}  {r.edge_type:<32}  {r.title[:50]}")
    typer.echo(f"Total: {len(rows)} rows")
