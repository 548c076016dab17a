"""Scan command: one poll cycle, print the ranked edges."""

from __future__ import annotations

import asyncio
import json

import typer

from edgewatch.ingestion.polymarket.gamma import GammaClient
from edgewatch.pipeline import PollOrchestrator

app = typer.Typer(help="Fetch markets once and print detected edges")


async def _scan(settings, limit: int):
    client = GammaClient(
        base_url=settings.gamma_api_base,
        limit=settings.poll_limit,
        timeout=settings.poll_timeout_sec,
    )
    poller = PollOrchestrator(client)
    try:
        result = await poller.poll_once()
    finally:
        await client.aclose()
    return result, poller.get_latest_edges(limit)


@app.callback(invoke_without_command=True)
def scan(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", help="Max edges to print"),
    as_json: bool = typer.Option(False, "--json", help="Print edges as JSON"),
) -> None:
    settings = ctx.obj["settings"]
    result, edges = asyncio.run(_scan(settings, limit))
    if result is None:
        typer.echo("Fetch failed; see log for details.", err=True)
        raise typer.Exit(1)
    if as_json:
        typer.echo(json.dumps([e.model_dump(mode="json") for e in edges], indent=2))
        return
    for e in edges:
        title = (e.title or "Untitled")[:60]
        typer.echo(f"  {e.edge_score:7.2f}  {e.yes_price:.3f}/{e.no_price:.3f}  {e.edge_type_label:<32}  {title}")
    typer.echo(f"Scored {len(result.snapshots)} markets, {len(result.edges)} edges.")
