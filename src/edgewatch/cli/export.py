"""Export command: local edge mirror to Parquet."""

from __future__ import annotations

import typer

from edgewatch.storage.db import get_connection, init_schema
from edgewatch.storage.export import export_edges_to_parquet

app = typer.Typer(help="Export the local DuckDB edge mirror")


@app.callback(invoke_without_command=True)
def export(
    ctx: typer.Context,
    edge_type: str | None = typer.Option(None, "--type", "-t", help="Only rows carrying this tag"),
    output: str = typer.Option("edges.parquet", "--output", "-o", help="Output path"),
) -> None:
    """Export edge_candidates to Parquet."""
    settings = ctx.obj["settings"]
    conn = get_connection(settings.db_path)
    init_schema(conn)
    try:
        count = export_edges_to_parquet(conn, output, edge_type=edge_type)
        typer.echo(f"Exported {count} edges to {output}")
    finally:
        conn.close()
