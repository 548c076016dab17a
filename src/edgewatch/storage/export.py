"""Export the mirrored edge table to Parquet."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def export_edges_to_parquet(
    conn: DuckDBPyConnection,
    output_path: str | Path,
    edge_type: str | None = None,
) -> int:
    """Export edge_candidates to a Parquet file. Optional substring filter on edge_type. Returns row count."""
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    # COPY does not take bound parameters, so the filter is inlined as a quoted literal.
    where = f" WHERE edge_type LIKE {_quote(f'%{edge_type}%')}" if edge_type else ""
    conn.execute(
        f"COPY (SELECT * FROM edge_candidates{where} ORDER BY position) TO {_quote(str(path))} (FORMAT PARQUET)"
    )
    return conn.execute(f"SELECT COUNT(*) FROM edge_candidates{where}").fetchone()[0]
