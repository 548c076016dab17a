"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Local mirror of the live edge sheet (rewritten on every sync)
CREATE TABLE IF NOT EXISTS edge_candidates (
    position        INTEGER PRIMARY KEY,
    market_title    VARCHAR,
    yes_price       VARCHAR,
    no_price        VARCHAR,
    volume_24h      VARCHAR,
    liquidity       VARCHAR,
    edge_score      VARCHAR,
    edge_type       VARCHAR,
    last_updated    VARCHAR,
    price_change    VARCHAR,
    market_id       VARCHAR,
    url             VARCHAR
);
"""

EDGE_CANDIDATE_COLUMNS = (
    "market_title",
    "yes_price",
    "no_price",
    "volume_24h",
    "liquidity",
    "edge_score",
    "edge_type",
    "last_updated",
    "price_change",
    "market_id",
    "url",
)


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager.
    ":memory:" opens an in-memory database."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
