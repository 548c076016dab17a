"""DuckDB sink - local edge_candidates table with the same columns as the sheet."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Sequence

import duckdb
import structlog

from edgewatch.errors import SinkConnectError, SinkWriteError
from edgewatch.models import SheetRow
from edgewatch.storage.db import EDGE_CANDIDATE_COLUMNS, get_connection, init_schema

log = structlog.get_logger(__name__)

_INSERT_SQL = (
    f"INSERT INTO edge_candidates (position, {', '.join(EDGE_CANDIDATE_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in range(len(EDGE_CANDIDATE_COLUMNS) + 1))})"
)


class DuckDBSink:
    """EdgeSink writing to DuckDB. Overwrite is one transaction: delete all, insert all."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = db_path
        self._conn = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        try:
            conn = get_connection(self.db_path)
            init_schema(conn)
        except (duckdb.Error, OSError) as e:
            raise SinkConnectError(str(e)) from e
        self._conn = conn
        log.info("duckdb_sink_connected", db_path=str(self.db_path))

    def _require_conn(self):
        if self._conn is None:
            raise SinkWriteError("duckdb sink not connected")
        return self._conn

    def overwrite(self, rows: Sequence[SheetRow]) -> None:
        conn = self._require_conn()
        params = [[i, *row.as_list()] for i, row in enumerate(rows)]
        with self._lock:
            try:
                conn.begin()
            except duckdb.Error as e:
                raise SinkWriteError(str(e)) from e
            try:
                conn.execute("DELETE FROM edge_candidates")
                if params:
                    conn.executemany(_INSERT_SQL, params)
                conn.commit()
            except duckdb.Error as e:
                conn.rollback()
                raise SinkWriteError(str(e)) from e

    def read_rows(self, limit: int = 10) -> list[SheetRow]:
        conn = self._require_conn()
        if limit <= 0:
            return []
        cols = ", ".join(EDGE_CANDIDATE_COLUMNS)
        with self._lock:
            try:
                rows = conn.execute(
                    f"SELECT {cols} FROM (SELECT * FROM edge_candidates ORDER BY position DESC LIMIT ?) "
                    "ORDER BY position",
                    [limit],
                ).fetchall()
            except duckdb.Error as e:
                raise SinkWriteError(str(e)) from e
        return [SheetRow.from_list(["" if v is None else str(v) for v in r]) for r in rows]

    @property
    def connection(self):
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
