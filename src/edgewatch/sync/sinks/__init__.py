"""Sink implementations and the factory that picks one from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from edgewatch.errors import ConfigurationError

if TYPE_CHECKING:
    from edgewatch.config import Settings
    from edgewatch.ingestion.base import EdgeSink


def create_sink(settings: Settings) -> EdgeSink:
    """Build the configured sink. Raises ConfigurationError when it cannot be used."""
    kind = settings.sink_kind
    if kind == "duckdb":
        from edgewatch.sync.sinks.duckdb_sink import DuckDBSink

        return DuckDBSink(settings.db_path)
    if kind == "sheets":
        if not settings.sheets_configured:
            raise ConfigurationError("Google Sheets credentials not configured")
        from edgewatch.sync.sinks.sheets import GoogleSheetsSink

        return GoogleSheetsSink.from_settings(settings)
    raise ConfigurationError(f"unknown sink: {kind}")
