"""Error taxonomy shared by the poll and sync pipelines."""

from __future__ import annotations


class EdgeWatchError(Exception):
    """Base class for all EdgeWatch errors."""


class ConfigurationError(EdgeWatchError):
    """Required configuration (e.g. sink credentials) is missing or invalid."""


class FetchError(EdgeWatchError):
    """Upstream market source unreachable, timed out or returned a malformed payload."""


class SinkError(EdgeWatchError):
    """Base class for failures talking to the external sink."""


class SinkConnectError(SinkError):
    """Could not open a handle to the sink."""


class SinkWriteError(SinkError):
    """The sink rejected or failed an overwrite."""


class RateLimitError(SinkWriteError):
    """The sink refused a write because a rate limit or quota was exceeded."""


_RATE_LIMIT_MARKERS = ("rate", "quota", "429")


def is_rate_limit_message(message: str) -> bool:
    """Heuristic used by sinks whose client libraries only expose error text."""
    lowered = (message or "").lower()
    return any(marker in lowered for marker in _RATE_LIMIT_MARKERS)
