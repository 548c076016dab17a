"""EdgeWatch - Polymarket edge scanner with live fan-out and sheet mirroring."""

__version__ = "0.1.0"
