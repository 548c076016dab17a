"""Edge scoring and detection."""

from edgewatch.edges.detector import detect_edges, parse_snapshots, score_snapshots
from edgewatch.edges.scorer import calculate_edge_score, determine_edge_type, score

__all__ = [
    "calculate_edge_score",
    "determine_edge_type",
    "detect_edges",
    "parse_snapshots",
    "score",
    "score_snapshots",
]
