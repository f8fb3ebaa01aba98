"""Text-to-graph reconciliation: line diff, change extraction and application."""

from graphtext.sync.apply import ApplyResult, apply_change, apply_changes, reconcile
from graphtext.sync.changes import ChangeOperation, ChangeType, extract_data_changes
from graphtext.sync.compare import (
    ComparisonOptions,
    DiffSummary,
    EdgeMatch,
    GraphDiffResult,
    GraphMatches,
    NodeMatch,
    compare_graphs,
    find_edge_matches,
    find_node_matches,
)
from graphtext.sync.line_diff import LineOperation, extract_line_operations

__all__ = [
    "ApplyResult",
    "ChangeOperation",
    "ChangeType",
    "ComparisonOptions",
    "DiffSummary",
    "EdgeMatch",
    "GraphDiffResult",
    "GraphMatches",
    "LineOperation",
    "NodeMatch",
    "apply_change",
    "apply_changes",
    "compare_graphs",
    "extract_data_changes",
    "extract_line_operations",
    "find_edge_matches",
    "find_node_matches",
    "reconcile",
]
