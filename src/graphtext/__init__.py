"""graphtext: an in-memory graph kept in sync with an editable edge-list text."""

from graphtext.config import ConfigError, EditorConfig, load_config
from graphtext.graph import Graph, parse_graph_text, serialize_graph
from graphtext.models import Edge, GraphData, GraphState, Node, NodePosition
from graphtext.observability import configure_logging, get_logger
from graphtext.sync import (
    ApplyResult,
    ChangeOperation,
    ChangeType,
    apply_changes,
    compare_graphs,
    extract_data_changes,
    extract_line_operations,
    reconcile,
)

__version__ = "0.1.0"

__all__ = [
    "ApplyResult",
    "ChangeOperation",
    "ChangeType",
    "ConfigError",
    "Edge",
    "EditorConfig",
    "Graph",
    "GraphData",
    "GraphState",
    "Node",
    "NodePosition",
    "__version__",
    "apply_changes",
    "compare_graphs",
    "configure_logging",
    "extract_data_changes",
    "extract_line_operations",
    "get_logger",
    "load_config",
    "parse_graph_text",
    "reconcile",
    "serialize_graph",
]
