"""Graph store, its invariants and the edge-list text format."""

from graphtext.graph.errors import (
    DuplicateEdgeError,
    EdgeEndpointError,
    EdgeNotFoundError,
    GraphConfigError,
    GraphIntegrityError,
    InvalidLabelError,
    NodeExistsError,
    NodeLimitError,
    NodeNotFoundError,
    SelfLoopError,
)
from graphtext.graph.graph import Graph
from graphtext.graph.store import DictGraphStore, GraphStore
from graphtext.graph.text import (
    normalize_line,
    parse_graph_text,
    serialize_graph,
)
from graphtext.graph.validation import ValidationCheck, ValidationReport, validate_graph_data

__all__ = [
    "DictGraphStore",
    "DuplicateEdgeError",
    "EdgeEndpointError",
    "EdgeNotFoundError",
    "Graph",
    "GraphConfigError",
    "GraphIntegrityError",
    "GraphStore",
    "InvalidLabelError",
    "NodeExistsError",
    "NodeLimitError",
    "NodeNotFoundError",
    "SelfLoopError",
    "ValidationCheck",
    "ValidationReport",
    "normalize_line",
    "parse_graph_text",
    "serialize_graph",
    "validate_graph_data",
]
