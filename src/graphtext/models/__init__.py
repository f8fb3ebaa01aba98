"""Pydantic models for graph data exchanged with the store."""

from graphtext.models.graph import (
    DEFAULT_MAX_NODES,
    GRAPH_TYPES,
    INDEXING_MODES,
    Edge,
    GraphData,
    GraphState,
    GraphType,
    Node,
    NodeIndexingMode,
    NodePosition,
)

__all__ = [
    "DEFAULT_MAX_NODES",
    "GRAPH_TYPES",
    "INDEXING_MODES",
    "Edge",
    "GraphData",
    "GraphState",
    "GraphType",
    "Node",
    "NodeIndexingMode",
    "NodePosition",
]
