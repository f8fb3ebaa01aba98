"""Pydantic models for graph data.

These models are the shapes handed across the store boundary: the store keeps
its own instances internally and only ever returns deep copies, so a caller
holding a ``GraphData`` snapshot cannot bypass the store's invariant checks.

Terminology:
- label: the node's display name and its unique identity key
- indexing mode: scheme for auto-generated labels ("0-indexed", "1-indexed", "custom")
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

GraphType = Literal["directed", "undirected"]
NodeIndexingMode = Literal["0-indexed", "1-indexed", "custom"]

GRAPH_TYPES: tuple[GraphType, ...] = ("directed", "undirected")
INDEXING_MODES: tuple[NodeIndexingMode, ...] = ("0-indexed", "1-indexed", "custom")

DEFAULT_MAX_NODES = 1000


class Node(BaseModel):
    """A graph node.

    Attributes:
        label: Unique identity within one graph; also the display name.
        x: Horizontal position, written only by the layout collaborator.
        y: Vertical position, written only by the layout collaborator.
    """

    label: str = Field(min_length=1, description="Unique node label")
    x: float | None = Field(default=None, description="Layout x coordinate")
    y: float | None = Field(default=None, description="Layout y coordinate")


class Edge(BaseModel):
    """An edge between two node labels.

    Identity is the (source, target) pair. For undirected graphs the pair is
    matched in either orientation, but only the orientation given at creation
    is stored.
    """

    source: str = Field(min_length=1, description="Source node label")
    target: str = Field(min_length=1, description="Target node label")
    weight: str | None = Field(default=None, description="Optional edge weight, kept as text")

    def connects(self, source: str, target: str, *, directed: bool) -> bool:
        """Check whether this edge joins *source* and *target*."""
        if self.source == source and self.target == target:
            return True
        return not directed and self.source == target and self.target == source

    def touches(self, label: str) -> bool:
        """Check whether *label* is one of this edge's endpoints."""
        return label in (self.source, self.target)


class NodePosition(BaseModel):
    """A layout position reported back by the rendering collaborator."""

    label: str
    x: float
    y: float


class GraphData(BaseModel):
    """Complete graph contents plus its configuration.

    Node order is significant: it drives auto-generated labels, the relabel
    pass and text serialization order.
    """

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    type: GraphType = "undirected"
    node_indexing_mode: NodeIndexingMode = "0-indexed"
    max_nodes: int = Field(default=DEFAULT_MAX_NODES, ge=1)

    @property
    def directed(self) -> bool:
        return self.type == "directed"

    def node_labels(self) -> list[str]:
        return [node.label for node in self.nodes]


class GraphState(BaseModel):
    """Graph data with a modified flag and the last operation's error message."""

    data: GraphData = Field(default_factory=GraphData)
    is_modified: bool = False
    error: str | None = None
