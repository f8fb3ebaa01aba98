"""Graph storage backend protocol and in-memory implementation.

The GraphStore protocol defines the low-level storage operations that Graph
delegates to. Implementations handle raw CRUD over live model instances;
Graph provides the public API with validation, the error slot and copies.

DictGraphStore keeps nodes in an insertion-ordered dict keyed by label, so
lookups are label-keyed while node order is preserved for serialization and
relabeling.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from graphtext.models.graph import Edge, Node


@runtime_checkable
class GraphStore(Protocol):
    """Storage backend protocol for Graph.

    Methods raise no domain-specific errors and perform no validation:
    Graph checks invariants before calling them.
    """

    # -- Nodes -----------------------------------------------------------------

    def get_node(self, label: str) -> Node | None:
        """Get the live node for *label*, or None if not found."""
        ...

    def has_node(self, label: str) -> bool:
        """Check whether a node exists."""
        ...

    def append_node(self, node: Node) -> None:
        """Append a node at the end of the node order."""
        ...

    def delete_node(self, label: str) -> None:
        """Delete a node. No cascade: caller handles edges first."""
        ...

    def nodes(self) -> list[Node]:
        """Return live nodes in insertion order."""
        ...

    def all_labels(self) -> list[str]:
        """Return all labels in insertion order."""
        ...

    def node_count(self) -> int:
        """Return total number of nodes."""
        ...

    def relabel(self, mapping: dict[str, str]) -> None:
        """Rename nodes and edge endpoints in one pass using *mapping*."""
        ...

    # -- Edges -----------------------------------------------------------------

    def add_edge(self, edge: Edge) -> None:
        """Append an edge (no validation)."""
        ...

    def edges(self) -> list[Edge]:
        """Return live edges in insertion order."""
        ...

    def find_edges(self, source: str, target: str, *, directed: bool) -> list[Edge]:
        """Return edges joining *source* and *target* under the direction rule."""
        ...

    def edges_referencing(self, label: str) -> list[Edge]:
        """Return all edges where *label* is an endpoint."""
        ...

    def remove_edges(self, predicate: Callable[[Edge], bool]) -> int:
        """Remove every edge matching *predicate*. Return how many were removed."""
        ...

    def edge_count(self) -> int:
        """Return total number of edges."""
        ...

    # -- Copying ---------------------------------------------------------------

    def copy(self) -> GraphStore:
        """Return an independent deep copy of this store."""
        ...


class DictGraphStore:
    """In-memory graph store.

    Nodes live in an insertion-ordered ``dict[label, Node]``; edges in a list.
    """

    def __init__(
        self,
        nodes: Iterable[Node] | None = None,
        edges: Iterable[Edge] | None = None,
    ) -> None:
        self._nodes: dict[str, Node] = {node.label: node for node in nodes or ()}
        self._edges: list[Edge] = list(edges or ())

    # -- Nodes -----------------------------------------------------------------

    def get_node(self, label: str) -> Node | None:
        return self._nodes.get(label)

    def has_node(self, label: str) -> bool:
        return label in self._nodes

    def append_node(self, node: Node) -> None:
        self._nodes[node.label] = node

    def delete_node(self, label: str) -> None:
        del self._nodes[label]

    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def all_labels(self) -> list[str]:
        return list(self._nodes.keys())

    def node_count(self) -> int:
        return len(self._nodes)

    def relabel(self, mapping: dict[str, str]) -> None:
        renamed: dict[str, Node] = {}
        for label, node in self._nodes.items():
            node.label = mapping.get(label, label)
            renamed[node.label] = node
        self._nodes = renamed
        for edge in self._edges:
            edge.source = mapping.get(edge.source, edge.source)
            edge.target = mapping.get(edge.target, edge.target)

    # -- Edges -----------------------------------------------------------------

    def add_edge(self, edge: Edge) -> None:
        self._edges.append(edge)

    def edges(self) -> list[Edge]:
        return list(self._edges)

    def find_edges(self, source: str, target: str, *, directed: bool) -> list[Edge]:
        return [e for e in self._edges if e.connects(source, target, directed=directed)]

    def edges_referencing(self, label: str) -> list[Edge]:
        return [e for e in self._edges if e.touches(label)]

    def remove_edges(self, predicate: Callable[[Edge], bool]) -> int:
        before = len(self._edges)
        self._edges = [e for e in self._edges if not predicate(e)]
        return before - len(self._edges)

    def edge_count(self) -> int:
        return len(self._edges)

    # -- Copying ---------------------------------------------------------------

    def copy(self) -> DictGraphStore:
        return DictGraphStore(
            copy.deepcopy(list(self._nodes.values())),
            copy.deepcopy(self._edges),
        )
