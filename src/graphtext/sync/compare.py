"""Structural comparison of two graphs.

Where the text engine works from a line edit, comparison works from two
complete graphs: it matches nodes by label and edges by their (matched)
endpoints, then reports what must change to turn the original into the
edited graph. The resulting change list can be fed to
:func:`graphtext.sync.apply.apply_changes`.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graphtext.observability.logging import get_logger
from graphtext.sync.changes import (
    ChangeOperation,
    ChangeType,
    edge_add,
    edge_remove,
    edge_weight_change,
    node_add,
    node_remove,
)

if TYPE_CHECKING:
    from graphtext.graph.graph import Graph
    from graphtext.models.graph import Edge, Node

log = get_logger(__name__)

WEIGHT_MISMATCH_CONFIDENCE = 0.8


@dataclass
class ComparisonOptions:
    """Which graph property differences to report besides structure."""

    include_graph_type_changes: bool = True
    include_indexing_mode_changes: bool = True
    include_max_nodes_changes: bool = True


@dataclass
class NodeMatch:
    original: Node
    edited: Node
    confidence: float = 1.0

    @property
    def is_exact(self) -> bool:
        return self.confidence == 1.0


@dataclass
class EdgeMatch:
    """An original edge paired with its counterpart in the edited graph.

    Attributes:
        original: Edge from the original graph.
        edited: Edge from the edited graph.
        confidence: 1.0 for identical weights, lower when only endpoints agree.
        reversed: True when matched in the opposite orientation
            (undirected graphs only).
    """

    original: Edge
    edited: Edge
    confidence: float = 1.0
    reversed: bool = False

    @property
    def weight_changed(self) -> bool:
        return self.original.weight != self.edited.weight

    @property
    def is_exact(self) -> bool:
        """True when endpoints and weight agree."""
        return not self.weight_changed


@dataclass
class GraphMatches:
    """Pairing of original and edited entities, plus what was left over."""

    nodes: list[NodeMatch] = field(default_factory=list)
    edges: list[EdgeMatch] = field(default_factory=list)
    unmatched_original_nodes: list[Node] = field(default_factory=list)
    unmatched_edited_nodes: list[Node] = field(default_factory=list)
    unmatched_original_edges: list[Edge] = field(default_factory=list)
    unmatched_edited_edges: list[Edge] = field(default_factory=list)


@dataclass
class DiffSummary:
    nodes_added: int = 0
    nodes_removed: int = 0
    nodes_relabeled: int = 0
    edges_added: int = 0
    edges_removed: int = 0
    edges_reweighted: int = 0
    properties_changed: int = 0

    @property
    def total(self) -> int:
        return (
            self.nodes_added
            + self.nodes_removed
            + self.nodes_relabeled
            + self.edges_added
            + self.edges_removed
            + self.edges_reweighted
            + self.properties_changed
        )


@dataclass
class GraphDiffResult:
    """Result of comparing two graphs.

    Attributes:
        changes: Structural changes in applicable order.
        property_changes: Graph type, indexing mode and node limit changes.
        matches: How entities were paired.
        summary: Change counts.
    """

    changes: list[ChangeOperation]
    property_changes: list[ChangeOperation]
    matches: GraphMatches
    summary: DiffSummary

    @property
    def has_changes(self) -> bool:
        return bool(self.changes or self.property_changes)

    def all_changes(self) -> list[ChangeOperation]:
        """Structural and property changes in an order that applies cleanly.

        Loosening changes (switching to directed, raising the node limit) go
        first; the rest go after the structural changes.
        """
        before: list[ChangeOperation] = []
        after: list[ChangeOperation] = []
        for change in self.property_changes:
            loosening = (
                change.type == ChangeType.GRAPH_TYPE_CHANGE and change.new_value == "directed"
            ) or (
                change.type == ChangeType.MAX_NODES_CHANGE
                and change.new_value > change.original_value
            )
            (before if loosening else after).append(change)
        return before + self.changes + after


def find_node_matches(
    original_nodes: list[Node], edited_nodes: list[Node]
) -> tuple[list[NodeMatch], list[Node], list[Node]]:
    """Pair nodes with identical labels.

    Returns:
        Tuple of (matches, unmatched original nodes, unmatched edited nodes).
    """
    edited_by_label = {node.label: node for node in edited_nodes}
    matches: list[NodeMatch] = []
    unmatched_original: list[Node] = []
    for node in original_nodes:
        counterpart = edited_by_label.pop(node.label, None)
        if counterpart is None:
            unmatched_original.append(node)
        else:
            matches.append(NodeMatch(node, counterpart))
    unmatched_edited = [node for node in edited_nodes if node.label in edited_by_label]
    return matches, unmatched_original, unmatched_edited


def _edge_match_confidence(original: Edge, edited: Edge, *, directed: bool) -> tuple[float, bool]:
    """Return (confidence, reversed) for a candidate pair; confidence 0 means no match."""
    if (original.source, original.target) == (edited.source, edited.target):
        is_reversed = False
    elif not directed and (original.source, original.target) == (edited.target, edited.source):
        is_reversed = True
    else:
        return 0.0, False
    confidence = 1.0 if original.weight == edited.weight else WEIGHT_MISMATCH_CONFIDENCE
    return confidence, is_reversed


def find_edge_matches(
    original_edges: list[Edge],
    edited_edges: list[Edge],
    *,
    directed: bool,
) -> tuple[list[EdgeMatch], list[Edge], list[Edge]]:
    """Pair edges whose endpoints correspond.

    Each original edge takes the best remaining edited edge: an exact weight
    match beats a weight mismatch, and a same-orientation match beats a
    reversed one. Reversed matches are only considered for undirected graphs.

    Returns:
        Tuple of (matches, unmatched original edges, unmatched edited edges).
    """
    remaining = list(range(len(edited_edges)))
    matches: list[EdgeMatch] = []
    unmatched_original: list[Edge] = []

    for original in original_edges:
        best: tuple[float, bool, int] | None = None
        for index in remaining:
            confidence, is_reversed = _edge_match_confidence(
                original, edited_edges[index], directed=directed
            )
            if confidence == 0.0:
                continue
            if best is None or (confidence, not is_reversed) > (best[0], not best[1]):
                best = (confidence, is_reversed, index)
        if best is None:
            unmatched_original.append(original)
            continue
        confidence, is_reversed, index = best
        remaining.remove(index)
        matches.append(EdgeMatch(original, edited_edges[index], confidence, is_reversed))

    unmatched_edited = [edited_edges[index] for index in remaining]
    return matches, unmatched_original, unmatched_edited


def _property_changes(
    original: Graph, edited: Graph, options: ComparisonOptions
) -> list[ChangeOperation]:
    changes: list[ChangeOperation] = []
    if options.include_graph_type_changes and original.get_type() != edited.get_type():
        changes.append(
            ChangeOperation(
                type=ChangeType.GRAPH_TYPE_CHANGE,
                description=(
                    f"Graph type changed from {original.get_type()} to {edited.get_type()}"
                ),
                original_value=original.get_type(),
                new_value=edited.get_type(),
            )
        )
    original_mode = original.get_node_indexing_mode()
    edited_mode = edited.get_node_indexing_mode()
    if options.include_indexing_mode_changes and original_mode != edited_mode:
        changes.append(
            ChangeOperation(
                type=ChangeType.INDEXING_MODE_CHANGE,
                description=f"Node indexing mode changed from {original_mode} to {edited_mode}",
                original_value=original_mode,
                new_value=edited_mode,
            )
        )
    if options.include_max_nodes_changes and original.get_max_nodes() != edited.get_max_nodes():
        changes.append(
            ChangeOperation(
                type=ChangeType.MAX_NODES_CHANGE,
                description=(
                    f"Maximum nodes changed from {original.get_max_nodes()} "
                    f"to {edited.get_max_nodes()}"
                ),
                original_value=original.get_max_nodes(),
                new_value=edited.get_max_nodes(),
            )
        )
    return changes


def compare_graphs(
    original: Graph,
    edited: Graph,
    options: ComparisonOptions | None = None,
) -> GraphDiffResult:
    """Compute the changes that turn *original* into *edited*.

    Structural changes are ordered so they apply cleanly: weight changes,
    edge removals, node removals, node additions, then edge additions.
    Edges are matched as directed only when both graphs are directed.

    Args:
        original: Graph before the edit.
        edited: Graph after the edit.
        options: Which property changes to report. Defaults to all.

    Returns:
        GraphDiffResult with changes, matches and summary counts.
    """
    options = options or ComparisonOptions()
    directed = original.is_directed() and edited.is_directed()

    node_matches, removed_nodes, added_nodes = find_node_matches(
        original.get_nodes(), edited.get_nodes()
    )
    edge_matches, removed_edges, added_edges = find_edge_matches(
        original.get_edges(), edited.get_edges(), directed=directed
    )
    matches = GraphMatches(
        nodes=node_matches,
        edges=edge_matches,
        unmatched_original_nodes=removed_nodes,
        unmatched_edited_nodes=added_nodes,
        unmatched_original_edges=removed_edges,
        unmatched_edited_edges=added_edges,
    )

    changes: list[ChangeOperation] = []
    changes.extend(
        edge_weight_change(match.original, match.edited.weight)
        for match in edge_matches
        if match.weight_changed
    )
    changes.extend(edge_remove(edge) for edge in removed_edges)
    changes.extend(node_remove(node) for node in removed_nodes)
    changes.extend(node_add(node.label) for node in added_nodes)
    changes.extend(edge_add(edge) for edge in added_edges)

    property_changes = _property_changes(original, edited, options)

    counts = Counter(change.type for change in changes)
    summary = DiffSummary(
        nodes_added=counts[ChangeType.NODE_ADD],
        nodes_removed=counts[ChangeType.NODE_REMOVE],
        nodes_relabeled=counts[ChangeType.NODE_LABEL_CHANGE],
        edges_added=counts[ChangeType.EDGE_ADD],
        edges_removed=counts[ChangeType.EDGE_REMOVE],
        edges_reweighted=counts[ChangeType.EDGE_WEIGHT_CHANGE],
        properties_changed=len(property_changes),
    )
    log.debug("graphs_compared", changes=summary.total)
    return GraphDiffResult(changes, property_changes, matches, summary)
