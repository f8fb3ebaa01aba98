"""The graph store: the single source of truth for graph contents.

The graph enforces its invariants the way a database enforces constraints:
- Node labels are unique (add fails if the label exists)
- Edges need both endpoints to exist; removing a node cascades to its edges
- Undirected graphs reject self-loops
- No two edges share an endpoint pair (either orientation when undirected)
- Node count stays within ``max_nodes``

Unlike most Python APIs, mutations here never raise. Every mutation returns a
success value (the new entity, ``True``, a count) or a failure value (``None``,
``False``) and leaves a message in a single error slot, readable through
:meth:`Graph.get_error`. The slot is cleared at the start of each mutation.
This lets the reconciliation loop drive the store best-effort without
try/except around every call.

Graph delegates raw storage to a GraphStore backend (DictGraphStore by
default) and only hands out deep copies of its nodes and edges.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

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
from graphtext.graph.labels import next_auto_label, relabel_mapping
from graphtext.graph.store import DictGraphStore, GraphStore
from graphtext.graph.validation import ValidationReport, validate_graph_data
from graphtext.models.graph import (
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
from graphtext.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from graphtext.config import EditorConfig

log = get_logger(__name__)

_UPDATABLE_NODE_FIELDS = frozenset({"label", "x", "y"})


def _is_token(value: str) -> bool:
    """True if *value* survives a round-trip through the text format as one token."""
    return bool(value) and value.split() == [value]


class Graph:
    """Invariant-preserving graph store with a never-raising mutation API.

    Attributes:
        _store: The underlying storage backend.
    """

    def __init__(
        self,
        data: GraphData | Mapping[str, Any] | None = None,
        node_indexing_mode: NodeIndexingMode | None = None,
        *,
        store: GraphStore | None = None,
        position_threshold: float = 1.0,
    ) -> None:
        """Initialize graph with optional seed data.

        Args:
            data: Seed graph data (model or plain dict). Nodes and edges are
                copied, not validated; call :meth:`validate_invariants` to
                check hand-built data.
            node_indexing_mode: Overrides the indexing mode in *data*.
            store: Pre-built storage backend. If provided, nodes and edges in
                *data* are ignored (its settings still apply).
            position_threshold: Minimum movement for
                :meth:`update_node_positions` to count as a change.
        """
        seed = GraphData.model_validate(data) if data is not None else GraphData()
        if store is not None:
            self._store = store
        else:
            self._store = DictGraphStore(
                (node.model_copy(deep=True) for node in seed.nodes),
                (edge.model_copy(deep=True) for edge in seed.edges),
            )
        self._type: GraphType = seed.type
        self._indexing_mode: NodeIndexingMode = node_indexing_mode or seed.node_indexing_mode
        self._max_nodes = seed.max_nodes
        self._position_threshold = position_threshold
        self._modified = False
        self._error: str | None = None

        # Checked on the raw seed: the store collapses duplicate labels
        violations = (
            validate_graph_data(seed).errors if store is None else self.validate_invariants()
        )
        if violations:
            log.warning("seed_data_invalid", violations=violations[:5], total=len(violations))

    @classmethod
    def from_config(
        cls,
        config: EditorConfig,
        data: GraphData | Mapping[str, Any] | None = None,
    ) -> Graph:
        """Create a graph whose settings come from an EditorConfig.

        Args:
            config: Editor configuration.
            data: Optional seed nodes and edges; its own settings are replaced.

        Returns:
            New Graph instance.
        """
        seed = GraphData.model_validate(data) if data is not None else GraphData()
        seed = seed.model_copy(
            update={
                "type": config.graph_type,
                "node_indexing_mode": config.node_indexing_mode,
                "max_nodes": config.max_nodes,
            }
        )
        return cls(seed, position_threshold=config.position_threshold)

    # -------------------------------------------------------------------------
    # State and error slot
    # -------------------------------------------------------------------------

    def get_state(self) -> GraphState:
        """Return a snapshot of data, modified flag and error message."""
        return GraphState(data=self.get_data(), is_modified=self._modified, error=self._error)

    def get_data(self) -> GraphData:
        """Return an immutable-by-convention snapshot (deep copy) of the graph."""
        return GraphData(
            nodes=self.get_nodes(),
            edges=self.get_edges(),
            type=self._type,
            node_indexing_mode=self._indexing_mode,
            max_nodes=self._max_nodes,
        )

    def get_error(self) -> str | None:
        """Return the last mutation's failure reason, or None."""
        return self._error

    def clear_error(self) -> None:
        self._error = None

    def is_modified(self) -> bool:
        return self._modified

    def _mark_modified(self) -> None:
        self._modified = True

    def _fail(self, error: GraphIntegrityError) -> None:
        self._error = str(error)
        log.debug("mutation_rejected", error=self._error, error_type=type(error).__name__)

    # -------------------------------------------------------------------------
    # Graph settings
    # -------------------------------------------------------------------------

    def get_type(self) -> GraphType:
        return self._type

    def is_directed(self) -> bool:
        return self._type == "directed"

    def is_undirected(self) -> bool:
        return self._type == "undirected"

    def get_node_indexing_mode(self) -> NodeIndexingMode:
        return self._indexing_mode

    def get_max_nodes(self) -> int:
        return self._max_nodes

    def set_type(self, graph_type: GraphType) -> bool:
        """Switch between directed and undirected.

        Switching to undirected fails if existing edges contain a self-loop or
        both orientations of the same pair.

        Returns:
            True if the graph now has *graph_type*, False on rejection.
        """
        self.clear_error()
        try:
            if graph_type not in GRAPH_TYPES:
                raise GraphConfigError("set graph type", f"unknown graph type '{graph_type}'")
            if graph_type == self._type:
                return True
            if graph_type == "undirected":
                self._check_undirected_compatible()
        except GraphIntegrityError as e:
            self._fail(e)
            return False

        self._type = graph_type
        self._mark_modified()
        log.debug("graph_type_changed", graph_type=graph_type)
        return True

    def _check_undirected_compatible(self) -> None:
        seen: set[tuple[str, str]] = set()
        for edge in self._store.edges():
            if edge.source == edge.target:
                raise GraphConfigError(
                    "set graph type",
                    f"self-loop on '{edge.source}' is not allowed in undirected graphs",
                )
            pair = (min(edge.source, edge.target), max(edge.source, edge.target))
            if pair in seen:
                raise GraphConfigError(
                    "set graph type",
                    f"edges '{edge.source} {edge.target}' and '{edge.target} {edge.source}' "
                    "would become duplicates",
                )
            seen.add(pair)

    def set_node_indexing_mode(self, mode: NodeIndexingMode) -> bool:
        """Change the indexing mode and relabel every node.

        Each node's label is regenerated from its position in node order, and
        every edge endpoint is rewritten to the new labels in the same pass.

        Returns:
            True if the mode is now *mode*, False if *mode* is unknown.
        """
        self.clear_error()
        if mode not in INDEXING_MODES:
            self._fail(GraphConfigError("set indexing mode", f"unknown indexing mode '{mode}'"))
            return False
        if mode == self._indexing_mode:
            return True

        self._indexing_mode = mode
        mapping = relabel_mapping(self._store.all_labels(), mode)
        self._store.relabel(mapping)
        self._mark_modified()
        log.debug("nodes_relabeled", mode=mode, count=len(mapping))
        return True

    def set_max_nodes(self, max_nodes: int) -> bool:
        """Change the node limit. Fails below 1 or below the current node count."""
        self.clear_error()
        if max_nodes < 1:
            self._fail(GraphConfigError("set max nodes", "limit must be at least 1"))
            return False
        if max_nodes < self._store.node_count():
            self._fail(
                GraphConfigError(
                    "set max nodes",
                    f"graph already has {self._store.node_count()} nodes",
                )
            )
            return False
        if max_nodes != self._max_nodes:
            self._max_nodes = max_nodes
            self._mark_modified()
        return True

    def get_next_auto_label(self) -> str:
        """Return the label a UI-created node would receive next."""
        return next_auto_label(self._store.all_labels(), self._indexing_mode)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Remove all nodes and edges, keeping settings and the storage backend."""
        self._store.remove_edges(lambda e: True)
        for label in self._store.all_labels():
            self._store.delete_node(label)
        self._modified = False
        self._error = None

    def clone(self) -> Graph:
        """Return an independent deep copy, including modified flag and error."""
        cloned = Graph(
            GraphData(
                type=self._type,
                node_indexing_mode=self._indexing_mode,
                max_nodes=self._max_nodes,
            ),
            store=self._store.copy(),
            position_threshold=self._position_threshold,
        )
        cloned._modified = self._modified
        cloned._error = self._error
        return cloned

    # -------------------------------------------------------------------------
    # Node Operations
    # -------------------------------------------------------------------------

    def add_node(self, label: str, x: float | None = None, y: float | None = None) -> Node | None:
        """Add a node at the end of node order.

        Returns:
            Copy of the new node, or None if the label is invalid or taken,
            or the node limit is reached.
        """
        self.clear_error()
        try:
            if self._store.node_count() >= self._max_nodes:
                raise NodeLimitError(self._max_nodes)
            if not _is_token(label):
                raise InvalidLabelError(label, action="add node")
            if self._store.has_node(label):
                raise NodeExistsError(label, action="add node")
        except GraphIntegrityError as e:
            self._fail(e)
            return None

        node = Node(label=label, x=x, y=y)
        self._store.append_node(node)
        self._mark_modified()
        return node.model_copy(deep=True)

    def add_node_with_auto_label(
        self, x: float | None = None, y: float | None = None
    ) -> Node | None:
        """Add a node labelled by the current indexing mode."""
        return self.add_node(self.get_next_auto_label(), x, y)

    def remove_node(self, label: str) -> bool:
        """Remove a node and every edge touching it."""
        self.clear_error()
        if not self._store.has_node(label):
            self._fail(
                NodeNotFoundError(label, available=self._store.all_labels(), action="remove node")
            )
            return False

        removed_edges = self._store.remove_edges(lambda e: e.touches(label))
        self._store.delete_node(label)
        self._mark_modified()
        if removed_edges:
            log.debug("node_removed_cascade", label=label, edges=removed_edges)
        return True

    def update_node(self, node_label: str, **updates: Any) -> Node | None:
        """Update an existing node's label and/or position.

        A label change is applied in place, so edges pointing at the node
        follow the rename.

        Args:
            node_label: Label of the node to update.
            **updates: Any of ``label``, ``x``, ``y``.

        Returns:
            Copy of the updated node, or None on failure.
        """
        self.clear_error()
        node = self._store.get_node(node_label)
        if node is None:
            self._fail(
                NodeNotFoundError(
                    node_label, available=self._store.all_labels(), action="update node"
                )
            )
            return None

        new_label = updates.get("label")
        try:
            unknown = set(updates) - _UPDATABLE_NODE_FIELDS
            if unknown:
                raise GraphConfigError(
                    "update node", f"unknown field(s): {', '.join(sorted(unknown))}"
                )
            if new_label is not None and new_label != node_label:
                if not _is_token(new_label):
                    raise InvalidLabelError(new_label, action="update node")
                if self._store.has_node(new_label):
                    raise NodeExistsError(new_label, action="update node")
        except GraphIntegrityError as e:
            self._fail(e)
            return None

        if new_label is not None and new_label != node_label:
            self._store.relabel({node_label: new_label})
        if "x" in updates:
            node.x = updates["x"]
        if "y" in updates:
            node.y = updates["y"]
        self._mark_modified()
        return node.model_copy(deep=True)

    def get_node(self, label: str) -> Node | None:
        """Return a copy of the node with *label*, or None."""
        node = self._store.get_node(label)
        return node.model_copy(deep=True) if node is not None else None

    def get_nodes(self) -> list[Node]:
        """Return copies of all nodes in node order."""
        return [node.model_copy(deep=True) for node in self._store.nodes()]

    def get_node_labels(self) -> list[str]:
        return self._store.all_labels()

    def has_node(self, label: str) -> bool:
        return self._store.has_node(label)

    def node_count(self) -> int:
        return self._store.node_count()

    def degree(self, label: str) -> int:
        """Number of edges touching *label* (a self-loop counts once)."""
        return len(self._store.edges_referencing(label))

    def neighbors(self, label: str) -> list[str]:
        """Labels adjacent to *label* through any edge, in edge order."""
        result: list[str] = []
        for edge in self._store.edges_referencing(label):
            other = edge.target if edge.source == label else edge.source
            if other not in result:
                result.append(other)
        return result

    # -------------------------------------------------------------------------
    # Positions (written by the layout collaborator)
    # -------------------------------------------------------------------------

    def update_node_position(self, label: str, x: float, y: float) -> bool:
        self.clear_error()
        node = self._store.get_node(label)
        if node is None:
            self._fail(
                NodeNotFoundError(
                    label, available=self._store.all_labels(), action="update node position"
                )
            )
            return False
        node.x = x
        node.y = y
        self._mark_modified()
        return True

    def update_node_positions(
        self, positions: Iterable[NodePosition | Mapping[str, Any]]
    ) -> bool:
        """Apply a batch of layout positions.

        Unknown labels and malformed entries are skipped. Movements no larger
        than the position threshold are ignored.

        Returns:
            True if at least one node moved.
        """
        changed = False
        for raw in positions:
            try:
                position = (
                    raw if isinstance(raw, NodePosition) else NodePosition.model_validate(raw)
                )
            except ValidationError:
                log.debug("position_skipped", entry=repr(raw))
                continue

            node = self._store.get_node(position.label)
            if node is None:
                continue
            dx = abs((node.x or 0.0) - position.x)
            dy = abs((node.y or 0.0) - position.y)
            if dx > self._position_threshold or dy > self._position_threshold:
                moved = self.update_node_position(position.label, position.x, position.y)
                changed = moved or changed
        return changed

    def get_node_position(self, label: str) -> tuple[float, float] | None:
        node = self._store.get_node(label)
        if node is None or node.x is None or node.y is None:
            return None
        return (node.x, node.y)

    # -------------------------------------------------------------------------
    # Edge Operations
    # -------------------------------------------------------------------------

    def add_edge(self, source: str, target: str, weight: str | None = None) -> Edge | None:
        """Add an edge between two existing nodes.

        An empty weight is treated as no weight.

        Returns:
            Copy of the new edge, or None on a missing endpoint, self-loop in
            an undirected graph, duplicate edge or invalid weight.
        """
        self.clear_error()
        weight = weight or None
        try:
            source_exists = self._store.has_node(source)
            target_exists = self._store.has_node(target)
            if not source_exists or not target_exists:
                if not source_exists and not target_exists:
                    missing = "both"
                elif not source_exists:
                    missing = "source"
                else:
                    missing = "target"
                raise EdgeEndpointError(
                    source, target, missing, available=self._store.all_labels()
                )
            if self.is_undirected() and source == target:
                raise SelfLoopError(source)
            if self._store.find_edges(source, target, directed=self.is_directed()):
                raise DuplicateEdgeError(source, target)
            if weight is not None and not _is_token(weight):
                raise InvalidLabelError(weight, kind="weight", action="add edge")
        except GraphIntegrityError as e:
            self._fail(e)
            return None

        edge = Edge(source=source, target=target, weight=weight)
        self._store.add_edge(edge)
        self._mark_modified()
        return edge.model_copy(deep=True)

    def _find_edge(self, source: str, target: str) -> Edge | None:
        matches = self._store.find_edges(source, target, directed=self.is_directed())
        return matches[0] if matches else None

    def remove_edge(self, source: str, target: str) -> bool:
        """Remove the edge joining *source* and *target*.

        Undirected graphs match either orientation.
        """
        self.clear_error()
        edge = self._find_edge(source, target)
        if edge is None:
            self._fail(EdgeNotFoundError(source, target, action="remove edge"))
            return False
        self._store.remove_edges(lambda e: e is edge)
        self._mark_modified()
        return True

    def remove_edges_between(self, source: str, target: str) -> int:
        """Remove every edge joining the two labels. Returns how many were removed."""
        self.clear_error()
        directed = self.is_directed()
        removed = self._store.remove_edges(lambda e: e.connects(source, target, directed=directed))
        if removed:
            self._mark_modified()
        return removed

    def update_edge_weight(self, source: str, target: str, weight: str | None) -> bool:
        """Set or clear (``None`` or ``""``) the weight of an existing edge."""
        self.clear_error()
        weight = weight or None
        edge = self._find_edge(source, target)
        try:
            if edge is None:
                raise EdgeNotFoundError(source, target, action="update edge")
            if weight is not None and not _is_token(weight):
                raise InvalidLabelError(weight, kind="weight", action="update edge")
        except GraphIntegrityError as e:
            self._fail(e)
            return False

        edge.weight = weight
        self._mark_modified()
        return True

    def remove_edge_weight(self, source: str, target: str) -> bool:
        """Clear the weight of an existing edge."""
        self.clear_error()
        if self._find_edge(source, target) is None:
            self._fail(EdgeNotFoundError(source, target, action="remove weight"))
            return False
        return self.update_edge_weight(source, target, None)

    def clear_all_edges(self) -> None:
        self.clear_error()
        if self._store.remove_edges(lambda e: True):
            self._mark_modified()

    def get_edge(self, source: str, target: str) -> Edge | None:
        """Return a copy of the edge joining the labels, or None."""
        edge = self._find_edge(source, target)
        return edge.model_copy(deep=True) if edge is not None else None

    def get_edges(self) -> list[Edge]:
        """Return copies of all edges in insertion order."""
        return [edge.model_copy(deep=True) for edge in self._store.edges()]

    def get_edges_by_node(self, label: str) -> list[Edge]:
        return [edge.model_copy(deep=True) for edge in self._store.edges_referencing(label)]

    def get_edges_between(self, source: str, target: str) -> list[Edge]:
        return [
            edge.model_copy(deep=True)
            for edge in self._store.find_edges(source, target, directed=self.is_directed())
        ]

    def has_edge_between(self, source: str, target: str) -> bool:
        return self._find_edge(source, target) is not None

    def get_edge_tuples(self) -> list[tuple[str, str]]:
        return [(edge.source, edge.target) for edge in self._store.edges()]

    def edge_count(self) -> int:
        return self._store.edge_count()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> ValidationReport:
        """Run every invariant check and return the full report."""
        return validate_graph_data(self.get_data())

    def validate_invariants(self) -> list[str]:
        """Check graph invariants and return any violations.

        Returns:
            List of violation messages (empty if valid).
        """
        return self.validate().errors

    # -------------------------------------------------------------------------
    # Utility
    # -------------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Graph(nodes={self._store.node_count()}, edges={self._store.edge_count()}, "
            f"type={self._type}, indexing={self._indexing_mode})"
        )

