"""Semantic interpretation of line operations as graph change operations.

Each line operation from the line diff is re-classified by token count and
turned into zero or more change operations:

- 1-token add/remove: NODE_ADD / NODE_REMOVE
- 1-token modify: NODE_LABEL_CHANGE
- 2/3-token add/remove: EDGE_ADD / EDGE_REMOVE
- 2/3-token modify, same endpoints: EDGE_WEIGHT_CHANGE
- 2/3-token modify, different endpoints: EDGE_REMOVE, then NODE_ADD for each
  new endpoint not yet known, then EDGE_ADD

A rename inside an edge line is never read as a node rename. A modify that
turns a node line into an edge line (or back) is handled as a removal of the
old line followed by an addition of the new one. Lines with more than three
tokens produce nothing.

Edge lines from the old text are read through node renames made earlier in
the same pass. Once a pass is mapped, moved lines are resolved: a node whose
label the new text still declares is never removed, and an edge line that only
moved produces no change.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from graphtext.graph.text import MAX_LINE_TOKENS, EdgeLine, decode_edge_line, tokenize_line
from graphtext.models.graph import Edge, GraphData, Node
from graphtext.observability.logging import get_logger
from graphtext.sync.line_diff import extract_line_operations

if TYPE_CHECKING:
    from graphtext.sync.line_diff import LineOperation

log = get_logger(__name__)


class ChangeType(StrEnum):
    """Kind of a change operation.

    The first six come from text edits; the last three are graph property
    changes reported by graph comparison.
    """

    NODE_LABEL_CHANGE = "node_label_change"
    NODE_ADD = "node_add"
    NODE_REMOVE = "node_remove"
    EDGE_ADD = "edge_add"
    EDGE_REMOVE = "edge_remove"
    EDGE_WEIGHT_CHANGE = "edge_weight_change"
    GRAPH_TYPE_CHANGE = "graph_type_change"
    INDEXING_MODE_CHANGE = "indexing_mode_change"
    MAX_NODES_CHANGE = "max_nodes_change"


@dataclass
class ChangeOperation:
    """One atomic semantic edit to apply to a graph.

    Attributes:
        type: What kind of change this is.
        description: Human-readable summary for logs and UI.
        original_value: Old label, weight or property value, where relevant.
        new_value: New label, weight or property value, where relevant.
        node: The node concerned (NODE_* changes).
        edge: The edge concerned (EDGE_* changes).
        metadata: Extra context, such as the text line the change came from.
    """

    type: ChangeType
    description: str
    original_value: Any = None
    new_value: Any = None
    node: Node | None = None
    edge: Edge | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _weight_text(weight: str | None) -> str:
    return f'"{weight}"' if weight is not None else "none"


def node_add(label: str, **metadata: Any) -> ChangeOperation:
    return ChangeOperation(
        type=ChangeType.NODE_ADD,
        description=f'Node "{label}" was added',
        new_value=label,
        node=Node(label=label),
        metadata=metadata,
    )


def node_remove(node: Node, **metadata: Any) -> ChangeOperation:
    return ChangeOperation(
        type=ChangeType.NODE_REMOVE,
        description=f'Node "{node.label}" was removed',
        original_value=node.label,
        node=node,
        metadata=metadata,
    )


def node_label_change(node: Node, new_label: str, **metadata: Any) -> ChangeOperation:
    return ChangeOperation(
        type=ChangeType.NODE_LABEL_CHANGE,
        description=f'Node label changed from "{node.label}" to "{new_label}"',
        original_value=node.label,
        new_value=new_label,
        node=node,
        metadata=metadata,
    )


def edge_add(edge: Edge, **metadata: Any) -> ChangeOperation:
    return ChangeOperation(
        type=ChangeType.EDGE_ADD,
        description=f'Edge from "{edge.source}" to "{edge.target}" was added',
        new_value=edge.weight,
        edge=edge,
        metadata=metadata,
    )


def edge_remove(edge: Edge, **metadata: Any) -> ChangeOperation:
    return ChangeOperation(
        type=ChangeType.EDGE_REMOVE,
        description=f'Edge from "{edge.source}" to "{edge.target}" was removed',
        original_value=edge.weight,
        edge=edge,
        metadata=metadata,
    )


def edge_weight_change(edge: Edge, new_weight: str | None, **metadata: Any) -> ChangeOperation:
    return ChangeOperation(
        type=ChangeType.EDGE_WEIGHT_CHANGE,
        description=(
            f'Edge "{edge.source}" - "{edge.target}" weight changed from '
            f"{_weight_text(edge.weight)} to {_weight_text(new_weight)}"
        ),
        original_value=edge.weight,
        new_value=new_weight,
        edge=edge,
        metadata=metadata,
    )


class _ChangeMapper:
    """Converts line operations to change operations against one snapshot.

    Besides the snapshot, the mapper tracks what earlier changes in the same
    pass did to the graph:

    - known labels: snapshot labels plus labels introduced by earlier changes,
      so endpoint renames only add nodes that do not exist yet
    - renames: old-text edge lines are read through earlier label changes,
      since renaming a node carries its edges along
    """

    def __init__(self, snapshot: GraphData) -> None:
        self._snapshot = snapshot
        self._nodes = {node.label: node for node in snapshot.nodes}
        self._known: set[str] = set(self._nodes)
        self._renamed: dict[str, str] = {}

    def _lookup_node(self, label: str) -> Node:
        node = self._nodes.get(label)
        return node.model_copy(deep=True) if node is not None else Node(label=label)

    def _lookup_edge(self, line: EdgeLine) -> Edge:
        """Find the snapshot edge a decoded line refers to.

        The text is authoritative: when no snapshot edge has the line's weight,
        the edge is rebuilt from the line.
        """
        directed = self._snapshot.directed
        for edge in self._snapshot.edges:
            if edge.weight == line.weight and edge.connects(
                line.source, line.target, directed=directed
            ):
                return edge.model_copy(deep=True)
        return Edge(source=line.source, target=line.target, weight=line.weight)

    def _current(self, line: EdgeLine) -> EdgeLine:
        """Read an old-text edge line through the renames made so far."""
        return line._replace(
            source=self._renamed.get(line.source, line.source),
            target=self._renamed.get(line.target, line.target),
        )

    def _addition(self, tokens: list[str], meta: dict[str, Any]) -> list[ChangeOperation]:
        if not tokens:
            return []
        if len(tokens) == 1:
            self._known.add(tokens[0])
            return [node_add(tokens[0], **meta)]
        line = decode_edge_line(tokens)
        self._known.update((line.source, line.target))
        return [edge_add(Edge(source=line.source, target=line.target, weight=line.weight), **meta)]

    def _removal(self, tokens: list[str], meta: dict[str, Any]) -> list[ChangeOperation]:
        if not tokens:
            return []
        if len(tokens) == 1:
            return [node_remove(self._lookup_node(tokens[0]), **meta)]
        line = self._current(decode_edge_line(tokens))
        return [edge_remove(self._lookup_edge(line), **meta)]

    def _modification(
        self, old_tokens: list[str], new_tokens: list[str], meta: dict[str, Any]
    ) -> list[ChangeOperation]:
        if len(old_tokens) == 1 and len(new_tokens) == 1:
            old_label, new_label = old_tokens[0], new_tokens[0]
            if new_label in self._known or new_label in self._nodes:
                # Renaming onto an existing label: the lines were reordered
                return self._removal(old_tokens, meta) + self._addition(new_tokens, meta)
            self._known.discard(old_label)
            self._known.add(new_label)
            self._renamed[old_label] = new_label
            return [node_label_change(self._lookup_node(old_label), new_label, **meta)]

        if len(old_tokens) == 1 or len(new_tokens) == 1:
            return self._removal(old_tokens, meta) + self._addition(new_tokens, meta)

        old = self._current(decode_edge_line(old_tokens))
        new = decode_edge_line(new_tokens)
        if (old.source, old.target) == (new.source, new.target):
            if old.weight == new.weight:
                return []
            return [edge_weight_change(self._lookup_edge(old), new.weight, **meta)]

        changes = [edge_remove(self._lookup_edge(old), **meta)]
        for label in dict.fromkeys((new.source, new.target)):
            if label not in self._known:
                self._known.add(label)
                changes.append(node_add(label, **meta))
        new_edge = Edge(source=new.source, target=new.target, weight=new.weight)
        changes.append(edge_add(new_edge, **meta))
        return changes

    def map(self, op: LineOperation) -> list[ChangeOperation]:
        if op.type == "keep":
            return []
        meta: dict[str, Any] = {"line_index": op.index, "line_operation": op.type}
        tokens = _line_tokens(op.line)
        if op.type == "add":
            return self._addition(tokens, meta)
        if op.type == "remove":
            return self._removal(tokens, meta)

        meta["original_line_index"] = op.original_index
        old_tokens = _line_tokens(op.original_line or "")
        if old_tokens and tokens:
            return self._modification(old_tokens, tokens, meta)
        return self._removal(old_tokens, meta) + self._addition(tokens, meta)

    def resolve(self, changes: list[ChangeOperation], new_text: str) -> list[ChangeOperation]:
        """Cancel what moved lines and cascades make redundant.

        - A removed node whose label the new text still declares (on a node
          line anywhere, or as an edge endpoint) is kept with its edges, and
          its NODE_REMOVE and NODE_ADD are dropped.
        - EDGE_REMOVE for an edge touching a node that really goes is dropped,
          since removing the node takes the edge with it.
        - An EDGE_REMOVE and EDGE_ADD of the same edge cancel out, or become
          one EDGE_WEIGHT_CHANGE when the weights differ.
        """
        removed = {
            change.node.label
            for change in changes
            if change.type == ChangeType.NODE_REMOVE and change.node is not None
        }
        restored = removed & _declared_labels(new_text)
        gone = removed - restored

        resolved: list[ChangeOperation] = []
        for change in changes:
            if change.type in (ChangeType.NODE_ADD, ChangeType.NODE_REMOVE):
                if change.node is not None and change.node.label in restored:
                    continue
            elif change.type == ChangeType.EDGE_REMOVE and change.edge is not None:
                if change.edge.source in gone or change.edge.target in gone:
                    continue
            resolved.append(change)
        return self._cancel_edge_moves(resolved)

    def _edge_key(self, edge: Edge) -> tuple[str, str]:
        if self._snapshot.directed:
            return edge.source, edge.target
        return min(edge.source, edge.target), max(edge.source, edge.target)

    def _cancel_edge_moves(self, changes: list[ChangeOperation]) -> list[ChangeOperation]:
        removals: dict[tuple[str, str], list[tuple[int, Edge]]] = defaultdict(list)
        for index, change in enumerate(changes):
            if change.type == ChangeType.EDGE_REMOVE and change.edge is not None:
                removals[self._edge_key(change.edge)].append((index, change.edge))

        dropped: set[int] = set()
        replaced: dict[int, ChangeOperation] = {}
        for index, change in enumerate(changes):
            if change.type != ChangeType.EDGE_ADD or change.edge is None:
                continue
            pending = removals.get(self._edge_key(change.edge))
            if not pending:
                continue
            removal_index, removed_edge = pending.pop(0)
            dropped.add(removal_index)
            if removed_edge.weight == change.edge.weight:
                dropped.add(index)
            else:
                replaced[index] = edge_weight_change(
                    removed_edge, change.edge.weight, **change.metadata
                )
        return [
            replaced.get(index, change)
            for index, change in enumerate(changes)
            if index not in dropped
        ]


def _line_tokens(line: str) -> list[str]:
    """Tokens of a node or edge line; empty for lines that declare nothing."""
    tokens = tokenize_line(line)
    return tokens if len(tokens) <= MAX_LINE_TOKENS else []


def _declared_labels(text: str) -> set[str]:
    """Labels a text declares, on node lines or as edge endpoints."""
    labels: set[str] = set()
    for line in text.splitlines():
        tokens = _line_tokens(line)
        if len(tokens) == 1:
            labels.add(tokens[0])
        elif tokens:
            edge = decode_edge_line(tokens)
            labels.update((edge.source, edge.target))
    return labels


def extract_data_changes(
    new_text: str,
    previous_text: str,
    graph_data: GraphData | None = None,
) -> list[ChangeOperation]:
    """Translate a text edit into the change operations that reproduce it.

    Args:
        new_text: The edited text.
        previous_text: The text before the edit.
        graph_data: Snapshot of the graph before the edit, used to resolve
            the nodes and edges that removed or modified lines refer to.
            Defaults to an empty graph.

    Returns:
        Change operations in the order they must be applied.
    """
    mapper = _ChangeMapper(graph_data if graph_data is not None else GraphData())
    changes: list[ChangeOperation] = []
    for op in extract_line_operations(new_text, previous_text):
        changes.extend(mapper.map(op))
    changes = mapper.resolve(changes, new_text)

    log.debug("data_changes_extracted", count=len(changes))
    return changes
