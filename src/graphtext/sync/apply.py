"""Applying change operations to a live graph.

Changes are applied in order through the graph's never-raising mutation API.
A change the graph rejects is recorded as an error and the loop moves on:
there is no rollback. Callers that need all-or-nothing behavior apply to a
clone (``preserve_original=True``, or ``reconcile(..., atomic=True)``) and
keep the clone only when the result reports success.

Every step addresses nodes and edges by label, so entities a text edit does
not touch keep their identity.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from graphtext.graph.graph import Graph
from graphtext.observability.logging import get_logger
from graphtext.sync.changes import ChangeOperation, ChangeType, extract_data_changes

log = get_logger(__name__)


class ChangeDataError(Exception):
    """A change operation lacks the node, edge or value its type requires."""


@dataclass
class ApplyResult:
    """Outcome of an apply pass.

    Attributes:
        graph: The graph the changes were applied to (possibly partially
            mutated, or a clone when the original was preserved).
        success: True if no change failed.
        errors: One message per failed change, plus invariant violations
            when validation was requested.
        warnings: Validation warnings, when validation was requested.
        changes: The change operations that were applied.
    """

    graph: Graph
    success: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    changes: list[ChangeOperation] = field(default_factory=list)


def _require_label(change: ChangeOperation) -> str:
    if change.node is None:
        raise ChangeDataError("change has no node")
    return change.node.label


def _apply_node_add(graph: Graph, change: ChangeOperation) -> bool:
    if change.node is None:
        raise ChangeDataError("change has no node")
    return graph.add_node(change.node.label, change.node.x, change.node.y) is not None


def _apply_node_remove(graph: Graph, change: ChangeOperation) -> bool:
    return graph.remove_node(_require_label(change))


def _apply_node_label_change(graph: Graph, change: ChangeOperation) -> bool:
    old_label = change.original_value or _require_label(change)
    if not change.new_value:
        raise ChangeDataError("change has no new label")
    return graph.update_node(old_label, label=change.new_value) is not None


def _apply_edge_add(graph: Graph, change: ChangeOperation) -> bool:
    edge = change.edge
    if edge is None:
        raise ChangeDataError("change has no edge")
    # Endpoints missing from the graph are created first.
    for label in dict.fromkeys((edge.source, edge.target)):
        if not graph.has_node(label) and graph.add_node(label) is None:
            return False
    return graph.add_edge(edge.source, edge.target, edge.weight) is not None


def _apply_edge_remove(graph: Graph, change: ChangeOperation) -> bool:
    if change.edge is None:
        raise ChangeDataError("change has no edge")
    return graph.remove_edge(change.edge.source, change.edge.target)


def _apply_edge_weight_change(graph: Graph, change: ChangeOperation) -> bool:
    if change.edge is None:
        raise ChangeDataError("change has no edge")
    return graph.update_edge_weight(change.edge.source, change.edge.target, change.new_value)


def _apply_graph_type_change(graph: Graph, change: ChangeOperation) -> bool:
    return graph.set_type(change.new_value)


def _apply_indexing_mode_change(graph: Graph, change: ChangeOperation) -> bool:
    return graph.set_node_indexing_mode(change.new_value)


def _apply_max_nodes_change(graph: Graph, change: ChangeOperation) -> bool:
    try:
        max_nodes = int(change.new_value)
    except (TypeError, ValueError) as e:
        raise ChangeDataError(f"max nodes value {change.new_value!r} is not an integer") from e
    return graph.set_max_nodes(max_nodes)


_APPLIERS: dict[ChangeType, Callable[[Graph, ChangeOperation], bool]] = {
    ChangeType.NODE_ADD: _apply_node_add,
    ChangeType.NODE_REMOVE: _apply_node_remove,
    ChangeType.NODE_LABEL_CHANGE: _apply_node_label_change,
    ChangeType.EDGE_ADD: _apply_edge_add,
    ChangeType.EDGE_REMOVE: _apply_edge_remove,
    ChangeType.EDGE_WEIGHT_CHANGE: _apply_edge_weight_change,
    ChangeType.GRAPH_TYPE_CHANGE: _apply_graph_type_change,
    ChangeType.INDEXING_MODE_CHANGE: _apply_indexing_mode_change,
    ChangeType.MAX_NODES_CHANGE: _apply_max_nodes_change,
}


def apply_change(graph: Graph, change: ChangeOperation) -> str | None:
    """Apply one change.

    Returns:
        None on success, otherwise the reason the change was rejected.
    """
    applier = _APPLIERS.get(change.type)
    if applier is None:
        return f"unsupported change type '{change.type}'"
    try:
        if applier(graph, change):
            return None
    except ChangeDataError as e:
        return str(e)
    return graph.get_error() or "graph rejected the change"


def apply_changes(
    graph: Graph,
    changes: list[ChangeOperation],
    *,
    validate_result: bool = False,
    preserve_original: bool = False,
) -> ApplyResult:
    """Apply change operations in order, continuing past failures.

    Args:
        graph: Graph to mutate.
        changes: Change operations, in the order they must be applied.
        validate_result: Run the invariant checks afterwards and report
            violations as errors and warnings.
        preserve_original: Apply to a clone and leave *graph* untouched.

    Returns:
        ApplyResult holding the mutated graph and one error per failed change.
    """
    target = graph.clone() if preserve_original else graph
    errors: list[str] = []
    warnings: list[str] = []

    for change in changes:
        reason = apply_change(target, change)
        if reason is not None:
            errors.append(f'Failed to apply change "{change.description}": {reason}')
            log.warning("change_apply_failed", change_type=str(change.type), error=reason)

    if validate_result:
        report = target.validate()
        errors.extend(report.errors)
        warnings.extend(report.warnings)

    log.info(
        "changes_applied",
        total=len(changes),
        failed=len(errors),
        nodes=target.node_count(),
        edges=target.edge_count(),
    )
    return ApplyResult(
        graph=target,
        success=not errors,
        errors=errors,
        warnings=warnings,
        changes=list(changes),
    )


def reconcile(
    graph: Graph,
    new_text: str,
    previous_text: str,
    *,
    atomic: bool = False,
) -> ApplyResult:
    """Bring *graph* in line with an edit of its text.

    Args:
        graph: Graph that *previous_text* describes.
        new_text: The edited text.
        previous_text: The text before the edit.
        atomic: Apply to a clone. On success the result holds the mutated
            clone; on any failure it holds the untouched *graph*.

    Returns:
        ApplyResult for the pass.
    """
    changes = extract_data_changes(new_text, previous_text, graph.get_data())
    result = apply_changes(graph, changes, preserve_original=atomic)
    if atomic and not result.success:
        log.info("reconcile_discarded", failed=len(result.errors))
        return ApplyResult(
            graph=graph,
            success=False,
            errors=result.errors,
            warnings=result.warnings,
            changes=result.changes,
        )
    return result
