"""Tests for applying change operations and reconciling text edits."""

from __future__ import annotations

import logging

import pytest

from graphtext.graph import Graph, parse_graph_text, serialize_graph
from graphtext.models.graph import Edge, Node
from graphtext.sync.apply import apply_change, apply_changes, reconcile
from graphtext.sync.changes import (
    ChangeOperation,
    ChangeType,
    edge_add,
    extract_data_changes,
    node_add,
    node_remove,
)


def _edge_set(graph: Graph) -> set[tuple[str, str, str | None]]:
    return {(e.source, e.target, e.weight) for e in graph.get_edges()}


class TestReconcileScenarios:
    """Text edits end in the graph the edited text describes."""

    def test_edge_line_added(self) -> None:
        """Adding "B C" creates node C and the edge."""
        graph = parse_graph_text("A\nB\nA B")

        result = reconcile(graph, "A\nB\nA B\nB C", "A\nB\nA B")

        assert result.success
        assert result.graph is graph
        assert graph.node_count() == 3
        assert graph.edge_count() == 2
        assert graph.has_edge_between("B", "C")

    def test_weight_edited(self) -> None:
        graph = parse_graph_text("Alice\nBob\nAlice Bob 5")

        result = reconcile(graph, "Alice\nBob\nAlice Bob 10", "Alice\nBob\nAlice Bob 5")

        assert result.success
        assert _edge_set(graph) == {("Alice", "Bob", "10")}

    def test_endpoint_renamed(self) -> None:
        """Renaming an edge endpoint leaves the old node in place."""
        graph = parse_graph_text("Alice\nBob\nAlice Bob")

        result = reconcile(graph, "Alice\nBob\nDavid Bob", "Alice\nBob\nAlice Bob")

        assert result.success
        assert graph.get_node_labels() == ["Alice", "Bob", "David"]
        assert graph.get_edge_tuples() == [("David", "Bob")]

    def test_node_renamed(self) -> None:
        """A node rename keeps its edges attached."""
        graph = parse_graph_text("Alice\nBob\nAlice Bob 2")

        result = reconcile(graph, "Alice\nRobert\nAlice Robert 2", "Alice\nBob\nAlice Bob 2")

        assert result.success
        assert graph.get_node_labels() == ["Alice", "Robert"]
        assert _edge_set(graph) == {("Alice", "Robert", "2")}

    def test_node_removed_with_edges(self, people_graph: Graph, people_text: str) -> None:
        result = reconcile(people_graph, "Alice\nBob\nAlice Bob", people_text)

        assert result.success
        assert people_graph.get_node_labels() == ["Alice", "Bob"]
        assert people_graph.get_edge_tuples() == [("Alice", "Bob")]

    def test_rename_mixed_with_new_lines(self) -> None:
        previous = "Alice\nBob\nAlice Bob"
        edited = "Alice\nRobert\nCharlie\nAlice Robert\nBob Charlie"
        graph = parse_graph_text(previous)

        result = reconcile(graph, edited, previous)

        assert result.success
        assert graph.get_node_labels() == ["Alice", "Bob", "Robert", "Charlie"]
        assert _edge_set(graph) == {("Alice", "Robert", None), ("Bob", "Charlie", None)}

    def test_matches_fresh_parse(self, people_graph: Graph, people_text: str) -> None:
        """A successful pass serializes to the same text a fresh parse gives."""
        edited = "Alice\nBob\nCharlie\nDana\nAlice Bob 3\nCharlie Dana"

        result = reconcile(people_graph, edited, people_text)

        assert result.success
        assert serialize_graph(people_graph) == serialize_graph(parse_graph_text(edited))

    def test_unchanged_text_is_idempotent(self, people_graph: Graph, people_text: str) -> None:
        """Reconciling a text against itself applies nothing."""
        before = people_graph.get_data()

        result = reconcile(people_graph, people_text, people_text)

        assert result.success
        assert result.changes == []
        assert people_graph.get_data() == before


class TestMovedLines:
    """Moving lines around keeps nodes and their edges."""

    @pytest.mark.parametrize(
        ("previous", "edited"),
        [
            ("A\nB\nA B", "B\nA B\nA"),
            ("A\nB\nC\nA B", "B\nC\nA\nA B"),
            ("A\nB\nA B", "B\nA\nA B"),
        ],
    )
    def test_node_line_moved(self, previous: str, edited: str) -> None:
        graph = parse_graph_text(previous)
        before = _edge_set(graph)

        result = reconcile(graph, edited, previous)

        assert result.success
        assert result.changes == []
        assert graph.has_edge_between("A", "B")
        assert _edge_set(graph) == before

    def test_node_line_deleted_but_edge_line_kept(self) -> None:
        """The edge line still declares A, so A and its edge survive."""
        graph = parse_graph_text("A\nB\nA B")

        result = reconcile(graph, "B\nA B", "A\nB\nA B")

        assert result.success
        assert result.changes == []
        assert sorted(graph.get_node_labels()) == ["A", "B"]
        assert graph.has_edge_between("A", "B")

    def test_edge_lines_swapped(self) -> None:
        previous = "A\nB\nC\nA B\nB C 2"
        graph = parse_graph_text(previous)

        result = reconcile(graph, "A\nB\nC\nB C 2\nA B", previous)

        assert result.success
        assert result.changes == []
        assert _edge_set(graph) == {("A", "B", None), ("B", "C", "2")}

    def test_moved_edge_line_with_new_weight(self) -> None:
        previous = "A\nB\nC\nA B 1\nB C"
        graph = parse_graph_text(previous)

        result = reconcile(graph, "A\nB\nC\nB C\nA B 4", previous)

        assert result.success
        assert [c.type for c in result.changes] == [ChangeType.EDGE_WEIGHT_CHANGE]
        assert _edge_set(graph) == {("A", "B", "4"), ("B", "C", None)}

    def test_moved_lines_match_fresh_parse(self) -> None:
        previous = "A\nB\nC\nA B\nB C"
        edited = "B\nC\nB C\nA\nA B"
        graph = parse_graph_text(previous)

        result = reconcile(graph, edited, previous)

        assert result.success
        assert _edge_set(graph) == _edge_set(parse_graph_text(edited))


class TestApplyChanges:
    """Test the apply loop."""

    def test_continues_past_failures(self, people_graph: Graph) -> None:
        """A rejected change is reported and later changes still apply."""
        changes = [node_add("Alice"), node_add("Zed")]

        result = apply_changes(people_graph, changes)

        assert not result.success
        assert result.errors == [
            "Failed to apply change \"Node \"Alice\" was added\": "
            "Cannot add node: label 'Alice' already exists"
        ]
        assert people_graph.has_node("Zed")
        assert result.changes == changes

    def test_no_rollback(self, people_graph: Graph) -> None:
        """Changes before a failure stay applied."""
        changes = [node_remove(Node(label="Alice")), node_remove(Node(label="Ghost"))]

        result = apply_changes(people_graph, changes)

        assert not result.success
        assert not people_graph.has_node("Alice")
        assert people_graph.validate_invariants() == []

    def test_preserve_original(self, people_graph: Graph) -> None:
        result = apply_changes(people_graph, [node_add("Zed")], preserve_original=True)

        assert result.success
        assert result.graph is not people_graph
        assert result.graph.has_node("Zed")
        assert not people_graph.has_node("Zed")

    def test_validate_result_reports_warnings(self, people_graph: Graph) -> None:
        """Validation findings are attached to the result."""
        result = apply_changes(people_graph, [node_add("Zed")], validate_result=True)

        assert result.success
        assert result.warnings == ["1 node(s) have no edges: Zed"]

    def test_edge_add_creates_endpoints(self, graph: Graph) -> None:
        result = apply_changes(graph, [edge_add(Edge(source="A", target="B", weight="1"))])

        assert result.success
        assert graph.get_node_labels() == ["A", "B"]

    def test_edge_add_rejected(self, people_graph: Graph) -> None:
        """Self-loops in undirected graphs fail with the store's message."""
        reason = apply_change(people_graph, edge_add(Edge(source="Alice", target="Alice")))
        assert reason == "Cannot add edge: self-loops are not allowed in undirected graphs"

    def test_failure_is_logged(
        self, people_graph: Graph, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            apply_changes(people_graph, [node_add("Alice")])

        assert any("change_apply_failed" in record.getMessage() for record in caplog.records)


class TestMissingChangeData:
    """Changes without the data their type needs fail without raising."""

    def test_node_change_without_node(self, graph: Graph) -> None:
        change = ChangeOperation(type=ChangeType.NODE_ADD, description="bare add")

        result = apply_changes(graph, [change])

        assert result.errors == ['Failed to apply change "bare add": change has no node']

    def test_edge_change_without_edge(self, graph: Graph) -> None:
        change = ChangeOperation(type=ChangeType.EDGE_REMOVE, description="bare remove")
        assert apply_change(graph, change) == "change has no edge"

    def test_rename_without_new_label(self, people_graph: Graph) -> None:
        change = ChangeOperation(
            type=ChangeType.NODE_LABEL_CHANGE,
            description="rename",
            original_value="Alice",
            node=Node(label="Alice"),
        )
        assert apply_change(people_graph, change) == "change has no new label"

    def test_max_nodes_not_an_integer(self, graph: Graph) -> None:
        change = ChangeOperation(
            type=ChangeType.MAX_NODES_CHANGE, description="limit", new_value="lots"
        )
        assert apply_change(graph, change) == "max nodes value 'lots' is not an integer"


class TestPropertyChanges:
    """Graph property changes go through the store's setters."""

    def test_graph_type(self, people_graph: Graph) -> None:
        change = ChangeOperation(
            type=ChangeType.GRAPH_TYPE_CHANGE,
            description="type",
            original_value="undirected",
            new_value="directed",
        )

        assert apply_change(people_graph, change) is None
        assert people_graph.is_directed()

    def test_indexing_mode_relabels(self) -> None:
        graph = parse_graph_text("0\n1\n0 1")
        change = ChangeOperation(
            type=ChangeType.INDEXING_MODE_CHANGE,
            description="mode",
            original_value="0-indexed",
            new_value="1-indexed",
        )

        assert apply_change(graph, change) is None
        assert graph.get_node_labels() == ["1", "2"]
        assert graph.get_edge_tuples() == [("1", "2")]

    def test_max_nodes_below_count(self, people_graph: Graph) -> None:
        change = ChangeOperation(
            type=ChangeType.MAX_NODES_CHANGE,
            description="limit",
            original_value=1000,
            new_value=2,
        )

        assert apply_change(people_graph, change) == (
            "Cannot set max nodes: graph already has 3 nodes"
        )
        assert people_graph.get_max_nodes() == 1000


class TestAtomicReconcile:
    """All-or-nothing reconciliation."""

    def test_success_returns_clone(self, people_graph: Graph, people_text: str) -> None:
        result = reconcile(people_graph, people_text + "\nDana", people_text, atomic=True)

        assert result.success
        assert result.graph is not people_graph
        assert result.graph.has_node("Dana")
        assert not people_graph.has_node("Dana")

    def test_failure_keeps_original(self, people_graph: Graph, people_text: str) -> None:
        """A failed pass returns the untouched graph and the errors."""
        edited = people_text + "\nDana\nAlice Alice"

        result = reconcile(people_graph, edited, people_text, atomic=True)

        assert not result.success
        assert result.graph is people_graph
        assert not people_graph.has_node("Dana")
        assert len(result.errors) == 1

    def test_non_atomic_failure_keeps_partial_progress(
        self, people_graph: Graph, people_text: str
    ) -> None:
        edited = people_text + "\nDana\nAlice Alice"

        result = reconcile(people_graph, edited, people_text)

        assert not result.success
        assert people_graph.has_node("Dana")


class TestExtractThenApply:
    """Extraction with an explicit snapshot, applied separately."""

    def test_round_trip_through_changes(self, people_graph: Graph, people_text: str) -> None:
        edited = "Alice\nBob\nEve\nAlice Bob 1\nBob Eve"
        changes = extract_data_changes(edited, people_text, people_graph.get_data())

        result = apply_changes(people_graph, changes, validate_result=True)

        assert result.success
        assert result.warnings == []
        assert people_graph.get_node_labels() == ["Alice", "Bob", "Eve"]
        assert _edge_set(people_graph) == {("Alice", "Bob", "1"), ("Bob", "Eve", None)}
