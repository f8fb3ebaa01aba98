"""Tests for the line-level diff."""

from __future__ import annotations

from graphtext.sync.line_diff import LineOperation, edit_distance_table, extract_line_operations


def _of_type(ops: list[LineOperation], op_type: str) -> list[LineOperation]:
    return [op for op in ops if op.type == op_type]


class TestEditDistanceTable:
    """Test the dynamic-programming table."""

    def test_base_cases(self) -> None:
        """First row and column count pure insertions and deletions."""
        dp = edit_distance_table(["a", "b"], ["x", "y", "z"])
        assert [row[0] for row in dp] == [0, 1, 2]
        assert dp[0] == [0, 1, 2, 3]

    def test_distance(self) -> None:
        """One substitution and one insertion give distance 2."""
        dp = edit_distance_table(["A", "B", "C"], ["A", "X", "C", "D"])
        assert dp[3][4] == 2


class TestSingleOperations:
    """Test basic line operations."""

    def test_addition(self) -> None:
        """An appended line is an add with its new-text index."""
        ops = extract_line_operations("A\nB\nC", "A\nB")

        adds = _of_type(ops, "add")
        assert len(adds) == 1
        assert adds[0].line == "C"
        assert adds[0].index == 2

    def test_removal(self) -> None:
        """A dropped line is a remove with its old-text index."""
        ops = extract_line_operations("A\nB", "A\nB\nC")

        removes = _of_type(ops, "remove")
        assert len(removes) == 1
        assert removes[0].line == "C"
        assert removes[0].index == 2
        assert len(ops) == 3

    def test_modification(self) -> None:
        """An edited line is one modify carrying both texts."""
        ops = extract_line_operations("A\nX\nC", "A\nB\nC")

        modifies = _of_type(ops, "modify")
        assert len(modifies) == 1
        assert modifies[0].line == "X"
        assert modifies[0].original_line == "B"
        assert modifies[0].index == 1
        assert modifies[0].original_index == 1

    def test_identical_texts_keep_everything(self) -> None:
        """Identical texts produce only keeps, in order."""
        ops = extract_line_operations("A\nB\nC", "A\nB\nC")
        assert [(op.type, op.line) for op in ops] == [
            ("keep", "A"),
            ("keep", "B"),
            ("keep", "C"),
        ]


class TestTieBreaking:
    """keep > modify > remove > add when several paths are equally short."""

    def test_prefers_modify_over_remove_add(self) -> None:
        """Extra lines become one add plus modifications, not removals."""
        ops = extract_line_operations("A\nX\nY\nZ", "A\nB\nC")

        assert [(op.type, op.line, op.original_line) for op in ops] == [
            ("keep", "A", None),
            ("add", "X", None),
            ("modify", "Y", "B"),
            ("modify", "Z", "C"),
        ]

    def test_complex_mixed(self) -> None:
        """Unchanged lines around a changed block are kept."""
        ops = extract_line_operations("A\nX\nY\nD", "A\nB\nC\nD")

        assert len(_of_type(ops, "keep")) == 2
        assert len(_of_type(ops, "modify")) == 2
        assert _of_type(ops, "remove") == []

    def test_reordered_lines(self) -> None:
        """A moved line is a remove plus an add; the rest is kept."""
        ops = extract_line_operations("C\nA\nB", "A\nB\nC")

        assert [(op.type, op.line) for op in ops] == [
            ("add", "C"),
            ("keep", "A"),
            ("keep", "B"),
            ("remove", "C"),
        ]


class TestEdgeCases:
    """Test empty input and whitespace handling."""

    def test_empty_texts(self) -> None:
        assert extract_line_operations("", "") == []

    def test_one_side_empty(self) -> None:
        """Against an empty text every line is added or removed."""
        assert len(_of_type(extract_line_operations("A\nB", ""), "add")) == 2
        assert len(_of_type(extract_line_operations("", "A\nB"), "remove")) == 2

    def test_whitespace_only_differences_are_kept(self) -> None:
        """Lines compare after normalization but report their original text."""
        ops = extract_line_operations("Alice\nBob\nAlice Bob", "  Alice  \nBob\t\t\nAlice\t  Bob")

        assert all(op.type == "keep" for op in ops)
        assert ops[0].line == "Alice"

    def test_blank_lines_keep_source_indexes(self) -> None:
        """Blank lines are skipped but indexes refer to the real line numbers."""
        ops = extract_line_operations("A\n\n\nB\nC", "A\nB")

        adds = _of_type(ops, "add")
        assert [(op.line, op.index) for op in adds] == [("C", 4)]
        keeps = _of_type(ops, "keep")
        assert [(op.line, op.index, op.original_index) for op in keeps] == [
            ("A", 0, 0),
            ("B", 3, 1),
        ]


class TestMultiCharacterLines:
    """Test realistic node and edge lines."""

    def test_node_addition(self) -> None:
        ops = extract_line_operations("Alice\nBob\nCharlie\nAlice Bob", "Alice\nBob\nAlice Bob")

        adds = _of_type(ops, "add")
        assert [(op.line, op.index) for op in adds] == [("Charlie", 2)]

    def test_node_removal(self) -> None:
        ops = extract_line_operations("Alice\nBob\nAlice Bob", "Alice\nBob\nCharlie\nAlice Bob")

        removes = _of_type(ops, "remove")
        assert [(op.line, op.index) for op in removes] == [("Charlie", 2)]

    def test_rename_touches_node_and_edge_lines(self) -> None:
        """Renaming Bob modifies both the node line and the edge line."""
        ops = extract_line_operations("Alice\nRobert\nAlice Robert", "Alice\nBob\nAlice Bob")

        modifies = _of_type(ops, "modify")
        assert [(op.original_line, op.line, op.index) for op in modifies] == [
            ("Bob", "Robert", 1),
            ("Alice Bob", "Alice Robert", 2),
        ]

    def test_edge_weight_edit(self) -> None:
        ops = extract_line_operations("Alice\nBob\nAlice Bob 10", "Alice\nBob\nAlice Bob 5")

        modifies = _of_type(ops, "modify")
        assert len(modifies) == 1
        assert modifies[0].original_line == "Alice Bob 5"
        assert modifies[0].line == "Alice Bob 10"

    def test_insertions_between_kept_lines(self) -> None:
        """New lines interleaved with old ones are pure additions."""
        previous = "New York\nLos Angeles\nChicago\nNew York Los Angeles\nLos Angeles Chicago"
        new = (
            "New York\nLos Angeles\nChicago\nBoston\n"
            "New York Los Angeles\nLos Angeles Chicago\nChicago Boston"
        )
        ops = extract_line_operations(new, previous)

        assert len(_of_type(ops, "keep")) == 5
        assert [op.line for op in _of_type(ops, "add")] == ["Boston", "Chicago Boston"]

    def test_complete_restructuring(self) -> None:
        """With nothing in common, nothing is kept."""
        ops = extract_line_operations(
            "NodeA\nNodeB\nNodeC\nNodeD\nNodeA NodeB\nNodeB NodeC\nNodeC NodeD",
            "Node1\nNode2\nNode3\nNode1 Node2\nNode2 Node3",
        )

        assert _of_type(ops, "keep") == []
        assert len(_of_type(ops, "modify")) == 5
        assert len(_of_type(ops, "add")) == 2
