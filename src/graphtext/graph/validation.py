"""Invariant checks over graph data.

This is for detecting code bugs or hand-built corrupt data, not for rejecting
user edits: the store refuses invalid mutations before they happen.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from graphtext.models.graph import GraphData


@dataclass
class ValidationCheck:
    """Result of a single validation check.

    Attributes:
        name: Identifier for the check.
        severity: "pass", "warn", or "fail".
        message: Human-readable description of the result.
    """

    name: str
    severity: Literal["pass", "warn", "fail"]
    message: str = ""


@dataclass
class ValidationReport:
    """Aggregated results of validation checks."""

    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if no check failed."""
        return not any(c.severity == "fail" for c in self.checks)

    @property
    def errors(self) -> list[str]:
        return [c.message for c in self.checks if c.severity == "fail"]

    @property
    def warnings(self) -> list[str]:
        return [c.message for c in self.checks if c.severity == "warn"]

    @property
    def summary(self) -> str:
        """Human-readable summary of all checks."""
        fails = len(self.errors)
        warns = len(self.warnings)
        passes = sum(1 for c in self.checks if c.severity == "pass")

        parts: list[str] = []
        if fails:
            parts.append(f"{fails} failed")
        if warns:
            parts.append(f"{warns} warnings")
        if passes:
            parts.append(f"{passes} passed")
        return ", ".join(parts)


def _check_unique_labels(data: GraphData) -> list[ValidationCheck]:
    counts = Counter(data.node_labels())
    return [
        ValidationCheck("unique_labels", "fail", f"Duplicate node label '{label}' ({n} times)")
        for label, n in counts.items()
        if n > 1
    ]


def _check_edge_endpoints(data: GraphData) -> list[ValidationCheck]:
    labels = set(data.node_labels())
    checks: list[ValidationCheck] = []
    for i, edge in enumerate(data.edges):
        if edge.source not in labels:
            checks.append(
                ValidationCheck(
                    "edge_endpoints",
                    "fail",
                    f"Edge {i} ({edge.source} -> {edge.target}): "
                    f"source '{edge.source}' does not exist",
                )
            )
        if edge.target not in labels:
            checks.append(
                ValidationCheck(
                    "edge_endpoints",
                    "fail",
                    f"Edge {i} ({edge.source} -> {edge.target}): "
                    f"target '{edge.target}' does not exist",
                )
            )
    return checks


def _check_self_loops(data: GraphData) -> list[ValidationCheck]:
    if data.directed:
        return []
    return [
        ValidationCheck(
            "self_loops", "fail", f"Edge {i}: self-loop on '{edge.source}' in undirected graph"
        )
        for i, edge in enumerate(data.edges)
        if edge.source == edge.target
    ]


def _check_duplicate_edges(data: GraphData) -> list[ValidationCheck]:
    checks: list[ValidationCheck] = []
    seen: set[tuple[str, str]] = set()
    for i, edge in enumerate(data.edges):
        key = (edge.source, edge.target)
        if not data.directed:
            key = (min(key), max(key))
        if key in seen:
            checks.append(
                ValidationCheck(
                    "duplicate_edges",
                    "fail",
                    f"Edge {i}: duplicate edge between '{edge.source}' and '{edge.target}'",
                )
            )
        seen.add(key)
    return checks


def _check_node_limit(data: GraphData) -> list[ValidationCheck]:
    if len(data.nodes) > data.max_nodes:
        return [
            ValidationCheck(
                "node_limit",
                "fail",
                f"Graph has {len(data.nodes)} nodes, above the limit of {data.max_nodes}",
            )
        ]
    return []


def _check_isolated_nodes(data: GraphData) -> list[ValidationCheck]:
    connected = {label for edge in data.edges for label in (edge.source, edge.target)}
    isolated = [label for label in data.node_labels() if label not in connected]
    if isolated and data.edges:
        return [
            ValidationCheck(
                "isolated_nodes",
                "warn",
                f"{len(isolated)} node(s) have no edges: {', '.join(isolated[:5])}"
                + ("..." if len(isolated) > 5 else ""),
            )
        ]
    return []


_CHECKS = (
    ("unique_labels", _check_unique_labels),
    ("edge_endpoints", _check_edge_endpoints),
    ("self_loops", _check_self_loops),
    ("duplicate_edges", _check_duplicate_edges),
    ("node_limit", _check_node_limit),
    ("isolated_nodes", _check_isolated_nodes),
)


def validate_graph_data(data: GraphData) -> ValidationReport:
    """Run every invariant check against *data*.

    Invariants checked:
    1. Node labels are unique
    2. All edge endpoints exist (referential integrity)
    3. No self-loops in undirected graphs
    4. No duplicate (source, target) pairs under the direction rule
    5. Node count within the configured maximum

    Isolated nodes are reported as a warning only.

    Returns:
        Report with one "pass" check per clean invariant plus any findings.
    """
    report = ValidationReport()
    for name, check in _CHECKS:
        findings = check(data)
        if findings:
            report.checks.extend(findings)
        else:
            report.checks.append(ValidationCheck(name, "pass"))
    return report
