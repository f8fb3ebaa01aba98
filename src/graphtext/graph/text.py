"""Edge-list text format.

A graph serializes to one line per node (its label, in node order) followed by
one line per edge (``"<source> <target>"`` plus ``" <weight>"`` when weighted).
There is no header line and no blank lines.

Parsing is tolerant. Each non-blank line is trimmed, whitespace-collapsed and
classified by token count:

- 1 token: node declaration (repeats in the same text are ignored)
- 2 or 3 tokens: edge declaration, auto-creating undeclared endpoints; the
  third token is the weight (repeats of an endpoint pair are ignored)
- more than 3 tokens: dropped

Parsing has no failure mode: lines the store rejects are skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from graphtext.graph.graph import Graph
from graphtext.observability.logging import get_logger

if TYPE_CHECKING:
    from graphtext.models.graph import GraphData

log = get_logger(__name__)

MAX_LINE_TOKENS = 3


class EdgeLine(NamedTuple):
    """An edge declaration decoded from one line."""

    source: str
    target: str
    weight: str | None


def normalize_line(line: str) -> str:
    """Trim a line and collapse internal whitespace runs to single spaces."""
    return " ".join(line.split())


def tokenize_line(line: str) -> list[str]:
    return line.split()


def decode_edge_line(tokens: list[str]) -> EdgeLine:
    """Decode 2 or 3 tokens into (source, target, weight)."""
    weight = tokens[2] if len(tokens) == MAX_LINE_TOKENS else None
    return EdgeLine(tokens[0], tokens[1], weight)


def format_edge_line(source: str, target: str, weight: str | None = None) -> str:
    return f"{source} {target} {weight}" if weight else f"{source} {target}"


def serialize_graph(graph: Graph | GraphData) -> str:
    """Serialize a graph (or a data snapshot) to edge-list text."""
    data = graph.get_data() if isinstance(graph, Graph) else graph
    lines = [node.label for node in data.nodes]
    lines.extend(format_edge_line(e.source, e.target, e.weight) for e in data.edges)
    return "\n".join(lines)


def parse_graph_text(text: str, graph: Graph | None = None) -> Graph:
    """Parse edge-list text into *graph* (a new undirected graph by default).

    Args:
        text: Edge-list text.
        graph: Graph to add nodes and edges to. Existing content is kept;
            labels already present are not re-added.

    Returns:
        The graph that was populated.
    """
    if graph is None:
        graph = Graph()

    declared_nodes: set[str] = set()
    declared_edges: set[tuple[str, str]] = set()
    skipped = 0

    for raw_line in text.splitlines():
        tokens = tokenize_line(raw_line)
        if not tokens:
            continue
        if len(tokens) > MAX_LINE_TOKENS:
            skipped += 1
            continue

        if len(tokens) == 1:
            label = tokens[0]
            if label in declared_nodes:
                continue
            if graph.has_node(label) or graph.add_node(label) is not None:
                declared_nodes.add(label)
            else:
                skipped += 1
            continue

        edge = decode_edge_line(tokens)
        key = (edge.source, edge.target)
        if key in declared_edges:
            continue
        for label in (edge.source, edge.target):
            if label not in declared_nodes and (
                graph.has_node(label) or graph.add_node(label) is not None
            ):
                declared_nodes.add(label)
        if graph.add_edge(edge.source, edge.target, edge.weight) is not None:
            declared_edges.add(key)
        else:
            skipped += 1

    if skipped:
        log.debug("parse_lines_skipped", count=skipped)
    graph.clear_error()
    return graph
