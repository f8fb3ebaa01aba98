"""Graph integrity error types.

These errors describe mutations that would violate a graph invariant, similar
to constraint violations in a database. They never escape the public ``Graph``
API: each mutation method catches ``GraphIntegrityError``, records ``str(err)``
in the single error slot and returns a failure value instead.

Each error can also format itself as longer feedback (with "did you mean"
suggestions) for display next to the text editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches

_MAX_SUGGESTIONS = 3
_MAX_AVAILABLE_DISPLAY = 10


def _suggest(label: str, available: list[str]) -> list[str]:
    """Find labels that look like typos of *label*."""
    return get_close_matches(label, available, n=_MAX_SUGGESTIONS, cutoff=0.6)


def _format_available(available: list[str]) -> list[str]:
    lines = [f"  - `{a}`" for a in available[:_MAX_AVAILABLE_DISPLAY]]
    if len(available) > _MAX_AVAILABLE_DISPLAY:
        lines.append(f"  - ... and {len(available) - _MAX_AVAILABLE_DISPLAY} more")
    return lines


class GraphIntegrityError(Exception):
    """Base class for graph integrity violations."""

    def to_feedback(self) -> str:
        """Format the error as a human-readable explanation.

        Subclasses with more context override this; the default is the
        one-line message.
        """
        return str(self)


@dataclass
class NodeExistsError(GraphIntegrityError):
    """Raised when a node label is already taken.

    Attributes:
        label: The label that already exists.
        action: What was being attempted (e.g. "add node", "update node").
    """

    label: str
    action: str = "add node"

    def __post_init__(self) -> None:
        super().__init__(f"Cannot {self.action}: label '{self.label}' already exists")

    def to_feedback(self) -> str:
        return "\n".join(
            [
                "## Error: Label Already Exists",
                "",
                f"**Label**: `{self.label}`",
                "",
                "Node labels are unique. Pick a different label, or edit the",
                "existing node instead of declaring it again.",
            ]
        )


@dataclass
class NodeNotFoundError(GraphIntegrityError):
    """Raised when referencing a label that is not in the graph.

    Attributes:
        label: The label that was referenced but doesn't exist.
        available: Labels that do exist, used for suggestions.
        action: What was being attempted.
    """

    label: str
    available: list[str] = field(default_factory=list)
    action: str = "find node"

    def __post_init__(self) -> None:
        super().__init__(f"Cannot {self.action}: node with label '{self.label}' not found")

    def to_feedback(self) -> str:
        lines = [
            "## Error: Node Not Found",
            "",
            f"**You referenced**: `{self.label}`",
            "",
        ]
        suggestions = _suggest(self.label, self.available)
        if suggestions:
            lines.append("**Did you mean one of these?**")
            lines.extend(f"  - `{s}`" for s in suggestions)
            lines.append("")
        if self.available:
            lines.append("**Existing labels**:")
            lines.extend(_format_available(self.available))
        return "\n".join(lines)


@dataclass
class NodeLimitError(GraphIntegrityError):
    """Raised when adding a node would exceed the configured maximum."""

    max_nodes: int

    def __post_init__(self) -> None:
        super().__init__(f"Cannot add node: maximum node limit of {self.max_nodes} reached")


@dataclass
class InvalidLabelError(GraphIntegrityError):
    """Raised for labels or weights that cannot be written as a single text token.

    Attributes:
        value: The rejected value.
        kind: "label" or "weight".
        action: What was being attempted.
    """

    value: str
    kind: str = "label"
    action: str = "add node"

    def __post_init__(self) -> None:
        super().__init__(
            f"Cannot {self.action}: {self.kind} '{self.value}' is invalid "
            "(must be non-empty and contain no whitespace)"
        )


@dataclass
class EdgeEndpointError(GraphIntegrityError):
    """Raised when an edge references endpoints that don't exist.

    Attributes:
        source: Source label.
        target: Target label.
        missing: Which endpoint is missing ("source", "target" or "both").
        available: Existing labels, used for suggestions.
    """

    source: str
    target: str
    missing: str
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.missing == "both":
            msg = (
                f"Cannot add edge: source node '{self.source}' "
                f"and target node '{self.target}' not found"
            )
        elif self.missing == "source":
            msg = f"Cannot add edge: source node '{self.source}' not found"
        else:
            msg = f"Cannot add edge: target node '{self.target}' not found"
        super().__init__(msg)

    def to_feedback(self) -> str:
        lines = [
            "## Error: Edge Endpoint Not Found",
            "",
            f"**Edge**: `{self.source}` -> `{self.target}`",
            "",
        ]
        for role in ("source", "target"):
            if self.missing not in (role, "both"):
                continue
            label = self.source if role == "source" else self.target
            lines.append(f"**Problem**: {role.capitalize()} node `{label}` does not exist.")
            suggestions = _suggest(label, self.available)
            if suggestions:
                lines.append("**Did you mean**: " + ", ".join(f"`{s}`" for s in suggestions))
            lines.append("")
        lines.append("**Solution**: Declare the node first, or use an existing label.")
        return "\n".join(lines)


@dataclass
class SelfLoopError(GraphIntegrityError):
    """Raised when adding a self-loop to an undirected graph."""

    label: str

    def __post_init__(self) -> None:
        super().__init__("Cannot add edge: self-loops are not allowed in undirected graphs")


@dataclass
class DuplicateEdgeError(GraphIntegrityError):
    """Raised when an edge with the same endpoint pair already exists."""

    source: str
    target: str

    def __post_init__(self) -> None:
        super().__init__(
            f"Cannot add edge: edge between '{self.source}' and '{self.target}' already exists"
        )


@dataclass
class EdgeNotFoundError(GraphIntegrityError):
    """Raised when no edge joins the given endpoints.

    Attributes:
        source: Source label.
        target: Target label.
        action: What was being attempted (e.g. "remove edge").
    """

    source: str
    target: str
    action: str = "find edge"

    def __post_init__(self) -> None:
        super().__init__(
            f"Cannot {self.action}: edge between '{self.source}' and '{self.target}' not found"
        )


@dataclass
class GraphConfigError(GraphIntegrityError):
    """Raised when a graph-level setting (type, indexing mode, max nodes) is rejected."""

    action: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"Cannot {self.action}: {self.reason}")
