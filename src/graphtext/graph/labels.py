"""Auto-generated node labels for each indexing mode.

"0-indexed" and "custom" number nodes from 0, "1-indexed" from 1. Only labels
made entirely of digits count as numeric when looking for the next free index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from graphtext.models.graph import NodeIndexingMode


def generate_label(index: int, mode: NodeIndexingMode) -> str:
    """Return the label for the node at sequence position *index*."""
    if mode == "1-indexed":
        return str(index + 1)
    return str(index)


def _numeric_value(label: str) -> int | None:
    if label.isascii() and label.isdigit():
        return int(label)
    return None


def next_auto_label(labels: Sequence[str], mode: NodeIndexingMode) -> str:
    """Pick the label for the next auto-created node.

    Continues after the highest numeric label, or from the node count when no
    label is numeric. Labels already in use are skipped.
    """
    numeric = [value for value in map(_numeric_value, labels) if value is not None]
    if numeric:
        highest = max(numeric)
        # 1-indexed labels are index + 1, so the highest label is already the next index
        index = highest if mode == "1-indexed" else highest + 1
    else:
        index = len(labels)

    taken = set(labels)
    label = generate_label(index, mode)
    while label in taken:
        index += 1
        label = generate_label(index, mode)
    return label


def relabel_mapping(labels: Sequence[str], mode: NodeIndexingMode) -> dict[str, str]:
    """Map every current label to the label its position gets under *mode*."""
    return {label: generate_label(index, mode) for index, label in enumerate(labels)}
