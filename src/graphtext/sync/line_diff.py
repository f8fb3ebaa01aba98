"""Line-level diff between two versions of the text buffer.

Lines are compared after normalization (trim plus whitespace collapse) but
reported with their original text. Blank lines are dropped before diffing;
every operation keeps the line number it had in its own text.

The diff is an edit-distance table over the two line sequences::

    dp[i][0] = i, dp[0][j] = j
    dp[i][j] = dp[i-1][j-1]                              if old[i] == new[j]
             = 1 + min(dp[i-1][j], dp[i][j-1], dp[i-1][j-1])  otherwise

Backtracking from dp[m][n] prefers, among moves that achieve the cell's
value, keep > modify > remove > add. Preferring modify means an edited line is
reported as one modification rather than a remove/add pair, which later
becomes a node rename or an edge reweight instead of a delete and re-create.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Literal

from graphtext.graph.text import normalize_line
from graphtext.observability.logging import get_logger

log = get_logger(__name__)

LineOpType = Literal["keep", "add", "remove", "modify"]


@dataclass(frozen=True)
class LineOperation:
    """One step of the line diff.

    Attributes:
        type: keep, add, remove or modify.
        line: The new line for keep/add/modify; the old line for remove.
        index: Line number of ``line`` in its own text (0-based).
        original_line: The old line, for modify only.
        original_index: Line number of the old line, for keep and modify.
    """

    type: LineOpType
    line: str
    index: int
    original_line: str | None = None
    original_index: int | None = None


@dataclass(frozen=True)
class _Line:
    index: int
    raw: str
    normalized: str


def _split_lines(text: str) -> list[_Line]:
    lines = []
    for index, raw in enumerate(text.splitlines()):
        normalized = normalize_line(raw)
        if normalized:
            lines.append(_Line(index, raw, normalized))
    return lines


def edit_distance_table(old: list[str], new: list[str]) -> list[list[int]]:
    """Build the (len(old)+1) x (len(new)+1) line edit-distance table."""
    m, n = len(old), len(new)
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m + 1):
        dp[i][0] = i
    for j in range(n + 1):
        dp[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if old[i - 1] == new[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = 1 + min(dp[i - 1][j], dp[i][j - 1], dp[i - 1][j - 1])
    return dp


def _backtrack(old: list[_Line], new: list[_Line], dp: list[list[int]]) -> list[LineOperation]:
    ops: list[LineOperation] = []
    i, j = len(old), len(new)
    while i > 0 or j > 0:
        if i > 0 and j > 0 and old[i - 1].normalized == new[j - 1].normalized:
            ops.append(
                LineOperation("keep", new[j - 1].raw, new[j - 1].index, None, old[i - 1].index)
            )
            i -= 1
            j -= 1
            continue

        current = dp[i][j]
        if i > 0 and j > 0 and dp[i - 1][j - 1] + 1 == current:
            ops.append(
                LineOperation(
                    "modify",
                    new[j - 1].raw,
                    new[j - 1].index,
                    old[i - 1].raw,
                    old[i - 1].index,
                )
            )
            i -= 1
            j -= 1
        elif i > 0 and dp[i - 1][j] + 1 == current:
            ops.append(LineOperation("remove", old[i - 1].raw, old[i - 1].index))
            i -= 1
        else:
            ops.append(LineOperation("add", new[j - 1].raw, new[j - 1].index))
            j -= 1

    ops.reverse()
    return ops


def extract_line_operations(new_text: str, previous_text: str) -> list[LineOperation]:
    """Diff two texts line by line.

    Args:
        new_text: The edited text.
        previous_text: The text before the edit.

    Returns:
        Line operations in text order. Identical texts (after normalization)
        yield only keep operations; two blank texts yield none.
    """
    old = _split_lines(previous_text)
    new = _split_lines(new_text)
    dp = edit_distance_table([line.normalized for line in old], [line.normalized for line in new])
    ops = _backtrack(old, new, dp)

    counts = Counter(op.type for op in ops)
    log.debug(
        "line_diff_computed",
        distance=dp[len(old)][len(new)],
        keep=counts["keep"],
        add=counts["add"],
        remove=counts["remove"],
        modify=counts["modify"],
    )
    return ops
