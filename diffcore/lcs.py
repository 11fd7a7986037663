"""
Sequence alignment for array diffs.

align() builds an edit script from a longest-common-subsequence table.
Element equality is the deep, kind-aware is_equal() below.
"""
from typing import Any, Sequence
from dataclasses import dataclass
from enum import Enum

from diffcore.types import ValueKind, MISSING, UNDEFINED
from diffcore.normalizer import classify, object_entries, normalize, primitive_equal


class EditOpType(str, Enum):
    ADD = "add"
    DELETE = "delete"
    KEEP = "keep"
    REPLACE = "replace"


@dataclass(frozen=True)
class EditOp:
    """
    One step of an edit script.

    index is the left-hand index for KEEP and DELETE and the right-hand
    index for ADD and REPLACE. new_value is only set for REPLACE.
    """
    op: EditOpType
    index: int
    value: Any
    new_value: Any = MISSING


_NORMALIZED_KINDS = (ValueKind.FUNCTION, ValueKind.DATE, ValueKind.REGEXP, ValueKind.SYMBOL)


def is_equal(a: Any, b: Any) -> bool:
    """
    Deep equality across value kinds.

    Containers already being compared further up the stack are assumed
    equal, so cyclic inputs terminate.
    """
    return _is_equal(a, b, set())


def _is_equal(a: Any, b: Any, active: set) -> bool:
    if a is b:
        return True

    if a is None or b is None or a is UNDEFINED or b is UNDEFINED:
        return False

    kind = classify(a)
    if kind != classify(b):
        return False

    if kind == ValueKind.ARRAY:
        if len(a) != len(b):
            return False
        pair = (id(a), id(b))
        if pair in active:
            return True
        active.add(pair)
        try:
            return all(_is_equal(x, y, active) for x, y in zip(a, b))
        finally:
            active.discard(pair)

    if kind == ValueKind.OBJECT:
        entries_a = object_entries(a)
        entries_b = object_entries(b)
        if entries_a.keys() != entries_b.keys():
            return False
        pair = (id(a), id(b))
        if pair in active:
            return True
        active.add(pair)
        try:
            return all(_is_equal(entries_a[key], entries_b[key], active) for key in entries_a)
        finally:
            active.discard(pair)

    if kind in _NORMALIZED_KINDS:
        return normalize(a, kind) == normalize(b, kind)

    return primitive_equal(a, b)


def compute_lcs_table(left: Sequence, right: Sequence) -> list[list[int]]:
    """
    Longest-common-subsequence table.

    dp[i][j] is the LCS length of left[:i] and right[:j]. Runs in
    O(len(left) * len(right)) time and space.
    """
    m, n = len(left), len(right)
    dp = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        row, prev = dp[i], dp[i - 1]
        item = left[i - 1]
        for j in range(1, n + 1):
            if is_equal(item, right[j - 1]):
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    return dp


def align(left: Sequence, right: Sequence) -> list[EditOp]:
    """
    Compute the edit script that turns left into right.

    Walks the LCS table back from the bottom-right corner. Equal
    elements are kept; otherwise the larger neighbour wins, and a tie
    records a DELETE before an ADD. Ops are returned in left-to-right
    order.
    """
    dp = compute_lcs_table(left, right)
    ops = []
    i, j = len(left), len(right)

    while i > 0 or j > 0:
        if i == 0:
            j -= 1
            ops.append(EditOp(EditOpType.ADD, j, right[j]))
        elif j == 0:
            i -= 1
            ops.append(EditOp(EditOpType.DELETE, i, left[i]))
        elif is_equal(left[i - 1], right[j - 1]):
            i -= 1
            j -= 1
            ops.append(EditOp(EditOpType.KEEP, i, left[i]))
        elif dp[i - 1][j] >= dp[i][j - 1]:
            i -= 1
            ops.append(EditOp(EditOpType.DELETE, i, left[i]))
        else:
            j -= 1
            ops.append(EditOp(EditOpType.ADD, j, right[j]))

    ops.reverse()
    return ops


def lcs_length(left: Sequence, right: Sequence) -> int:
    return compute_lcs_table(left, right)[len(left)][len(right)]
