"""
Diff tree assembly and query helpers.

The node constructors enforce which of old_value/new_value each
classification carries. Everything else here is plain tree traversal.
"""
from typing import Any, Callable, Iterator, Optional, Sequence
import re

from diffcore.types import (
    Classification,
    ValueKind,
    DiffNode,
    DiffStats,
    DiffResult,
    MISSING,
)


_INDEX_SEGMENT = re.compile(r"^\d+$")
_IDENTIFIER_SEGMENT = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _children(children: Optional[Sequence[DiffNode]]) -> Optional[tuple]:
    if children is None:
        return None
    return tuple(children)


def added_node(
    path: Sequence[str],
    value_kind: ValueKind,
    new_value: Any,
    children: Optional[Sequence[DiffNode]] = None,
) -> DiffNode:
    return DiffNode(
        classification=Classification.ADDED,
        path=tuple(path),
        value_kind=value_kind,
        new_value=new_value,
        children=_children(children),
    )


def deleted_node(
    path: Sequence[str],
    value_kind: ValueKind,
    old_value: Any,
    children: Optional[Sequence[DiffNode]] = None,
) -> DiffNode:
    return DiffNode(
        classification=Classification.DELETED,
        path=tuple(path),
        value_kind=value_kind,
        old_value=old_value,
        children=_children(children),
    )


def modified_node(
    path: Sequence[str],
    value_kind: ValueKind,
    old_value: Any,
    new_value: Any,
    children: Optional[Sequence[DiffNode]] = None,
) -> DiffNode:
    return DiffNode(
        classification=Classification.MODIFIED,
        path=tuple(path),
        value_kind=value_kind,
        old_value=old_value,
        new_value=new_value,
        children=_children(children),
    )


def unchanged_node(
    path: Sequence[str],
    value_kind: ValueKind,
    old_value: Any,
    new_value: Any = MISSING,
    children: Optional[Sequence[DiffNode]] = None,
) -> DiffNode:
    """Unchanged node. new_value defaults to old_value."""
    return DiffNode(
        classification=Classification.UNCHANGED,
        path=tuple(path),
        value_kind=value_kind,
        old_value=old_value,
        new_value=old_value if new_value is MISSING else new_value,
        children=_children(children),
    )


def iter_nodes(root: DiffNode) -> Iterator[DiffNode]:
    """Yield every node of the tree in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))


def compute_stats(root: DiffNode) -> DiffStats:
    stats = DiffStats()
    for node in iter_nodes(root):
        stats.record(node.classification)
    return stats


def build_result(root: DiffNode) -> DiffResult:
    return DiffResult(root=root, stats=compute_stats(root))


def count_nodes(root: DiffNode) -> int:
    return sum(1 for _ in iter_nodes(root))


def node_depth(node: DiffNode) -> int:
    """Depth of a node; the root is at depth 0."""
    return len(node.path)


def max_depth(root: DiffNode) -> int:
    return max(len(node.path) for node in iter_nodes(root))


def filter_nodes(root: DiffNode, predicate: Callable[[DiffNode], bool]) -> list[DiffNode]:
    """Collect matching nodes in pre-order."""
    return [node for node in iter_nodes(root) if predicate(node)]


def find_by_path(root: DiffNode, path: Sequence[str]) -> Optional[DiffNode]:
    """
    Find the node at an exact path.

    Paths are unique within a tree, so the first pre-order match is
    the only one.
    """
    target = tuple(path)
    for node in iter_nodes(root):
        if node.path == target:
            return node
    return None


def clone(root: DiffNode) -> DiffNode:
    """
    Structural deep copy of a diff tree.

    Nodes and paths are rebuilt; old/new values are shared with the
    original since they belong to the caller.
    """
    children = None
    if root.children is not None:
        children = tuple(clone(child) for child in root.children)
    return DiffNode(
        classification=root.classification,
        path=tuple(root.path),
        value_kind=root.value_kind,
        old_value=root.old_value,
        new_value=root.new_value,
        children=children,
    )


def validate_node(node: DiffNode) -> bool:
    """
    Check the value-presence and path invariants of a tree.

    Added nodes carry only new_value, deleted nodes only old_value,
    modified and unchanged nodes carry both. Each child path extends
    its parent's path by one segment.
    """
    for current in iter_nodes(node):
        if not isinstance(current.classification, Classification):
            return False
        if not isinstance(current.value_kind, ValueKind):
            return False

        has_old, has_new = current.has_old_value, current.has_new_value
        if current.classification == Classification.ADDED and (has_old or not has_new):
            return False
        if current.classification == Classification.DELETED and (has_new or not has_old):
            return False
        if current.classification in (Classification.MODIFIED, Classification.UNCHANGED):
            if not (has_old and has_new):
                return False

        for child in current.children or ():
            if len(child.path) != len(current.path) + 1:
                return False
            if child.path[:-1] != current.path:
                return False

    return True


def build_path_expression(path: Sequence[str]) -> str:
    """
    Render a path as a JSONPath-like expression.

    ("user", "name")      -> $.user.name
    ("items", "0")        -> $.items[0]
    ("headers", "x-id")   -> $.headers["x-id"]
    """
    parts = ["$"]
    for segment in path:
        segment = str(segment)
        if _INDEX_SEGMENT.match(segment):
            parts.append(f"[{segment}]")
        elif _IDENTIFIER_SEGMENT.match(segment):
            parts.append(f".{segment}")
        else:
            escaped = segment.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'["{escaped}"]')
    return "".join(parts)


def build_readable_path(path: Sequence[str]) -> str:
    """Render a path for people, e.g. items[0].title; the root is 'root'."""
    if not path:
        return "root"

    readable = ""
    for segment in path:
        segment = str(segment)
        if _INDEX_SEGMENT.match(segment):
            readable += f"[{segment}]"
        elif readable:
            readable += f".{segment}"
        else:
            readable = segment
    return readable


def node_from_dict(data: dict) -> DiffNode:
    """Rebuild a DiffNode from DiffNode.to_dict() output."""
    children = data.get("children")
    return DiffNode(
        classification=Classification(data["type"]),
        path=tuple(data.get("path", ())),
        value_kind=ValueKind(data["value_type"]),
        old_value=data.get("old_value", MISSING),
        new_value=data.get("new_value", MISSING),
        children=None if children is None else tuple(node_from_dict(c) for c in children),
    )


def result_from_dict(data: dict) -> DiffResult:
    """Rebuild a DiffResult from DiffResult.to_dict() output."""
    stats = data.get("stats", {})
    return DiffResult(
        root=node_from_dict(data["root"]),
        stats=DiffStats(
            added=stats.get("added", 0),
            deleted=stats.get("deleted", 0),
            modified=stats.get("modified", 0),
            unchanged=stats.get("unchanged", 0),
        ),
    )
