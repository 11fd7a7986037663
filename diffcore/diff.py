"""
TreeDiff comparison engine.

This module walks two value trees side by side and builds the diff
tree, including:
- Objects (key union, ignore list)
- Arrays (LCS alignment or index-by-index)
- Extended kinds compared through their normalized forms
- Cycle and depth guards so any input terminates
"""
from typing import Any, Optional, Sequence
import logging

from diffcore.types import (
    Classification,
    ValueKind,
    SequenceDiffMode,
    DiffNode,
    DiffStats,
    DiffResult,
    DiffOptions,
    DiffConfigError,
    CIRCULAR_REFERENCE,
    MAX_DEPTH_REACHED,
)
from diffcore.normalizer import (
    classify,
    is_composite,
    normalize,
    object_entries,
    primitive_equal,
)
from diffcore.lcs import EditOpType, align
from diffcore.result import added_node, deleted_node, modified_node, unchanged_node


logger = logging.getLogger(__name__)


_HANDLERS = {
    ValueKind.PRIMITIVE: "_diff_scalar",
    ValueKind.NULL: "_diff_scalar",
    ValueKind.UNDEFINED: "_diff_scalar",
    ValueKind.OBJECT: "_diff_object",
    ValueKind.ARRAY: "_diff_array",
    ValueKind.FUNCTION: "_diff_normalized",
    ValueKind.DATE: "_diff_normalized",
    ValueKind.REGEXP: "_diff_normalized",
    ValueKind.SYMBOL: "_diff_normalized",
}

assert set(_HANDLERS) == set(ValueKind), "every ValueKind needs a diff handler"


def _identical(a: Any, b: Any) -> bool:
    """Same object, or equal primitives of the same type."""
    if a is b:
        return True
    return classify(a) == ValueKind.PRIMITIVE and classify(b) == ValueKind.PRIMITIVE and primitive_equal(a, b)


class DiffEngine:
    """
    Single-use comparison engine.

    Holds the per-comparison state: validated options, the identities
    of the containers on the current root-to-node chain, and the running
    classification tally. compare() builds a fresh engine per call.

    With detect_cycles disabled a cyclic input recurses until the
    interpreter's recursion limit is hit.
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        if options is None:
            options = DiffOptions()
        elif isinstance(options, dict):
            try:
                options = DiffOptions(**options)
            except TypeError as e:
                raise DiffConfigError(f"Unknown diff option: {e}")
        elif not isinstance(options, DiffOptions):
            raise DiffConfigError(f"options must be DiffOptions or a dict, got {type(options).__name__}")
        self.options = options.validate()
        self.stats = DiffStats()
        self._on_path: set = set()

    def compute(self, old_value: Any, new_value: Any) -> DiffResult:
        self.stats = DiffStats()
        self._on_path = set()

        root = self.diff_at(old_value, new_value, ())
        return DiffResult(root=root, stats=self.stats)

    def _emit(self, node: DiffNode) -> DiffNode:
        self.stats.record(node.classification)
        return node

    def _seen(self, value: Any) -> bool:
        return id(value) in self._on_path and is_composite(classify(value))

    def diff_at(self, old_value: Any, new_value: Any, path: Sequence[str]) -> DiffNode:
        """Compare two values located at path and return their diff node."""
        path = tuple(path)

        if self.options.detect_cycles and (self._seen(old_value) or self._seen(new_value)):
            logger.debug(f"Circular reference at {list(path)}")
            return self._emit(modified_node(
                path, classify(old_value), CIRCULAR_REFERENCE, CIRCULAR_REFERENCE
            ))

        max_depth = self.options.max_depth
        if max_depth is not None and len(path) >= max_depth:
            logger.debug(f"Max depth {max_depth} reached at {list(path)}")
            kind = classify(old_value)
            if _identical(old_value, new_value):
                return self._emit(unchanged_node(path, kind, MAX_DEPTH_REACHED, MAX_DEPTH_REACHED))
            return self._emit(modified_node(path, kind, MAX_DEPTH_REACHED, MAX_DEPTH_REACHED))

        marked = []
        if self.options.detect_cycles:
            for value in (old_value, new_value):
                if is_composite(classify(value)) and id(value) not in self._on_path:
                    self._on_path.add(id(value))
                    marked.append(id(value))

        try:
            return self._dispatch(old_value, new_value, path)
        finally:
            for ident in marked:
                self._on_path.discard(ident)

    def _dispatch(self, old_value: Any, new_value: Any, path: tuple) -> DiffNode:
        old_kind = classify(old_value)
        new_kind = classify(new_value)

        # A change of kind is a leaf, even between two containers
        if old_kind != new_kind:
            return self._emit(modified_node(path, old_kind, old_value, new_value))

        handler = _HANDLERS.get(old_kind)
        if handler is None:
            raise AssertionError(f"Unsupported value kind: {old_kind!r}")
        return getattr(self, handler)(old_value, new_value, path, old_kind)

    def _diff_scalar(self, old_value: Any, new_value: Any, path: tuple, kind: ValueKind) -> DiffNode:
        if old_value is new_value or primitive_equal(old_value, new_value):
            return self._emit(unchanged_node(path, kind, old_value, new_value))
        return self._emit(modified_node(path, kind, old_value, new_value))

    def _diff_normalized(self, old_value: Any, new_value: Any, path: tuple, kind: ValueKind) -> DiffNode:
        if old_value is new_value or normalize(old_value, kind) == normalize(new_value, kind):
            return self._emit(unchanged_node(path, kind, old_value, new_value))
        return self._emit(modified_node(path, kind, old_value, new_value))

    def _diff_object(self, old_value: Any, new_value: Any, path: tuple, kind: ValueKind) -> DiffNode:
        old_entries = object_entries(old_value)
        new_entries = object_entries(new_value)
        ignore_keys = self.options.ignore_keys

        all_keys = list(old_entries)
        all_keys.extend(key for key in new_entries if key not in old_entries)

        children = []
        for key in all_keys:
            segment = str(key)
            if segment in ignore_keys:
                continue

            child_path = path + (segment,)
            if key not in new_entries:
                old_child = old_entries[key]
                children.append(self._emit(deleted_node(child_path, classify(old_child), old_child)))
            elif key not in old_entries:
                new_child = new_entries[key]
                children.append(self._emit(added_node(child_path, classify(new_child), new_child)))
            else:
                children.append(self.diff_at(old_entries[key], new_entries[key], child_path))

        return self._composite(path, kind, old_value, new_value, children)

    def _diff_array(self, old_value: Any, new_value: Any, path: tuple, kind: ValueKind) -> DiffNode:
        old_items = list(old_value)
        new_items = list(new_value)

        if self.options.sequence_diff_mode == SequenceDiffMode.LCS:
            children = self._align_items(old_items, new_items, path)
        else:
            children = self._positional_items(old_items, new_items, path)

        return self._composite(path, kind, old_value, new_value, children)

    def _align_items(self, old_items: list, new_items: list, path: tuple) -> list[DiffNode]:
        children = []
        old_index = 0
        new_index = 0

        for op in align(old_items, new_items):
            if op.op == EditOpType.KEEP:
                children.append(self.diff_at(
                    old_items[old_index], new_items[new_index], path + (str(new_index),)
                ))
                old_index += 1
                new_index += 1
            elif op.op == EditOpType.ADD:
                item = new_items[new_index]
                children.append(self._emit(added_node(path + (str(new_index),), classify(item), item)))
                new_index += 1
            elif op.op == EditOpType.DELETE:
                item = old_items[old_index]
                children.append(self._emit(deleted_node(path + (str(old_index),), classify(item), item)))
                old_index += 1
            elif op.op == EditOpType.REPLACE:
                children.append(self._emit(modified_node(
                    path + (str(new_index),), classify(op.value), op.value, op.new_value
                )))
                old_index += 1
                new_index += 1
            else:
                raise AssertionError(f"Unsupported edit op: {op.op!r}")

        return children

    def _positional_items(self, old_items: list, new_items: list, path: tuple) -> list[DiffNode]:
        children = []

        for i in range(max(len(old_items), len(new_items))):
            child_path = path + (str(i),)
            if i >= len(new_items):
                children.append(self._emit(deleted_node(child_path, classify(old_items[i]), old_items[i])))
            elif i >= len(old_items):
                children.append(self._emit(added_node(child_path, classify(new_items[i]), new_items[i])))
            else:
                children.append(self.diff_at(old_items[i], new_items[i], child_path))

        return children

    def _composite(
        self,
        path: tuple,
        kind: ValueKind,
        old_value: Any,
        new_value: Any,
        children: list[DiffNode],
    ) -> DiffNode:
        if any(child.classification != Classification.UNCHANGED for child in children):
            return self._emit(modified_node(path, kind, old_value, new_value, children))
        return self._emit(unchanged_node(path, kind, old_value, new_value, children))


def diff_at(old_value: Any, new_value: Any, path: Sequence[str] = (), options: Optional[DiffOptions] = None) -> DiffNode:
    """Diff two values as if they sat at path inside a larger tree."""
    return DiffEngine(options).diff_at(old_value, new_value, path)


def compare(old_value: Any, new_value: Any, options: Optional[DiffOptions] = None) -> DiffResult:
    """
    Main entry point for comparing two values.

    Args:
        old_value: The baseline/previous value
        new_value: The new/current value
        options:   Optional DiffOptions; invalid options raise
                   DiffConfigError before any comparison work

    Returns:
        DiffResult with the diff tree and per-classification counts
    """
    engine = DiffEngine(options)
    result = engine.compute(old_value, new_value)

    logger.debug(
        f"Compared {result.root.value_kind.value} values: "
        f"+{result.stats.added} -{result.stats.deleted} "
        f"~{result.stats.modified} ={result.stats.unchanged}"
    )
    return result
