# TreeDiff v0.1.0
"""
Core package for the TreeDiff engine.
Contains classification, sequence alignment, the diff engine and
result helpers.
"""
from diffcore.types import (
    Classification,
    ValueKind,
    SequenceDiffMode,
    DiffNode,
    DiffStats,
    DiffResult,
    DiffOptions,
    DiffError,
    DiffConfigError,
    Symbol,
    MISSING,
    UNDEFINED,
    CIRCULAR_REFERENCE,
    MAX_DEPTH_REACHED,
)
from diffcore.normalizer import (
    classify,
    normalize,
    serialize,
)
from diffcore.lcs import (
    EditOp,
    EditOpType,
    align,
    is_equal,
)
from diffcore.diff import (
    DiffEngine,
    compare,
    diff_at,
)
from diffcore.result import (
    build_result,
    iter_nodes,
    compute_stats,
    count_nodes,
    max_depth,
    find_by_path,
    filter_nodes,
    clone,
    validate_node,
    build_path_expression,
    build_readable_path,
    result_from_dict,
)
from diffcore.file_parser import (
    validate_json,
    format_json,
    parse_json_content,
    parse_json_file,
    JsonValidation,
    ParsedDocument,
)

__all__ = [
    "Classification",
    "ValueKind",
    "SequenceDiffMode",
    "DiffNode",
    "DiffStats",
    "DiffResult",
    "DiffOptions",
    "DiffError",
    "DiffConfigError",
    "Symbol",
    "MISSING",
    "UNDEFINED",
    "CIRCULAR_REFERENCE",
    "MAX_DEPTH_REACHED",
    "classify",
    "normalize",
    "serialize",
    "EditOp",
    "EditOpType",
    "align",
    "is_equal",
    "DiffEngine",
    "compare",
    "diff_at",
    "build_result",
    "iter_nodes",
    "compute_stats",
    "count_nodes",
    "max_depth",
    "find_by_path",
    "filter_nodes",
    "clone",
    "validate_node",
    "build_path_expression",
    "build_readable_path",
    "result_from_dict",
    "validate_json",
    "format_json",
    "parse_json_content",
    "parse_json_file",
    "JsonValidation",
    "ParsedDocument",
]
