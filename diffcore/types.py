"""
Core types for the TreeDiff engine.

Every node of a diff tree is a DiffNode tagged with exactly one
Classification and one ValueKind. Absent old/new values are marked
with MISSING, which is distinct from None (null) and UNDEFINED.
"""
from typing import Any, Optional
from dataclasses import dataclass, field
from enum import Enum


class Classification(str, Enum):
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class ValueKind(str, Enum):
    PRIMITIVE = "primitive"
    OBJECT = "object"
    ARRAY = "array"
    FUNCTION = "function"
    DATE = "date"
    REGEXP = "regexp"
    UNDEFINED = "undefined"
    NULL = "null"
    SYMBOL = "symbol"


class SequenceDiffMode(str, Enum):
    LCS = "lcs"
    POSITIONAL = "positional"


class DiffError(Exception):
    """Base class for diff engine errors."""


class DiffConfigError(DiffError, ValueError):
    """Raised when DiffOptions hold an invalid value."""


class _Missing:
    """Marks an old/new value that is absent (not merely empty)."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


class _Undefined:
    """The undefined value. Compares only to itself."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()
UNDEFINED: Any = _Undefined()


class Symbol:
    """
    A unique, description-bearing token.

    Two symbols are never the same object, but normalization only
    looks at the description, so Symbol("id") and Symbol("id") diff
    as unchanged.
    """
    __slots__ = ("description",)

    def __init__(self, description: Optional[str] = None):
        self.description = description

    def __str__(self) -> str:
        return f"Symbol({self.description if self.description is not None else ''})"

    def __repr__(self) -> str:
        return str(self)


CIRCULAR_REFERENCE = "[Circular Reference]"
MAX_DEPTH_REACHED = "[Max Depth Reached]"


@dataclass(frozen=True)
class DiffNode:
    """A single node of the diff tree."""
    classification: Classification
    path: tuple
    value_kind: ValueKind
    old_value: Any = MISSING
    new_value: Any = MISSING
    children: Optional[tuple] = None

    @property
    def has_old_value(self) -> bool:
        return self.old_value is not MISSING

    @property
    def has_new_value(self) -> bool:
        return self.new_value is not MISSING

    @property
    def is_changed(self) -> bool:
        return self.classification != Classification.UNCHANGED

    def to_dict(self, include_values: bool = True) -> dict:
        """Convert to a plain dictionary for JSON serialization."""
        result = {
            "type": self.classification.value,
            "path": list(self.path),
            "value_type": self.value_kind.value,
        }

        if include_values:
            if self.has_old_value:
                result["old_value"] = self.old_value
            if self.has_new_value:
                result["new_value"] = self.new_value

        if self.children is not None:
            result["children"] = [c.to_dict(include_values) for c in self.children]

        return result


@dataclass
class DiffStats:
    """Per-classification node counts of a diff tree."""
    added: int = 0
    deleted: int = 0
    modified: int = 0
    unchanged: int = 0

    @property
    def total(self) -> int:
        return self.added + self.deleted + self.modified + self.unchanged

    def record(self, classification: Classification) -> None:
        if classification == Classification.ADDED:
            self.added += 1
        elif classification == Classification.DELETED:
            self.deleted += 1
        elif classification == Classification.MODIFIED:
            self.modified += 1
        else:
            self.unchanged += 1

    def to_dict(self) -> dict:
        return {
            "added": self.added,
            "deleted": self.deleted,
            "modified": self.modified,
            "unchanged": self.unchanged,
        }


@dataclass
class DiffResult:
    """Result of comparing two values."""
    root: DiffNode
    stats: DiffStats = field(default_factory=DiffStats)

    @property
    def is_identical(self) -> bool:
        return self.root.classification == Classification.UNCHANGED

    def to_dict(self, include_values: bool = True) -> dict:
        return {
            "root": self.root.to_dict(include_values),
            "stats": self.stats.to_dict(),
        }


@dataclass
class DiffOptions:
    """
    Caller-supplied comparison options.

    max_depth:          stop recursing once a path has this many segments
                        (None means unbounded)
    ignore_keys:        object keys skipped entirely
    sequence_diff_mode: "lcs" aligns arrays, "positional" compares by index
    detect_cycles:      guard against reference cycles in the input
    """
    max_depth: Optional[int] = None
    ignore_keys: frozenset = field(default_factory=frozenset)
    sequence_diff_mode: SequenceDiffMode = SequenceDiffMode.LCS
    detect_cycles: bool = True

    def validate(self) -> "DiffOptions":
        """
        Check every field and return a normalized copy.

        Raises DiffConfigError on the first invalid field. Values are
        never clamped.
        """
        max_depth = self.max_depth
        if max_depth is not None:
            if isinstance(max_depth, bool) or not isinstance(max_depth, int):
                raise DiffConfigError(
                    f"max_depth must be a non-negative integer or None, got {max_depth!r}"
                )
            if max_depth < 0:
                raise DiffConfigError(f"max_depth must be non-negative, got {max_depth}")

        if isinstance(self.ignore_keys, str):
            raise DiffConfigError("ignore_keys must be a collection of strings, not a string")
        try:
            ignore_keys = frozenset(self.ignore_keys or ())
        except TypeError:
            raise DiffConfigError(
                f"ignore_keys must be a collection of strings, got {self.ignore_keys!r}"
            )
        for key in ignore_keys:
            if not isinstance(key, str):
                raise DiffConfigError(f"ignore_keys entries must be strings, got {key!r}")

        try:
            mode = SequenceDiffMode(self.sequence_diff_mode)
        except ValueError:
            allowed = ", ".join(m.value for m in SequenceDiffMode)
            raise DiffConfigError(
                f"sequence_diff_mode must be one of {allowed}, got {self.sequence_diff_mode!r}"
            )

        if not isinstance(self.detect_cycles, bool):
            raise DiffConfigError(f"detect_cycles must be a bool, got {self.detect_cycles!r}")

        return DiffOptions(
            max_depth=max_depth,
            ignore_keys=ignore_keys,
            sequence_diff_mode=mode,
            detect_cycles=self.detect_cycles,
        )
