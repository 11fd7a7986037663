"""
Pydantic schemas for the TreeDiff API.
"""
from typing import Optional, Any
from pydantic import BaseModel, Field

from diffcore.types import DiffOptions, DiffResult


# ============================================================
# COMPARISON SCHEMAS
# ============================================================

class DiffOptionsSchema(BaseModel):
    """
    Comparison options. Omitted fields fall back to the server defaults.

    An explicit null max_depth means unbounded, even when the server
    sets a default depth.
    """
    max_depth: Optional[int] = Field(default=None, ge=0)
    ignore_keys: Optional[list[str]] = None
    sequence_diff_mode: Optional[str] = Field(default=None, pattern="^(lcs|positional)$")
    detect_cycles: Optional[bool] = None

    def to_options(self, defaults: DiffOptions) -> DiffOptions:
        return DiffOptions(
            max_depth=self.max_depth if "max_depth" in self.model_fields_set else defaults.max_depth,
            ignore_keys=(
                frozenset(self.ignore_keys) if self.ignore_keys is not None else defaults.ignore_keys
            ),
            sequence_diff_mode=self.sequence_diff_mode or defaults.sequence_diff_mode,
            detect_cycles=(
                self.detect_cycles if self.detect_cycles is not None else defaults.detect_cycles
            ),
        )


class ComparisonRequest(BaseModel):
    """Request to compare two values."""
    old_value: Any = None
    new_value: Any = None
    options: Optional[DiffOptionsSchema] = None


class DiffNodeSchema(BaseModel):
    type: str
    path: list[str]
    value_type: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    children: Optional[list["DiffNodeSchema"]] = None


class DiffStatsSchema(BaseModel):
    added: int = 0
    deleted: int = 0
    modified: int = 0
    unchanged: int = 0


class ComparisonResponse(BaseModel):
    is_identical: bool
    root: DiffNodeSchema
    stats: DiffStatsSchema
    before_file: Optional[str] = None
    after_file: Optional[str] = None

    @classmethod
    def from_result(cls, result: DiffResult, **extra) -> "ComparisonResponse":
        return cls(
            is_identical=result.is_identical,
            root=DiffNodeSchema.model_validate(result.root.to_dict()),
            stats=DiffStatsSchema(**result.stats.to_dict()),
            **extra,
        )


DiffNodeSchema.model_rebuild()


# ============================================================
# VALIDATION SCHEMAS
# ============================================================

class ValidationRequest(BaseModel):
    text: str
    indent: int = Field(default=2, ge=0, le=8)


class ValidationResponse(BaseModel):
    is_valid: bool
    error: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    formatted: Optional[str] = None
