"""
JSON input utilities for TreeDiff.

Inputs arrive as text (editor contents, uploads, files on disk) and
are validated and parsed here before they reach compare().
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass
class JsonValidation:
    """Result of validating a JSON document."""
    is_valid: bool
    error: Optional[str] = None
    value: Any = None
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> dict:
        result = {"is_valid": self.is_valid}
        if self.error is not None:
            result["error"] = self.error
            result["line"] = self.line
            result["column"] = self.column
        return result


@dataclass
class ParsedDocument:
    """A parsed JSON document ready for comparison."""
    filename: str
    value: Any
    file_path: Optional[str] = None


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _loads(text: str) -> Any:
    # Python's json accepts NaN/Infinity by default; strict JSON does not
    return json.loads(text, parse_constant=_reject_constant)


def validate_json(text: str) -> JsonValidation:
    """
    Validate JSON text.

    Blank or whitespace-only text counts as valid (nothing entered
    yet). NaN and Infinity literals are rejected.
    """
    if text is None or not text.strip():
        return JsonValidation(is_valid=True)

    try:
        value = _loads(text)
    except json.JSONDecodeError as e:
        return JsonValidation(
            is_valid=False,
            error=f"{e.msg} (line {e.lineno}, column {e.colno})",
            line=e.lineno,
            column=e.colno,
        )
    except ValueError as e:
        return JsonValidation(is_valid=False, error=str(e))

    return JsonValidation(is_valid=True, value=value)


def format_json(text: str, indent: int = 2) -> str:
    """Pretty-print JSON text. Invalid or blank input is returned unchanged."""
    if text is None or not text.strip():
        return text

    try:
        value = _loads(text)
    except ValueError:
        return text

    return json.dumps(value, indent=indent, ensure_ascii=False)


def parse_json_content(content: str, filename: str) -> Optional[ParsedDocument]:
    """
    Parse JSON content directly (for API uploads).

    Args:
        content: JSON string content
        filename: Original filename

    Returns:
        ParsedDocument or None if parsing fails
    """
    try:
        value = _loads(content)
    except ValueError as e:
        logger.warning(f"Error parsing JSON content from {filename}: {e}")
        return None

    return ParsedDocument(filename=filename, value=value)


def parse_json_file(file_path: str) -> Optional[ParsedDocument]:
    """
    Parse a JSON file from disk.

    Args:
        file_path: Path to the JSON file

    Returns:
        ParsedDocument or None if the file is missing or not valid JSON
    """
    path = Path(file_path)

    if not path.is_file():
        logger.warning(f"File not found: {file_path}")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            value = _loads(f.read())
    except (ValueError, OSError) as e:
        logger.warning(f"Error parsing {file_path}: {e}")
        return None

    return ParsedDocument(
        filename=path.name,
        value=value,
        file_path=str(path.absolute()),
    )
