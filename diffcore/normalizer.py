"""
Value classification and normalization.

classify() maps any Python value onto the closed ValueKind set.
The normalize_* helpers produce comparable canonical forms for the
extended kinds (callables, dates, patterns, symbols); serialize()
produces display strings and is never used for equality.
"""
from typing import Any
from collections import abc
from datetime import date, datetime, timezone
import ast
import hashlib
import inspect
import json
import numbers
import re

from diffcore.types import ValueKind, Symbol, UNDEFINED


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_WHITESPACE = re.compile(r"\s+")

# Single-letter codes for compiled pattern flags. re.UNICODE is implied
# for str patterns and is left out of the canonical form.
_FLAG_LETTERS = (
    (re.ASCII, "a"),
    (re.IGNORECASE, "i"),
    (re.LOCALE, "L"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)

_SCALAR_TYPES = (str, bytes, bytearray, bool, numbers.Number)


def classify(value: Any) -> ValueKind:
    """Classify a value. First match wins."""
    if value is None:
        return ValueKind.NULL
    if value is UNDEFINED:
        return ValueKind.UNDEFINED
    if isinstance(value, Symbol):
        return ValueKind.SYMBOL
    if isinstance(value, _SCALAR_TYPES):
        return ValueKind.PRIMITIVE
    if callable(value):
        return ValueKind.FUNCTION
    if isinstance(value, date):
        return ValueKind.DATE
    if isinstance(value, re.Pattern):
        return ValueKind.REGEXP
    if isinstance(value, (list, tuple, abc.Sequence)):
        return ValueKind.ARRAY
    if isinstance(value, abc.Set):
        return ValueKind.PRIMITIVE
    if not _has_members(value):
        # Opaque values such as timedelta or time compare with ==
        return ValueKind.PRIMITIVE
    return ValueKind.OBJECT


def is_composite(kind: ValueKind) -> bool:
    return kind in (ValueKind.OBJECT, ValueKind.ARRAY)


def _has_members(value: Any) -> bool:
    """True when object_entries() can see into value."""
    if hasattr(value, "keys") and hasattr(value, "__getitem__"):
        return True
    if hasattr(value, "__dict__"):
        return True
    return any("__slots__" in cls.__dict__ for cls in type(value).__mro__ if cls is not object)


def object_entries(value: Any) -> dict:
    """
    Return the members of an OBJECT-kind value as a dict.

    Mappings yield their items, plain instances their attribute dict,
    slotted instances their populated slots.
    """
    if hasattr(value, "keys") and hasattr(value, "__getitem__"):
        return {key: value[key] for key in value.keys()}

    try:
        return dict(vars(value))
    except TypeError:
        pass

    entries = {}
    for cls in type(value).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in entries or name in ("__dict__", "__weakref__"):
                continue
            if hasattr(value, name):
                entries[name] = getattr(value, name)
    return entries


def normalize_function(fn: Any) -> str:
    """
    Canonical source text of a callable.

    Whitespace runs collapse to a single space. A lambda is reduced to
    its own expression rather than the whole line it sits on. Callables
    without retrievable source (builtins, C extensions) fall back to
    their qualified name.
    """
    try:
        if getattr(fn, "__name__", None) == "<lambda>" and hasattr(fn, "__code__"):
            source = _lambda_source(fn)
        else:
            source = inspect.getsource(fn)
    except (OSError, TypeError):
        module = getattr(fn, "__module__", None) or ""
        name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
        source = f"{module}.{name}" if module else name
    return _WHITESPACE.sub(" ", source).strip()


def _lambda_source(fn: Any) -> str:
    """
    Source text of a single lambda.

    inspect hands back the whole enclosing statement, which may hold
    several lambdas. The one starting on the code object's first line is
    picked out of the parsed statement; instruction positions decide
    between neighbours on the same line. When it still cannot be
    isolated the statement text is kept with a bytecode digest appended.
    """
    lines, first_line = inspect.getsourcelines(fn)
    source = "".join(lines)
    text = source
    if text[:1].isspace():
        # Indented statement, parse it as a block body
        text = "if 1:\n" + text
        first_line -= 1

    try:
        tree = ast.parse(text)
    except (SyntaxError, ValueError):
        return f"{source.strip()} #{_code_digest(fn.__code__)}"

    line = fn.__code__.co_firstlineno - first_line + 1
    candidates = [
        node for node in ast.walk(tree)
        if isinstance(node, ast.Lambda) and node.lineno == line
    ]
    if len(candidates) > 1:
        candidates = _owning_lambdas(fn.__code__, candidates, first_line - 1)

    if len(candidates) == 1:
        segment = ast.get_source_segment(text, candidates[0])
        if segment:
            return segment
    return f"{source.strip()} #{_code_digest(fn.__code__)}"


def _owning_lambdas(code: Any, candidates: list, line_offset: int) -> list:
    """Keep the innermost lambda whose body holds code's instructions."""
    positions = getattr(code, "co_positions", None)
    if positions is None:
        return candidates

    spots = [
        (lineno - line_offset, col)
        for lineno, _, col, _ in positions()
        if lineno is not None and col is not None
    ]
    owners = [
        node for node in candidates
        if any(
            (node.body.lineno, node.body.col_offset) <= spot < (node.body.end_lineno, node.body.end_col_offset)
            for spot in spots
        )
    ]
    # A nested lambda's body sits inside its parent's, so the latest start wins
    owners.sort(key=lambda node: (node.body.lineno, node.body.col_offset), reverse=True)
    return owners[:1]


def _code_digest(code: Any) -> str:
    digest = hashlib.sha1()
    stack = [code]
    while stack:
        current = stack.pop()
        digest.update(current.co_code)
        digest.update(repr(current.co_names).encode("utf-8", "backslashreplace"))
        for const in current.co_consts:
            if inspect.iscode(const):
                stack.append(const)
            else:
                digest.update(repr(const).encode("utf-8", "backslashreplace"))
    return digest.hexdigest()[:12]


def normalize_date(value: date) -> int:
    """Microseconds since the Unix epoch. Naive values are read as UTC."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds


def regexp_flags(pattern: re.Pattern) -> str:
    """Flag letters of a compiled pattern, in sorted order."""
    return "".join(sorted(letter for flag, letter in _FLAG_LETTERS if pattern.flags & flag))


def normalize_regexp(pattern: re.Pattern) -> str:
    """Pattern source and flags as a /source/flags literal."""
    source = pattern.pattern
    if isinstance(source, bytes):
        source = repr(source)
    return f"/{source}/{regexp_flags(pattern)}"


def normalize_symbol(symbol: Symbol) -> str:
    return str(symbol)


def normalize(value: Any, kind: ValueKind) -> Any:
    """Canonical comparable form of an extended-kind value."""
    if kind == ValueKind.FUNCTION:
        return normalize_function(value)
    if kind == ValueKind.DATE:
        return normalize_date(value)
    if kind == ValueKind.REGEXP:
        return normalize_regexp(value)
    if kind == ValueKind.SYMBOL:
        return normalize_symbol(value)
    return value


def primitive_equal(a: Any, b: Any) -> bool:
    """Primitives are equal when they share a type and compare equal."""
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    return bool(a == b)


def serialize(value: Any, kind: ValueKind) -> str:
    """Format a value for display. Never raises."""
    try:
        if kind == ValueKind.NULL:
            return "null"
        if kind == ValueKind.UNDEFINED:
            return "undefined"
        if kind == ValueKind.FUNCTION:
            return normalize_function(value)
        if kind == ValueKind.DATE:
            return value.isoformat()
        if kind == ValueKind.REGEXP:
            return normalize_regexp(value)
        if kind == ValueKind.SYMBOL:
            return normalize_symbol(value)
        if kind == ValueKind.PRIMITIVE and isinstance(value, (bytes, bytearray, set, frozenset)):
            return repr(value)
        return json.dumps(value, default=str)
    except Exception:
        pass

    try:
        return repr(value)
    except Exception:
        return f"<{type(value).__name__}>"
