"""
Tests for value classification, normalization and display formatting.
"""
import re
import sys
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

import pytest

from diffcore.types import ValueKind, Symbol, UNDEFINED
from diffcore.normalizer import (
    classify,
    object_entries,
    normalize,
    normalize_function,
    normalize_date,
    normalize_regexp,
    normalize_symbol,
    regexp_flags,
    primitive_equal,
    serialize,
)


def _make_handler():
    def handler(x):
        return x + 1
    return handler


def _make_spaced_handler():
    def handler(x):
        return   x  +  1
    return handler


def _make_other_handler():
    def handler(x):
        return x + 2
    return handler


ADD_ONE = lambda x: x + 1  # noqa: E731
IDENTITY, INCREMENT = (lambda x: x), (lambda x: x + 1)
DOUBLE_A, DOUBLE_B = (lambda x: x * 2), (lambda x: x * 2)
MAKE_ADDER = lambda n: lambda x: x + n  # noqa: E731


@dataclass
class Point:
    x: int
    y: int


class Slotted:
    __slots__ = ("a", "b")

    def __init__(self, a):
        self.a = a


class TestClassify:

    @pytest.mark.parametrize("value,expected", [
        (None, ValueKind.NULL),
        (UNDEFINED, ValueKind.UNDEFINED),
        (Symbol("id"), ValueKind.SYMBOL),
        (42, ValueKind.PRIMITIVE),
        (4.2, ValueKind.PRIMITIVE),
        ("text", ValueKind.PRIMITIVE),
        (True, ValueKind.PRIMITIVE),
        (b"raw", ValueKind.PRIMITIVE),
        ({1, 2}, ValueKind.PRIMITIVE),
        (len, ValueKind.FUNCTION),
        (lambda: 1, ValueKind.FUNCTION),
        (datetime(2024, 1, 1), ValueKind.DATE),
        (date(2024, 1, 1), ValueKind.DATE),
        (re.compile("a+"), ValueKind.REGEXP),
        ([1, 2], ValueKind.ARRAY),
        ((1, 2), ValueKind.ARRAY),
        (range(3), ValueKind.ARRAY),
        ({"a": 1}, ValueKind.OBJECT),
        (Point(1, 2), ValueKind.OBJECT),
    ])
    def test_kinds(self, value, expected):
        assert classify(value) == expected

    @pytest.mark.parametrize("value", [timedelta(days=1), time(1, 30), object()])
    def test_opaque_values_are_primitive(self, value):
        assert classify(value) == ValueKind.PRIMITIVE

    def test_slotted_instance_is_object(self):
        assert classify(Slotted(1)) == ValueKind.OBJECT

    def test_every_value_has_one_kind(self):
        for value in [None, 0, "", [], {}, Symbol(), UNDEFINED, object()]:
            assert isinstance(classify(value), ValueKind)


class TestObjectEntries:

    def test_mapping(self):
        assert object_entries({"a": 1, "b": 2}) == {"a": 1, "b": 2}

    def test_instance_attributes(self):
        assert object_entries(Point(1, 2)) == {"x": 1, "y": 2}

    def test_slots_skip_unset(self):
        assert object_entries(Slotted(5)) == {"a": 5}

    def test_plain_object_is_empty(self):
        assert object_entries(object()) == {}


class TestNormalizeFunction:

    def test_whitespace_is_collapsed(self):
        text = normalize_function(_make_spaced_handler())
        assert "  " not in text
        assert text == text.strip()
        assert text.startswith("def handler(x):")

    def test_same_source_different_whitespace_is_equal(self):
        assert normalize_function(_make_handler()) == normalize_function(_make_spaced_handler())

    def test_different_body_differs(self):
        assert normalize_function(_make_handler()) != normalize_function(_make_other_handler())

    def test_builtin_falls_back_to_name(self):
        assert normalize_function(len) == "builtins.len"

    def test_lambda_is_its_own_expression(self):
        assert normalize_function(ADD_ONE) == "lambda x: x + 1"

    def test_lambdas_sharing_a_line_differ(self):
        assert normalize_function(IDENTITY) != normalize_function(INCREMENT)

    def test_identical_lambdas_sharing_a_line_are_equal(self):
        assert normalize_function(DOUBLE_A) == normalize_function(DOUBLE_B)

    @pytest.mark.skipif(sys.version_info < (3, 11), reason="needs code positions")
    def test_lambdas_sharing_a_line_keep_their_own_text(self):
        assert normalize_function(IDENTITY) == "lambda x: x"
        assert normalize_function(INCREMENT) == "lambda x: x + 1"

    @pytest.mark.skipif(sys.version_info < (3, 11), reason="needs code positions")
    def test_nested_lambdas(self):
        assert normalize_function(MAKE_ADDER) == "lambda n: lambda x: x + n"
        assert normalize_function(MAKE_ADDER(1)) == "lambda x: x + n"


class TestNormalizeDate:

    def test_epoch(self):
        assert normalize_date(datetime(1970, 1, 1, tzinfo=timezone.utc)) == 0

    def test_plain_date_is_utc_midnight(self):
        assert normalize_date(date(1970, 1, 2)) == 86400 * 1_000_000

    def test_naive_is_read_as_utc(self):
        naive = datetime(2024, 1, 1, 12, 0)
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert normalize_date(naive) == normalize_date(aware)

    def test_timezone_independent(self):
        utc = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
        plus_one = datetime(2024, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=1)))
        assert normalize_date(utc) == normalize_date(plus_one)

    def test_microseconds_are_kept(self):
        a = datetime(2024, 1, 1, 0, 0, 0, 1)
        b = datetime(2024, 1, 1, 0, 0, 0, 2)
        assert normalize_date(b) - normalize_date(a) == 1


class TestNormalizeRegexp:

    def test_source_and_flags(self):
        assert normalize_regexp(re.compile("a+", re.IGNORECASE)) == "/a+/i"

    def test_implicit_unicode_flag_is_omitted(self):
        assert normalize_regexp(re.compile("test")) == "/test/"

    def test_flags_are_sorted(self):
        assert regexp_flags(re.compile("x", re.MULTILINE | re.IGNORECASE | re.DOTALL)) == "ims"

    def test_flag_difference_matters(self):
        assert normalize_regexp(re.compile("a", re.I)) != normalize_regexp(re.compile("a", re.M))

    def test_bytes_pattern_differs_from_str(self):
        assert normalize_regexp(re.compile(b"a")) != normalize_regexp(re.compile("a"))


class TestNormalizeSymbol:

    def test_equal_descriptions_normalize_equal(self):
        assert normalize_symbol(Symbol("id")) == normalize_symbol(Symbol("id"))

    def test_description_form(self):
        assert normalize_symbol(Symbol("id")) == "Symbol(id)"
        assert normalize_symbol(Symbol()) == "Symbol()"


class TestNormalizeDispatch:

    def test_primitives_pass_through(self):
        assert normalize(5, ValueKind.PRIMITIVE) == 5

    def test_dispatches_by_kind(self):
        assert normalize(Symbol("s"), ValueKind.SYMBOL) == "Symbol(s)"
        assert normalize(re.compile("a"), ValueKind.REGEXP) == "/a/"


class TestPrimitiveEqual:

    def test_same_type_and_value(self):
        assert primitive_equal("a", "a")
        assert primitive_equal(1, 1)

    def test_type_matters(self):
        assert not primitive_equal(1, True)
        assert not primitive_equal(1, 1.0)

    def test_nan_is_not_equal_to_another_nan(self):
        assert not primitive_equal(float("nan"), float("nan"))


class TestSerialize:

    @pytest.mark.parametrize("value,kind,expected", [
        ("hi", ValueKind.PRIMITIVE, '"hi"'),
        (3, ValueKind.PRIMITIVE, "3"),
        (None, ValueKind.NULL, "null"),
        (UNDEFINED, ValueKind.UNDEFINED, "undefined"),
        (datetime(2024, 1, 1), ValueKind.DATE, "2024-01-01T00:00:00"),
        (re.compile("a", re.I), ValueKind.REGEXP, "/a/i"),
        (Symbol("x"), ValueKind.SYMBOL, "Symbol(x)"),
        ({"a": 1}, ValueKind.OBJECT, '{"a": 1}'),
        ([1, 2], ValueKind.ARRAY, "[1, 2]"),
    ])
    def test_display_forms(self, value, kind, expected):
        assert serialize(value, kind) == expected

    def test_never_raises_on_cycles(self):
        cyclic = {}
        cyclic["self"] = cyclic
        assert isinstance(serialize(cyclic, ValueKind.OBJECT), str)

    def test_unserializable_values_fall_back(self):
        text = serialize({"point": Point(1, 2)}, ValueKind.OBJECT)
        assert "Point" in text

    def test_function_display_is_canonical_source(self):
        assert serialize(_make_handler(), ValueKind.FUNCTION).startswith("def handler")
