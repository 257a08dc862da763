"""Tests for value coercion and the merge rule."""

import math
from decimal import Decimal

import pytest

from xml_json_converter.api.parser import to_json
from xml_json_converter.tree.serializer import to_xml
from xml_json_converter.tree.values import (
    NumberKind,
    accumulate,
    integer_text,
    number_kind,
    string_to_number,
    string_to_value,
    to_json_string,
)


class TestStringToValue:
    """Test suite for text coercion."""

    @pytest.mark.parametrize("text,expected", [
        ("true", True),
        ("TRUE", True),
        ("False", False),
        ("null", None),
        ("NuLL", None),
        ("1234", 1234),
        ("-17", -17),
        ("0", 0),
        ("", ""),
        ("abc", "abc"),
        ("00", "00"),
        ("007", "007"),
        ("-007", "-007"),
        ("-", "-"),
        ("1.2.3", "1.2.3"),
        ("12abc", "12abc"),
        ("0x1F", "0x1F"),
    ])
    def test_coercion(self, text, expected):
        """Test the default coercion rules."""
        value = string_to_value(text)

        assert value == expected
        assert type(value) is type(expected)

    def test_decimal_keeps_precision(self):
        """Test that decimal literals are exact."""
        value = string_to_value("0.1000000000000000000001")

        assert isinstance(value, Decimal)
        assert value == Decimal("0.1000000000000000000001")
        assert str(value) == "0.1000000000000000000001"

    def test_exponent_is_decimal(self):
        """Test that exponent notation produces a Decimal."""
        value = string_to_value("1.5e3")

        assert isinstance(value, Decimal)
        assert value == 1500

    def test_negative_zero(self):
        """Test that negative zero keeps its sign."""
        value = string_to_value("-0")

        assert isinstance(value, float)
        assert value == 0.0
        assert math.copysign(1.0, value) == -1.0
        assert math.copysign(1.0, string_to_value("-0.0")) == -1.0

    def test_big_integer(self):
        """Test that integers beyond 64 bits are exact."""
        assert string_to_value("123456789012345678901234567890") == 123456789012345678901234567890

    def test_converter_overrides_rules(self):
        """Test that a converter replaces the default coercion."""
        assert string_to_value("1234", str) == "1234"
        assert string_to_value("true", len) == 4


class TestStringToNumber:
    """Test suite for numeric literal parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("1.5f", 1.5),
        ("2.5D", 2.5),
        ("1e2d", 100.0),
        ("0x1.8p1", 3.0),
        ("-0x1.0p-1", -0.5),
    ])
    def test_float_fallbacks(self, text, expected):
        """Test suffixed and hexadecimal floats."""
        value = string_to_number(text)

        assert isinstance(value, float)
        assert value == expected

    @pytest.mark.parametrize("text", ["00", "-01", "", "abc", "1.2.3", "1e400000f"])
    def test_invalid(self, text):
        """Test rejected literals."""
        with pytest.raises(ValueError):
            string_to_number(text)

    def test_leading_zero_message(self):
        """Test the leading zero message."""
        with pytest.raises(ValueError, match="has a leading zero"):
            string_to_number("0123")


class TestNumberKind:
    """Test suite for numeric subtype reporting."""

    @pytest.mark.parametrize("value,expected", [
        (0, NumberKind.INT32),
        (2147483647, NumberKind.INT32),
        (-2147483648, NumberKind.INT32),
        (2147483648, NumberKind.INT64),
        (-2147483649, NumberKind.INT64),
        (9223372036854775807, NumberKind.INT64),
        (-9223372036854775808, NumberKind.INT64),
        (9223372036854775808, NumberKind.BIG_INTEGER),
        (Decimal("1.5"), NumberKind.DECIMAL),
        (-0.0, NumberKind.FLOAT),
    ])
    def test_kinds(self, value, expected):
        """Test classification at the fixed-width boundaries."""
        assert number_kind(value) is expected

    def test_parsed_boundaries(self):
        """Test classification of parsed text."""
        assert number_kind(string_to_value("2147483647")) is NumberKind.INT32
        assert number_kind(string_to_value("2147483648")) is NumberKind.INT64

    @pytest.mark.parametrize("value", [True, "1", None])
    def test_non_numbers_rejected(self, value):
        """Test that non-numeric values raise TypeError."""
        with pytest.raises(TypeError):
            number_kind(value)


class TestAccumulate:
    """Test suite for the merge rule."""

    def test_first_second_and_third_writes(self):
        """Test value, promotion to list, then append."""
        obj = {}

        accumulate(obj, "k", 1)
        assert obj == {"k": 1}
        accumulate(obj, "k", 2)
        assert obj == {"k": [1, 2]}
        accumulate(obj, "k", 3)
        assert obj == {"k": [1, 2, 3]}

    def test_list_value_is_wrapped(self):
        """Test that a list stored under a new key is wrapped."""
        obj = {}

        accumulate(obj, "k", [1, 2])
        assert obj == {"k": [[1, 2]]}
        accumulate(obj, "k", 3)
        assert obj == {"k": [[1, 2], 3]}


class TestVeryLongIntegers:
    """Test suite for integers longer than the interpreter's str conversion limit."""

    DIGITS = "9" * 5000

    def test_parsed_as_big_integer(self):
        """Test that a very long literal is still an integer."""
        value = string_to_value(self.DIGITS)

        assert type(value) is int
        assert number_kind(value) is NumberKind.BIG_INTEGER
        assert value == 10 ** 5000 - 1

    def test_negative_literal(self):
        """Test a very long negative literal."""
        assert string_to_value("-" + self.DIGITS) == -(10 ** 5000 - 1)

    def test_rendered_as_json(self):
        """Test that the JSON text keeps every digit."""
        value = string_to_value(self.DIGITS)

        assert to_json_string({"n": value}) == '{"n":' + self.DIGITS + "}"
        assert integer_text(-value) == "-" + self.DIGITS

    def test_round_trip_through_xml(self):
        """Test serializing to XML and parsing the result back."""
        value = string_to_value(self.DIGITS)

        text = to_xml({"n": value})

        assert text == "<n>" + self.DIGITS + "</n>"
        assert to_json(text) == {"n": value}


class TestToJsonString:
    """Test suite for compact JSON rendering."""

    def test_nested_tree(self):
        """Test rendering of every value type."""
        tree = {
            "a": [1, Decimal("1.50"), None, True, False, "x\"y"],
            "b": {"c": -0.0},
        }

        assert to_json_string(tree) == '{"a":[1,1.50,null,true,false,"x\\"y"],"b":{"c":-0.0}}'

    def test_non_ascii_kept(self):
        """Test that text is not ASCII-escaped."""
        assert to_json_string("é") == '"é"'

    def test_non_finite_rejected(self):
        """Test that NaN and infinity are rejected."""
        with pytest.raises(ValueError, match="non-finite"):
            to_json_string({"x": float("nan")})
