"""
Tests for value classification, coercion and operators
"""

import math

import pytest
from pyvox.values import (
    OperandTypeError,
    arithmetic,
    classify_literal,
    compare,
    format_value,
    logic,
    sniff_input,
    truthy,
)


class TestLiterals:

    def test_classification(self):
        assert classify_literal("42") == 42
        assert classify_literal("-7") == -7
        assert classify_literal("4.5") == 4.5
        assert classify_literal(".5") == 0.5
        assert classify_literal("TrUe") is True
        assert classify_literal("false") is False
        assert classify_literal('"a\\tb\\n\\"q\\" \\\\"') == 'a\tb\n"q" \\'
        assert classify_literal('""') == ""

    def test_names_are_not_literals(self):
        assert classify_literal("x") is None
        assert classify_literal("%t3") is None
        assert classify_literal("4.") is None

    def test_out_of_range_integer_is_a_name(self):
        assert classify_literal("2147483647") == 2147483647
        assert classify_literal("-2147483648") == -2147483648
        assert classify_literal("2147483648") is None
        assert classify_literal("-99999999999") is None

    def test_input_sniffing(self):
        assert sniff_input("12") == 12
        assert sniff_input("-1.25") == -1.25
        assert sniff_input("FALSE") is False
        assert sniff_input("hello world") == "hello world"
        assert sniff_input("") == ""
        assert sniff_input("2147483648") == "2147483648"

    def test_format(self):
        assert format_value(None) == "null"
        assert format_value(True) == "true"
        assert format_value(7.0) == "7.0"
        assert format_value(math.nan) == "NaN"
        assert format_value(-math.inf) == "-Infinity"
        assert format_value(3) == "3"

    def test_float_exponent_notation(self):
        assert format_value(1e302) == "1.0E302"
        assert format_value(12345678.0) == "1.2345678E7"
        assert format_value(-2.5e10) == "-2.5E10"
        assert format_value(1e-5) == "1.0E-5"
        assert format_value(0.001) == "0.001"
        assert format_value(9999999.0) == "9999999.0"
        assert format_value(0.0) == "0.0"


class TestIntegerArithmetic:

    @pytest.mark.parametrize("l,r,q", [(7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3), (0, 5, 0)])
    def test_div_truncates(self, l, r, q):
        assert arithmetic("div", l, r) == q

    def test_div_by_zero_is_zero(self):
        assert arithmetic("div", 9, 0) == 0

    def test_mod(self):
        assert arithmetic("mod", -7, 2) == -1
        assert arithmetic("mod", 7, -2) == 1
        assert arithmetic("mod", 7, 0) == 7

    def test_power(self):
        assert arithmetic("power", 2, 10) == 1024
        assert arithmetic("power", 0, 0) == 1
        assert arithmetic("power", 5, -1) == 1

    def test_wraps_to_32_bits(self):
        assert arithmetic("power", 2, 31) == -2147483648
        assert arithmetic("power", 2, 32) == 0
        assert arithmetic("mul", 65536, 65536) == 0
        assert arithmetic("add", 2147483647, 1) == -2147483648
        assert arithmetic("sub", -2147483648, 1) == 2147483647
        assert arithmetic("div", -2147483648, -1) == -2147483648

    def test_null_is_zero(self):
        assert arithmetic("add", None, 5) == 5
        assert arithmetic("sub", None, None) == 0


class TestFloatArithmetic:

    def test_mixed_promotes(self):
        result = arithmetic("add", 3, 4.0)
        assert isinstance(result, float) and result == 7.0

    def test_div_by_zero_is_zero(self):
        assert arithmetic("div", 1.5, 0) == 0.0

    def test_mod_by_zero_returns_left(self):
        assert arithmetic("mod", 5.5, 0.0) == 5.5

    def test_mod_is_ieee_remainder(self):
        assert arithmetic("mod", 5.0, 3.0) == -1.0
        assert arithmetic("mod", 7.5, 2.0) == math.remainder(7.5, 2.0)

    def test_power(self):
        assert arithmetic("power", 0.0, 0.0) == 1.0
        assert arithmetic("power", 2.0, 3.0) == pytest.approx(8.0)
        assert arithmetic("power", 0.0, 2.0) == 0.0
        assert math.isnan(arithmetic("power", -8.0, 0.5))

    def test_nan_is_not_equal_to_itself(self):
        nan = arithmetic("power", -2.0, 1.5)
        assert compare("eq", nan, nan) is False


class TestTextAndTypeErrors:

    def test_text_concatenation(self):
        assert arithmetic("add", "n=", 3) == "n=3"
        assert arithmetic("add", 2.5, "x") == "2.5x"
        assert arithmetic("add", "ok ", True) == "ok true"

    def test_other_ops_on_text_fail(self):
        with pytest.raises(OperandTypeError):
            arithmetic("sub", "a", 1)

    def test_boolean_arithmetic_fails(self):
        with pytest.raises(OperandTypeError):
            arithmetic("add", True, 1)
        with pytest.raises(OperandTypeError):
            arithmetic("mul", False, None)


class TestComparison:

    def test_nulls(self):
        assert compare("eq", None, None) is True
        assert compare("ne", None, None) is False
        assert compare("eq", None, 1) is False
        assert compare("ne", None, 1) is False
        assert compare("lt", None, 1) is True
        assert compare("gt", 1, None) is True
        assert compare("gt", None, 1) is False
        assert compare("le", None, 1) is True
        assert compare("ge", None, 1) is False
        assert compare("le", 1, None) is False
        assert compare("ge", 1, None) is True
        assert compare("le", None, None) is True
        assert compare("ge", None, None) is True
        assert compare("lt", None, None) is False
        assert compare("gt", None, None) is False

    def test_numbers_mixed(self):
        assert compare("eq", 2, 2.0) is True
        assert compare("lt", 1, 1.5) is True
        assert compare("lt", 2147483647, 1e300) is True

    def test_text(self):
        assert compare("lt", "apple", "banana") is True
        assert compare("eq", "a", "a") is True

    def test_booleans(self):
        assert compare("lt", False, True) is True
        assert compare("lt", True, False) is False
        assert compare("ge", True, True) is True

    def test_mixed_types_fall_back_to_text(self):
        assert compare("eq", 1, "1") is True
        assert compare("eq", True, "true") is True
        assert compare("lt", 10, "9") is True


class TestLogic:

    def test_truthiness(self):
        assert truthy(None) is False
        assert truthy(0) is False
        assert truthy(0.0) is False
        assert truthy("") is False
        assert truthy("0") is True
        assert truthy(-1) is True

    def test_and_or(self):
        assert logic("and", 1, "x") is True
        assert logic("and", 1, None) is False
        assert logic("or", 0, "") is False
        assert logic("or", None, 2.5) is True
