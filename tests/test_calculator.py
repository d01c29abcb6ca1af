"""
Test Calculator Module
======================

Unit tests for extracting and evaluating single operations.
"""

import math

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from services import calculator


class TestEvaluate:
    """Tests for evaluate()."""

    @pytest.mark.parametrize("left, operator, right, expected", [
        (2, "+", 2, 4),
        (10, "-", 4, 6),
        (6, "*", 7, 42),
        (9, "/", 2, 4.5),
        (2, "^", 10, 1024),
    ])
    def test_operators(self, left, operator, right, expected):
        assert calculator.evaluate(left, operator, right) == expected

    def test_division_by_zero_is_nan(self):
        assert math.isnan(calculator.evaluate(5, "/", 0))

    def test_zero_divided(self):
        assert calculator.evaluate(0, "/", 5) == 0

    def test_overflow_is_infinite(self):
        assert calculator.evaluate(10, "^", 400) == math.inf

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            calculator.evaluate(1, "%", 2)


class TestExtract:
    """Tests for extract()."""

    def test_first_expression_wins(self):
        calc = calculator.extract("first 3 * 4 then 5 + 6")

        assert (calc.left, calc.operator, calc.right, calc.result) == (3, "*", 4, 12)

    def test_no_spaces(self):
        assert calculator.extract("8-3").result == 5

    def test_undefined(self):
        assert calculator.extract("1 / 0").undefined is True
        assert calculator.extract("1 / 1").undefined is False

    def test_nothing_to_extract(self):
        assert calculator.extract("please add these up") is None

    def test_ascii_digits_only(self):
        assert calculator.extract("add \u0662 + \u0662") is None


class TestFormatNumber:
    """Tests for format_number()."""

    @pytest.mark.parametrize("value, expected", [
        (4.0, "4"),
        (2.5, "2.5"),
        (-3.0, "-3"),
        (0.1 + 0.2, "0.30000000000000004"),
        (1 / 20000, "0.00005"),
        (1e-6, "0.000001"),
        (-2.5e-7, "-2.5e-7"),
        (1e21, "1e+21"),
        (1.5e22, "1.5e+22"),
        (123456.789, "123456.789"),
        (math.inf, "Infinity"),
        (math.nan, "NaN"),
    ])
    def test_format(self, value, expected):
        assert calculator.format_number(value) == expected

    def test_small_values_drop_exponent_padding(self):
        value = 1 / 3000000
        assert calculator.format_number(value) == repr(value).replace("e-07", "e-7")
        assert calculator.format_number(value).endswith("e-7")
