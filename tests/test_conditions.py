"""
Tests for the condition evaluator
"""
import math

import pytest

from field_validation.conditions import Operator, evaluate, to_number


class TestEvaluate:
    """Test the six comparison operators."""

    @pytest.mark.parametrize("operator,left,right,expected", [
        (Operator.LT, 1, 2, True),
        (Operator.LT, 2, 2, False),
        (Operator.LE, 2, 2, True),
        (Operator.GT, 10, 9, True),
        (Operator.GT, 9, 10, False),
        (Operator.GE, 5, 5, True),
        (Operator.EQ, 3.0, 3, True),
        (Operator.EQ, 3, 4, False),
        (Operator.NE, 3, 4, True),
        (Operator.NE, 3, 3, False),
    ])
    def test_operators(self, operator, left, right, expected):
        """Test each operator against numeric operands."""
        assert evaluate(operator, left, right) is expected

    def test_magnitude_not_lexical(self):
        """Test 9 < 10 numerically, which a string comparison gets wrong."""
        assert evaluate(Operator.LT, to_number("9"), to_number("10"))

    def test_nan_fails_comparisons(self):
        """Test NaN fails every operator but !=."""
        for operator in (Operator.LT, Operator.LE, Operator.GT, Operator.GE, Operator.EQ):
            assert evaluate(operator, math.nan, 1) is False
        assert evaluate(Operator.NE, math.nan, 1) is True


class TestOperatorParse:
    """Test operator symbol resolution."""

    def test_symbols(self):
        """Test canonical symbols."""
        assert Operator.parse(">=") is Operator.GE
        assert Operator.parse("!=") is Operator.NE

    def test_legacy_aliases(self):
        """Test '=' and '<>' spellings."""
        assert Operator.parse("=") is Operator.EQ
        assert Operator.parse("<>") is Operator.NE

    def test_unknown_symbol(self):
        """Test unknown symbols raise ValueError."""
        with pytest.raises(ValueError):
            Operator.parse("~")


class TestToNumber:
    """Test parseFloat-style conversion."""

    @pytest.mark.parametrize("text,expected", [
        ("5", 5.0),
        ("  3.5", 3.5),
        ("-2", -2.0),
        ("+7", 7.0),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("12px", 12.0),
        ("4.2.1", 4.2),
    ])
    def test_numeric_prefix(self, text, expected):
        """Test the leading numeric prefix is used."""
        assert to_number(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "px12", None, "-", "."])
    def test_not_a_number(self, text):
        """Test input without a numeric prefix becomes NaN."""
        assert math.isnan(to_number(text))

    def test_infinity(self):
        """Test Infinity spellings."""
        assert to_number("Infinity") == math.inf
        assert to_number("-Infinity") == -math.inf

    def test_numbers_pass_through(self):
        """Test int and float inputs are accepted as-is."""
        assert to_number(15) == 15.0
        assert to_number(2.5) == 2.5
