"""Tests for RoundingMode and rounded integer division."""

import decimal
from decimal import Decimal

import pytest

from fixedpoint.constants import INT64_MAX, INT64_MIN
from fixedpoint.errors import DivisionByZero, InexactResult, Overflow
from fixedpoint.rounding import RoundingMode, div_trunc, divide_longs, divide_rounded

R = RoundingMode


class TestRoundingMode:
    """Tests for the RoundingMode enum."""

    def test_ordinals_are_stable(self):
        """Ordinals are passed to the native extension and must not move."""
        assert [mode.value for mode in RoundingMode] == list(range(8))
        assert R.UP.value == 0
        assert R.HALF_EVEN.value == 6
        assert R.UNNECESSARY.value == 7

    def test_decimal_rounding_mapping(self):
        """Each mode maps to its decimal module constant."""
        assert R.HALF_EVEN.decimal_rounding == decimal.ROUND_HALF_EVEN
        assert R.FLOOR.decimal_rounding == decimal.ROUND_FLOOR
        assert R.UNNECESSARY.decimal_rounding is None

    def test_from_decimal(self):
        """decimal constants map back to RoundingMode."""
        assert RoundingMode.from_decimal(decimal.ROUND_HALF_UP) is R.HALF_UP
        assert RoundingMode.from_decimal(decimal.ROUND_CEILING) is R.CEILING

    def test_from_decimal_without_equivalent_raises(self):
        """ROUND_05UP has no RoundingMode counterpart."""
        with pytest.raises(ValueError):
            RoundingMode.from_decimal(decimal.ROUND_05UP)


class TestDivTrunc:
    """Tests for truncating division."""

    @pytest.mark.parametrize(
        "a,b,expected",
        [(7, 3, 2), (-7, 3, -2), (7, -3, -2), (-7, -3, 2), (6, 3, 2), (0, 5, 0)],
    )
    def test_truncates_toward_zero(self, a, b, expected):
        """Quotient is truncated toward zero for every sign combination."""
        assert div_trunc(a, b) == expected

    def test_zero_divisor_raises(self):
        """Division by zero raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            div_trunc(1, 0)

    def test_division_by_zero_is_zero_division_error(self):
        """DivisionByZero can be caught as the builtin ZeroDivisionError."""
        with pytest.raises(ZeroDivisionError):
            div_trunc(1, 0)


class TestDivideRounded:
    """Tests for divide_rounded against known tables."""

    @pytest.mark.parametrize(
        "a,b,rounding,expected",
        [
            (6, 4, R.HALF_EVEN, 2),
            (-6, 4, R.HALF_EVEN, -2),
            (10, 4, R.HALF_EVEN, 2),
            (-10, 4, R.HALF_EVEN, -2),
            (7, 4, R.HALF_UP, 2),
            (7, 4, R.HALF_DOWN, 2),
            (6, 4, R.HALF_UP, 2),
            (6, 4, R.HALF_DOWN, 1),
            (-6, 4, R.HALF_UP, -2),
            (-6, 4, R.HALF_DOWN, -1),
            (5, 4, R.UP, 2),
            (-5, 4, R.UP, -2),
            (5, 4, R.DOWN, 1),
            (-5, 4, R.DOWN, -1),
            (5, 4, R.CEILING, 2),
            (-5, 4, R.CEILING, -1),
            (5, 4, R.FLOOR, 1),
            (-5, 4, R.FLOOR, -2),
        ],
    )
    def test_table(self, a, b, rounding, expected):
        """Rounded quotients match the reference table."""
        assert divide_rounded(a, b, rounding) == expected

    @pytest.mark.parametrize("rounding", list(RoundingMode))
    def test_exact_division_ignores_mode(self, rounding):
        """An exact quotient is returned unchanged for every mode."""
        assert divide_rounded(12, 4, rounding) == 3
        assert divide_rounded(-12, 4, rounding) == -3

    def test_unnecessary_inexact_raises(self):
        """UNNECESSARY raises InexactResult when rounding would be needed."""
        with pytest.raises(InexactResult) as exc_info:
            divide_rounded(5, 2, R.UNNECESSARY)
        assert exc_info.value.dividend == 5
        assert exc_info.value.divisor == 2
        assert exc_info.value.rounding is R.UNNECESSARY

    def test_zero_divisor_raises(self):
        """Division by zero raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            divide_rounded(5, 0, R.HALF_UP)

    @pytest.mark.parametrize("rounding", [m for m in RoundingMode if m is not R.UNNECESSARY])
    @pytest.mark.parametrize("a", [-7, -6, -5, -1, 1, 5, 6, 7, 15, -15])
    @pytest.mark.parametrize("b", [-4, -3, -2, 2, 3, 4, 10])
    def test_matches_decimal_module(self, a, b, rounding):
        """Every sign combination rounds exactly like the decimal module."""
        ctx = decimal.Context(prec=50)
        quotient = ctx.divide(Decimal(a), Decimal(b))
        expected = int(quotient.to_integral_value(rounding=rounding.decimal_rounding))
        assert divide_rounded(a, b, rounding) == expected

    def test_negative_divisor_rounds_away_in_quotient_direction(self):
        """UP rounds away from zero in the direction of the true quotient."""
        assert divide_rounded(5, -4, R.UP) == -2
        assert divide_rounded(-5, -4, R.UP) == 2
        assert divide_rounded(5, -4, R.CEILING) == -1
        assert divide_rounded(5, -4, R.FLOOR) == -2

    def test_int64_min_operand(self):
        """The most negative int64 divides without intermediate overflow."""
        assert divide_rounded(INT64_MIN, 2, R.UNNECESSARY) == INT64_MIN // 2
        assert divide_rounded(INT64_MIN, 10, R.HALF_EVEN) == -922337203685477581


class TestDivideLongs:
    """Tests for the int64-checked wrapper."""

    def test_regular_division(self):
        """In-range operands divide like divide_rounded."""
        assert divide_longs(7, 2, R.HALF_UP) == 4

    def test_min_by_minus_one_overflows(self):
        """INT64_MIN / -1 leaves the int64 range."""
        with pytest.raises(Overflow):
            divide_longs(INT64_MIN, -1, R.DOWN)

    def test_out_of_range_operand_raises(self):
        """Operands outside int64 are rejected."""
        with pytest.raises(Overflow):
            divide_longs(INT64_MAX + 1, 3, R.DOWN)
