"""Tests for the wide multiply provider and its backends."""

import random

import pytest

from fixedpoint import wide
from fixedpoint.constants import INT64_MAX, INT64_MIN
from fixedpoint.errors import DivisionByZero, InexactResult, Overflow, UnsupportedScale
from fixedpoint.rounding import RoundingMode, divide_rounded
from fixedpoint.wide import (
    DecimalBackend,
    IntegerBackend,
    multiply_and_scale,
    multiply_divide_wide,
    scale_and_divide,
)
from tests.helpers import BACKEND_NAMES, make_backend

R = RoundingMode


class TestBackendContract:
    """Every backend satisfies the same contract."""

    def test_probe_vectors(self, wide_backend):
        """Each backend reproduces the selection probe vectors."""
        for a, b, c, rounding, expected in wide._PROBE_VECTORS:
            assert wide_backend.multiply_divide(a, b, c, rounding) == expected

    def test_full_width_product(self, wide_backend):
        """Products beyond 64 bits are not truncated before dividing."""
        a = 123_456_789_012_345_678
        b = 987_654_321
        result = wide_backend.multiply_divide(a, b, 10**18, R.DOWN)
        assert result == (a * b) // 10**18

    def test_unnecessary_inexact_raises(self, wide_backend):
        """UNNECESSARY raises when the quotient is not exact."""
        with pytest.raises(InexactResult):
            wide_backend.multiply_divide(5, 1, 2, R.UNNECESSARY)

    def test_result_overflow_raises(self, wide_backend):
        """A quotient outside int64 raises Overflow."""
        with pytest.raises(Overflow):
            wide_backend.multiply_divide(INT64_MAX, INT64_MAX, 2, R.DOWN)

    def test_zero_divisor_raises(self, wide_backend):
        """A zero divisor raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            wide_backend.multiply_divide(1, 1, 0, R.DOWN)

    def test_negative_divisor_rejected(self, wide_backend):
        """The boundary only accepts strictly positive divisors."""
        with pytest.raises(ValueError):
            wide_backend.multiply_divide(1, 1, -10, R.DOWN)

    def test_operand_outside_int64_rejected(self, wide_backend):
        """Operands must be int64."""
        with pytest.raises(Overflow):
            wide_backend.multiply_divide(INT64_MIN - 1, 1, 1, R.DOWN)


class TestBackendAgreement:
    """Backends are interchangeable: identical results on random inputs."""

    @pytest.mark.parametrize("rounding", [m for m in RoundingMode if m is not R.UNNECESSARY])
    def test_random_operands_agree(self, rounding):
        """All available backends agree with exact integer rounding."""
        rng = random.Random(1234 + rounding.value)
        backends = [make_backend(name) for name in BACKEND_NAMES]
        for _ in range(300):
            a = rng.randint(INT64_MIN, INT64_MAX)
            b = rng.randint(-(10**6), 10**6)
            c = 10 ** rng.randint(6, 18)
            expected = divide_rounded(a * b, c, rounding)
            if not INT64_MIN <= expected <= INT64_MAX:
                continue
            for backend in backends:
                assert backend.multiply_divide(a, b, c, rounding) == expected, backend.name

    def test_decimal_ties_are_exact(self):
        """Exact ties at large magnitudes resolve according to the mode."""
        backend = DecimalBackend()
        # quotient is exactly x.5 with a large integer part
        a = 2 * 10**17 + 1
        assert backend.multiply_divide(a, 5, 10, R.HALF_EVEN) == 10**17
        assert backend.multiply_divide(a, 5, 10, R.HALF_UP) == 10**17 + 1
        assert backend.multiply_divide(a, 5, 10, R.HALF_DOWN) == 10**17

    def test_decimal_near_tie_uses_sticky_digit(self):
        """A quotient just above a tie rounds up even in HALF_DOWN mode."""
        backend = DecimalBackend()
        c = 3 * 10**17
        a = 15 * 10**16 + 1  # a / c = 0.5000...0033
        assert backend.multiply_divide(a, 1, c, R.HALF_DOWN) == 1
        assert IntegerBackend().multiply_divide(a, 1, c, R.HALF_DOWN) == 1


class TestProviderOperations:
    """Tests for multiply_and_scale / scale_and_divide."""

    def test_multiply_and_scale(self, wide_backend):
        """12.345 * 2.000 at scale 3 is 24.690."""
        assert multiply_and_scale(12_345, 2_000, 3, R.HALF_EVEN) == 24_690

    @pytest.mark.parametrize("digits", [0, 19, -1])
    def test_multiply_and_scale_digit_range(self, digits):
        """Digit counts outside 1..18 raise UnsupportedScale."""
        with pytest.raises(UnsupportedScale):
            multiply_and_scale(1, 1, digits, R.DOWN)

    def test_scale_and_divide(self, wide_backend):
        """1.000 / 3 at scale 3 rounds to 0.333."""
        assert scale_and_divide(1_000, 0, 3, R.HALF_EVEN) == 333
        assert scale_and_divide(1_000, 3, 3_000, R.HALF_EVEN) == 333

    def test_scale_and_divide_negative_divisor(self, wide_backend):
        """A negative divisor is handled by negating the scale factor."""
        assert scale_and_divide(1_000, 3, -3_000, R.HALF_EVEN) == -333
        assert scale_and_divide(2_000, 3, -3_000, R.UP) == -667
        assert scale_and_divide(2_000, 3, -3_000, R.FLOOR) == -667
        assert scale_and_divide(2_000, 3, -3_000, R.CEILING) == -666

    def test_scale_and_divide_zero_divisor(self):
        """A zero divisor raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            scale_and_divide(1, 3, 0, R.DOWN)

    def test_scale_and_divide_digit_range(self):
        """Digit counts outside 0..18 raise UnsupportedScale."""
        with pytest.raises(UnsupportedScale):
            scale_and_divide(1, 19, 1, R.DOWN)

    def test_multiply_divide_wide(self, wide_backend):
        """The raw boundary computes round(a * b / c)."""
        assert multiply_divide_wide(INT64_MAX, 2, 4, R.HALF_EVEN) == 4_611_686_018_427_387_904


class TestBackendSelection:
    """Tests for backend probing and fallback."""

    def test_default_backend_passes_probe(self):
        """The backend selected at import is a known backend."""
        assert wide.backend_name() in ("native", "integer", "decimal")

    def test_select_decimal(self):
        """Preference "decimal" selects the decimal backend."""
        assert wide._select_backend("decimal").name == "decimal"

    def test_select_integer(self):
        """Preference "integer" selects the integer backend."""
        assert wide._select_backend("integer").name == "integer"

    def test_native_falls_back_when_unavailable(self, monkeypatch):
        """Without the extension, "native" falls back to the integer backend."""
        monkeypatch.setattr(wide, "_native_multdiv128", None)
        assert wide._select_backend("native").name == "integer"

    def test_failing_probe_falls_back(self, monkeypatch):
        """A backend that fails the probe is skipped."""

        def broken(a, b, c, rounding):
            return 0

        monkeypatch.setattr(wide, "_native_multdiv128", broken)
        assert wide._select_backend("auto").name == "integer"

    def test_raising_probe_falls_back(self, monkeypatch):
        """A backend that raises during the probe is skipped."""

        def broken(a, b, c, rounding):
            raise TypeError("unsupported")

        monkeypatch.setattr(wide, "_native_multdiv128", broken)
        assert wide._select_backend("auto").name == "integer"

    def test_set_backend_by_name_returns_previous(self):
        """set_backend returns the replaced backend so it can be restored."""
        original = wide.get_backend()
        previous = wide.set_backend("decimal")
        try:
            assert previous is original
            assert wide.backend_name() == "decimal"
        finally:
            wide.set_backend(previous)
        assert wide.get_backend() is original
