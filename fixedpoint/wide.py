"""Wide multiply provider: round(a * b / c) with a double-width intermediate.

Two 64-bit mantissas multiply into a product of up to 126 bits, which must be
scaled and rounded back into 64 bits without truncating the intermediate.
The work is done by one of three interchangeable backends:

- NativeBackend: the compiled extension fixedpoint._multdiv128 (C __int128),
  available when built with setup_cython.py
- IntegerBackend: exact multiply/divide on Python integers
- DecimalBackend: portable emulation on decimal.Decimal

The backend is selected once, when this module is imported, by running a
probe against known vectors. A backend that fails to import or disagrees with
the probe is skipped and the next candidate is used for the rest of the
process; there is no per-call retry.

Usage:
    from fixedpoint.wide import multiply_and_scale, scale_and_divide
"""

from __future__ import annotations

import decimal
from collections.abc import Callable
from decimal import Decimal
from typing import Protocol

import structlog

from fixedpoint.config import get_config
from fixedpoint.constants import INT64_MAX, INT64_MIN, MAX_SCALE, POWERS_OF_TEN, is_int64
from fixedpoint.errors import DivisionByZero, InexactResult, Overflow, UnsupportedScale
from fixedpoint.rounding import RoundingMode, divide_rounded

__all__ = [
    "WideBackend",
    "NativeBackend",
    "IntegerBackend",
    "DecimalBackend",
    "multiply_divide_wide",
    "multiply_and_scale",
    "scale_and_divide",
    "get_backend",
    "set_backend",
    "backend_name",
    "NATIVE_AVAILABLE",
]

logger = structlog.get_logger()

# Largest divisor accepted by the boundary: -INT64_MIN after sign normalisation
MAX_WIDE_DIVISOR = 2**63

try:
    from fixedpoint._multdiv128 import multdiv128 as _native_multdiv128

    NATIVE_AVAILABLE = True
except ImportError:
    _native_multdiv128 = None
    NATIVE_AVAILABLE = False


def _check_operands(a: int, b: int, c: int) -> None:
    if not is_int64(a):
        raise Overflow(a, "wide multiply operand")
    if not is_int64(b):
        raise Overflow(b, "wide multiply operand")
    if c == 0:
        raise DivisionByZero(f"Division by zero: {a} * {b} / 0")
    if not 0 < c <= MAX_WIDE_DIVISOR:
        raise ValueError(f"Wide divisor must be in range 1..2^63, got {c}")


def _check_result(result: int, a: int, b: int, c: int) -> int:
    if not is_int64(result):
        logger.debug("wide_result_overflow", a=a, b=b, c=c, result=str(result))
        raise Overflow(result, f"round({a} * {b} / {c})")
    return result


class WideBackend(Protocol):
    """Protocol for a wide multiply-then-divide implementation.

    Every implementation must return identical results for every input in
    range; they differ only in speed and portability.
    """

    name: str

    def multiply_divide(self, a: int, b: int, c: int, rounding: RoundingMode) -> int:
        """Compute round(a * b / c) with a full-precision intermediate product.

        Args:
            a: First factor (int64)
            b: Second factor (int64)
            c: Divisor, strictly positive
            rounding: Rounding mode for the final quotient

        Returns:
            The rounded quotient (int64)

        Raises:
            DivisionByZero: If c is zero
            InexactResult: If rounding is UNNECESSARY and the result is not exact
            Overflow: If the rounded quotient does not fit into int64
        """
        ...


class IntegerBackend:
    """Exact double-width arithmetic on Python integers."""

    name = "integer"

    def multiply_divide(self, a: int, b: int, c: int, rounding: RoundingMode) -> int:
        _check_operands(a, b, c)
        return _check_result(divide_rounded(a * b, c, rounding), a, b, c)


class NativeBackend:
    """Wrapper around the compiled 128-bit multdiv extension."""

    name = "native"

    def __init__(self, multdiv: Callable[[int, int, int, int], int]) -> None:
        self._multdiv = multdiv

    def multiply_divide(self, a: int, b: int, c: int, rounding: RoundingMode) -> int:
        _check_operands(a, b, c)
        return self._multdiv(a, b, c, rounding.value)


# 38 digits hold any int64 * int64 product; the rest are fractional digits of
# the truncated quotient.
_DECIMAL_PRECISION = 60


class DecimalBackend:
    """Portable emulation using arbitrary-precision decimal arithmetic.

    The product a * b is exact. The quotient is computed truncated; when it is
    inexact a trailing sticky digit is appended, which keeps it strictly
    between its neighbours so the final rounding to zero fractional digits is
    the only rounding step.
    """

    name = "decimal"

    def multiply_divide(self, a: int, b: int, c: int, rounding: RoundingMode) -> int:
        _check_operands(a, b, c)
        ctx = decimal.Context(
            prec=_DECIMAL_PRECISION,
            rounding=decimal.ROUND_DOWN,
            traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
        )
        product = ctx.multiply(Decimal(a), Decimal(b))
        quotient = ctx.divide(product, Decimal(c))
        inexact = bool(ctx.flags[decimal.Inexact])
        if inexact:
            sticky_exponent = quotient.as_tuple().exponent - 1
            sticky = Decimal((0 if quotient >= 0 else 1, (1,), sticky_exponent))
            wide_ctx = decimal.Context(prec=_DECIMAL_PRECISION + 2, traps=[decimal.Inexact])
            quotient = wide_ctx.add(quotient, sticky)

        if rounding is RoundingMode.UNNECESSARY:
            truncated = quotient.to_integral_value(rounding=decimal.ROUND_DOWN)
            if inexact or truncated != quotient:
                raise InexactResult(a * b, c, rounding)
            return _check_result(int(truncated), a, b, c)

        rounded = quotient.to_integral_value(rounding=rounding.decimal_rounding)
        return _check_result(int(rounded), a, b, c)


# =============================================================================
# Backend selection
# =============================================================================

# (a, b, c, rounding, expected)
_PROBE_VECTORS: tuple[tuple[int, int, int, RoundingMode, int], ...] = (
    (INT64_MAX, INT64_MAX, INT64_MAX, RoundingMode.UNNECESSARY, INT64_MAX),
    (INT64_MIN, INT64_MAX, INT64_MAX, RoundingMode.DOWN, INT64_MIN),
    (INT64_MIN, 1, MAX_WIDE_DIVISOR, RoundingMode.UNNECESSARY, -1),
    (10**18, 10**18, 10**18, RoundingMode.UNNECESSARY, 10**18),
    (12_345, 2, 1, RoundingMode.HALF_EVEN, 24_690),
    (15, 1, 10, RoundingMode.HALF_EVEN, 2),
    (25, 1, 10, RoundingMode.HALF_EVEN, 2),
    (-25, 1, 10, RoundingMode.HALF_UP, -3),
    (-25, 1, 10, RoundingMode.HALF_DOWN, -2),
    (-21, 1, 10, RoundingMode.CEILING, -2),
    (-21, 1, 10, RoundingMode.FLOOR, -3),
    (21, 1, 10, RoundingMode.UP, 3),
    (7, 10**17, 3 * 10**17, RoundingMode.HALF_UP, 2),
    (123_456_789_012_345_678, 987_654_321, 10**18, RoundingMode.HALF_EVEN, 121_932_631),
)


def _probe(backend: WideBackend) -> bool:
    """Run the probe vectors; True if every result matches."""
    for a, b, c, rounding, expected in _PROBE_VECTORS:
        actual = backend.multiply_divide(a, b, c, rounding)
        if actual != expected:
            logger.warning(
                "wide_backend_probe_mismatch",
                backend=backend.name,
                a=a,
                b=b,
                c=c,
                rounding=rounding.name,
                expected=expected,
                actual=actual,
            )
            return False
    return True


def _make_backend(name: str) -> WideBackend | None:
    if name == "native":
        if _native_multdiv128 is None:
            return None
        return NativeBackend(_native_multdiv128)
    if name == "integer":
        return IntegerBackend()
    if name == "decimal":
        return DecimalBackend()
    raise ValueError(f"Unknown wide backend: {name!r}")


_CANDIDATES = {
    "auto": ("native", "integer", "decimal"),
    "native": ("native", "integer", "decimal"),
    "integer": ("integer", "decimal"),
    "decimal": ("decimal",),
}


def _select_backend(preference: str) -> WideBackend:
    """Pick the first candidate for preference that is available and passes the probe."""
    for name in _CANDIDATES[preference]:
        backend = _make_backend(name)
        if backend is None:
            logger.info("wide_backend_unavailable", backend=name, preference=preference)
            continue
        try:
            passed = _probe(backend)
        except (ArithmeticError, TypeError, ValueError) as err:
            logger.warning("wide_backend_probe_failed", backend=name, error=str(err))
            continue
        if passed:
            logger.info("wide_backend_selected", backend=name, preference=preference)
            return backend
    raise RuntimeError(f"No usable wide multiply backend for preference {preference!r}")


_backend: WideBackend = _select_backend(get_config().wide_backend)


def get_backend() -> WideBackend:
    """Return the process-wide wide multiply backend."""
    return _backend


def set_backend(backend: str | WideBackend) -> WideBackend:
    """Replace the process-wide backend and return the previous one.

    Intended for tests and benchmarks. A name is resolved with the same
    probe-and-fallback rules as the initial selection.
    """
    global _backend
    previous = _backend
    _backend = _select_backend(backend) if isinstance(backend, str) else backend
    return previous


def backend_name() -> str:
    """Name of the active backend ("native", "integer" or "decimal")."""
    return _backend.name


# =============================================================================
# Provider operations
# =============================================================================


def multiply_divide_wide(a: int, b: int, c: int, rounding: RoundingMode) -> int:
    """Compute round(a * b / c) with a full-precision intermediate product.

    Raises:
        DivisionByZero: If c is zero
        ValueError: If c is negative
    """
    return _backend.multiply_divide(a, b, c, rounding)


def multiply_and_scale(a: int, b: int, scale_down_digits: int, rounding: RoundingMode) -> int:
    """Compute round(a * b / 10**scale_down_digits).

    Args:
        a: First mantissa
        b: Second mantissa
        scale_down_digits: Number of decimal digits to drop (1..18)
        rounding: Rounding mode for the dropped digits

    Raises:
        UnsupportedScale: If scale_down_digits is outside 1..18
    """
    if not 1 <= scale_down_digits <= MAX_SCALE:
        raise UnsupportedScale(
            scale_down_digits,
            f"Cannot scale a product down by {scale_down_digits} digits (must be in range 1..18)",
        )
    return _backend.multiply_divide(a, b, POWERS_OF_TEN[scale_down_digits], rounding)


def scale_and_divide(a: int, scale_up_digits: int, divisor: int, rounding: RoundingMode) -> int:
    """Compute round(a * 10**scale_up_digits / divisor).

    A negative divisor is handled by negating the power-of-ten factor, so the
    wide boundary always receives a positive divisor.

    Args:
        a: Dividend mantissa
        scale_up_digits: Number of decimal digits to add before dividing (0..18)
        divisor: Divisor mantissa (non-zero)
        rounding: Rounding mode for the quotient

    Raises:
        UnsupportedScale: If scale_up_digits is outside 0..18
        DivisionByZero: If divisor is zero
    """
    if not 0 <= scale_up_digits <= MAX_SCALE:
        raise UnsupportedScale(
            scale_up_digits,
            f"Cannot scale a dividend up by {scale_up_digits} digits (must be in range 0..18)",
        )
    if divisor == 0:
        raise DivisionByZero(f"Division by zero: {a} * 10^{scale_up_digits} / 0")
    factor = POWERS_OF_TEN[scale_up_digits]
    if divisor < 0:
        factor, divisor = -factor, -divisor
    return _backend.multiply_divide(a, factor, divisor, rounding)
