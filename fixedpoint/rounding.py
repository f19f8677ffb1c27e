"""Rounding modes and rounded integer division.

divide_rounded() is the single place where a quotient is rounded. The wide
multiply backends and rescaling all go through it, so every path rounds
exactly like the decimal module does for the same mode.
"""

from __future__ import annotations

import decimal
from enum import Enum

from fixedpoint.constants import is_int64
from fixedpoint.errors import DivisionByZero, InexactResult, Overflow

__all__ = [
    "RoundingMode",
    "divide_rounded",
    "divide_longs",
    "div_trunc",
]


class RoundingMode(Enum):
    """Decimal rounding semantics.

    The values are ordinals and are passed as plain ints to the native
    wide-multiply extension, so their order must not change.
    """

    UP = 0
    DOWN = 1
    CEILING = 2
    FLOOR = 3
    HALF_UP = 4
    HALF_DOWN = 5
    HALF_EVEN = 6
    UNNECESSARY = 7

    @property
    def decimal_rounding(self) -> str | None:
        """Equivalent decimal module constant (None for UNNECESSARY)."""
        return _TO_DECIMAL.get(self)

    @classmethod
    def from_decimal(cls, rounding: str) -> RoundingMode:
        """Map a decimal.ROUND_* constant to a RoundingMode.

        Raises:
            ValueError: If rounding has no equivalent (e.g. ROUND_05UP)
        """
        for mode, name in _TO_DECIMAL.items():
            if name == rounding:
                return mode
        raise ValueError(f"No RoundingMode equivalent for {rounding!r}")


_TO_DECIMAL = {
    RoundingMode.UP: decimal.ROUND_UP,
    RoundingMode.DOWN: decimal.ROUND_DOWN,
    RoundingMode.CEILING: decimal.ROUND_CEILING,
    RoundingMode.FLOOR: decimal.ROUND_FLOOR,
    RoundingMode.HALF_UP: decimal.ROUND_HALF_UP,
    RoundingMode.HALF_DOWN: decimal.ROUND_HALF_DOWN,
    RoundingMode.HALF_EVEN: decimal.ROUND_HALF_EVEN,
}


def div_trunc(a: int, b: int) -> int:
    """Integer division with truncation toward zero.

    Python's // operator rounds toward negative infinity; fixed-point
    quotients truncate toward zero.

    Raises:
        DivisionByZero: If b is zero

    Examples:
        -7 // 3 == -3, div_trunc(-7, 3) == -2
    """
    if b == 0:
        raise DivisionByZero(f"Division by zero: {a} / 0")
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def divide_rounded(a: int, b: int, rounding: RoundingMode) -> int:
    """Compute a / b rounded according to rounding.

    Works for any sign combination and any magnitude. The remainder is
    compared against the divisor directly (2*|r| vs |b|), so no absolute value
    of a boundary operand is ever needed to decide the rounding direction.

    Args:
        a: Dividend
        b: Divisor (non-zero)
        rounding: Rounding mode applied when the division is not exact

    Returns:
        The rounded quotient

    Raises:
        DivisionByZero: If b is zero
        InexactResult: If rounding is UNNECESSARY and b does not divide a
    """
    q = div_trunc(a, b)
    r = a - q * b
    if r == 0:
        return q  # exact: same result for all modes

    # sign of the true quotient; r != 0 implies a != 0
    away = 1 if (a > 0) == (b > 0) else -1

    if rounding is RoundingMode.UP:
        return q + away
    if rounding is RoundingMode.DOWN:
        return q
    if rounding is RoundingMode.CEILING:
        return q + 1 if away > 0 else q
    if rounding is RoundingMode.FLOOR:
        return q if away > 0 else q - 1
    if rounding is RoundingMode.UNNECESSARY:
        raise InexactResult(a, b, rounding)

    twice_r = 2 * abs(r)
    abs_b = abs(b)
    if rounding is RoundingMode.HALF_UP:
        return q + away if twice_r >= abs_b else q
    if rounding is RoundingMode.HALF_DOWN:
        return q + away if twice_r > abs_b else q
    if rounding is RoundingMode.HALF_EVEN:
        if twice_r > abs_b:
            return q + away
        if twice_r < abs_b:
            return q
        # equidistant: pick the even neighbour
        return q + away if q & 1 else q
    raise TypeError(f"Unknown rounding mode: {rounding!r}")


def divide_longs(a: int, b: int, rounding: RoundingMode) -> int:
    """Rounded division for operands in the signed 64-bit range.

    The quotient of two int64 values only leaves the range for
    INT64_MIN / -1, which raises Overflow.

    Raises:
        Overflow: If an operand or the result is outside the int64 range
    """
    if not is_int64(a):
        raise Overflow(a, "divide_longs dividend")
    if not is_int64(b):
        raise Overflow(b, "divide_longs divisor")
    result = divide_rounded(a, b, rounding)
    if not is_int64(result):
        raise Overflow(result, "divide_longs")
    return result
