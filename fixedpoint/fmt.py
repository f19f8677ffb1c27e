"""Conversions between mantissas and text, Decimal and float.

Parsing is done directly on the digits of the literal, never through a binary
float. Formatting produces the plain (non-exponential) representation with
exactly `scale` fractional digits.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal

from fixedpoint.constants import POWERS_OF_TEN, is_int64
from fixedpoint.errors import Overflow, PrecisionLoss
from fixedpoint.rounding import RoundingMode, divide_rounded

__all__ = [
    "parse_decimal_literal",
    "parse_mantissa",
    "format_mantissa",
    "mantissa_from_decimal",
    "mantissa_from_float",
    "mantissa_to_decimal",
]

_DECIMAL_LITERAL = re.compile(r"^([+-]?)([0-9]*)(?:\.([0-9]*))?$")


def parse_decimal_literal(text: str) -> tuple[int, int]:
    """Split a plain decimal literal into an unscaled integer and its fraction digit count.

    Accepts an optional sign, digits, and an optional fractional part
    ("12", "-0.50", "+.5", "3."). Surrounding whitespace is ignored.

    Returns:
        (unscaled, fraction_digits) such that value == unscaled / 10**fraction_digits

    Raises:
        ValueError: If text is not a plain decimal literal
    """
    if not isinstance(text, str):
        raise TypeError(f"Decimal literal must be str, got {type(text).__name__}")
    match = _DECIMAL_LITERAL.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid decimal literal: {text!r}")
    sign, int_part, frac_part = match.group(1), match.group(2), match.group(3) or ""
    if not int_part and not frac_part:
        raise ValueError(f"Invalid decimal literal: {text!r}")
    unscaled = int((int_part or "0") + frac_part)
    if sign == "-":
        unscaled = -unscaled
    return unscaled, len(frac_part)


def _rescale_unscaled(
    unscaled: int,
    digits: int,
    scale: int,
    rounding: RoundingMode | None,
    source: object,
) -> int:
    """Convert unscaled / 10**digits into a mantissa at scale."""
    if digits <= scale:
        mantissa = unscaled * 10 ** (scale - digits)
    else:
        divisor = 10 ** (digits - scale)
        if rounding is None:
            if unscaled % divisor != 0:
                raise PrecisionLoss(digits, scale, source)
            mantissa = unscaled // divisor
        else:
            mantissa = divide_rounded(unscaled, divisor, rounding)
    if not is_int64(mantissa):
        raise Overflow(mantissa, f"conversion of {source} to scale {scale}")
    return mantissa


def parse_mantissa(text: str, scale: int, rounding: RoundingMode | None = None) -> int:
    """Parse a decimal literal into a mantissa with `scale` fractional digits.

    Extra fractional digits that are all zero are dropped silently; any other
    extra digits require a rounding mode.

    Raises:
        ValueError: If text is not a plain decimal literal
        PrecisionLoss: If text has more significant fractional digits than
            scale and no rounding mode is given
        Overflow: If the mantissa does not fit into int64
    """
    unscaled, digits = parse_decimal_literal(text)
    return _rescale_unscaled(unscaled, digits, scale, rounding, text)


def format_mantissa(mantissa: int, scale: int) -> str:
    """Render mantissa / 10**scale as a plain decimal string.

    Examples:
        format_mantissa(12345, 2) == "123.45"
        format_mantissa(-5, 3) == "-0.005"
        format_mantissa(7, 0) == "7"
    """
    if scale == 0:
        return str(mantissa)
    sign = "-" if mantissa < 0 else ""
    digits = str(abs(mantissa)).rjust(scale + 1, "0")
    return f"{sign}{digits[:-scale]}.{digits[-scale:]}"


def mantissa_from_decimal(
    value: Decimal, scale: int, rounding: RoundingMode | None = None
) -> int:
    """Convert a Decimal into a mantissa at scale.

    Raises:
        ValueError: If value is NaN or infinite
        PrecisionLoss: If value needs rounding and no rounding mode is given
    """
    if not value.is_finite():
        raise ValueError(f"Cannot convert non-finite Decimal {value} to fixed point")
    sign, digit_tuple, exponent = value.as_tuple()
    unscaled = int("".join(map(str, digit_tuple))) if digit_tuple else 0
    if sign:
        unscaled = -unscaled
    if exponent >= 0:
        return _rescale_unscaled(unscaled * 10**exponent, 0, scale, rounding, value)
    return _rescale_unscaled(unscaled, -exponent, scale, rounding, value)


def mantissa_from_float(value: float, scale: int) -> int:
    """Convert a float into a mantissa at scale, rounding half up.

    This path is lossy for values that have no exact binary representation
    (0.1, 0.29, ...): the float is scaled first and then rounded.

    Raises:
        ValueError: If value is NaN or infinite
        Overflow: If the mantissa does not fit into int64
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot convert non-finite float {value} to fixed point")
    scaled = value * float(POWERS_OF_TEN[scale])
    mantissa = math.floor(scaled)
    # scaled - floor(scaled) is exact for doubles
    if scaled - mantissa >= 0.5:
        mantissa += 1
    if not is_int64(mantissa):
        raise Overflow(mantissa, f"conversion of {value!r} to scale {scale}")
    return mantissa


def mantissa_to_decimal(mantissa: int, scale: int) -> Decimal:
    """Exact Decimal for mantissa / 10**scale, keeping trailing zeros."""
    return Decimal(mantissa).scaleb(-scale)
