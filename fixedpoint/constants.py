"""Integer-domain constants shared by the fixed-point core.

Mantissas are Python ints constrained to the signed 64-bit range; scales are
the number of implied fractional decimal digits.
"""

# =============================================================================
# Mantissa range (signed 64-bit)
# =============================================================================

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# =============================================================================
# Scale range
# =============================================================================

#: Largest supported number of fractional digits; 10**18 is the largest
#: power of ten that fits into a signed 64-bit integer.
MAX_SCALE = 18
MIN_SCALE = 0

#: POWERS_OF_TEN[n] == 10**n for n in 0..18
POWERS_OF_TEN: tuple[int, ...] = tuple(10**n for n in range(MAX_SCALE + 1))


def is_int64(value: int) -> bool:
    """True if value fits into a signed 64-bit integer."""
    return INT64_MIN <= value <= INT64_MAX


def is_valid_scale(scale: int) -> bool:
    """True if scale is a supported number of fractional digits."""
    return MIN_SCALE <= scale <= MAX_SCALE


__all__ = [
    "INT64_MIN",
    "INT64_MAX",
    "MAX_SCALE",
    "MIN_SCALE",
    "POWERS_OF_TEN",
    "is_int64",
    "is_valid_scale",
]
