"""Fixed-point arithmetic errors.

All errors derive from FixedPointError, which is an ArithmeticError, so callers
can catch the whole family at once. Each error is raised at the call site of
the offending operation; nothing is silently truncated or zeroed.
"""

from __future__ import annotations

from typing import Any


class FixedPointError(ArithmeticError):
    """Base class for fixed-point arithmetic errors."""

    pass


class DivisionByZero(FixedPointError, ZeroDivisionError):
    """Division or remainder with a zero divisor."""

    pass


class InexactResult(FixedPointError):
    """Rounding mode UNNECESSARY was requested but the result is not exact.

    Attributes:
        dividend: The numerator of the failed division
        divisor: The denominator of the failed division
        rounding: The requested rounding mode
    """

    def __init__(self, dividend: Any, divisor: Any, rounding: Any = None) -> None:
        super().__init__(
            f"Rounding required but forbidden: {dividend} / {divisor} is not exact"
            f" (rounding={getattr(rounding, 'name', rounding)})"
        )
        self.dividend = dividend
        self.divisor = divisor
        self.rounding = rounding


class PrecisionLoss(FixedPointError):
    """A narrowing rescale was requested without a rounding mode.

    Attributes:
        source_scale: Scale of the value being converted
        target_scale: Requested (smaller) scale
    """

    def __init__(self, source_scale: int, target_scale: int, value: Any = None) -> None:
        detail = f" for {value}" if value is not None else ""
        super().__init__(
            f"Reducing scale from {source_scale} to {target_scale}{detail}"
            " requires a rounding mode"
        )
        self.source_scale = source_scale
        self.target_scale = target_scale
        self.value = value


class UnsupportedScale(FixedPointError, ValueError):
    """A scale (or scale difference) outside 0..18, or a scale change on a fixed-scale type.

    Attributes:
        scale: The offending scale or digit count
    """

    def __init__(self, scale: int, message: str | None = None) -> None:
        super().__init__(message or f"Unsupported scale: {scale} (must be in range 0..18)")
        self.scale = scale


class Overflow(FixedPointError, OverflowError):
    """A result mantissa does not fit into a signed 64-bit integer.

    Attributes:
        value: The out-of-range mantissa (exact, as a Python int)
    """

    def __init__(self, value: int, context: str | None = None) -> None:
        where = f" in {context}" if context else ""
        super().__init__(f"Mantissa {value} exceeds the signed 64-bit range{where}")
        self.value = value


__all__ = [
    "FixedPointError",
    "DivisionByZero",
    "InexactResult",
    "PrecisionLoss",
    "UnsupportedScale",
    "Overflow",
]
