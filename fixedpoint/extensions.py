"""Shorthand constructors, type conversions and sums.

    from fixedpoint.extensions import millis, as_micros, gsum

    millis(16)                    # MilliUnits 0.016
    as_micros(millis(16))         # MicroUnits 0.016000
    gsum([units(1), millis(5)])   # MilliUnits 1.005
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from fixedpoint.base import FixedPointBase
from fixedpoint.rounding import RoundingMode
from fixedpoint.units import FemtoUnits, MicroUnits, MilliUnits, NanoUnits, PicoUnits, Units
from fixedpoint.variable import VariableUnits

__all__ = [
    "units",
    "millis",
    "micros",
    "nanos",
    "picos",
    "femtos",
    "as_units",
    "as_millis",
    "as_micros",
    "as_nanos",
    "as_picos",
    "as_femtos",
    "as_variable",
    "of_scale",
    "sum_values",
    "gsum",
]

T = TypeVar("T", bound=FixedPointBase)


# Mantissa constructors: millis(16) is 0.016
def units(mantissa: int) -> Units:
    return Units.of(mantissa)


def millis(mantissa: int) -> MilliUnits:
    return MilliUnits.of(mantissa)


def micros(mantissa: int) -> MicroUnits:
    return MicroUnits.of(mantissa)


def nanos(mantissa: int) -> NanoUnits:
    return NanoUnits.of(mantissa)


def picos(mantissa: int) -> PicoUnits:
    return PicoUnits.of(mantissa)


def femtos(mantissa: int) -> FemtoUnits:
    return FemtoUnits.of(mantissa)


# Conversions: narrowing requires a rounding mode
def as_units(value: FixedPointBase, rounding: RoundingMode | None = None) -> Units:
    return Units.from_value(value, rounding)


def as_millis(value: FixedPointBase, rounding: RoundingMode | None = None) -> MilliUnits:
    return MilliUnits.from_value(value, rounding)


def as_micros(value: FixedPointBase, rounding: RoundingMode | None = None) -> MicroUnits:
    return MicroUnits.from_value(value, rounding)


def as_nanos(value: FixedPointBase, rounding: RoundingMode | None = None) -> NanoUnits:
    return NanoUnits.from_value(value, rounding)


def as_picos(value: FixedPointBase, rounding: RoundingMode | None = None) -> PicoUnits:
    return PicoUnits.from_value(value, rounding)


def as_femtos(value: FixedPointBase, rounding: RoundingMode | None = None) -> FemtoUnits:
    return FemtoUnits.from_value(value, rounding)


def as_variable(value: FixedPointBase) -> VariableUnits:
    """Same number as a VariableUnits with the value's own scale."""
    return VariableUnits.from_value(value)


def of_scale(mantissa: int, scale: int) -> VariableUnits:
    return VariableUnits.of_scale(mantissa, scale)


def sum_values(values: Iterable[T], zero: T | None = None) -> T:
    """Sum of values of one type, folded with add().

    Args:
        values: Values of the same concrete type
        zero: Start value; also the result for an empty iterable

    Raises:
        ValueError: If values is empty and no zero is given
        TypeError: If the values are of different types
    """
    total = zero
    for value in values:
        total = value if total is None else total.add(value)
    if total is None:
        raise ValueError("sum_values() of an empty iterable requires an explicit zero")
    return total


def gsum(values: Iterable[FixedPointBase]) -> FixedPointBase:
    """Sum of values of any types, folded with gadd() starting from Units.ZERO.

    The result has the kind of the widest operand; an empty iterable gives
    Units.ZERO.
    """
    total: FixedPointBase = Units.ZERO
    for value in values:
        total = total.gadd(value)
    return total
