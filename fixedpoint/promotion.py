"""Scale promotion rules for operations on values of different scales.

Every value has a ScaleKind: Fixed(scale) for the fixed-scale type family or
Variable(scale) for VariableUnits. Generic operations compute the kind of
their result explicitly from the operand kinds and build the result through
instantiate(), instead of relying on whichever operand's class happens to be
called.

Rules:
- Mantissas are only ever widened implicitly (multiplied by an exact power of
  ten). Narrowing requires an explicit rounding mode via rescale_mantissa().
- Additive operations return the wider operand's kind; on equal scales the
  left operand's kind wins.
- Multiplicative operations return the left operand's kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from fixedpoint.constants import POWERS_OF_TEN, is_int64, is_valid_scale
from fixedpoint.errors import Overflow, PrecisionLoss, UnsupportedScale
from fixedpoint.rounding import RoundingMode, divide_rounded

if TYPE_CHECKING:
    from fixedpoint.base import FixedPointBase

__all__ = [
    "Fixed",
    "Variable",
    "ScaleKind",
    "kind_of",
    "wider_kind",
    "align",
    "rescale_mantissa",
    "instantiate",
]


@dataclass(frozen=True)
class Fixed:
    """Kind of a fixed-scale type (the scale is part of the type)."""

    scale: int

    def with_scale(self, scale: int) -> Fixed:
        return Fixed(scale)


@dataclass(frozen=True)
class Variable:
    """Kind of VariableUnits (the scale is part of the instance)."""

    scale: int

    def with_scale(self, scale: int) -> Variable:
        return Variable(scale)


ScaleKind = Union[Fixed, Variable]


def kind_of(value: FixedPointBase) -> ScaleKind:
    return value.kind


def wider_kind(left: ScaleKind, right: ScaleKind) -> ScaleKind:
    """Result kind of an additive operation: the wider scale, left on ties."""
    return right if right.scale > left.scale else left


def align(
    mantissa_a: int, scale_a: int, mantissa_b: int, scale_b: int
) -> tuple[int, int, int]:
    """Bring two mantissas to their common (larger) scale.

    Returns:
        (scale, aligned_a, aligned_b)
    """
    diff = scale_a - scale_b
    if diff >= 0:
        return scale_a, mantissa_a, mantissa_b * POWERS_OF_TEN[diff]
    return scale_b, mantissa_a * POWERS_OF_TEN[-diff], mantissa_b


def rescale_mantissa(
    mantissa: int,
    source_scale: int,
    target_scale: int,
    rounding: RoundingMode | None = None,
    value: object = None,
) -> int:
    """Convert a mantissa from source_scale to target_scale.

    Widening is always exact. Narrowing requires a rounding mode, even when
    the dropped digits happen to be zero.

    Args:
        mantissa: Mantissa at source_scale
        source_scale: Current number of fractional digits
        target_scale: Requested number of fractional digits
        rounding: Rounding mode for narrowing
        value: The value being converted, for error messages

    Raises:
        UnsupportedScale: If target_scale is outside 0..18
        PrecisionLoss: If narrowing without a rounding mode
        Overflow: If the widened mantissa does not fit into int64
    """
    if not is_valid_scale(target_scale):
        raise UnsupportedScale(target_scale)
    diff = target_scale - source_scale
    if diff >= 0:
        result = mantissa * POWERS_OF_TEN[diff]
    else:
        if rounding is None:
            raise PrecisionLoss(source_scale, target_scale, value)
        result = divide_rounded(mantissa, POWERS_OF_TEN[-diff], rounding)
    if not is_int64(result):
        raise Overflow(result, f"rescale from {source_scale} to {target_scale} digits")
    return result


def instantiate(kind: ScaleKind, mantissa: int) -> FixedPointBase:
    """Build a value of the given kind, reusing canonical instances where possible."""
    # deferred: the concrete types import this module
    if isinstance(kind, Fixed):
        from fixedpoint.units import fixed_scale_type

        return fixed_scale_type(kind.scale).of(mantissa)
    if isinstance(kind, Variable):
        from fixedpoint.variable import VariableUnits

        return VariableUnits.of_scale(mantissa, kind.scale)
    raise TypeError(f"Unknown scale kind: {kind!r}")
