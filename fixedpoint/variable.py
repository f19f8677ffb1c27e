"""Variable-scale fixed-point type.

VariableUnits stores its scale per instance. It is the result type of
operations whose scale is not known from the operand types, such as
percent(), and the target of as_variable() conversions.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fixedpoint.base import FixedPointBase
from fixedpoint.config import get_config
from fixedpoint.constants import MAX_SCALE, POWERS_OF_TEN, is_valid_scale
from fixedpoint.errors import UnsupportedScale
from fixedpoint.fmt import (
    mantissa_from_decimal,
    mantissa_from_float,
    parse_decimal_literal,
    parse_mantissa,
)
from fixedpoint.promotion import ScaleKind, Variable, rescale_mantissa
from fixedpoint.rounding import RoundingMode

__all__ = ["VariableUnits"]


def _check_scale(scale: int) -> int:
    if isinstance(scale, bool) or not isinstance(scale, int) or not is_valid_scale(scale):
        raise UnsupportedScale(scale)
    return scale


class VariableUnits(FixedPointBase):
    """Fixed-point value whose number of fractional digits is instance data.

    Two VariableUnits of different scales add up at the wider scale:

        VariableUnits.of_scale(15, 1) + VariableUnits.of_scale(5, 3)  # 1.505
    """

    __slots__ = ("_scale",)

    def __init__(self, mantissa: int, scale: int) -> None:
        self._scale = _check_scale(scale)
        super().__init__(mantissa)

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def kind(self) -> ScaleKind:
        return Variable(self._scale)

    @property
    def zero(self) -> VariableUnits:
        return _ZEROS[self._scale]

    @property
    def one(self) -> VariableUnits:
        return _ONES[self._scale]

    def is_fixed_scale(self) -> bool:
        return False

    def new_instance_of(self, mantissa: int) -> VariableUnits:
        if mantissa == self._mantissa:
            return self
        return VariableUnits.of_scale(mantissa, self._scale)

    def new_instance_of_scale(self, mantissa: int, scale: int) -> VariableUnits:
        if scale == self._scale:
            return self.new_instance_of(mantissa)
        return VariableUnits.of_scale(mantissa, scale)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def of_scale(cls, mantissa: int, scale: int) -> VariableUnits:
        """Value with the given raw mantissa and scale, reusing canonical zero/one."""
        _check_scale(scale)
        if get_config().cache_canonical:
            if mantissa == 0:
                return _ZEROS[scale]
            if mantissa == POWERS_OF_TEN[scale]:
                return _ONES[scale]
        return cls(mantissa, scale)

    @classmethod
    def of(cls, mantissa: int, scale: int = 0) -> VariableUnits:
        return cls.of_scale(mantissa, scale)

    @classmethod
    def value_of(cls, integral: int, scale: int = 0) -> VariableUnits:
        _check_scale(scale)
        return cls.of_scale(integral * POWERS_OF_TEN[scale], scale)

    @classmethod
    def from_float(cls, value: float, scale: int) -> VariableUnits:
        _check_scale(scale)
        return cls.of_scale(mantissa_from_float(value, scale), scale)

    @classmethod
    def from_string(
        cls, text: str, scale: int | None = None, rounding: RoundingMode | None = None
    ) -> VariableUnits:
        """Parse a plain decimal literal.

        Without an explicit scale the scale is the number of fractional digits
        in the literal, so "1.50" has scale 2.

        Raises:
            ValueError: If text is not a decimal literal
            UnsupportedScale: If the inferred scale exceeds 18
            PrecisionLoss: If text has more significant digits than an explicit
                scale and no rounding mode is given
        """
        if scale is None:
            _, digits = parse_decimal_literal(text)
            if digits > MAX_SCALE:
                raise UnsupportedScale(
                    digits, f"Literal {text!r} has {digits} fractional digits, at most 18 supported"
                )
            scale = digits
        _check_scale(scale)
        return cls.of_scale(parse_mantissa(text, scale, rounding), scale)

    @classmethod
    def from_decimal(
        cls, value: Decimal, scale: int | None = None, rounding: RoundingMode | None = None
    ) -> VariableUnits:
        """Convert a Decimal; without an explicit scale the Decimal's exponent decides."""
        if scale is None:
            if not value.is_finite():
                raise ValueError(f"Cannot convert non-finite Decimal {value} to fixed point")
            exponent = value.as_tuple().exponent
            scale = max(0, -exponent)  # type: ignore[operator]
            if scale > MAX_SCALE:
                raise UnsupportedScale(
                    scale, f"Decimal {value} has {scale} fractional digits, at most 18 supported"
                )
        _check_scale(scale)
        return cls.of_scale(mantissa_from_decimal(value, scale, rounding), scale)

    @classmethod
    def from_value(
        cls,
        other: FixedPointBase,
        scale: int | None = None,
        rounding: RoundingMode | None = None,
    ) -> VariableUnits:
        """Convert a value of any type; without a scale the value's own scale is kept."""
        if scale is None:
            scale = other.scale
        if isinstance(other, VariableUnits) and other.scale == scale:
            return other
        return cls.of_scale(
            rescale_mantissa(other.mantissa, other.scale, scale, rounding, other), scale
        )

    @classmethod
    def _from_input(cls, value: Any) -> FixedPointBase:
        if isinstance(value, FixedPointBase):
            return cls.from_value(value)
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, Decimal):
            return cls.from_decimal(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.value_of(value)
        raise ValueError(f"Cannot convert {type(value).__name__} to VariableUnits")


_ZEROS: tuple[VariableUnits, ...] = tuple(
    VariableUnits(0, scale) for scale in range(MAX_SCALE + 1)
)
_ONES: tuple[VariableUnits, ...] = tuple(
    VariableUnits(POWERS_OF_TEN[scale], scale) for scale in range(MAX_SCALE + 1)
)
