"""Fixed-scale fixed-point types: one class per scale 0..18.

All classes share the generic FixedScale implementation; each subclass only
binds its scale through the class keyword:

    class MilliUnits(FixedScale, scale=3):
        __slots__ = ()

The commonly used scales have names (Units, Tenths, Hundredths, MilliUnits,
MicroUnits, NanoUnits, PicoUnits, FemtoUnits, AttoUnits). The remaining scales
are generated at import as FixedScale4, FixedScale5, ... and every scale is
reachable through fixed_scale_type().
"""

from __future__ import annotations

import types
from decimal import Decimal
from typing import Any, ClassVar, TypeVar

from fixedpoint.base import FixedPointBase
from fixedpoint.config import get_config
from fixedpoint.constants import MAX_SCALE, POWERS_OF_TEN, is_valid_scale
from fixedpoint.errors import UnsupportedScale
from fixedpoint.fmt import mantissa_from_decimal, mantissa_from_float, parse_mantissa
from fixedpoint.promotion import Fixed, ScaleKind, rescale_mantissa
from fixedpoint.rounding import RoundingMode

__all__ = [
    "FixedScale",
    "Units",
    "Tenths",
    "Hundredths",
    "MilliUnits",
    "MicroUnits",
    "NanoUnits",
    "PicoUnits",
    "FemtoUnits",
    "AttoUnits",
    "FIXED_SCALE_TYPES",
    "fixed_scale_type",
]

F = TypeVar("F", bound="FixedScale")


class FixedScale(FixedPointBase):
    """Base of the fixed-scale family; the scale is a property of the class."""

    __slots__ = ()

    SCALE: ClassVar[int]
    UNIT_MANTISSA: ClassVar[int]
    ZERO: ClassVar[FixedScale]
    ONE: ClassVar[FixedScale]

    def __init_subclass__(cls, scale: int | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if scale is None:
            return
        if not is_valid_scale(scale):
            raise UnsupportedScale(scale)
        cls.SCALE = scale
        cls.UNIT_MANTISSA = POWERS_OF_TEN[scale]
        cls.ZERO = cls(0)
        cls.ONE = cls(POWERS_OF_TEN[scale])

    def __init__(self, mantissa: int) -> None:
        if not hasattr(type(self), "SCALE"):
            raise TypeError(f"{type(self).__name__} has no scale; use a concrete subclass")
        super().__init__(mantissa)

    @property
    def scale(self) -> int:
        return self.SCALE

    @property
    def kind(self) -> ScaleKind:
        return Fixed(self.SCALE)

    @property
    def zero(self: F) -> F:
        return self.ZERO  # type: ignore[return-value]

    @property
    def one(self: F) -> F:
        return self.ONE  # type: ignore[return-value]

    @property
    def unit_mantissa(self) -> int:
        return self.UNIT_MANTISSA

    def new_instance_of(self: F, mantissa: int) -> F:
        if mantissa == self._mantissa:
            return self
        return type(self).of(mantissa)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def of(cls: type[F], mantissa: int) -> F:
        """Value with the given raw mantissa: of(12345) is 12.345 for MilliUnits."""
        if get_config().cache_canonical:
            if mantissa == 0:
                return cls.ZERO  # type: ignore[return-value]
            if mantissa == cls.UNIT_MANTISSA:
                return cls.ONE  # type: ignore[return-value]
        return cls(mantissa)

    @classmethod
    def value_of(cls: type[F], integral: int) -> F:
        """Value equal to the integer: value_of(12) is 12.000 for MilliUnits."""
        return cls.of(integral * cls.UNIT_MANTISSA)

    @classmethod
    def from_float(cls: type[F], value: float) -> F:
        """Value nearest to a float, rounding half up; lossy for binary fractions."""
        return cls.of(mantissa_from_float(value, cls.SCALE))

    @classmethod
    def from_string(cls: type[F], text: str, rounding: RoundingMode | None = None) -> F:
        """Parse a plain decimal literal such as "-12.345".

        Raises:
            ValueError: If text is not a decimal literal
            PrecisionLoss: If text has more significant digits than the scale
                and no rounding mode is given
        """
        return cls.of(parse_mantissa(text, cls.SCALE, rounding))

    @classmethod
    def from_decimal(cls: type[F], value: Decimal, rounding: RoundingMode | None = None) -> F:
        return cls.of(mantissa_from_decimal(value, cls.SCALE, rounding))

    @classmethod
    def from_value(
        cls: type[F], other: FixedPointBase, rounding: RoundingMode | None = None
    ) -> F:
        """Convert a value of any type to this scale.

        Raises:
            PrecisionLoss: If other has more fractional digits and no rounding
                mode is given
        """
        if type(other) is cls:
            return other  # type: ignore[return-value]
        return cls.of(rescale_mantissa(other.mantissa, other.scale, cls.SCALE, rounding, other))

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
        raise ValueError(f"Cannot convert {type(value).__name__} to {cls.__name__}")


class Units(FixedScale, scale=0):
    __slots__ = ()


class Tenths(FixedScale, scale=1):
    __slots__ = ()


class Hundredths(FixedScale, scale=2):
    __slots__ = ()


class MilliUnits(FixedScale, scale=3):
    __slots__ = ()


class MicroUnits(FixedScale, scale=6):
    __slots__ = ()


class NanoUnits(FixedScale, scale=9):
    __slots__ = ()


class PicoUnits(FixedScale, scale=12):
    __slots__ = ()


class FemtoUnits(FixedScale, scale=15):
    __slots__ = ()


class AttoUnits(FixedScale, scale=18):
    __slots__ = ()


_NAMED: dict[int, type[FixedScale]] = {
    cls.SCALE: cls
    for cls in (
        Units,
        Tenths,
        Hundredths,
        MilliUnits,
        MicroUnits,
        NanoUnits,
        PicoUnits,
        FemtoUnits,
        AttoUnits,
    )
}


def _generate(scale: int) -> type[FixedScale]:
    """Create the unnamed class for a scale, registered in this module."""
    name = f"FixedScale{scale}"

    def body(namespace: dict[str, Any]) -> None:
        namespace["__slots__"] = ()
        namespace["__module__"] = __name__

    cls = types.new_class(name, (FixedScale,), {"scale": scale}, body)
    globals()[name] = cls
    return cls


FIXED_SCALE_TYPES: tuple[type[FixedScale], ...] = tuple(
    _NAMED[scale] if scale in _NAMED else _generate(scale) for scale in range(MAX_SCALE + 1)
)


def fixed_scale_type(scale: int) -> type[FixedScale]:
    """The fixed-scale class for a scale in 0..18.

    Raises:
        UnsupportedScale: If scale is outside 0..18
    """
    if not is_valid_scale(scale):
        raise UnsupportedScale(scale)
    return FIXED_SCALE_TYPES[scale]
