"""Base class for fixed-point decimal values.

A value is an int64 mantissa with an implied number of fractional digits
(the scale): the represented number is mantissa / 10**scale. Subclasses fix
the scale per type (fixedpoint.units) or carry it per instance
(fixedpoint.variable).

Instances are immutable. Operations return new values, or cached canonical
zero/one instances, or an operand itself when the result is unchanged.

Equality (==) follows data identity: same concrete type, same scale, same
mantissa. Use compare() or the ordering operators for numeric comparison
across types:

    Units.of(1) == MilliUnits.of(1000)          # False
    Units.of(1).compare(MilliUnits.of(1000))    # 0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from functools import singledispatchmethod
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic_core import core_schema

from fixedpoint.config import get_config
from fixedpoint.constants import POWERS_OF_TEN, is_int64
from fixedpoint.errors import DivisionByZero, FixedPointError, Overflow, UnsupportedScale
from fixedpoint.fmt import format_mantissa, mantissa_to_decimal
from fixedpoint.promotion import (
    ScaleKind,
    Variable,
    align,
    instantiate,
    rescale_mantissa,
    wider_kind,
)
from fixedpoint.rounding import RoundingMode, div_trunc, divide_rounded
from fixedpoint.wide import multiply_and_scale, scale_and_divide

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

    from fixedpoint.variable import VariableUnits

__all__ = ["FixedPointBase"]

T = TypeVar("T", bound="FixedPointBase")


def _signum(value: int) -> int:
    return (value > 0) - (value < 0)


class FixedPointBase(ABC):
    """Fixed-point decimal number: an int64 mantissa scaled by 10**-scale."""

    __slots__ = ("_mantissa",)
    _mantissa: int

    def __init__(self, mantissa: int) -> None:
        """Create a value from its raw mantissa.

        Raises:
            TypeError: If mantissa is not an int
            Overflow: If mantissa does not fit into int64
        """
        if isinstance(mantissa, bool) or not isinstance(mantissa, int):
            raise TypeError(
                f"{type(self).__name__} mantissa must be int, got {type(mantissa).__name__}"
            )
        if not is_int64(mantissa):
            raise Overflow(mantissa, type(self).__name__)
        self._mantissa = mantissa

    # =========================================================================
    # Type-specific hooks
    # =========================================================================

    @property
    @abstractmethod
    def scale(self) -> int:
        """Number of fractional decimal digits."""

    @property
    @abstractmethod
    def kind(self) -> ScaleKind:
        """Scale kind used by the promotion rules."""

    @property
    @abstractmethod
    def zero(self: T) -> T:
        """The number 0 with the same type and scale."""

    @property
    @abstractmethod
    def one(self: T) -> T:
        """The number 1 with the same type and scale."""

    @abstractmethod
    def new_instance_of(self: T, mantissa: int) -> T:
        """Value with the same type and scale and the given mantissa.

        Returns the cached zero/one instances for those mantissas, and self
        if the mantissa is unchanged.
        """

    def new_instance_of_scale(self, mantissa: int, scale: int) -> FixedPointBase:
        """Value of the same type with a different scale.

        Raises:
            UnsupportedScale: Fixed-scale types cannot change their scale
        """
        if scale == self.scale:
            return self.new_instance_of(mantissa)
        raise UnsupportedScale(
            scale,
            f"Creating instances of scale {scale} is not supported for {type(self).__name__}",
        )

    def is_fixed_scale(self) -> bool:
        """True if all instances of this type have the same scale."""
        return True

    # =========================================================================
    # Accessors and predicates
    # =========================================================================

    @property
    def mantissa(self) -> int:
        """The scaled integer representation."""
        return self._mantissa

    @property
    def unit_mantissa(self) -> int:
        """Mantissa representing the number 1 at this scale."""
        return POWERS_OF_TEN[self.scale]

    def signum(self) -> int:
        """-1, 0 or 1 depending on the sign."""
        return _signum(self._mantissa)

    def is_zero(self) -> bool:
        return self._mantissa == 0

    def is_not_zero(self) -> bool:
        return self._mantissa != 0

    def is_one(self) -> bool:
        return self._mantissa == self.unit_mantissa

    def is_minus_one(self) -> bool:
        return self._mantissa == -self.unit_mantissa

    # =========================================================================
    # Unary operations
    # =========================================================================

    def negate(self: T) -> T:
        """-self. Raises Overflow for a mantissa of INT64_MIN."""
        return self.new_instance_of(-self._mantissa)

    def abs(self: T) -> T:
        if self._mantissa >= 0:
            return self
        return self.new_instance_of(-self._mantissa)

    def ulp(self: T) -> T:
        """One unit in the last place."""
        return self.new_instance_of(1)

    def increment(self: T) -> T:
        """self + 1."""
        return self.new_instance_of(self._mantissa + self.unit_mantissa)

    def decrement(self: T) -> T:
        """self - 1."""
        return self.new_instance_of(self._mantissa - self.unit_mantissa)

    def percent(self) -> VariableUnits:
        """self / 100, obtained by adjusting the scale.

        Scales 17 and 18 cannot grow by two digits; their mantissa is divided
        by 10 or 100 (truncating) and the result has scale 18.
        """
        scale = self.scale
        if scale == 18:
            return instantiate(Variable(18), div_trunc(self._mantissa, 100))  # type: ignore[return-value]
        if scale == 17:
            return instantiate(Variable(18), div_trunc(self._mantissa, 10))  # type: ignore[return-value]
        return instantiate(Variable(scale + 2), self._mantissa)  # type: ignore[return-value]

    # =========================================================================
    # Comparison
    # =========================================================================

    def compare(self, that: FixedPointBase) -> int:
        """Numeric comparison across scales: -1, 0 or 1.

        Signs are compared first. For equal signs and different scales the
        wider mantissa is scaled down (truncating) and compared; only when that
        is a tie is the narrower mantissa scaled up, which cannot leave the
        int64 range at that point.
        """
        signum_this = _signum(self._mantissa)
        signum_that = _signum(that._mantissa)
        if signum_this != signum_that:
            return -1 if signum_this < signum_that else 1
        if signum_that == 0:
            return 0

        scale_diff = self.scale - that.scale
        if scale_diff == 0:
            return _signum(self._mantissa - that._mantissa)
        if scale_diff < 0:
            factor = POWERS_OF_TEN[-scale_diff]
            diff = self._mantissa - div_trunc(that._mantissa, factor)
            if diff != 0:
                return _signum(diff)
            return _signum(self._mantissa * factor - that._mantissa)
        factor = POWERS_OF_TEN[scale_diff]
        diff = div_trunc(self._mantissa, factor) - that._mantissa
        if diff != 0:
            return _signum(diff)
        return _signum(self._mantissa - that._mantissa * factor)

    def min(self: T, that: T) -> T:
        """The smaller of self and that (self on ties); same type only."""
        self._require_same_type(that, "min")
        return self if self.compare(that) <= 0 else that

    def max(self: T, that: T) -> T:
        """The bigger of self and that (self on ties); same type only."""
        self._require_same_type(that, "max")
        return self if self.compare(that) >= 0 else that

    def gmin(self, that: FixedPointBase) -> FixedPointBase:
        """The smaller of self and that, for operands of any type."""
        return self if self.compare(that) <= 0 else that

    def gmax(self, that: FixedPointBase) -> FixedPointBase:
        """The bigger of self and that, for operands of any type."""
        return self if self.compare(that) >= 0 else that

    # =========================================================================
    # Addition and subtraction
    # =========================================================================

    def _require_same_type(self, that: object, operation: str) -> None:
        if type(that) is not type(self):
            raise TypeError(
                f"{type(self).__name__}.{operation} requires a {type(self).__name__} operand,"
                f" got {type(that).__name__}; use the g-prefixed variant for mixed types"
            )

    def add(self: T, that: T) -> T:
        """Sum of two values of the same type, at the bigger of both scales."""
        self._require_same_type(that, "add")
        diff = self.scale - that.scale
        if diff >= 0:
            return self.new_instance_of(self._mantissa + POWERS_OF_TEN[diff] * that._mantissa)
        return that.new_instance_of(that._mantissa + POWERS_OF_TEN[-diff] * self._mantissa)

    def subtract(self: T, that: T) -> T:
        """Difference of two values of the same type, at the bigger of both scales."""
        self._require_same_type(that, "subtract")
        diff = self.scale - that.scale
        if diff >= 0:
            return self.new_instance_of(self._mantissa - POWERS_OF_TEN[diff] * that._mantissa)
        return that.new_instance_of(POWERS_OF_TEN[-diff] * self._mantissa - that._mantissa)

    def gadd(self, that: FixedPointBase) -> FixedPointBase:
        """Sum of values of any types, with the kind of the wider operand.

        A zero operand returns the other operand unchanged.
        """
        if self._mantissa == 0:
            return that
        if that._mantissa == 0:
            return self
        kind = wider_kind(self.kind, that.kind)
        _, mantissa_a, mantissa_b = align(self._mantissa, self.scale, that._mantissa, that.scale)
        return instantiate(kind, mantissa_a + mantissa_b)

    def gsubtract(self, that: FixedPointBase) -> FixedPointBase:
        """Difference of values of any types, with the kind of the wider operand."""
        if that._mantissa == 0:
            return self
        if self._mantissa == 0:
            return that.negate()
        kind = wider_kind(self.kind, that.kind)
        _, mantissa_a, mantissa_b = align(self._mantissa, self.scale, that._mantissa, that.scale)
        return instantiate(kind, mantissa_a - mantissa_b)

    # =========================================================================
    # Multiplication
    # =========================================================================

    def mantissa_of_multiplication(
        self, that: FixedPointBase, target_scale: int, rounding: RoundingMode
    ) -> int:
        """Mantissa of self * that at target_scale.

        Without digits to drop the product is an exact integer multiply;
        otherwise the wide multiply provider scales and rounds it.
        """
        digits_to_scale = self.scale + that.scale - target_scale
        if digits_to_scale <= 0:
            return self._mantissa * that._mantissa * POWERS_OF_TEN[-digits_to_scale]
        return multiply_and_scale(self._mantissa, that._mantissa, digits_to_scale, rounding)

    @singledispatchmethod
    def multiply(self, that: FixedPointBase, rounding: RoundingMode | None = None):  # type: ignore[no-untyped-def]
        """Product with the type and scale of self.

        Args:
            that: Fixed-point factor of any type, or an int factor (exact)
            rounding: Rounding mode for dropped digits (default: the configured
                default rounding mode, HALF_EVEN)
        """
        if not isinstance(that, FixedPointBase):
            raise TypeError(f"Cannot multiply {type(self).__name__} by {type(that).__name__}")
        if rounding is None:
            rounding = get_config().default_rounding
        if self._mantissa == 0 or that._mantissa == 0:
            return self.zero
        if that.is_one():
            return self
        if that.is_minus_one():
            return self.negate()
        return self.new_instance_of(self.mantissa_of_multiplication(that, self.scale, rounding))

    @multiply.register(int)
    def _multiply_int(self, factor: int, rounding: RoundingMode | None = None):  # type: ignore[no-untyped-def]
        if isinstance(factor, bool):
            raise TypeError("Cannot multiply a fixed-point value by bool")
        return self.new_instance_of(self._mantissa * factor)

    def gmultiply(
        self, that: FixedPointBase, rounding: RoundingMode | None = None
    ) -> FixedPointBase:
        """Product of values of any types, with the kind and scale of self.

        Zero and +/-1 operands are resolved without a multiplication.
        """
        if rounding is None:
            rounding = get_config().default_rounding
        if self._mantissa == 0 or that._mantissa == 0:
            return self.zero
        if that.is_one():
            return self
        if that.is_minus_one():
            return self.negate()
        if self.is_one():
            return instantiate(
                self.kind, rescale_mantissa(that._mantissa, that.scale, self.scale, rounding, that)
            )
        if self.is_minus_one():
            return instantiate(
                self.kind, rescale_mantissa(-that._mantissa, that.scale, self.scale, rounding, that)
            )
        return instantiate(self.kind, self.mantissa_of_multiplication(that, self.scale, rounding))

    # =========================================================================
    # Division
    # =========================================================================

    @singledispatchmethod
    def divide(self, that: FixedPointBase, rounding: RoundingMode | None = None):  # type: ignore[no-untyped-def]
        """Quotient with the type and scale of self.

        Args:
            that: Fixed-point divisor of any type, or an int divisor
            rounding: Rounding mode for the quotient. Defaults to the configured
                default rounding mode for fixed-point divisors, and to
                truncation (DOWN) for int divisors.

        Raises:
            DivisionByZero: If the divisor is zero
        """
        if not isinstance(that, FixedPointBase):
            raise TypeError(f"Cannot divide {type(self).__name__} by {type(that).__name__}")
        if that._mantissa == 0:
            raise DivisionByZero(f"Division by zero: {self} / {that}")
        if rounding is None:
            rounding = get_config().default_rounding
        if self._mantissa == 0:
            return self.zero
        if that.is_one():
            return self
        if that.is_minus_one():
            return self.negate()
        return self.new_instance_of(
            scale_and_divide(self._mantissa, that.scale, that._mantissa, rounding)
        )

    @divide.register(int)
    def _divide_int(self, divisor: int, rounding: RoundingMode | None = None):  # type: ignore[no-untyped-def]
        if isinstance(divisor, bool):
            raise TypeError("Cannot divide a fixed-point value by bool")
        if divisor == 0:
            raise DivisionByZero(f"Division by zero: {self} / 0")
        if divisor == 1:
            return self
        if divisor == -1:
            return self.negate()
        if rounding is None:
            return self.new_instance_of(div_trunc(self._mantissa, divisor))
        return self.new_instance_of(divide_rounded(self._mantissa, divisor, rounding))

    def remainder(self: T, divisor: int) -> T:
        """Remainder of the truncating division by an int; has the sign of self.

        Raises:
            DivisionByZero: If divisor is zero
        """
        if divisor == 0:
            raise DivisionByZero(f"Division by zero: {self} % 0")
        if divisor in (1, -1):
            return self.zero
        quotient = div_trunc(self._mantissa, divisor)
        return self.new_instance_of(self._mantissa - quotient * divisor)

    # =========================================================================
    # Rescaling and conversion
    # =========================================================================

    def rescale(self, target_scale: int, rounding: RoundingMode | None = None) -> FixedPointBase:
        """Same number at target_scale, keeping the kind (fixed or variable).

        Raises:
            UnsupportedScale: If target_scale is outside 0..18
            PrecisionLoss: If target_scale < scale and no rounding mode is given
        """
        if target_scale == self.scale:
            return self
        mantissa = rescale_mantissa(self._mantissa, self.scale, target_scale, rounding, self)
        return instantiate(self.kind.with_scale(target_scale), mantissa)

    def to_decimal(self) -> Decimal:
        """Exact Decimal with exactly `scale` fractional digits."""
        return mantissa_to_decimal(self._mantissa, self.scale)

    # =========================================================================
    # Python protocol
    # =========================================================================

    def __str__(self) -> str:
        return format_mantissa(self._mantissa, self.scale)

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedPointBase):
            return NotImplemented
        if other is self:
            return True
        return (
            type(other) is type(self)
            and other.scale == self.scale
            and other._mantissa == self._mantissa
        )

    def __hash__(self) -> int:
        return hash((self.scale, self._mantissa))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, FixedPointBase):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, FixedPointBase):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, FixedPointBase):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, FixedPointBase):
            return NotImplemented
        return self.compare(other) >= 0

    def __bool__(self) -> bool:
        return self._mantissa != 0

    def __neg__(self: T) -> T:
        return self.negate()

    def __abs__(self: T) -> T:
        return self.abs()

    def __add__(self, other: object) -> FixedPointBase:
        if not isinstance(other, FixedPointBase):
            return NotImplemented
        if type(other) is type(self):
            return self.add(other)
        return self.gadd(other)

    def __sub__(self, other: object) -> FixedPointBase:
        if not isinstance(other, FixedPointBase):
            return NotImplemented
        if type(other) is type(self):
            return self.subtract(other)
        return self.gsubtract(other)

    def __mul__(self, other: object) -> FixedPointBase:
        if isinstance(other, bool) or not isinstance(other, (int, FixedPointBase)):
            return NotImplemented
        return self.multiply(other)

    def __rmul__(self, other: object) -> FixedPointBase:
        if isinstance(other, bool) or not isinstance(other, int):
            return NotImplemented
        return self.multiply(other)

    def __truediv__(self, other: object) -> FixedPointBase:
        if isinstance(other, bool) or not isinstance(other, (int, FixedPointBase)):
            return NotImplemented
        if isinstance(other, int):
            return self.divide(other, get_config().default_rounding)
        return self.divide(other)

    def __mod__(self, other: object) -> FixedPointBase:
        if isinstance(other, bool) or not isinstance(other, int):
            return NotImplemented
        return self.remainder(other)

    # =========================================================================
    # pydantic integration
    # =========================================================================

    @classmethod
    def _from_input(cls, value: Any) -> FixedPointBase:
        """Build an instance of cls from a field input (str, int, Decimal or value)."""
        raise TypeError(f"{cls.__name__} is abstract; annotate fields with a concrete type")

    @classmethod
    def _validate_input(cls, value: Any) -> FixedPointBase:
        if isinstance(value, cls):
            return value
        try:
            return cls._from_input(value)
        except FixedPointError as err:
            raise ValueError(str(err)) from err

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Accept instances, decimal strings and ints; serialize as the plain decimal string."""
        return core_schema.no_info_plain_validator_function(
            cls._validate_input,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, info_arg=False, return_schema=core_schema.str_schema()
            ),
        )
