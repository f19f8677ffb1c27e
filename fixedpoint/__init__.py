"""Fixed-point decimal arithmetic on 64-bit mantissas.

This package provides:
- Fixed-scale types for 0..18 fractional digits (Units, MilliUnits, ...)
- VariableUnits, a type carrying its scale per instance
- RoundingMode and the rounding division used by all types
- A wide multiply provider for products that need 128-bit intermediates
"""

from fixedpoint.base import FixedPointBase
from fixedpoint.errors import (
    DivisionByZero,
    FixedPointError,
    InexactResult,
    Overflow,
    PrecisionLoss,
    UnsupportedScale,
)
from fixedpoint.rounding import RoundingMode, divide_rounded
from fixedpoint.units import (
    AttoUnits,
    FemtoUnits,
    FixedScale,
    Hundredths,
    MicroUnits,
    MilliUnits,
    NanoUnits,
    PicoUnits,
    Tenths,
    Units,
    fixed_scale_type,
)
from fixedpoint.variable import VariableUnits

__version__ = "0.1.0"
__all__ = [
    "FixedPointBase",
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
    "VariableUnits",
    "fixed_scale_type",
    "RoundingMode",
    "divide_rounded",
    "FixedPointError",
    "DivisionByZero",
    "InexactResult",
    "PrecisionLoss",
    "UnsupportedScale",
    "Overflow",
    "__version__",
]
