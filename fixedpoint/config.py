"""Process-wide configuration for the fixed-point library.

Configuration is read once from environment variables:
- FIXEDPOINT_WIDE_BACKEND: auto | native | integer | decimal (default: auto)
- FIXEDPOINT_CACHE: reuse canonical zero/one instances (default: true)
- FIXEDPOINT_DEFAULT_ROUNDING: rounding mode used by the * and / operators
  (default: HALF_EVEN)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from fixedpoint.rounding import RoundingMode

logger = structlog.get_logger()

WIDE_BACKENDS = ("auto", "native", "integer", "decimal")


@dataclass(frozen=True)
class FixedPointConfig:
    """Centralized configuration for the fixed-point core.

    Attributes:
        wide_backend: Which wide-multiply implementation to select.
            "auto" tries the native extension, then the integer backend.
        cache_canonical: If True, operations return the shared ZERO/ONE
            instances where possible. Results are identical either way.
        default_rounding: Rounding mode used by the * and / operators, which
            cannot take a rounding argument.
    """

    wide_backend: str = "auto"
    cache_canonical: bool = True
    default_rounding: RoundingMode = RoundingMode.HALF_EVEN

    def __post_init__(self) -> None:
        if self.wide_backend not in WIDE_BACKENDS:
            raise ValueError(
                f"Invalid wide backend {self.wide_backend!r}, expected one of {WIDE_BACKENDS}"
            )


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def load_config(environ: Mapping[str, str] | None = None) -> FixedPointConfig:
    """Build a FixedPointConfig from FIXEDPOINT_* environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)

    Raises:
        ValueError: If a variable holds an unknown backend or rounding mode
    """
    env = os.environ if environ is None else environ
    wide_backend = env.get("FIXEDPOINT_WIDE_BACKEND", "auto").strip().lower()
    cache_canonical = _parse_bool(env.get("FIXEDPOINT_CACHE", "true"))
    rounding_name = env.get("FIXEDPOINT_DEFAULT_ROUNDING", "HALF_EVEN").strip().upper()
    try:
        default_rounding = RoundingMode[rounding_name]
    except KeyError as err:
        raise ValueError(f"Invalid rounding mode in environment: {rounding_name!r}") from err

    config = FixedPointConfig(
        wide_backend=wide_backend,
        cache_canonical=cache_canonical,
        default_rounding=default_rounding,
    )
    logger.debug(
        "fixedpoint_config_loaded",
        wide_backend=config.wide_backend,
        cache_canonical=config.cache_canonical,
        default_rounding=config.default_rounding.name,
    )
    return config


# Default configuration instance
DEFAULT_CONFIG = load_config()

_config = DEFAULT_CONFIG


def get_config() -> FixedPointConfig:
    """Return the active configuration."""
    return _config


def set_config(config: FixedPointConfig) -> FixedPointConfig:
    """Replace the active configuration and return the previous one.

    Intended for tests and benchmarks. The wide backend is not re-selected;
    use fixedpoint.wide.set_backend() for that.
    """
    global _config
    previous = _config
    _config = config
    return previous


__all__ = [
    "WIDE_BACKENDS",
    "FixedPointConfig",
    "load_config",
    "DEFAULT_CONFIG",
    "get_config",
    "set_config",
]
