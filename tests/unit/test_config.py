"""Tests for fixed-point configuration."""

from dataclasses import replace

import pytest

from fixedpoint import MilliUnits, RoundingMode
from fixedpoint.config import (
    DEFAULT_CONFIG,
    FixedPointConfig,
    get_config,
    load_config,
    set_config,
)


class TestFixedPointConfig:
    """Tests for the config dataclass."""

    def test_defaults(self):
        """Defaults select the auto backend, caching and HALF_EVEN."""
        config = FixedPointConfig()
        assert config.wide_backend == "auto"
        assert config.cache_canonical is True
        assert config.default_rounding is RoundingMode.HALF_EVEN

    def test_frozen(self):
        """Configs are immutable."""
        config = FixedPointConfig()
        with pytest.raises(AttributeError):
            config.wide_backend = "decimal"  # type: ignore[misc]

    def test_invalid_backend(self):
        """Unknown backends are rejected."""
        with pytest.raises(ValueError):
            FixedPointConfig(wide_backend="gpu")


class TestLoadConfig:
    """Tests for reading FIXEDPOINT_* variables."""

    def test_empty_environment(self):
        """An empty environment gives the defaults."""
        assert load_config({}) == FixedPointConfig()

    def test_all_variables(self):
        """Every variable is honoured."""
        config = load_config(
            {
                "FIXEDPOINT_WIDE_BACKEND": "Decimal",
                "FIXEDPOINT_CACHE": "0",
                "FIXEDPOINT_DEFAULT_ROUNDING": "half_up",
            }
        )
        assert config.wide_backend == "decimal"
        assert config.cache_canonical is False
        assert config.default_rounding is RoundingMode.HALF_UP

    @pytest.mark.parametrize("value,expected", [("true", True), ("YES", True), ("off", False)])
    def test_cache_flag(self, value, expected):
        """Boolean flags accept the usual spellings."""
        assert load_config({"FIXEDPOINT_CACHE": value}).cache_canonical is expected

    def test_invalid_rounding(self):
        """Unknown rounding modes are rejected."""
        with pytest.raises(ValueError):
            load_config({"FIXEDPOINT_DEFAULT_ROUNDING": "BANKERS"})

    def test_invalid_backend(self):
        """Unknown backends are rejected."""
        with pytest.raises(ValueError):
            load_config({"FIXEDPOINT_WIDE_BACKEND": "gpu"})


class TestActiveConfig:
    """Tests for get_config/set_config."""

    def test_set_config_returns_previous(self):
        """set_config swaps the active config."""
        original = get_config()
        previous = set_config(replace(original, cache_canonical=False))
        try:
            assert previous is original
            assert get_config().cache_canonical is False
        finally:
            set_config(previous)
        assert get_config() is original

    def test_default_rounding_drives_operators(self):
        """* and / use the configured default rounding mode."""
        previous = set_config(replace(get_config(), default_rounding=RoundingMode.HALF_UP))
        try:
            assert (MilliUnits.of(1_005) * MilliUnits.of(500)).mantissa == 503
        finally:
            set_config(previous)
        assert (MilliUnits.of(1_005) * MilliUnits.of(500)).mantissa == 502

    def test_default_config_is_loaded(self):
        """DEFAULT_CONFIG is a FixedPointConfig."""
        assert isinstance(DEFAULT_CONFIG, FixedPointConfig)
