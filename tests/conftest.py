"""Pytest configuration and fixtures."""

from collections.abc import Iterator
from dataclasses import replace

import pytest

from fixedpoint import wide
from fixedpoint.config import FixedPointConfig, get_config, set_config
from fixedpoint.wide import DecimalBackend, IntegerBackend, WideBackend
from tests.helpers import BACKEND_NAMES, make_backend


@pytest.fixture(params=BACKEND_NAMES)
def wide_backend(request: pytest.FixtureRequest) -> Iterator[WideBackend]:
    """Run the test once per available wide backend, installed process-wide."""
    backend = make_backend(request.param)
    previous = wide.set_backend(backend)
    try:
        yield backend
    finally:
        wide.set_backend(previous)


@pytest.fixture
def decimal_backend() -> Iterator[WideBackend]:
    """Install the portable decimal backend for the duration of a test."""
    previous = wide.set_backend(DecimalBackend())
    try:
        yield wide.get_backend()
    finally:
        wide.set_backend(previous)


@pytest.fixture
def integer_backend() -> Iterator[WideBackend]:
    """Install the exact integer backend for the duration of a test."""
    previous = wide.set_backend(IntegerBackend())
    try:
        yield wide.get_backend()
    finally:
        wide.set_backend(previous)


@pytest.fixture
def no_cache() -> Iterator[FixedPointConfig]:
    """Disable reuse of canonical zero/one instances."""
    previous = set_config(replace(get_config(), cache_canonical=False))
    try:
        yield get_config()
    finally:
        set_config(previous)
