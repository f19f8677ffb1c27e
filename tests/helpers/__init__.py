"""Test helpers module for shared test utilities.

- backends: wide multiply backend names and construction without the probe
"""

from tests.helpers.backends import BACKEND_NAMES, make_backend

__all__ = [
    "BACKEND_NAMES",
    "make_backend",
]
