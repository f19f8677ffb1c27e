"""Build script for the optional native wide-multiply extension.

Run with: python setup_cython.py build_ext --inplace

Without the extension, fixedpoint.wide selects the pure-Python integer backend.
"""

from setuptools import Extension, setup

try:
    from Cython.Build import cythonize

    extensions = [
        Extension(
            "fixedpoint._multdiv128",
            ["fixedpoint/_multdiv128.pyx"],
        ),
    ]

    setup(
        name="fixedpoint-native",
        packages=[],  # Prevent auto-discovery
        ext_modules=cythonize(
            extensions,
            compiler_directives={
                "language_level": "3",
                "boundscheck": False,
                "wraparound": False,
                "cdivision": True,
            },
        ),
    )
except ImportError:
    print("Cython not installed. Run: pip install cython")
    raise
