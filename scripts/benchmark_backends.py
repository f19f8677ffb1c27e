#!/usr/bin/env python3
"""Time the wide multiply backends and check that they agree.

Usage:
    # Compare all available backends on 100k random operands
    python scripts/benchmark_backends.py

    # Fewer iterations, fixed seed, debug logging
    python scripts/benchmark_backends.py --count 10000 --seed 7 -v
"""

import argparse
import logging
import random
import sys
import time
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fixedpoint.constants import INT64_MAX, INT64_MIN, POWERS_OF_TEN  # noqa: E402
from fixedpoint.errors import Overflow  # noqa: E402
from fixedpoint.rounding import RoundingMode  # noqa: E402
from fixedpoint.wide import (  # noqa: E402
    NATIVE_AVAILABLE,
    DecimalBackend,
    IntegerBackend,
    NativeBackend,
    WideBackend,
)

logger = structlog.get_logger()

ROUNDING_MODES = [mode for mode in RoundingMode if mode is not RoundingMode.UNNECESSARY]


def available_backends() -> list[WideBackend]:
    backends: list[WideBackend] = [IntegerBackend(), DecimalBackend()]
    if NATIVE_AVAILABLE:
        from fixedpoint._multdiv128 import multdiv128

        backends.insert(0, NativeBackend(multdiv128))
    return backends


def random_operands(count: int, rng: random.Random) -> list[tuple[int, int, int, RoundingMode]]:
    """Operands shaped like mantissa products: two int64 factors and a power of ten."""
    operands = []
    for _ in range(count):
        a = rng.randint(INT64_MIN, INT64_MAX)
        b = rng.randint(-(10**9), 10**9)
        c = POWERS_OF_TEN[rng.randint(9, 18)]
        operands.append((a, b, c, rng.choice(ROUNDING_MODES)))
    return operands


def run_backend(
    backend: WideBackend, operands: list[tuple[int, int, int, RoundingMode]]
) -> tuple[list[int | None], float]:
    """Results (None where the quotient overflows) and elapsed seconds."""
    results: list[int | None] = []
    start = time.perf_counter()
    for a, b, c, rounding in operands:
        try:
            results.append(backend.multiply_divide(a, b, c, rounding))
        except Overflow:
            results.append(None)
    return results, time.perf_counter() - start


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark the wide multiply backends")
    parser.add_argument("--count", type=int, default=100_000, help="Number of operations")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    operands = random_operands(args.count, random.Random(args.seed))
    backends = available_backends()

    print("Wide multiply backends")
    print("=" * 60)
    reference: list[int | None] | None = None
    mismatches = 0
    for backend in backends:
        results, elapsed = run_backend(backend, operands)
        per_op_ns = elapsed / len(operands) * 1e9 if operands else 0.0
        print(f"{backend.name:<10} {elapsed * 1000:>10.1f}ms  {per_op_ns:>8.0f}ns/op")
        if reference is None:
            reference = results
            continue
        diff = sum(1 for left, right in zip(reference, results) if left != right)
        if diff:
            logger.error("wide_backend_mismatch", backend=backend.name, mismatches=diff)
            mismatches += diff

    if mismatches:
        print(f"\nFAILED: {mismatches} mismatching results")
        return 1
    print(f"\nAll {len(backends)} backends agree on {len(operands)} operations")
    return 0


if __name__ == "__main__":
    sys.exit(main())
