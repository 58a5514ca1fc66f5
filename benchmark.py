#!/usr/bin/env python3
"""
SeqFlow Benchmark Script

Times the matching strategies and the samplers on synthetic data.

Usage:
    python benchmark.py
    python benchmark.py --numpy  # Include a vectorised NumPy baseline
"""

import asyncio
import time
import argparse
import random
import sys
from typing import Callable

# Add parent directory to path
sys.path.insert(0, '.')

from seqflow.matcher import SequenceMatcher
from seqflow.sampling import (
    ReservoirSampler, WeightedReservoirSampler, RandomSampler,
    SystematicSampler, BernoulliSampler
)
from seqflow.streams import collect


def time_function(func: Callable, *args, iterations: int = 1, **kwargs) -> float:
    """Time a function over multiple iterations."""
    start = time.perf_counter()
    for _ in range(iterations):
        result = func(*args, **kwargs)
    end = time.perf_counter()
    return (end - start) * 1000  # Return milliseconds


def random_dna(size: int, seed: int = 1) -> str:
    rng = random.Random(seed)
    return ''.join(rng.choice('ACGT') for _ in range(size))


def benchmark_exact_search():
    """Benchmark Boyer-Moore against KMP."""
    print("\n=== Exact Search Benchmark ===")

    text = random_dna(200000)
    for pattern in ("GATC", "GAATTC", "ACGTACGTACGT", "ATATATATATATATAT"):
        for algorithm in ("boyer-moore", "kmp"):
            matcher = SequenceMatcher(pattern, algorithm=algorithm)
            count = matcher.count(text)
            elapsed = time_function(matcher.count, text, iterations=5)
            print(f"  {algorithm:>11} {pattern:<18} {count:>6} hits: {elapsed / 5:.2f}ms/call")


def benchmark_fuzzy_and_iupac():
    """Benchmark mismatch-tolerant and ambiguity-aware search."""
    print("\n=== Fuzzy / IUPAC Benchmark ===")

    text = random_dna(50000)
    for k in (0, 1, 2):
        matcher = SequenceMatcher("GATTACAGATTACA", algorithm="fuzzy", max_mismatches=k)
        elapsed = time_function(matcher.count, text)
        print(f"  fuzzy k={k}: {matcher.count(text)} hits in {elapsed:.2f}ms")

    iupac = SequenceMatcher("GANTCRYN", iupac_aware=True)
    elapsed = time_function(iupac.count, text)
    print(f"  IUPAC GANTCRYN: {iupac.count(text)} hits in {elapsed:.2f}ms")

    regex = SequenceMatcher("GA[AT]+TC", algorithm="regex")
    elapsed = time_function(regex.count, text)
    print(f"  regex GA[AT]+TC: {regex.count(text)} hits in {elapsed:.2f}ms")


def benchmark_streaming():
    """Benchmark chunked matching against a single pass."""
    print("\n=== Chunk Streaming Benchmark ===")

    text = random_dna(500000)
    chunks = [text[i:i + 4096] for i in range(0, len(text), 4096)]

    for buffer_size in (1024, 65536, 1_000_000):
        matcher = SequenceMatcher("GAATTC", buffer_size=buffer_size)
        start = time.perf_counter()
        found = asyncio.run(collect(matcher.stream_matches(chunks)))
        elapsed = (time.perf_counter() - start) * 1000
        print(f"  buffer {buffer_size:>9,}: {len(found)} matches in {elapsed:.2f}ms")


def benchmark_samplers():
    """Benchmark each sampler over a stream of integers."""
    print("\n=== Sampler Benchmark ===")

    n = 200000
    items = range(n)

    def reservoir():
        return asyncio.run(ReservoirSampler(1000, seed=42).sample_stream(items))

    def weighted():
        pairs = ((i, 1 + i % 5) for i in items)
        return asyncio.run(WeightedReservoirSampler(1000, seed=42).sample_stream(pairs))

    def shuffled():
        return asyncio.run(collect(RandomSampler(1000, seed=42).sample(items)))

    def systematic():
        return asyncio.run(collect(SystematicSampler.sample_by_size(items, 1000)))

    def bernoulli():
        return asyncio.run(collect(BernoulliSampler(0.01, seed=42).sample(items)))

    for name, func in (
        ("reservoir", reservoir),
        ("weighted reservoir", weighted),
        ("random (Fisher-Yates)", shuffled),
        ("systematic by size", systematic),
        ("bernoulli p=0.01", bernoulli),
    ):
        elapsed = time_function(func)
        print(f"  {name:<22} {n:,} items: {elapsed:.2f}ms")


def benchmark_with_numpy():
    """Benchmark exact search against a vectorised NumPy scan."""
    print("\n=== NumPy Comparison Benchmark ===")

    try:
        import numpy as np

        print("  NumPy is available - running comparison...")

        text = random_dna(200000)
        pattern = "GAATTC"
        matcher = SequenceMatcher(pattern)

        pure_elapsed = time_function(matcher.count, text, iterations=5)

        text_array = np.frombuffer(text.encode('ascii'), dtype=np.uint8)
        pattern_array = np.frombuffer(pattern.encode('ascii'), dtype=np.uint8)

        def numpy_positions():
            windows = np.lib.stride_tricks.sliding_window_view(text_array, len(pattern_array))
            return np.flatnonzero((windows == pattern_array).all(axis=1))

        numpy_elapsed = time_function(numpy_positions, iterations=5)

        expected = [m.position for m in matcher.find_in_sequence(text)]
        agree = numpy_positions().tolist() == expected

        print(f"\n  Exact search ({len(text):,} bp, '{pattern}') x5:")
        print(f"    Boyer-Moore (pure Python): {pure_elapsed:.2f}ms")
        print(f"    NumPy sliding window: {numpy_elapsed:.2f}ms")
        print(f"    Speedup: {pure_elapsed/numpy_elapsed:.1f}x")
        print(f"    Positions agree: {agree}")

    except ImportError:
        print("  NumPy not available - skipping NumPy comparison")
        print("  Install with: pip install numpy")


def run_all_benchmarks(include_numpy: bool = False):
    """Run all benchmarks."""
    print("=" * 60)
    print("SeqFlow Benchmark Suite")
    print("=" * 60)

    benchmark_exact_search()
    benchmark_fuzzy_and_iupac()
    benchmark_streaming()
    benchmark_samplers()

    if include_numpy:
        benchmark_with_numpy()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='SeqFlow Benchmarks')
    parser.add_argument('--numpy', action='store_true',
                        help='Include NumPy comparison benchmarks')
    args = parser.parse_args()

    run_all_benchmarks(include_numpy=args.numpy)
    return 0


if __name__ == '__main__':
    sys.exit(main())
