#!/usr/bin/env python3
"""
SeqFlow Demo

Walks through the pattern matcher and the samplers on small inputs.

Usage:
    python demo.py
"""

import asyncio
import sys
sys.path.insert(0, '..')

from seqflow.sequence import Sequence
from seqflow.matcher import SequenceMatcher, find_pattern
from seqflow.iupac import expand_ambiguous
from seqflow.sampling import (
    ReservoirSampler, StratifiedSampler, WeightedReservoirSampler, weighted_pairs
)
from seqflow.sample import SampleOptions, sample_sequences
from seqflow.streams import collect


def main():
    """Main entry point."""
    print("SeqFlow Pattern Matching and Sampling")
    print("=====================================\n")

    example_exact_search()
    example_fuzzy_and_iupac()
    example_streaming()
    example_sampling()

    print("\nAll examples completed successfully!")
    return 0


def example_exact_search():
    """Example 1: Exact Search"""
    print("Example 1: Exact Search")
    print("-----------------------")

    seq = Sequence("ATGCGATCGATCGATCGATCGATCGATCG", id="chr_demo")

    for algorithm in ("boyer-moore", "kmp"):
        matcher = SequenceMatcher("GATC", algorithm=algorithm)
        positions = [m.position for m in matcher.find_in_sequence(seq)]
        print(f"{matcher!r}: {positions}")

    # Overlapping hits are all reported
    print(f"'AA' in 'AAAA': {[m.position for m in find_pattern('AAAA', 'AA')]}")

    # Context around each hit
    matcher = SequenceMatcher("CGAT", context_window=3)
    first = matcher.find_first(seq)
    print(f"First CGAT: {first.context.before}[{first.matched}]{first.context.after}"
          f" at {first.position} in {first.sequence_id}")
    print()


def example_fuzzy_and_iupac():
    """Example 2: Mismatches and Ambiguity Codes"""
    print("Example 2: Mismatches and Ambiguity Codes")
    print("-----------------------------------------")

    matcher = SequenceMatcher("ATCG", algorithm="fuzzy", max_mismatches=1)
    for match in matcher.find_in_sequence("ATGGATCG"):
        print(f"  {match.matched} at {match.position}: "
              f"{match.mismatches} mismatch(es), score {match.score:.2f}")

    print(f"\nN expands to {sorted(expand_ambiguous('N'))}, "
          f"R expands to {sorted(expand_ambiguous('R'))}")

    iupac = SequenceMatcher("GATNAC", iupac_aware=True)
    print(f"Strategy for GATNAC: {iupac.algorithm}")
    for text in ("GATAAC", "GATCAC", "GATTTC"):
        print(f"  {text}: {'match' if iupac.test(text) else 'no match'}")

    regex = SequenceMatcher("GA[AT]+TC", algorithm="regex")
    print(f"Regex GA[AT]+TC in GGAATTCGATTTC: "
          f"{[(m.position, m.matched) for m in regex.find_in_sequence('GGAATTCGATTTC')]}")
    print()


def example_streaming():
    """Example 3: Matching Over a Chunked Stream"""
    print("Example 3: Matching Over a Chunked Stream")
    print("-----------------------------------------")

    chunks = ["TTTTTGAA", "TTCTTTTT", "GAAT", "TCAA"]
    print(f"Chunks: {chunks}")

    matcher = SequenceMatcher("GAATTC", buffer_size=8)
    matches = asyncio.run(collect(matcher.stream_matches(chunks, sequence_id="reads")))
    for match in matches:
        print(f"  {match.matched} at global position {match.position}")
    print()


def example_sampling():
    """Example 4: Sampling"""
    print("Example 4: Sampling")
    print("-------------------")

    letters = list("abcde")
    print(f"Reservoir k=2 of {letters} (seed=1): "
          f"{asyncio.run(ReservoirSampler(2, seed=1).sample_stream(letters))}")

    records = [Sequence(f"ACGT{'A' * (i % 7)}", id=f"read{i}") for i in range(100)]

    options = SampleOptions(n=10, strategy="systematic")
    picked = asyncio.run(collect(sample_sequences(records, options)))
    print(f"Systematic n=10 of 100: {[r.id for r in picked]}")

    options = SampleOptions(fraction=0.05, seed=7)
    picked = asyncio.run(collect(sample_sequences(records, options)))
    print(f"Fraction 0.05 (seed=7): {len(picked)} records")

    weighted = WeightedReservoirSampler(5, seed=3)
    chosen = asyncio.run(weighted.sample_stream(weighted_pairs(records, len)))
    print(f"Length-weighted k=5: {[r.id for r in chosen]}")

    stratified = StratifiedSampler(6, lambda r: f"len{len(r)}", expected_strata=7, seed=11)
    strata = asyncio.run(stratified.sample_stream(records))
    print(f"Stratified by length: {len(strata)} strata")
    for label, members in sorted(strata.items()):
        print(f"  {label}: {[r.id for r in members]}")
    print()


if __name__ == '__main__':
    sys.exit(main())
