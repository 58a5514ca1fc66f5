"""
Shared fixtures for the seqflow tests.
"""

import asyncio
import random

import pytest

from seqflow.streams import collect


async def _agen(items):
    for item in items:
        yield item


@pytest.fixture
def drain():
    """Run an async iterator to completion and return its items."""
    def _drain(stream):
        return asyncio.run(collect(stream))
    return _drain


@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def async_source():
    """Wrap a list as an async generator."""
    return _agen


@pytest.fixture
def dna_texts():
    """Deterministic random DNA strings of assorted lengths."""
    rng = random.Random(20240601)
    texts = ["", "A", "ATATATATAT", "AAAAAAAAAA", "ATCGATCGATCG"]
    for length in (5, 17, 64, 200):
        for _ in range(5):
            texts.append("".join(rng.choice("ACGT") for _ in range(length)))
    return texts


@pytest.fixture
def spread_seed():
    """Map a trial number to a well-spread 32-bit seed."""
    def _seed(trial):
        return (trial * 2654435761) & 0xFFFFFFFF
    return _seed
