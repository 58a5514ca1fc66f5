"""
SeqFlow - Seeded Random Number Generator

A small xorshift32 generator owned by each sampler instance.

The same seed always produces the same stream of floats, which is what
makes sampled subsets reproducible. There is no module-level random
state: every sampler builds (or is handed) its own generator.
"""

import secrets
from typing import Optional


_MASK32 = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0

# Zero is a fixed point of xorshift; a zero seed is mapped here instead.
ZERO_SEED_STATE = 0x9E3779B9


class XorShift32:
    """
    xorshift32 pseudo-random generator producing floats in ``[0, 1)``.

    Attributes:
        seed: The seed the generator was built from, or ``None`` when the
            initial state was drawn from the operating system

    Example:
        >>> rng = XorShift32(42)
        >>> a = [rng() for _ in range(3)]
        >>> rng.reset()
        >>> a == [rng() for _ in range(3)]
        True
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._state = self._initial_state(seed)

    @staticmethod
    def _initial_state(seed: Optional[int]) -> int:
        if seed is None:
            state = secrets.randbits(32)
        else:
            state = int(seed) & _MASK32
        return state or ZERO_SEED_STATE

    @property
    def state(self) -> int:
        """Current 32-bit internal state."""
        return self._state

    def next_uint32(self) -> int:
        """Advance the generator and return the new 32-bit state."""
        x = self._state
        x ^= (x << 13) & _MASK32
        x ^= x >> 17
        x ^= (x << 5) & _MASK32
        self._state = x
        return x

    def random(self) -> float:
        """Return the next float in ``[0, 1)``."""
        return self.next_uint32() / _TWO_POW_32

    def __call__(self) -> float:
        return self.random()

    def randbelow(self, n: int) -> int:
        """Return ``floor(random() * n)``, an integer in ``[0, n)``."""
        return int(self.random() * n)

    def reset(self) -> None:
        """
        Rewind to the initial state derived from ``seed``.

        An unseeded generator draws a fresh state instead.
        """
        self._state = self._initial_state(self.seed)

    def __repr__(self) -> str:
        return f"XorShift32(seed={self.seed!r})"


def string_hash(label: str) -> int:
    """
    Hash a string to a non-negative 31-bit integer.

    Rolling ``h * 31 + c`` over the characters, wrapped to a signed 32-bit
    integer and made non-negative. Stable across processes, unlike
    ``hash()``, so it can seed per-stratum generators.
    """
    h = 0
    for ch in label:
        h = ((h << 5) - h + ord(ch)) & _MASK32
    if h & 0x80000000:
        h -= 0x100000000
    return abs(h)
