"""
SeqFlow - Statistical Sampling

Samplers for drawing representative subsets from record streams whose
size is not known in advance.

    ReservoirSampler          uniform k-of-n, O(k) memory (Algorithm R)
    WeightedReservoirSampler  weight-proportional k-of-n (A-Res)
    SystematicSampler         every interval-th item from an offset
    RandomSampler             partial Fisher-Yates over the whole stream
    StratifiedSampler         one reservoir per stratum label
    BernoulliSampler          each item kept independently with p

Every sampler owns its generator. Given the same seed and the same input
order a sampler produces exactly the same output; that is the contract
the tests pin down. Streams may be async iterables or plain iterables.
"""

import logging
import math
from dataclasses import dataclass
from typing import (
    AsyncIterator, Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar,
)

from .errors import ConfigurationError
from .rng import XorShift32, string_hash
from .streams import Source, aiterate, collect


_log = logging.getLogger(__name__)

T = TypeVar("T")


def _make_rng(seed: Optional[int], rng: Optional[XorShift32]) -> XorShift32:
    if rng is not None:
        return rng
    return XorShift32(seed)


class ReservoirSampler(Generic[T]):
    """
    Uniform reservoir sampling (Vitter's Algorithm R).

    The first ``k`` items fill the reservoir. Item number ``n`` after that
    draws ``j = floor(rng() * n)`` and replaces slot ``j`` when ``j < k``,
    so after ``n`` items every item has been kept with probability
    ``k / n``.

    Example:
        >>> sampler = ReservoirSampler(2, seed=1)
        >>> for item in "abcde":
        ...     sampler.add(item)
        >>> len(sampler.get_sample())
        2
    """

    def __init__(self, k: int, seed: Optional[int] = None, rng: Optional[XorShift32] = None):
        if k <= 0:
            raise ConfigurationError("Reservoir size must be positive")
        self.k = k
        self._rng = _make_rng(seed, rng)
        self._reservoir: List[T] = []
        self._seen = 0

    @property
    def seen(self) -> int:
        """Number of items offered so far."""
        return self._seen

    @property
    def current_size(self) -> int:
        """Number of items currently held (never more than k)."""
        return len(self._reservoir)

    def add(self, item: T) -> None:
        """Offer one item to the reservoir."""
        self._seen += 1

        if len(self._reservoir) < self.k:
            self._reservoir.append(item)
        else:
            j = self._rng.randbelow(self._seen)
            if j < self.k:
                self._reservoir[j] = item

    async def sample_stream(self, stream: Source) -> List[T]:
        """Consume a whole stream and return the sample."""
        async for item in aiterate(stream):
            self.add(item)
        return self.get_sample()

    def get_sample(self) -> List[T]:
        """Return a copy of the current sample."""
        return list(self._reservoir)

    def reset(self) -> None:
        """Empty the reservoir and rewind the generator."""
        self._reservoir = []
        self._seen = 0
        self._rng.reset()


class SystematicSampler(Generic[T]):
    """
    Systematic sampling: items at ``offset``, ``offset + interval``, ...

    Needs no randomness. ``sample_by_size`` picks the interval from a
    target sample size instead.
    """

    def __init__(self, interval: int, offset: int = 0):
        if interval <= 0:
            raise ConfigurationError("Sampling interval must be positive")
        if offset < 0:
            raise ConfigurationError("Offset must be non-negative")
        self.interval = interval
        self.offset = offset
        self._count = 0

    @property
    def seen(self) -> int:
        """Number of items consumed so far."""
        return self._count

    async def sample(self, stream: Source) -> AsyncIterator[T]:
        """Yield every ``interval``-th item starting at ``offset``."""
        async for item in aiterate(stream):
            index = self._count
            self._count += 1
            if index >= self.offset and (index - self.offset) % self.interval == 0:
                yield item

    def reset(self) -> None:
        """Restart the position count at zero."""
        self._count = 0

    @classmethod
    def sample_by_size(cls, stream: Source, k: int, offset: int = 0) -> AsyncIterator[T]:
        """
        Two-pass systematic sample of at most ``k`` evenly spaced items.

        The first pass counts the ``n`` items; the interval is then
        ``max(1, n // k)``. When ``k >= n`` every item is returned
        unchanged.

        Raises:
            ConfigurationError: If ``k`` is not positive or ``offset`` is
                negative (raised here, before the stream is read)
        """
        if k <= 0:
            raise ConfigurationError("Sample size must be positive")
        if offset < 0:
            raise ConfigurationError("Offset must be non-negative")
        return cls._sample_by_size(stream, k, offset)

    @staticmethod
    async def _sample_by_size(stream: Source, k: int, offset: int) -> AsyncIterator[T]:
        items = await collect(stream)
        n = len(items)

        if k >= n:
            for item in items:
                yield item
            return

        interval = max(1, n // k)
        taken = 0
        for index in range(offset, n, interval):
            if taken >= k:
                break
            yield items[index]
            taken += 1


class RandomSampler(Generic[T]):
    """
    Uniform sample without replacement via a partial Fisher-Yates shuffle.

    The whole stream is buffered, then only the first ``min(k, n)`` slots
    are shuffled: slot ``i`` swaps with a random slot in ``[i, n)``.
    """

    def __init__(self, k: int, seed: Optional[int] = None, rng: Optional[XorShift32] = None):
        if k <= 0:
            raise ConfigurationError("Sample size must be positive")
        self.k = k
        self._rng = _make_rng(seed, rng)

    async def sample(self, stream: Source) -> AsyncIterator[T]:
        """Yield the sampled items in shuffled order."""
        items = await collect(stream)
        n = len(items)
        size = min(self.k, n)

        for i in range(size):
            j = i + self._rng.randbelow(n - i)
            items[i], items[j] = items[j], items[i]

        for item in items[:size]:
            yield item

    def reset(self) -> None:
        """Rewind the generator to its seed."""
        self._rng.reset()


class StratifiedSampler(Generic[T]):
    """
    Stratified sampling with one reservoir per stratum.

    ``stratum_fn`` labels each item. Each new label gets its own
    ReservoirSampler of capacity ``ceil(total / expected_strata)``, or
    ``total`` when the number of strata is not known. A label's generator
    is always seeded from ``string_hash(label)``, XORed with ``seed`` when
    one is given, so the sample drawn for a label is reproducible and does
    not depend on which other labels arrived first.

    Attributes:
        total: Upper bound on the flattened sample size
        samples_per_stratum: Capacity of each stratum's reservoir
    """

    def __init__(
        self,
        total: int,
        stratum_fn: Callable[[T], str],
        expected_strata: Optional[int] = None,
        seed: Optional[int] = None
    ):
        if total <= 0:
            raise ConfigurationError("Total samples must be positive")
        if expected_strata is not None and expected_strata <= 0:
            raise ConfigurationError("expected_strata must be positive")

        self.total = total
        self.stratum_fn = stratum_fn
        self.expected_strata = expected_strata
        self.seed = seed
        self.samples_per_stratum = (
            math.ceil(total / expected_strata) if expected_strata else total
        )
        self._strata: Dict[str, ReservoirSampler[T]] = {}

    @property
    def strata(self) -> List[str]:
        """Labels seen so far, in first-seen order."""
        return list(self._strata)

    def _stratum_seed(self, label: str) -> int:
        if self.seed is None:
            return string_hash(label)
        return string_hash(label) ^ self.seed

    def add(self, item: T) -> None:
        """Route one item to its stratum's reservoir."""
        label = self.stratum_fn(item)
        sampler = self._strata.get(label)
        if sampler is None:
            sampler = ReservoirSampler(self.samples_per_stratum, seed=self._stratum_seed(label))
            self._strata[label] = sampler
            _log.debug("New stratum '%s' (capacity %d)", label, self.samples_per_stratum)
        sampler.add(item)

    async def sample_stream(self, stream: Source) -> Dict[str, List[T]]:
        """Consume a whole stream and return the per-stratum samples."""
        async for item in aiterate(stream):
            self.add(item)
        return self.get_samples()

    def get_samples(self) -> Dict[str, List[T]]:
        """Per-stratum samples, omitting empty strata."""
        samples = {}
        for label, sampler in self._strata.items():
            stratum_sample = sampler.get_sample()
            if stratum_sample:
                samples[label] = stratum_sample
        return samples

    def get_all_samples(self) -> List[T]:
        """
        All strata concatenated.

        If the concatenation exceeds ``total`` it is re-sampled down to
        ``total`` with a fresh reservoir seeded from the base seed.
        """
        combined: List[T] = []
        for sampler in self._strata.values():
            combined.extend(sampler.get_sample())

        if len(combined) <= self.total:
            return combined

        final = ReservoirSampler(self.total, seed=self.seed)
        for item in combined:
            final.add(item)
        return final.get_sample()

    def reset(self) -> None:
        """Forget every stratum."""
        self._strata = {}


@dataclass
class _WeightedEntry(Generic[T]):
    item: T
    key: float


class WeightedReservoirSampler(Generic[T]):
    """
    Weighted reservoir sampling (Efraimidis-Spirakis A-Res).

    Each item gets the key ``rng() ** (1 / weight)`` and the ``k`` items
    with the largest keys are kept. Heavier items draw keys closer to 1
    and so survive more often; the total weight never needs to be known.

    Once full, the reservoir is a list sorted by descending key. A new
    key larger than the last (smallest) one replaces it and is bubbled
    forward in a single pass.
    """

    def __init__(self, k: int, seed: Optional[int] = None, rng: Optional[XorShift32] = None):
        if k <= 0:
            raise ConfigurationError("Reservoir size must be positive")
        self.k = k
        self._rng = _make_rng(seed, rng)
        self._reservoir: List[_WeightedEntry[T]] = []

    @property
    def current_size(self) -> int:
        """Number of weighted items currently held (never more than k)."""
        return len(self._reservoir)

    def add(self, item: T, weight: float) -> None:
        """
        Offer one weighted item.

        Raises:
            ConfigurationError: If ``weight`` is not positive
        """
        if not weight > 0:
            raise ConfigurationError(f"Weight must be positive, got {weight}")

        key = self._rng.random() ** (1.0 / weight)
        reservoir = self._reservoir

        if len(reservoir) < self.k:
            reservoir.append(_WeightedEntry(item, key))
            if len(reservoir) == self.k:
                reservoir.sort(key=lambda entry: entry.key, reverse=True)
            return

        if key <= reservoir[-1].key:
            return

        reservoir[-1] = _WeightedEntry(item, key)
        i = self.k - 1
        while i > 0 and reservoir[i].key > reservoir[i - 1].key:
            reservoir[i], reservoir[i - 1] = reservoir[i - 1], reservoir[i]
            i -= 1

    async def sample_stream(self, stream: Source) -> List[T]:
        """Consume a stream of ``(item, weight)`` pairs and return the sample."""
        async for item, weight in aiterate(stream):
            self.add(item, weight)
        return self.get_sample()

    def get_sample(self) -> List[T]:
        """Items currently held, largest key first once the reservoir is full."""
        return [entry.item for entry in self._reservoir]

    def get_keys(self) -> List[float]:
        """Keys currently held, aligned with get_sample()."""
        return [entry.key for entry in self._reservoir]

    def reset(self) -> None:
        """Empty the reservoir and rewind the generator."""
        self._reservoir = []
        self._rng.reset()


class BernoulliSampler(Generic[T]):
    """
    Bernoulli sampling: every item is kept independently with probability p.

    The sample size is not fixed; its expectation is ``p * n``.
    """

    def __init__(self, p: float, seed: Optional[int] = None, rng: Optional[XorShift32] = None):
        if not 0.0 <= p <= 1.0:
            raise ConfigurationError(f"Probability must be between 0 and 1, got {p}")
        self.p = p
        self._rng = _make_rng(seed, rng)

    def should_sample(self) -> bool:
        """Run one Bernoulli trial."""
        return self._rng.random() < self.p

    async def sample(self, stream: Source) -> AsyncIterator[T]:
        """Yield the items that pass their trial."""
        async for item in aiterate(stream):
            if self.should_sample():
                yield item

    def reset(self) -> None:
        """Rewind the generator to its seed."""
        self._rng.reset()


def weighted_pairs(items: Iterable[T], weight_fn: Callable[[T], float]) -> Iterable[Tuple[T, float]]:
    """Pair each item with its weight for WeightedReservoirSampler.sample_stream."""
    return ((item, weight_fn(item)) for item in items)
