"""
SeqFlow - Sample Operation

Draw a subset of sequence records by count or by fraction.

    n=...          fixed-size sample with the chosen strategy
    fraction=...   each record kept with that probability (no dataset
                   size needed)

Example:
    >>> options = SampleOptions(n=100, strategy="systematic")
    >>> async for record in sample_sequences(reader, options):  # doctest: +SKIP
    ...     writer.write(record)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Optional

from .errors import ConfigurationError
from .sampling import BernoulliSampler, RandomSampler, ReservoirSampler, SystematicSampler
from .streams import Source, aiterate


_log = logging.getLogger(__name__)


class SamplingStrategy(Enum):
    """How a fixed-size sample is drawn."""
    RESERVOIR = "reservoir"    # single pass, O(n) time, O(k) memory
    SYSTEMATIC = "systematic"  # evenly spaced, buffers the stream
    RANDOM = "random"          # partial shuffle, buffers the stream


@dataclass(frozen=True)
class SampleOptions:
    """
    Sampling request. Exactly one of ``n`` and ``fraction`` must be set.

    Attributes:
        n: Number of records to keep (positive integer)
        fraction: Probability of keeping each record, in ``(0, 1]``
        strategy: Strategy for ``n``-based sampling; ignored for fractions
        seed: Seed for reproducible output
    """
    n: Optional[int] = None
    fraction: Optional[float] = None
    strategy: SamplingStrategy = SamplingStrategy.RESERVOIR
    seed: Optional[int] = None

    def __post_init__(self):
        if self.n is None and self.fraction is None:
            raise ConfigurationError("Either n or fraction must be specified")
        if self.n is not None and self.fraction is not None:
            raise ConfigurationError("Cannot specify both n and fraction")

        if self.n is not None:
            if isinstance(self.n, bool) or not isinstance(self.n, int) or self.n <= 0:
                raise ConfigurationError(f"n must be a positive integer, got: {self.n}")
        if self.fraction is not None:
            if not 0.0 < self.fraction <= 1.0:
                raise ConfigurationError(
                    f"Fraction must be between 0 and 1, got: {self.fraction}"
                )

        try:
            strategy = SamplingStrategy(self.strategy)
        except ValueError:
            valid = ", ".join(s.value for s in SamplingStrategy)
            raise ConfigurationError(
                f"Invalid strategy: {self.strategy}. Valid options: {valid}"
            ) from None
        object.__setattr__(self, "strategy", strategy)


def sample_sequences(source: Source, options: SampleOptions) -> AsyncIterator:
    """
    Sample records from a stream according to ``options``.

    Returns an async iterator; records are yielded once the strategy can
    produce them (immediately for fractions, after the whole input for
    fixed-size strategies).
    """
    if options.fraction is not None:
        return _sample_fraction(source, options)
    return _sample_count(source, options)


async def _counted(source: Source, counter: list) -> AsyncIterator:
    async for item in aiterate(source):
        counter[0] += 1
        yield item


async def _sample_fraction(source: Source, options: SampleOptions) -> AsyncIterator:
    _log.debug("Bernoulli sampling with fraction %s", options.fraction)
    sampler = BernoulliSampler(options.fraction, seed=options.seed)
    seen = [0]
    kept = 0
    async for record in sampler.sample(_counted(source, seen)):
        kept += 1
        yield record
    _log.info("Sampled %d of %d records (fraction %s)", kept, seen[0], options.fraction)


async def _sample_count(source: Source, options: SampleOptions) -> AsyncIterator:
    strategy = options.strategy
    _log.debug("Sampling %d records with %s strategy", options.n, strategy.value)

    seen = [0]
    counted = _counted(source, seen)
    if strategy is SamplingStrategy.RESERVOIR:
        reservoir = ReservoirSampler(options.n, seed=options.seed)
        selected = aiterate(await reservoir.sample_stream(counted))
    elif strategy is SamplingStrategy.SYSTEMATIC:
        selected = SystematicSampler.sample_by_size(counted, options.n)
    else:
        selected = RandomSampler(options.n, seed=options.seed).sample(counted)

    kept = 0
    async for record in selected:
        kept += 1
        yield record
    _log.info("Sampled %d of %d records (%s)", kept, seen[0], strategy.value)
