"""
SeqFlow - Streaming Pattern Matching and Sampling for Genomic Records

The two kernels behind a Unix-pipeline-style sequence toolkit.

Modules:
    - matcher: Boyer-Moore, KMP, fuzzy, IUPAC-aware and regex search
    - streaming: matching across an unbounded stream of text chunks
    - sampling: reservoir, weighted, systematic, random, stratified and
      Bernoulli samplers
    - sample: count- or fraction-based sampling of record streams
    - rng: the seeded xorshift32 generator shared by every sampler
    - iupac: IUPAC ambiguity code expansion
"""

from .errors import SeqFlowError, ConfigurationError, ExecutionError
from .sequence import Sequence, SequenceError
from .iupac import expand_ambiguous, bases_compatible
from .rng import XorShift32
from .matcher import (
    Algorithm, MatchOptions, Match, MatchContext, SequenceMatcher,
    find_pattern, has_pattern, count_pattern,
)
from .streaming import ChunkStreamMatcher
from .sampling import (
    ReservoirSampler, SystematicSampler, RandomSampler, StratifiedSampler,
    WeightedReservoirSampler, BernoulliSampler,
)
from .sample import SampleOptions, SamplingStrategy, sample_sequences

__version__ = "0.1.0"
__all__ = [
    "SeqFlowError",
    "ConfigurationError",
    "ExecutionError",
    "Sequence",
    "SequenceError",
    "expand_ambiguous",
    "bases_compatible",
    "XorShift32",
    "Algorithm",
    "MatchOptions",
    "Match",
    "MatchContext",
    "SequenceMatcher",
    "find_pattern",
    "has_pattern",
    "count_pattern",
    "ChunkStreamMatcher",
    "ReservoirSampler",
    "SystematicSampler",
    "RandomSampler",
    "StratifiedSampler",
    "WeightedReservoirSampler",
    "BernoulliSampler",
    "SampleOptions",
    "SamplingStrategy",
    "sample_sequences",
]
