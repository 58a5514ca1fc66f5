"""
SeqFlow - Pattern Matching

Exact, fuzzy, IUPAC-aware and regular-expression search over genomic text.

A SequenceMatcher is built once per pattern. The search strategy and its
lookup table (Boyer-Moore bad-character table, KMP prefix table, compiled
regex, per-position IUPAC expansions) are chosen and precomputed at
construction, then reused for every sequence searched.

All exact strategies report overlapping matches: "ATAT" is found twice in
"ATATAT". This matters for tandem repeats and is deliberate.

Example:
    >>> matcher = SequenceMatcher("ATCG")
    >>> [m.position for m in matcher.find_in_sequence("ATCGATCGATCG")]
    [0, 4, 8]
"""

import dataclasses
import logging
import re
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Dict, Iterator, List, Optional, Tuple, Union

from .errors import ConfigurationError, ExecutionError
from .iupac import bases_compatible, has_ambiguous
from .sequence import Sequence, as_text
from .streaming import ChunkStreamMatcher
from .streams import Source, aiterate


_log = logging.getLogger(__name__)

# Length-preserving upper-casing; str.upper() can grow non-ASCII text.
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)

# (start, end, mismatches)
Hit = Tuple[int, int, int]


class Algorithm(Enum):
    """Search algorithm used by a SequenceMatcher."""
    BOYER_MOORE = "boyer-moore"
    KMP = "kmp"
    FUZZY = "fuzzy"
    REGEX = "regex"


@dataclass(frozen=True)
class MatchOptions:
    """
    Matching configuration, validated on construction.

    Attributes:
        algorithm: Search algorithm (enum member or its string value)
        max_mismatches: Mismatches tolerated per window (fuzzy only)
        iupac_aware: Treat ambiguity codes as base sets, not literals
        case_sensitive: When False, match on upper-cased text but report
            the original casing
        context_window: Characters of context captured on each side
        buffer_size: Window size for chunk streaming; must be at least
            the pattern length
    """
    algorithm: Algorithm = Algorithm.BOYER_MOORE
    max_mismatches: int = 0
    iupac_aware: bool = False
    case_sensitive: bool = True
    context_window: int = 50
    buffer_size: int = 1_000_000

    def __post_init__(self):
        try:
            algorithm = Algorithm(self.algorithm)
        except ValueError:
            valid = ", ".join(a.value for a in Algorithm)
            raise ConfigurationError(
                f"Unknown algorithm '{self.algorithm}'. Valid options: {valid}"
            ) from None
        object.__setattr__(self, "algorithm", algorithm)

        if self.max_mismatches < 0:
            raise ConfigurationError("max_mismatches must be non-negative")
        if self.context_window < 0:
            raise ConfigurationError("context_window must be non-negative")
        if self.buffer_size <= 0:
            raise ConfigurationError("buffer_size must be positive")


@dataclass(frozen=True)
class MatchContext:
    """Text surrounding a match, clipped to the sequence bounds."""
    before: str
    after: str
    context_start: int
    context_end: int


@dataclass(frozen=True)
class Match:
    """
    A single pattern occurrence.

    ``matched`` keeps the casing of the searched text. ``pattern`` is the
    pattern as given; for regex searches the two can differ in length.
    """
    position: int
    length: int
    matched: str
    pattern: str
    mismatches: int
    sequence_id: str
    context: MatchContext = field(repr=False)
    score: float

    @property
    def end(self) -> int:
        """Exclusive end position of the match."""
        return self.position + self.length

    def shifted(self, offset: int) -> 'Match':
        """Return a copy moved ``offset`` characters to the right."""
        context = dataclasses.replace(
            self.context,
            context_start=self.context.context_start + offset,
            context_end=self.context.context_end + offset,
        )
        return dataclasses.replace(self, position=self.position + offset, context=context)


def match_score(mismatches: int, length: int) -> float:
    """Similarity score ``1 - mismatches/length`` clamped to ``[0, 1]``."""
    if mismatches == 0 or length == 0:
        return 1.0
    return max(0.0, min(1.0, 1.0 - mismatches / length))


# ---------------------------------------------------------------------------
# Search strategies
#
# Each strategy owns its precomputed table and exposes scan(text), which
# yields (start, end, mismatches) in increasing start order.
# ---------------------------------------------------------------------------


class _BoyerMooreSearch:
    """Boyer-Moore with the bad-character rule, overlap-preserving."""

    searches_original = False

    def __init__(self, pattern: str):
        self.pattern = pattern
        # Last index of each character, excluding the final position
        self.bad_char: Dict[str, int] = {c: i for i, c in enumerate(pattern[:-1])}

    def scan(self, text: str) -> Iterator[Hit]:
        pattern = self.pattern
        bad_char = self.bad_char
        m = len(pattern)
        last_shift = len(text) - m

        shift = 0
        while shift <= last_shift:
            j = m - 1
            while j >= 0 and pattern[j] == text[shift + j]:
                j -= 1

            if j < 0:
                yield shift, shift + m, 0
                shift += 1
            else:
                shift += max(1, j - bad_char.get(text[shift + j], -1))


def build_lps(pattern: str) -> List[int]:
    """
    Build the KMP longest-proper-prefix-suffix table in O(m).

    ``lps[i]`` is the length of the longest proper prefix of
    ``pattern[:i + 1]`` that is also a suffix of it.
    """
    lps = [0] * len(pattern)
    length = 0
    i = 1

    while i < len(pattern):
        if pattern[i] == pattern[length]:
            length += 1
            lps[i] = length
            i += 1
        elif length != 0:
            length = lps[length - 1]
        else:
            lps[i] = 0
            i += 1

    return lps


class _KmpSearch:
    """Knuth-Morris-Pratt, resuming from the prefix table after a hit."""

    searches_original = False

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.lps = build_lps(pattern)

    def scan(self, text: str) -> Iterator[Hit]:
        pattern = self.pattern
        lps = self.lps
        m = len(pattern)

        i = 0
        j = 0
        while i < len(text):
            if text[i] == pattern[j]:
                i += 1
                j += 1
                if j == m:
                    yield i - m, i, 0
                    j = lps[j - 1]
            elif j != 0:
                j = lps[j - 1]
            else:
                i += 1


class _FuzzySearch:
    """Hamming-distance search: every window with at most k mismatches."""

    searches_original = False

    def __init__(self, pattern: str, max_mismatches: int):
        self.pattern = pattern
        self.max_mismatches = max_mismatches

    def scan(self, text: str) -> Iterator[Hit]:
        pattern = self.pattern
        limit = self.max_mismatches
        m = len(pattern)

        for i in range(len(text) - m + 1):
            mismatches = 0
            for j in range(m):
                if text[i + j] != pattern[j]:
                    mismatches += 1
                    if mismatches > limit:
                        break

            if mismatches <= limit:
                yield i, i + m, mismatches


class _IupacSearch:
    """Window search where ambiguity codes match any base they include."""

    searches_original = False

    def __init__(self, pattern: str):
        self.pattern = pattern

    def scan(self, text: str) -> Iterator[Hit]:
        pattern = self.pattern
        m = len(pattern)

        for i in range(len(text) - m + 1):
            for j in range(m):
                if not bases_compatible(text[i + j], pattern[j]):
                    break
            else:
                yield i, i + m, 0


class _RegexSearch:
    """Delegates to the ``re`` engine; match lengths may vary."""

    searches_original = True

    def __init__(self, pattern: str, case_sensitive: bool):
        self.pattern = pattern
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            self.regex = re.compile(pattern, flags)
        except re.error as exc:
            raise ConfigurationError(f"Invalid regex pattern '{pattern}': {exc}") from exc

    def scan(self, text: str) -> Iterator[Hit]:
        try:
            for found in self.regex.finditer(text):
                start, end = found.span()
                # Zero-width hits carry no sequence and are not reported
                if end > start:
                    yield start, end, 0
        except (re.error, RecursionError) as exc:
            raise ExecutionError(self.pattern, str(exc)) from exc


# ---------------------------------------------------------------------------
# Public matcher
# ---------------------------------------------------------------------------


class SequenceMatcher:
    """
    Reusable pattern matcher for genomic sequences.

    Attributes:
        pattern: The pattern as given
        options: Resolved MatchOptions
        algorithm: Strategy in effect ("iupac" when ambiguity matching
            replaced the configured algorithm)

    Example:
        >>> fuzzy = SequenceMatcher("ATCG", algorithm="fuzzy", max_mismatches=1)
        >>> hit = fuzzy.find_first("ATGG")
        >>> hit.mismatches, hit.score
        (1, 0.75)
    """

    def __init__(self, pattern: str, options: Optional[MatchOptions] = None, **overrides):
        if not pattern:
            raise ConfigurationError("Pattern cannot be empty")

        options = options or MatchOptions()
        if overrides:
            try:
                options = dataclasses.replace(options, **overrides)
            except TypeError as exc:
                raise ConfigurationError(f"Unknown matcher option: {exc}") from exc

        if options.buffer_size < len(pattern):
            raise ConfigurationError(
                f"buffer_size ({options.buffer_size}) must be at least "
                f"the pattern length ({len(pattern)})"
            )

        self.pattern = pattern
        self.options = options
        self._search_pattern = (
            pattern if options.case_sensitive else pattern.translate(_ASCII_UPPER)
        )
        self.algorithm, self._search = self._build_search()

        _log.debug(
            "Built %s matcher for pattern '%s' (case_sensitive=%s)",
            self.algorithm, pattern, options.case_sensitive,
        )

    def _build_search(self):
        options = self.options
        pattern = self._search_pattern
        algorithm = options.algorithm

        # Regex syntax is never read as IUPAC codes
        if (options.iupac_aware and algorithm is not Algorithm.REGEX
                and has_ambiguous(pattern)):
            return "iupac", _IupacSearch(pattern)

        if algorithm is Algorithm.KMP:
            search = _KmpSearch(pattern)
        elif algorithm is Algorithm.FUZZY:
            search = _FuzzySearch(pattern, options.max_mismatches)
        elif algorithm is Algorithm.REGEX:
            search = _RegexSearch(self.pattern, options.case_sensitive)
        else:
            search = _BoyerMooreSearch(pattern)
        return algorithm.value, search

    @property
    def fixed_length(self) -> bool:
        """Whether every match is exactly as long as the pattern."""
        return not isinstance(self._search, _RegexSearch)

    def _prepare(self, text: str) -> str:
        if self.options.case_sensitive or self._search.searches_original:
            return text
        return text.translate(_ASCII_UPPER)

    def _scan(self, text: str) -> Iterator[Hit]:
        return self._search.scan(self._prepare(text))

    def _build_match(
        self,
        text: str,
        start: int,
        end: int,
        mismatches: int,
        sequence_id: str
    ) -> Match:
        matched = text[start:end]
        window = self.options.context_window

        before_start = max(0, start - window)
        after_end = min(len(text), end + window)

        return Match(
            position=start,
            length=len(matched),
            matched=matched,
            pattern=self.pattern,
            mismatches=mismatches,
            sequence_id=sequence_id,
            context=MatchContext(
                before=text[before_start:start],
                after=text[end:after_end],
                context_start=before_start,
                context_end=after_end,
            ),
            score=match_score(mismatches, len(matched)),
        )

    def find_in_text(
        self,
        text: str,
        sequence_id: str = "unknown",
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Match]:
        """
        Search raw text.

        Args:
            text: Text to search
            sequence_id: Identifier reported on each match
            offset: Added to every reported position and context bound
            limit: Only matches starting before this local index are kept

        Returns:
            Matches in increasing position order
        """
        matches = []
        for start, end, mismatches in self._scan(text):
            if limit is not None and start >= limit:
                break
            found = self._build_match(text, start, end, mismatches, sequence_id)
            matches.append(found.shifted(offset) if offset else found)
        return matches

    def find_in_sequence(self, sequence: Union[Sequence, str]) -> List[Match]:
        """
        Find every match in one sequence, overlapping matches included.

        Args:
            sequence: A Sequence record or a raw string

        Returns:
            All matches, in position order

        Raises:
            ExecutionError: If the regex engine fails; no partial list is
                returned
        """
        text, sequence_id = as_text(sequence)
        return self.find_in_text(text, sequence_id)

    def find_first(self, sequence: Union[Sequence, str]) -> Optional[Match]:
        """Return the first match, stopping the search there."""
        text, sequence_id = as_text(sequence)
        hit = next(self._scan(text), None)
        if hit is None:
            return None
        start, end, mismatches = hit
        return self._build_match(text, start, end, mismatches, sequence_id)

    def test(self, sequence: Union[Sequence, str]) -> bool:
        """Check whether the pattern occurs at all."""
        text, _ = as_text(sequence)
        return next(self._scan(text), None) is not None

    def count(self, sequence: Union[Sequence, str]) -> int:
        """Count occurrences without building Match objects."""
        text, _ = as_text(sequence)
        return sum(1 for _ in self._scan(text))

    async def find_all(self, sequences: Source) -> AsyncIterator[Match]:
        """
        Lazily yield matches from a stream of sequences.

        Each record is searched as it arrives; nothing beyond the current
        record is held in memory.
        """
        async for record in aiterate(sequences):
            for found in self.find_in_sequence(record):
                yield found

    def stream_matches(self, chunks: Source, sequence_id: str = "stream") -> AsyncIterator[Match]:
        """
        Match across a stream of text chunks.

        Positions are global offsets into the concatenated stream. Matches
        straddling a chunk boundary are reported exactly once.
        """
        return ChunkStreamMatcher(self, sequence_id).matches(chunks)

    def __repr__(self) -> str:
        return f"SequenceMatcher(pattern={self.pattern!r}, algorithm={self.algorithm!r})"


def find_pattern(
    pattern: str,
    sequence: Union[Sequence, str],
    options: Optional[MatchOptions] = None
) -> List[Match]:
    """One-off search without keeping a matcher around."""
    return SequenceMatcher(pattern, options).find_in_sequence(sequence)


def has_pattern(
    pattern: str,
    sequence: Union[Sequence, str],
    options: Optional[MatchOptions] = None
) -> bool:
    """One-off existence check; stops at the first match."""
    return SequenceMatcher(pattern, options).test(sequence)


def count_pattern(
    pattern: str,
    sequence: Union[Sequence, str],
    options: Optional[MatchOptions] = None
) -> int:
    """One-off occurrence count."""
    return SequenceMatcher(pattern, options).count(sequence)
