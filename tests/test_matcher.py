"""
Tests for the pattern matcher.
"""

import pytest
from seqflow.errors import ConfigurationError, ExecutionError
from seqflow.sequence import Sequence
from seqflow.iupac import bases_compatible
from seqflow.matcher import (
    Algorithm, MatchOptions, SequenceMatcher, build_lps, match_score,
    find_pattern, has_pattern, count_pattern
)


def brute_force(text, pattern):
    """Reference scan: every start where the pattern occurs."""
    m = len(pattern)
    return [i for i in range(len(text) - m + 1) if text[i:i + m] == pattern]


def positions(matches):
    return [m.position for m in matches]


class TestMatcherConstruction:
    """Tests for matcher construction and options."""

    def test_empty_pattern_raises_error(self):
        """Test that an empty pattern is rejected."""
        with pytest.raises(ConfigurationError):
            SequenceMatcher("")

    def test_invalid_regex_raises_error(self):
        """Test that bad regex syntax fails at construction."""
        with pytest.raises(ConfigurationError):
            SequenceMatcher("AT[CG", algorithm="regex")

    def test_unknown_algorithm_raises_error(self):
        """Test that unknown algorithm names are rejected."""
        with pytest.raises(ConfigurationError):
            MatchOptions(algorithm="suffix-tree")

    def test_algorithm_string_is_coerced(self):
        """Test that algorithm names become enum members."""
        assert MatchOptions(algorithm="kmp").algorithm is Algorithm.KMP

    def test_negative_mismatches_raises_error(self):
        """Test option validation."""
        with pytest.raises(ConfigurationError):
            MatchOptions(max_mismatches=-1)

    def test_buffer_smaller_than_pattern_raises_error(self):
        """Test that the stream buffer must hold the whole pattern."""
        with pytest.raises(ConfigurationError):
            SequenceMatcher("ATCGATCG", buffer_size=4)

    def test_unknown_override_raises_error(self):
        """Test that unknown keyword options are rejected."""
        with pytest.raises(ConfigurationError):
            SequenceMatcher("ATCG", max_gaps=2)

    def test_configuration_error_is_value_error(self):
        """Test that callers catching ValueError still work."""
        with pytest.raises(ValueError):
            SequenceMatcher("")

    def test_defaults(self):
        """Test default options."""
        options = MatchOptions()
        assert options.algorithm is Algorithm.BOYER_MOORE
        assert options.max_mismatches == 0
        assert options.case_sensitive is True
        assert options.context_window == 50
        assert options.buffer_size == 1_000_000

    def test_iupac_strategy_selected(self):
        """Test that ambiguity codes switch to the IUPAC strategy."""
        assert SequenceMatcher("GATNAC", iupac_aware=True).algorithm == "iupac"
        assert SequenceMatcher("GATCAC", iupac_aware=True).algorithm == "boyer-moore"


class TestExactAlgorithms:
    """Tests for Boyer-Moore and KMP."""

    def test_boyer_moore_repeats(self):
        """Test the tandem-repeat scenario."""
        matcher = SequenceMatcher("ATCG")
        assert positions(matcher.find_in_sequence("ATCGATCGATCG")) == [0, 4, 8]

    def test_overlapping_matches(self):
        """Test that overlapping occurrences are all reported."""
        for algorithm in ("boyer-moore", "kmp"):
            matcher = SequenceMatcher("ATAT", algorithm=algorithm)
            assert positions(matcher.find_in_sequence("ATATATAT")) == [0, 2, 4]

    def test_homopolymer(self):
        """Test runs of a single base."""
        for algorithm in ("boyer-moore", "kmp"):
            matcher = SequenceMatcher("AAA", algorithm=algorithm)
            assert positions(matcher.find_in_sequence("AAAAA")) == [0, 1, 2]

    def test_algorithms_agree_with_brute_force(self, dna_texts):
        """Test BM == KMP == brute force over many texts and patterns."""
        patterns = ["A", "AT", "ACG", "GATTACA", "TTTT", "CGCG", "ACGTACGTA"]
        for pattern in patterns:
            bm = SequenceMatcher(pattern, algorithm="boyer-moore")
            kmp = SequenceMatcher(pattern, algorithm="kmp")
            for text in dna_texts:
                expected = brute_force(text, pattern)
                assert positions(bm.find_in_sequence(text)) == expected
                assert positions(kmp.find_in_sequence(text)) == expected

    def test_patterns_taken_from_text(self, dna_texts):
        """Test patterns that are guaranteed to occur."""
        for text in dna_texts:
            if len(text) < 20:
                continue
            pattern = text[7:15]
            expected = brute_force(text, pattern)
            assert 7 in expected
            for algorithm in ("boyer-moore", "kmp"):
                matcher = SequenceMatcher(pattern, algorithm=algorithm)
                assert positions(matcher.find_in_sequence(text)) == expected

    def test_pattern_longer_than_text(self):
        """Test that a long pattern finds nothing."""
        for algorithm in ("boyer-moore", "kmp", "fuzzy"):
            matcher = SequenceMatcher("ATCGATCG", algorithm=algorithm)
            assert matcher.find_in_sequence("ATCG") == []

    def test_build_lps(self):
        """Test the KMP prefix table."""
        assert build_lps("AAAA") == [0, 1, 2, 3]
        assert build_lps("ABAB") == [0, 0, 1, 2]
        assert build_lps("AABAAA") == [0, 1, 0, 1, 2, 2]


class TestFuzzyMatching:
    """Tests for mismatch-tolerant matching."""

    def test_one_mismatch(self):
        """Test the single-mismatch scenario."""
        matcher = SequenceMatcher("ATCG", algorithm="fuzzy", max_mismatches=1)
        matches = matcher.find_in_sequence("ATGG")
        assert len(matches) == 1
        assert matches[0].position == 0
        assert matches[0].mismatches == 1
        assert matches[0].score == 0.75

    def test_zero_mismatches_equals_exact(self, dna_texts):
        """Test that fuzzy with k=0 matches exact search."""
        for pattern in ("AC", "GATTACA", "TTTT", "ACGTA"):
            fuzzy = SequenceMatcher(pattern, algorithm="fuzzy")
            exact = SequenceMatcher(pattern)
            for text in dna_texts:
                assert positions(fuzzy.find_in_sequence(text)) == \
                    positions(exact.find_in_sequence(text))

    def test_mismatch_counts_are_exact(self):
        """Test that reported mismatches are the Hamming distance."""
        matcher = SequenceMatcher("AAAA", algorithm="fuzzy", max_mismatches=2)
        matches = matcher.find_in_sequence("AAAATTTT")
        assert [(m.position, m.mismatches) for m in matches] == [(0, 0), (1, 1), (2, 2)]

    def test_score_bounds(self):
        """Test that scores stay within [0, 1]."""
        matcher = SequenceMatcher("ACGT", algorithm="fuzzy", max_mismatches=4)
        for match in matcher.find_in_sequence("TTTTGGGGACGT"):
            assert 0.0 <= match.score <= 1.0
            assert match.score == pytest.approx(1.0 - match.mismatches / match.length)

    def test_match_score(self):
        """Test the score formula."""
        assert match_score(0, 4) == 1.0
        assert match_score(1, 4) == 0.75
        assert match_score(4, 4) == 0.0


class TestIupacMatching:
    """Tests for ambiguity-aware matching."""

    def test_n_matches_any_base(self):
        """Test the GATNAC scenario."""
        matcher = SequenceMatcher("GATNAC", iupac_aware=True)
        matches = matcher.find_in_sequence("TTGATCACTT")
        assert positions(matches) == [2]
        assert matches[0].matched == "GATCAC"
        assert matches[0].mismatches == 0

    def test_two_base_code(self):
        """Test a purine code."""
        matcher = SequenceMatcher("GRC", iupac_aware=True)
        assert positions(matcher.find_in_sequence("GACGGCGTC")) == [0, 3]

    def test_ambiguity_in_text(self):
        """Test that ambiguity codes in the text are honoured."""
        matcher = SequenceMatcher("AYG", iupac_aware=True)
        assert matcher.test("ANG")
        assert matcher.test("ACG")
        assert not matcher.test("AAG")

    def test_lowercase_codes_select_iupac(self):
        """Test that ambiguity detection ignores case."""
        matcher = SequenceMatcher("gaTNac", iupac_aware=True)
        assert matcher.algorithm == "iupac"
        assert positions(matcher.find_in_sequence("ttgatcac")) == [2]

    def test_agrees_with_base_compatibility(self, dna_texts):
        """Test every window against per-base compatibility."""
        pattern = "RNYSA"
        matcher = SequenceMatcher(pattern, iupac_aware=True)
        for text in dna_texts + ["RRNYSAWN", "nnnnn"]:
            expected = [
                i for i in range(len(text) - len(pattern) + 1)
                if all(bases_compatible(text[i + j], pattern[j]) for j in range(len(pattern)))
            ]
            assert positions(matcher.find_in_sequence(text)) == expected

    def test_without_iupac_n_is_literal(self):
        """Test that N is a plain character when IUPAC is off."""
        matcher = SequenceMatcher("GATNAC")
        assert matcher.find_in_sequence("GATCAC") == []
        assert positions(matcher.find_in_sequence("GATNAC")) == [0]


class TestRegexMatching:
    """Tests for the regex strategy."""

    def test_variable_length(self):
        """Test that matched text can differ from the pattern."""
        matcher = SequenceMatcher("AT+G", algorithm="regex")
        matches = matcher.find_in_sequence("CATTTGCATG")
        assert [(m.position, m.matched) for m in matches] == [(1, "ATTTG"), (7, "ATG")]
        assert all(m.pattern == "AT+G" for m in matches)
        assert matches[0].length == 5

    def test_case_insensitive_keeps_original_case(self):
        """Test that the reported text keeps the input casing."""
        matcher = SequenceMatcher("AT[CG]", algorithm="regex", case_sensitive=False)
        matches = matcher.find_in_sequence("ggatcAtG")
        assert [m.matched for m in matches] == ["atc", "AtG"]

    def test_iupac_does_not_rewrite_regex(self):
        """Test that regex syntax is not read as ambiguity codes."""
        matcher = SequenceMatcher(r"A\d", algorithm="regex", iupac_aware=True)
        assert matcher.algorithm == "regex"
        assert positions(matcher.find_in_sequence("CA1A")) == [1]

    def test_engine_failure_raises_execution_error(self):
        """Test that engine failures surface as ExecutionError."""
        matcher = SequenceMatcher("AT", algorithm="regex")

        class BrokenRegex:
            def finditer(self, text):
                raise RecursionError("maximum recursion depth exceeded")

        matcher._search.regex = BrokenRegex()
        with pytest.raises(ExecutionError):
            matcher.find_in_sequence("ATAT")


class TestCaseAndContext:
    """Tests for case handling and match context."""

    def test_case_sensitive_default(self):
        """Test that matching is case-sensitive by default."""
        matcher = SequenceMatcher("ATCG")
        assert matcher.find_in_sequence("atcg") == []

    def test_case_insensitive(self):
        """Test that original casing is reported."""
        matcher = SequenceMatcher("atcg", case_sensitive=False)
        matches = matcher.find_in_sequence("ggATcgaa")
        assert positions(matches) == [2]
        assert matches[0].matched == "ATcg"
        assert matches[0].context.before == "gg"
        assert matches[0].context.after == "aa"

    def test_context_clipped_at_start(self):
        """Test context at the beginning of the sequence."""
        matcher = SequenceMatcher("ATCG", context_window=3)
        match = matcher.find_first("ATCGGGGGG")
        assert match.context.before == ""
        assert match.context.after == "GGG"
        assert match.context.context_start == 0
        assert match.context.context_end == 7

    def test_context_clipped_at_end(self):
        """Test context at the end of the sequence."""
        matcher = SequenceMatcher("ATCG", context_window=10)
        match = matcher.find_first("GGATCG")
        assert match.context.before == "GG"
        assert match.context.after == ""
        assert match.context.context_end == 6
        assert match.context.context_start <= match.position <= match.context.context_end

    def test_zero_context(self):
        """Test a zero-width context window."""
        matcher = SequenceMatcher("TC", context_window=0)
        match = matcher.find_first("ATCG")
        assert match.context.before == ""
        assert match.context.after == ""
        assert match.context.context_start == 1
        assert match.context.context_end == 3


class TestMatcherOperations:
    """Tests for find_first, test, count and find_all."""

    def test_sequence_id_reported(self):
        """Test that record ids flow into matches."""
        matcher = SequenceMatcher("GG")
        match = matcher.find_first(Sequence("AGGA", id="chr2"))
        assert match.sequence_id == "chr2"
        assert matcher.find_first("AGGA").sequence_id == "unknown"

    def test_find_first(self):
        """Test that only the first match is returned."""
        matcher = SequenceMatcher("AT")
        assert matcher.find_first("GGATAT").position == 2
        assert matcher.find_first("GGGG") is None

    def test_test(self):
        """Test the existence check."""
        matcher = SequenceMatcher("GAATTC")
        assert matcher.test("AAGAATTCAA")
        assert not matcher.test("AAGATTCAA")

    def test_count_per_algorithm(self):
        """Test that count uses the configured algorithm."""
        assert SequenceMatcher("ATAT").count("ATATATAT") == 3
        assert SequenceMatcher("ATAT", algorithm="kmp").count("ATATATAT") == 3
        fuzzy = SequenceMatcher("AAAA", algorithm="fuzzy", max_mismatches=1)
        assert fuzzy.count("AAAATTTT") == 2
        assert SequenceMatcher("A+", algorithm="regex").count("AATAAA") == 2

    def test_find_all(self, drain, async_source):
        """Test lazy matching over a stream of records."""
        records = [
            Sequence("ATCGATCG", id="a"),
            Sequence("GGGG", id="b"),
            Sequence("TATCG", id="c"),
        ]
        matcher = SequenceMatcher("ATCG")
        matches = drain(matcher.find_all(async_source(records)))
        assert [(m.sequence_id, m.position) for m in matches] == [("a", 0), ("a", 4), ("c", 1)]

    def test_find_all_accepts_plain_iterables(self, drain):
        """Test that synchronous iterables are accepted."""
        matcher = SequenceMatcher("AC")
        matches = drain(matcher.find_all(["ACAC", "GG"]))
        assert positions(matches) == [0, 2]

    def test_find_all_empty_stream(self, drain, async_source):
        """Test that an empty stream yields nothing."""
        assert drain(SequenceMatcher("A").find_all(async_source([]))) == []

    def test_match_end(self):
        """Test the end property."""
        match = SequenceMatcher("TCG").find_first("ATCGA")
        assert match.end == 4

    def test_convenience_functions(self):
        """Test the one-off helpers."""
        assert positions(find_pattern("AT", "ATAT")) == [0, 2]
        assert has_pattern("GATNAC", "GATTAC", MatchOptions(iupac_aware=True))
        assert count_pattern("A", "AAGA") == 3
