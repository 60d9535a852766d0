"""
Tests for the fuzzy matcher and its similarity measures.
"""

import pytest

from firm_normalizer.services.fuzzy_matcher import (
    FuzzyMatcher,
    JaroWinklerMatcher,
    LevenshteinMatcher,
    MatchCandidate,
    build,
    search,
)


class TestLevenshtein:
    def test_distance(self):
        matcher = LevenshteinMatcher()
        assert matcher.distance("kitten", "sitting") == 3
        assert matcher.distance("", "abc") == 3
        assert matcher.distance("same", "same") == 0

    def test_similarity(self):
        matcher = LevenshteinMatcher()
        assert matcher.similarity("abcd", "abcd") == 1.0
        assert matcher.similarity("abcd", "") == 0.0
        assert matcher.similarity("", "") == 1.0
        assert matcher.similarity("abcd", "abce") == pytest.approx(0.75)


class TestJaroWinkler:
    def test_classic_pair(self):
        matcher = JaroWinklerMatcher()
        assert matcher.jaro_similarity("martha", "marhta") == pytest.approx(0.9444, abs=1e-3)
        assert matcher.similarity("martha", "marhta") == pytest.approx(0.9611, abs=1e-3)

    def test_no_common_characters(self):
        assert JaroWinklerMatcher().similarity("abc", "xyz") == 0.0

    def test_prefix_scale_bounds(self):
        with pytest.raises(ValueError):
            JaroWinklerMatcher(prefix_scale=0.3)


class TestFuzzyIndex:
    def test_exact_match_scores_zero(self):
        index = build(["jpmorgan chase", "goldman sachs"])
        results = search(index, "jpmorgan chase")
        assert results[0] == MatchCandidate(variant="jpmorgan chase", score=0.0)

    def test_best_candidate_first(self):
        index = build(["goldman sachs", "jp morgan chase", "jpmorgan chase"])
        results = index.search("jpmorgan chase co")
        assert results[0].variant == "jpmorgan chase"
        assert results[0].score < 0.35
        scores = [candidate.score for candidate in results]
        assert scores == sorted(scores)

    def test_unrelated_query_returns_nothing(self):
        index = build(["jpmorgan chase"])
        assert index.search("totally unrelated entity xyz") == []

    def test_more_shared_structure_scores_lower(self):
        index = FuzzyMatcher(threshold=1.0).build(["jpmorgan chase"])
        close = index.score("jpmorgan chas", "jpmorgan chase")
        further = index.score("jpmorgan ch", "jpmorgan chase")
        furthest = index.score("jp", "jpmorgan chase")
        assert 0.0 < close < further < furthest <= 1.0

    def test_ties_keep_corpus_order(self):
        forward = FuzzyMatcher(threshold=1.0).build(["abcx", "abcy"])
        backward = FuzzyMatcher(threshold=1.0).build(["abcy", "abcx"])
        assert [c.variant for c in forward.search("abcz")] == ["abcx", "abcy"]
        assert [c.variant for c in backward.search("abcz")] == ["abcy", "abcx"]

    def test_limit(self):
        index = FuzzyMatcher(threshold=1.0).build(["abcx", "abcy", "abcz"])
        assert len(index.search("abcw", limit=2)) == 2
        assert index.search("abcw", limit=0) == []

    def test_empty_query(self):
        assert build(["acme"]).search("") == []

    def test_threshold_filters_candidates(self):
        strict = FuzzyMatcher(threshold=0.0).build(["acme", "acne"])
        assert [c.variant for c in strict.search("acme")] == ["acme"]

    def test_duplicate_corpus_entries_collapse(self):
        index = build(["acme", "acme", "zeta"])
        assert index.corpus == ("acme", "zeta")

    def test_corpus_is_not_mutated(self):
        corpus = ["acme", "zeta"]
        build(corpus).search("acm")
        assert corpus == ["acme", "zeta"]

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ValueError):
            FuzzyMatcher(threshold=threshold)
