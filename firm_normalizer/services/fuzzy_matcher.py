"""
Fuzzy matching of canonical keys against the knowledge base corpus.

Scores are distances in [0, 1]: 0.0 for identical strings, 1.0 for strings
with nothing in common. The distance blends two similarity measures:

- Levenshtein similarity (edit distance scaled by the longer string)
- Jaro-Winkler similarity (character agreement with a common-prefix bonus)

Candidates are returned best first; equal scores keep corpus order.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class MatchCandidate:
    """A corpus variant and its distance from the query."""
    variant: str
    score: float


class LevenshteinMatcher:
    """Levenshtein edit distance and the similarity derived from it."""
    
    def distance(self, s1: str, s2: str) -> int:
        """
        Calculate Levenshtein distance between two strings.
        
        Args:
            s1: First string
            s2: Second string
            
        Returns:
            Edit distance between the strings
        """
        if len(s1) < len(s2):
            return self.distance(s2, s1)
        
        if len(s2) == 0:
            return len(s1)
        
        previous_row = list(range(len(s2) + 1))
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row
        
        return previous_row[-1]
    
    def similarity(self, s1: str, s2: str) -> float:
        """
        Calculate similarity score (0.0-1.0) based on Levenshtein distance.
        
        Returns:
            Similarity score where 1.0 is identical
        """
        if not s1 and not s2:
            return 1.0
        if not s1 or not s2:
            return 0.0
        
        max_len = max(len(s1), len(s2))
        return 1.0 - (self.distance(s1, s2) / max_len)


class JaroWinklerMatcher:
    """Jaro-Winkler similarity."""
    
    def __init__(self, prefix_scale: float = 0.1):
        """
        Args:
            prefix_scale: Scaling factor for common prefix bonus (0.0-0.25)
        """
        if not 0.0 <= prefix_scale <= 0.25:
            raise ValueError("Prefix scale must be between 0.0 and 0.25")
        self.prefix_scale = prefix_scale
    
    def jaro_similarity(self, s1: str, s2: str) -> float:
        """
        Calculate Jaro similarity between two strings.
        
        Returns:
            Jaro similarity score (0.0-1.0)
        """
        if not s1 and not s2:
            return 1.0
        if not s1 or not s2:
            return 0.0
        if s1 == s2:
            return 1.0
        
        len1, len2 = len(s1), len(s2)
        match_window = max(0, max(len1, len2) // 2 - 1)
        
        s1_matches = [False] * len1
        s2_matches = [False] * len2
        
        matches = 0
        transpositions = 0
        
        for i in range(len1):
            start = max(0, i - match_window)
            end = min(i + match_window + 1, len2)
            
            for j in range(start, end):
                if s2_matches[j] or s1[i] != s2[j]:
                    continue
                s1_matches[i] = s2_matches[j] = True
                matches += 1
                break
        
        if matches == 0:
            return 0.0
        
        k = 0
        for i in range(len1):
            if not s1_matches[i]:
                continue
            while not s2_matches[k]:
                k += 1
            if s1[i] != s2[k]:
                transpositions += 1
            k += 1
        
        return (matches / len1 + matches / len2 +
                (matches - transpositions / 2) / matches) / 3.0
    
    def similarity(self, s1: str, s2: str) -> float:
        """Jaro similarity with the Winkler bonus for a shared prefix (up to 4 chars)."""
        jaro = self.jaro_similarity(s1, s2)
        
        if jaro < 0.7:
            return jaro
        
        prefix_len = 0
        for i in range(min(len(s1), len(s2), 4)):
            if s1[i] == s2[i]:
                prefix_len += 1
            else:
                break
        
        return jaro + (prefix_len * self.prefix_scale * (1 - jaro))


class FuzzyIndex:
    """
    Read-only search index over a fixed corpus of canonical variants.
    
    Holds no mutable state after construction, so a single index can be
    searched from several threads at once.
    """
    
    def __init__(self, corpus: Tuple[str, ...], threshold: float,
                 levenshtein: LevenshteinMatcher, jaro_winkler: JaroWinklerMatcher,
                 levenshtein_weight: float):
        self._corpus = corpus
        self._threshold = threshold
        self._levenshtein = levenshtein
        self._jaro_winkler = jaro_winkler
        self._lev_weight = levenshtein_weight
        self._jw_weight = 1.0 - levenshtein_weight
    
    @property
    def corpus(self) -> Tuple[str, ...]:
        return self._corpus
    
    @property
    def threshold(self) -> float:
        return self._threshold
    
    def __len__(self) -> int:
        return len(self._corpus)
    
    def score(self, query: str, variant: str) -> float:
        """Distance between query and variant (0.0 identical, 1.0 unrelated)."""
        if query == variant:
            return 0.0
        similarity = (self._lev_weight * self._levenshtein.similarity(query, variant) +
                      self._jw_weight * self._jaro_winkler.similarity(query, variant))
        return min(1.0, max(0.0, 1.0 - similarity))
    
    def _lower_bound(self, query: str, variant: str) -> float:
        # Levenshtein similarity cannot exceed 1 - |len diff| / max len,
        # Jaro-Winkler cannot exceed 1.
        longest = max(len(query), len(variant))
        if longest == 0:
            return 0.0
        lev_ceiling = 1.0 - abs(len(query) - len(variant)) / longest
        return 1.0 - (self._lev_weight * lev_ceiling + self._jw_weight)
    
    def search(self, query: str, limit: Optional[int] = None) -> List[MatchCandidate]:
        """
        Rank corpus variants against query.
        
        Args:
            query: Canonical key to look up
            limit: Maximum number of candidates to return (all when None)
            
        Returns:
            Candidates scoring at or below the index threshold, best first
        """
        if not query or (limit is not None and limit <= 0):
            return []
        
        candidates = []
        for variant in self._corpus:
            if self._lower_bound(query, variant) > self._threshold:
                continue
            score = self.score(query, variant)
            if score <= self._threshold:
                candidates.append(MatchCandidate(variant=variant, score=score))
        
        # sort is stable, so ties keep corpus order
        candidates.sort(key=lambda candidate: candidate.score)
        
        if limit is not None:
            candidates = candidates[:limit]
        return candidates


class FuzzyMatcher:
    """
    Builds fuzzy search indexes with a shared configuration.
    """
    
    def __init__(self,
                 threshold: float = 0.4,
                 levenshtein_weight: float = 0.5,
                 jaro_prefix_scale: float = 0.1):
        """
        Initialize the fuzzy matcher.
        
        Args:
            threshold: Largest distance (0.0-1.0) an index returns as a candidate
            levenshtein_weight: Share of the Levenshtein similarity in the blend;
                Jaro-Winkler receives the remainder
            jaro_prefix_scale: Prefix scale for the Jaro-Winkler bonus
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("Threshold must be between 0.0 and 1.0")
        if not 0.0 <= levenshtein_weight <= 1.0:
            raise ValueError("Levenshtein weight must be between 0.0 and 1.0")
        self.threshold = threshold
        self.levenshtein_weight = levenshtein_weight
        self.levenshtein = LevenshteinMatcher()
        self.jaro_winkler = JaroWinklerMatcher(jaro_prefix_scale)
    
    def build(self, corpus: Iterable[str]) -> FuzzyIndex:
        """Index a corpus of canonical variants. Duplicates keep their first position."""
        unique = tuple(dict.fromkeys(corpus))
        return FuzzyIndex(
            corpus=unique,
            threshold=self.threshold,
            levenshtein=self.levenshtein,
            jaro_winkler=self.jaro_winkler,
            levenshtein_weight=self.levenshtein_weight
        )


def build(corpus: Iterable[str], threshold: float = 0.4) -> FuzzyIndex:
    """Build an index with the default blend."""
    return FuzzyMatcher(threshold=threshold).build(corpus)


def search(index: FuzzyIndex, query: str, limit: Optional[int] = None) -> List[MatchCandidate]:
    """Search a previously built index."""
    return index.search(query, limit)
