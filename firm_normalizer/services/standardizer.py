"""
Standardizer: maps a raw firm name to a standard label.

Resolution order:
1. empty input -> UNKNOWN
2. exact lookup of the canonical key in the knowledge base
3. best fuzzy candidate, accepted only when its score is strictly below
   the confidence threshold
4. otherwise UNKNOWN
"""

from dataclasses import dataclass
from typing import Any, Optional

from .canonicalizer import Canonicalizer
from .fuzzy_matcher import FuzzyIndex, FuzzyMatcher
from .knowledge_base import KnowledgeBase, UNKNOWN
from ..utils.logger import get_logger

logger = get_logger(__name__)

METHOD_EXACT = 'exact'
METHOD_FUZZY = 'fuzzy'
METHOD_NONE = 'none'


@dataclass(frozen=True)
class MatchOutcome:
    """How a raw name was resolved."""
    label: str
    canonical_key: str
    method: str
    matched_variant: Optional[str] = None
    score: Optional[float] = None


class Standardizer:
    """
    Resolves raw names against an explicit knowledge base handle.
    
    Every input resolves to a label; malformed input yields UNKNOWN rather
    than an exception, so batch processing never stops partway through.
    """
    
    def __init__(self,
                 knowledge_base: KnowledgeBase,
                 index: Optional[FuzzyIndex] = None,
                 canonicalizer: Optional[Canonicalizer] = None,
                 confidence_threshold: float = 0.35):
        """
        Args:
            knowledge_base: Loaded knowledge base snapshot
            index: Fuzzy index over the knowledge base corpus (built with
                default settings when omitted)
            canonicalizer: Canonicalizer to use (default suffix list when omitted)
            confidence_threshold: Fuzzy scores must be strictly below this value
        """
        if not 0.0 <= confidence_threshold <= 1.0:
            raise ValueError("Confidence threshold must be between 0.0 and 1.0")
        self.knowledge_base = knowledge_base
        self.index = index if index is not None else FuzzyMatcher().build(knowledge_base.all_known_variants)
        self.canonicalizer = canonicalizer or Canonicalizer()
        self.confidence_threshold = confidence_threshold
    
    def standardize(self, raw: Any) -> str:
        """Return the standard label for raw, or UNKNOWN."""
        return self.resolve(raw).label
    
    def resolve(self, raw: Any) -> MatchOutcome:
        """Resolve raw and report which path produced the label."""
        try:
            return self._resolve(raw)
        except Exception:
            logger.exception(f"Unexpected failure standardizing {raw!r}")
            return MatchOutcome(label=UNKNOWN, canonical_key='', method=METHOD_NONE)
    
    def _resolve(self, raw: Any) -> MatchOutcome:
        if not raw:
            return MatchOutcome(label=UNKNOWN, canonical_key='', method=METHOD_NONE)
        
        cleaned = self.canonicalizer.canonicalize(raw)
        if not cleaned:
            return MatchOutcome(label=UNKNOWN, canonical_key='', method=METHOD_NONE)
        
        label = self.knowledge_base.label_for(cleaned)
        if label is not None:
            return MatchOutcome(label=label, canonical_key=cleaned, method=METHOD_EXACT,
                                matched_variant=cleaned, score=0.0)
        
        candidates = self.index.search(cleaned, limit=1)
        if candidates and candidates[0].score < self.confidence_threshold:
            best = candidates[0]
            label = self.knowledge_base.label_for(best.variant)
            if label is not None:
                return MatchOutcome(label=label, canonical_key=cleaned, method=METHOD_FUZZY,
                                    matched_variant=best.variant, score=best.score)
            logger.warning(f"Fuzzy candidate '{best.variant}' has no label in the knowledge base")
        
        return MatchOutcome(label=UNKNOWN, canonical_key=cleaned, method=METHOD_NONE)
