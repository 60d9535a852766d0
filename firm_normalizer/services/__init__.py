"""
Services module for the Firm Normalizer.
"""

from .canonicalizer import Canonicalizer, canonicalize
from .knowledge_base import (
    KnowledgeBase, KnowledgeBaseLoader, load_knowledge_base, parse_knowledge_base, UNKNOWN
)
from .fuzzy_matcher import FuzzyMatcher, FuzzyIndex, MatchCandidate, LevenshteinMatcher, JaroWinklerMatcher
from .standardizer import Standardizer, MatchOutcome
from .batch_runner import BatchRunner, NormalizedRecord, GroupSummary, group, summarize_groups
from .row_source import RowSet, read_rows, parse_rows, validate_selection, write_records, export_records
from .normalizer_service import NormalizerService

__all__ = [
    'Canonicalizer',
    'canonicalize',
    'KnowledgeBase',
    'KnowledgeBaseLoader',
    'load_knowledge_base',
    'parse_knowledge_base',
    'UNKNOWN',
    'FuzzyMatcher',
    'FuzzyIndex',
    'MatchCandidate',
    'LevenshteinMatcher',
    'JaroWinklerMatcher',
    'Standardizer',
    'MatchOutcome',
    'BatchRunner',
    'NormalizedRecord',
    'GroupSummary',
    'group',
    'summarize_groups',
    'RowSet',
    'read_rows',
    'parse_rows',
    'validate_selection',
    'write_records',
    'export_records',
    'NormalizerService',
]
