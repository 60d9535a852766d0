"""
Service facade tying the knowledge base lifecycle to standardization.

The knowledge base is loaded once, then a fuzzy index is built from its
corpus. Until that succeeds (and again after a failed reload) every
standardization request raises KnowledgeBaseNotReadyError.
"""

import threading
from typing import Any, List, Mapping, Optional, Sequence

from .canonicalizer import Canonicalizer
from .fuzzy_matcher import FuzzyMatcher
from .knowledge_base import KnowledgeBase, KnowledgeBaseLoader, Source
from .standardizer import Standardizer, MatchOutcome
from .batch_runner import BatchRunner, NormalizedRecord, ProgressCallback
from ..config import Config
from ..utils.logger import get_logger
from ..utils.error_handler import LoadError, KnowledgeBaseNotReadyError, ConfigurationError

logger = get_logger(__name__)


class NormalizerService:
    """Loads the knowledge base and serves standardization requests."""
    
    def __init__(self, config: Optional[Config] = None, loader: Optional[KnowledgeBaseLoader] = None):
        """
        Args:
            config: Application configuration (defaults when omitted)
            loader: Knowledge base loader (built from config when omitted)
        """
        self.config = config or Config()
        self._validate_settings()
        self.loader = loader or KnowledgeBaseLoader(timeout=self.config.get('knowledge_base.timeout', 30))
        self.matcher = FuzzyMatcher(threshold=self.config.get('matching.threshold', 0.4))
        self.canonicalizer = Canonicalizer()
        self.confidence_threshold = self.config.get('matching.confidence_threshold', 0.35)
        self._standardizer: Optional[Standardizer] = None
        self._lock = threading.Lock()
    
    def _validate_settings(self):
        """
        Reject out-of-range matching and batch settings before anything is built.
        
        Raises:
            ConfigurationError: If a setting has the wrong type or range
        """
        for key in ('matching.threshold', 'matching.confidence_threshold'):
            value = self.config.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{key} must be a number between 0.0 and 1.0, got {value!r}")
        
        for key in ('batch.chunk_size', 'batch.max_workers'):
            value = self.config.get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{key} must be a positive integer, got {value!r}")
    
    @property
    def is_ready(self) -> bool:
        return self._standardizer is not None
    
    @property
    def knowledge_base(self) -> KnowledgeBase:
        return self.standardizer.knowledge_base
    
    @property
    def standardizer(self) -> Standardizer:
        standardizer = self._standardizer
        if standardizer is None:
            raise KnowledgeBaseNotReadyError()
        return standardizer
    
    def load(self, source: Optional[Source] = None) -> KnowledgeBase:
        """
        Load the knowledge base and build the fuzzy index.
        
        A failure leaves the service not ready, discarding any previously
        loaded knowledge base.
        
        Raises:
            LoadError: If the source is unreachable or malformed
        """
        if source is None:
            source = self.config.get('knowledge_base.source')
        
        with self._lock:
            self._standardizer = None
            try:
                knowledge_base = self.loader.load(source)
            except LoadError:
                logger.error(f"Error loading knowledge base from {source}")
                raise
            
            index = self.matcher.build(knowledge_base.all_known_variants)
            self._standardizer = Standardizer(
                knowledge_base,
                index=index,
                canonicalizer=self.canonicalizer,
                confidence_threshold=self.confidence_threshold
            )
        
        logger.info("Ready to process files.")
        return knowledge_base
    
    def standardize(self, raw: Any) -> str:
        """Standardize a single raw name."""
        return self.standardizer.standardize(raw)
    
    def resolve(self, raw: Any) -> MatchOutcome:
        """Standardize a single raw name and report how it was matched."""
        return self.standardizer.resolve(raw)
    
    def create_runner(self, progress_callback: Optional[ProgressCallback] = None) -> BatchRunner:
        return BatchRunner(
            self.standardizer,
            chunk_size=self.config.get('batch.chunk_size', 1000),
            max_workers=self.config.get('batch.max_workers', 1),
            progress_callback=progress_callback
        )
    
    def run(self, rows: Sequence[Mapping[str, Any]], column: str,
            progress_callback: Optional[ProgressCallback] = None) -> List[NormalizedRecord]:
        """Standardize the selected column of every row."""
        return self.create_runner(progress_callback).run(rows, column)
