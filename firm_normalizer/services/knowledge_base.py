"""
Knowledge base of known firm-name variants.

The knowledge base document is JSON with two members:

    {
        "variants": {"<canonical variant>": "<standard label>", ...},
        "allKnownVariants": ["<canonical variant>", ...]
    }

``variants`` is the exact-match dictionary and ``allKnownVariants`` is the
fuzzy-search corpus. Once loaded, the knowledge base is a frozen snapshot.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import requests

from ..utils.logger import get_logger, get_audit_logger, log_performance
from ..utils.error_handler import LoadError, ErrorCategory, ErrorContext

logger = get_logger(__name__)
audit_logger = get_audit_logger()

UNKNOWN = 'UNKNOWN'

Source = Union[str, Path, bytes]


@dataclass(frozen=True)
class KnowledgeBase:
    """Immutable variant index plus search corpus."""
    variants: Mapping[str, str]
    all_known_variants: Tuple[str, ...]
    source: Optional[str] = None
    
    def label_for(self, variant: str) -> Optional[str]:
        """Return the standard label for an exact canonical variant."""
        return self.variants.get(variant)
    
    def __contains__(self, variant: object) -> bool:
        return variant in self.variants
    
    def __len__(self) -> int:
        return len(self.variants)


def _describe(source: Source) -> str:
    if isinstance(source, bytes):
        return '<bytes>'
    return str(source)


def parse_knowledge_base(document: Any, source: Optional[str] = None) -> KnowledgeBase:
    """
    Validate a decoded knowledge base document and freeze it.
    
    Args:
        document: Decoded JSON value
        source: Description of where the document came from, for messages
        
    Returns:
        KnowledgeBase snapshot
        
    Raises:
        LoadError: If the document is not a well-formed mapping-plus-corpus
    """
    context = ErrorContext(operation='parse_knowledge_base', component='knowledge_base',
                           additional_data={'source': source})
    
    if not isinstance(document, dict):
        raise LoadError("Knowledge base must be a JSON object", context=context)
    
    variants = document.get('variants')
    corpus = document.get('allKnownVariants')
    
    if not isinstance(variants, dict):
        raise LoadError("Knowledge base 'variants' must be an object", context=context)
    if not isinstance(corpus, list):
        raise LoadError("Knowledge base 'allKnownVariants' must be an array", context=context)
    
    for key, label in variants.items():
        if not isinstance(label, str) or not label:
            raise LoadError(f"Variant '{key}' has an empty or non-string label", context=context)
    
    known: Dict[str, None] = {}
    for entry in corpus:
        if not isinstance(entry, str):
            raise LoadError(f"Corpus entry {entry!r} is not a string", context=context)
        known.setdefault(entry, None)
    
    missing = [key for key in variants if key not in known]
    if missing:
        raise LoadError(
            f"{len(missing)} variant(s) missing from allKnownVariants, e.g. '{missing[0]}'",
            context=context
        )
    
    unlabelled = [entry for entry in known if entry not in variants]
    if unlabelled:
        logger.warning(
            f"Dropping {len(unlabelled)} corpus entries without a label, e.g. '{unlabelled[0]}'"
        )
    
    corpus_tuple = tuple(entry for entry in known if entry in variants)
    
    return KnowledgeBase(
        variants=MappingProxyType(dict(variants)),
        all_known_variants=corpus_tuple,
        source=source
    )


class KnowledgeBaseLoader:
    """Reads the knowledge base from a local file, an HTTP(S) URL or raw bytes."""
    
    def __init__(self, timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize the loader.
        
        Args:
            timeout: Request timeout in seconds for URL sources
            session: Optional requests session (a new one is created if omitted)
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'FirmNormalizer/1.0'
        })
    
    @log_performance(logger, "knowledge base load")
    def load(self, source: Source) -> KnowledgeBase:
        """
        Fetch, decode and validate the knowledge base.
        
        Raises:
            LoadError: If the source is unreachable or malformed
        """
        description = _describe(source)
        payload = self._read(source)
        
        try:
            document = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise LoadError(
                f"Knowledge base at {description} is not valid JSON: {e}",
                original_exception=e
            )
        
        knowledge_base = parse_knowledge_base(document, source=description)
        
        audit_logger.info(
            f"Knowledge base loaded from {description}: "
            f"{len(knowledge_base.variants)} variants, "
            f"{len(knowledge_base.all_known_variants)} searchable"
        )
        return knowledge_base
    
    def _read(self, source: Source) -> bytes:
        if isinstance(source, bytes):
            return source
        
        text = str(source)
        if text.startswith(('http://', 'https://')):
            return self._fetch(text)
        
        path = Path(text)
        try:
            return path.read_bytes()
        except OSError as e:
            raise LoadError(
                f"Could not read knowledge base file {path}: {e}",
                original_exception=e
            )
    
    def _fetch(self, url: str) -> bytes:
        logger.info(f"Fetching knowledge base from {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise LoadError(
                f"Could not fetch knowledge base from {url}: {e}",
                category=ErrorCategory.NETWORK,
                original_exception=e
            )
        return response.content


def load_knowledge_base(source: Source, timeout: int = 30) -> KnowledgeBase:
    """Load a knowledge base with a one-off loader."""
    return KnowledgeBaseLoader(timeout=timeout).load(source)
