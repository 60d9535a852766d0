"""
Canonicalization of raw firm names into lookup keys.

A canonical key is the lower-cased name with common punctuation removed,
legal/industry suffixes stripped, and whitespace collapsed. It is the form
stored in the knowledge base and the form fed to the fuzzy matcher.
"""

import re
from typing import Any, Tuple


# Whole-word tokens removed from every name. Multi-word entries are listed
# before their single-word prefixes so the alternation prefers them.
LEGAL_SUFFIXES: Tuple[str, ...] = (
    'inc',
    'corp',
    'llc',
    'lp',
    'co',
    'ltd',
    'group',
    'financial',
    'bank',
    'national association',
    'na',
)

PUNCTUATION_CHARS = '.,&()'


class Canonicalizer:
    """
    Turns a raw firm name into its canonical key.
    
    The steps run in a fixed order, each on the output of the previous one:
    lower-case, delete punctuation, strip suffix tokens, collapse whitespace,
    trim. Suffix stripping is repeated until nothing more is removed so that
    an already-canonical key is a fixed point.
    """
    
    def __init__(self, suffixes: Tuple[str, ...] = LEGAL_SUFFIXES, punctuation: str = PUNCTUATION_CHARS):
        self.suffixes = tuple(suffixes)
        self._punctuation_table = str.maketrans('', '', punctuation)
        alternation = '|'.join(
            re.escape(suffix).replace(r'\ ', r'\s+')
            for suffix in sorted(self.suffixes, key=len, reverse=True)
        )
        self._suffix_pattern = re.compile(rf'\b(?:{alternation})\b')
        self._whitespace_pattern = re.compile(r'\s+')
    
    def canonicalize(self, raw: Any) -> str:
        """
        Return the canonical key for raw, or '' when there is no usable input.
        
        Non-string and empty values map to ''.
        """
        if not isinstance(raw, str) or not raw:
            return ''
        
        text = raw.lower().translate(self._punctuation_table)
        
        while True:
            stripped = self._collapse(self._suffix_pattern.sub('', text))
            if stripped == text:
                return stripped
            text = stripped
    
    def _collapse(self, text: str) -> str:
        return self._whitespace_pattern.sub(' ', text).strip()


_default_canonicalizer = Canonicalizer()


def canonicalize(raw: Any) -> str:
    """Canonicalize raw with the default suffix list."""
    return _default_canonicalizer.canonicalize(raw)
