"""
Utility modules for the Firm Normalizer.
"""

from .logger import get_logger, get_audit_logger, setup_logging
from .error_handler import (
    ErrorHandler,
    FirmNormalizerError,
    LoadError,
    KnowledgeBaseNotReadyError,
    ParseError,
    ValidationError,
    ConfigurationError,
)

__all__ = [
    'get_logger',
    'get_audit_logger',
    'setup_logging',
    'ErrorHandler',
    'FirmNormalizerError',
    'LoadError',
    'KnowledgeBaseNotReadyError',
    'ParseError',
    'ValidationError',
    'ConfigurationError',
]
