"""
Error types and central error handling for the Firm Normalizer.
"""

import csv
import json
import logging
import traceback
from typing import Optional, Dict, Any
from enum import Enum
from dataclasses import dataclass
from datetime import datetime

import requests


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    NETWORK = "network"
    DATA_LOADING = "data_loading"
    DATA_PARSING = "data_parsing"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for errors."""
    operation: Optional[str] = None
    component: Optional[str] = None
    additional_data: Optional[Dict[str, Any]] = None
    timestamp: datetime = None
    
    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


class FirmNormalizerError(Exception):
    """Base exception class for the Firm Normalizer."""
    
    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        user_message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        recoverable: bool = True,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.user_message = user_message or self._generate_user_message()
        self.context = context or ErrorContext()
        self.recoverable = recoverable
        self.original_exception = original_exception
        self.error_id = self._generate_error_id()
    
    def _generate_user_message(self) -> str:
        """Generate user-friendly error message."""
        category_messages = {
            ErrorCategory.NETWORK: "Could not reach the knowledge base. Please check your connection and reload.",
            ErrorCategory.DATA_LOADING: "Error loading knowledge base. Please reload before processing.",
            ErrorCategory.DATA_PARSING: "Error parsing the input file. The file format may be invalid.",
            ErrorCategory.VALIDATION: "Invalid column or no data to process.",
            ErrorCategory.CONFIGURATION: "Configuration error. Please check your settings.",
            ErrorCategory.SYSTEM: "System error occurred. Please try again later."
        }
        return category_messages.get(self.category, "An unexpected error occurred.")
    
    def _generate_error_id(self) -> str:
        """Generate unique error ID for tracking."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"FN_{self.category.value.upper()}_{timestamp}_{id(self) % 10000:04d}"
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_id": self.error_id,
            "message": self.message,
            "user_message": self.user_message,
            "category": self.category.value,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "operation": self.context.operation,
                "component": self.context.component,
                "additional_data": self.context.additional_data
            },
            "original_exception": str(self.original_exception) if self.original_exception else None,
            "traceback": traceback.format_exc() if self.original_exception else None
        }


class LoadError(FirmNormalizerError):
    """Knowledge base could not be fetched or is malformed."""
    
    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.DATA_LOADING)
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class KnowledgeBaseNotReadyError(LoadError):
    """Standardization was requested without a successfully loaded knowledge base."""
    
    def __init__(self, message: str = "Knowledge base is not loaded", **kwargs):
        super().__init__(message, **kwargs)


class ParseError(FirmNormalizerError):
    """Row source could not be parsed."""
    
    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.DATA_PARSING,
            severity=ErrorSeverity.MEDIUM,
            **kwargs
        )


class ValidationError(FirmNormalizerError):
    """Invalid column selection or empty input."""
    
    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            **kwargs
        )


class ConfigurationError(FirmNormalizerError):
    """Configuration-related errors."""
    
    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            **kwargs
        )


class ErrorHandler:
    """
    Turns any exception reaching the command line into a FirmNormalizerError
    and logs it at a level matching its severity.
    """
    
    # Foreign exceptions by category; anything else is a SYSTEM error
    CATEGORY_BY_EXCEPTION = {
        requests.exceptions.RequestException: ErrorCategory.NETWORK,
        json.JSONDecodeError: ErrorCategory.DATA_LOADING,
        csv.Error: ErrorCategory.DATA_PARSING,
        UnicodeDecodeError: ErrorCategory.DATA_PARSING,
        ValueError: ErrorCategory.VALIDATION,
        TypeError: ErrorCategory.VALIDATION,
    }
    
    SEVERITY_BY_CATEGORY = {
        ErrorCategory.NETWORK: ErrorSeverity.MEDIUM,
        ErrorCategory.DATA_LOADING: ErrorSeverity.CRITICAL,
        ErrorCategory.DATA_PARSING: ErrorSeverity.MEDIUM,
        ErrorCategory.VALIDATION: ErrorSeverity.LOW,
        ErrorCategory.CONFIGURATION: ErrorSeverity.HIGH,
        ErrorCategory.SYSTEM: ErrorSeverity.HIGH,
    }
    
    LOG_LEVEL_BY_SEVERITY = {
        ErrorSeverity.CRITICAL: logging.CRITICAL,
        ErrorSeverity.HIGH: logging.ERROR,
        ErrorSeverity.MEDIUM: logging.WARNING,
        ErrorSeverity.LOW: logging.INFO,
    }
    
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
    
    def handle_error(
        self,
        error: Exception,
        context: Optional[ErrorContext] = None,
        user_message: Optional[str] = None
    ) -> FirmNormalizerError:
        """
        Log an error and return it as a FirmNormalizerError.
        
        Args:
            error: The exception that was caught
            context: Where the error happened
            user_message: Replacement for the category's default message
        """
        if isinstance(error, FirmNormalizerError):
            fn_error = error
        else:
            fn_error = self._convert_exception(error, context, user_message)
        
        details = fn_error.to_dict()
        # 'message' clashes with the LogRecord attribute of the same name
        details.pop('message', None)
        level = self.LOG_LEVEL_BY_SEVERITY.get(fn_error.severity, logging.ERROR)
        self.logger.log(level, f"[{fn_error.error_id}] {fn_error.message}", extra=details)
        
        return fn_error
    
    def _convert_exception(
        self,
        error: Exception,
        context: Optional[ErrorContext],
        user_message: Optional[str]
    ) -> FirmNormalizerError:
        category = ErrorCategory.SYSTEM
        for exception_type, mapped in self.CATEGORY_BY_EXCEPTION.items():
            if isinstance(error, exception_type):
                category = mapped
                break
        
        return FirmNormalizerError(
            message=f"{type(error).__name__}: {error}",
            category=category,
            severity=self.SEVERITY_BY_CATEGORY[category],
            user_message=user_message,
            context=context,
            original_exception=error
        )
