"""
Logging setup for the Firm Normalizer.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
from functools import wraps


class FirmNormalizerFormatter(logging.Formatter):
    """Formatter that appends exception details to error records."""
    
    def __init__(self):
        super().__init__()
        self.default_format = '[%(asctime)s] %(levelname)-8s [%(name)s:%(lineno)d] %(message)s'
        self.error_format = '[%(asctime)s] %(levelname)-8s [%(name)s:%(lineno)d] %(message)s\nException: %(exc_info)s'
    
    def format(self, record):
        if record.levelno >= logging.ERROR and record.exc_info:
            formatter = logging.Formatter(self.error_format)
        else:
            formatter = logging.Formatter(self.default_format)
        return formatter.format(record)


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    enable_console: bool = True,
    enable_file: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Set up logging for the application.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files; file logging is skipped when None
        enable_console: Whether to enable console logging
        enable_file: Whether to enable file logging
        max_file_size: Maximum size of log files before rotation
        backup_count: Number of backup log files to keep
    """
    numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    _reset_handlers(root_logger)
    
    audit_logger = logging.getLogger('audit')
    _reset_handlers(audit_logger)
    
    formatter = FirmNormalizerFormatter()
    
    # Console output goes to stderr so exported data on stdout stays clean
    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
    
    if enable_file and log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        
        app_handler = logging.handlers.RotatingFileHandler(
            log_dir / "firm_normalizer.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        app_handler.setLevel(numeric_level)
        app_handler.setFormatter(formatter)
        root_logger.addHandler(app_handler)
        
        error_handler = logging.handlers.RotatingFileHandler(
            log_dir / "errors.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)
        
        # Knowledge base loads and batch runs
        audit_handler = logging.handlers.RotatingFileHandler(
            log_dir / "audit.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        audit_handler.setLevel(logging.INFO)
        audit_handler.setFormatter(formatter)
        
        audit_logger.addHandler(audit_handler)
        audit_logger.setLevel(logging.INFO)
        audit_logger.propagate = False


def cleanup_logging():
    """Close and detach all handlers installed by setup_logging."""
    _reset_handlers(logging.getLogger())
    _reset_handlers(logging.getLogger('audit'))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.
    
    Args:
        name: Logger name (typically __name__)
        
    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_audit_logger() -> logging.Logger:
    """Get the audit logger used for knowledge base loads and batch runs."""
    return logging.getLogger('audit')


def log_performance(logger: logging.Logger, operation_name: str):
    """Decorator to log the duration of an operation."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = datetime.now()
            logger.info(f"Starting {operation_name}")
            
            try:
                result = func(*args, **kwargs)
                duration = (datetime.now() - start_time).total_seconds()
                logger.info(f"{operation_name} completed in {duration:.2f} seconds")
                return result
            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                logger.error(f"{operation_name} failed after {duration:.2f} seconds: {e}")
                raise
        
        return wrapper
    return decorator
