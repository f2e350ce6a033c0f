"""
Error handling - exception hierarchy and error classification helpers.
"""

from .errors import (
    ErrorCategory,
    ErrorSeverity,
    EarlyWarningError,
    ConfigurationError,
    DataLoadError,
    categorize_error,
    assess_severity,
    extract_error_details
)

__all__ = [
    'ErrorCategory',
    'ErrorSeverity',
    'EarlyWarningError',
    'ConfigurationError',
    'DataLoadError',
    'categorize_error',
    'assess_severity',
    'extract_error_details'
]
