#!/usr/bin/env python3
"""
Error taxonomy for the early-warning engine

The analysis core never raises for well-typed numeric input that is merely
too short or degenerate: those paths return sentinel results. Exceptions are
reserved for misconfiguration (precondition violations) and for failures of
the outer surfaces (CLI input loading).
"""

import json
from enum import Enum
from typing import Optional


class ErrorSeverity(Enum):
    """Error severity"""
    LOW = "low"            # recoverable, e.g. a bad row in an input file
    MEDIUM = "medium"      # needs a manual check
    HIGH = "high"          # the requested analysis cannot run
    CRITICAL = "critical"  # the process cannot continue


class ErrorCategory(Enum):
    """Error category"""
    CONFIGURATION_ERROR = "configuration_error"  # invalid tunables or grid settings
    DATA_ERROR = "data_error"                    # unreadable or malformed input data
    ANALYSIS_ERROR = "analysis_error"            # unexpected failure inside a computation
    SYSTEM_ERROR = "system_error"                # environment problems


class EarlyWarningError(Exception):
    """Base class for all errors raised by the engine."""

    category = ErrorCategory.SYSTEM_ERROR
    severity = ErrorSeverity.HIGH

    def __init__(self, message: str, *, parameter: Optional[str] = None, value=None):
        super().__init__(message)
        self.parameter = parameter
        self.value = value

    def to_dict(self) -> dict:
        return {
            'error_type': type(self).__name__,
            'category': self.category.value,
            'severity': self.severity.value,
            'message': str(self),
            'parameter': self.parameter,
            'value': self.value if self.value is None else repr(self.value),
        }


class ConfigurationError(EarlyWarningError, ValueError):
    """A tunable is outside its domain (bandwidth <= 0, window < 1, ...).

    Distinct from the "insufficient data" sentinels so that callers never
    confuse "no signal" with "misconfigured".
    """

    category = ErrorCategory.CONFIGURATION_ERROR
    severity = ErrorSeverity.HIGH


class DataLoadError(EarlyWarningError):
    """Input data cannot be turned into an aligned price series."""

    category = ErrorCategory.DATA_ERROR
    severity = ErrorSeverity.MEDIUM


def categorize_error(error: Exception) -> ErrorCategory:
    """Map an arbitrary exception onto an ErrorCategory."""
    if isinstance(error, EarlyWarningError):
        return error.category

    error_str = str(error).lower()
    if isinstance(error, (FileNotFoundError, PermissionError)):
        return ErrorCategory.DATA_ERROR
    if any(keyword in error_str for keyword in ['data', 'empty', 'nan', 'missing', 'column']):
        return ErrorCategory.DATA_ERROR
    if any(keyword in error_str for keyword in ['fitting', 'singular', 'lppl', 'correlation']):
        return ErrorCategory.ANALYSIS_ERROR
    return ErrorCategory.SYSTEM_ERROR


def assess_severity(error: Exception, category: ErrorCategory) -> ErrorSeverity:
    """Estimate the severity of an exception."""
    if isinstance(error, EarlyWarningError):
        return error.severity
    if isinstance(error, (MemoryError, PermissionError)):
        return ErrorSeverity.CRITICAL
    if category == ErrorCategory.ANALYSIS_ERROR:
        return ErrorSeverity.HIGH
    if category == ErrorCategory.DATA_ERROR:
        return ErrorSeverity.MEDIUM
    return ErrorSeverity.LOW


def extract_error_details(error: Exception) -> str:
    """JSON summary of an exception, suitable for a log line."""
    if isinstance(error, EarlyWarningError):
        return json.dumps(error.to_dict(), ensure_ascii=False)

    category = categorize_error(error)
    details = {
        'error_type': type(error).__name__,
        'category': category.value,
        'severity': assess_severity(error, category).value,
        'message': str(error),
        'error_args': str(error.args) if error.args else None,
    }
    return json.dumps(details, ensure_ascii=False)
