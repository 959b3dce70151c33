"""
Fingerprint Cache - Core Error Types

Defines the exception hierarchy for the fingerprint cache.
All exceptions inherit from FingerprintCacheError for consistent error handling.

Only UnsupportedValueError and ConfigurationError ever reach callers of the
cache manager; store and validation failures degrade to a miss/no-op.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes attached to structured log records."""

    INVALID_INPUT = "INVALID_INPUT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    UNSUPPORTED_VALUE = "UNSUPPORTED_VALUE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class FingerprintCacheError(Exception):
    """Base exception for all fingerprint cache errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured logs."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(FingerprintCacheError):
    """Raised when configuration is invalid or a backend is unavailable."""


class ValidationError(FingerprintCacheError):
    """Raised when a cache call is rejected before touching the store."""


class StoreUnavailableError(FingerprintCacheError):
    """Raised by store adapters when a backing-store round trip fails."""

    def __init__(self, operation: str, details: dict[str, Any] | None = None):
        message = f"Backing store unavailable during {operation}"
        super().__init__(message, {"operation": operation, **(details or {})})
        self.operation = operation


class UnsupportedValueError(FingerprintCacheError):
    """Raised by the codec for values outside the supported data model."""

    def __init__(self, value_type: str, reason: str):
        message = f"Cannot encode value of type {value_type}: {reason}"
        super().__init__(message, {"value_type": value_type, "reason": reason})


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, StoreUnavailableError):
        return ErrorCode.STORE_UNAVAILABLE

    if isinstance(error, UnsupportedValueError):
        return ErrorCode.UNSUPPORTED_VALUE

    if isinstance(error, ValidationError):
        return ErrorCode.INVALID_INPUT

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    return ErrorCode.INTERNAL_ERROR
