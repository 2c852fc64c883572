"""
AB FIRST - Custom Exceptions
Exception hierarchy for configuration and assignment-service errors.
"""

from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum
import traceback
import json


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    EXTERNAL_API = "external_api"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class AbFirstException(Exception):
    """
    Base exception for all AB First errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., 'CONFIG_001')
        category: Error category for classification
        severity: Error severity level
        details: Additional error details
        timestamp: When the error occurred
    """

    def __init__(
        self,
        message: str,
        error_code: str = "ABF_ERR_001",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.timestamp = datetime.utcnow()
        self.cause = cause

        full_message = message
        if cause:
            full_message = f"{message} (caused by: {type(cause).__name__}: {cause})"

        super().__init__(full_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        result = {
            "error": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }

        if self.details:
            result["details"] = self.details

        return result

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict())


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationException(AbFirstException):
    """Configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        error_code: str = "CONFIG_001",
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            details=details,
            **kwargs
        )
        self.config_key = config_key


class MissingConfigException(ConfigurationException):
    """Required configuration is missing."""

    def __init__(self, config_key: str, **kwargs):
        super().__init__(
            message=f"{config_key} is missing in settings",
            config_key=config_key,
            error_code="CONFIG_002",
            **kwargs
        )


# =============================================================================
# ASSIGNMENT SERVICE ERRORS
# =============================================================================

class FetchException(AbFirstException):
    """
    A request to the A/B test service failed.

    Raised when a failed fetch result is unwrapped. The underlying
    FetchError (url, status, body) is kept on ``error``.
    """

    def __init__(self, error, **kwargs):
        details = kwargs.pop("details", {})
        details.update(error.to_dict())

        status = f"status {error.status}" if error.status is not None else "no response"
        super().__init__(
            message=f"Request to {error.url} failed ({status}): {error.error_message}",
            error_code="API_001",
            category=ErrorCategory.EXTERNAL_API,
            severity=ErrorSeverity.MEDIUM,
            details=details,
            **kwargs
        )
        self.error = error
        self.url = error.url
        self.status = error.status
        self.body = error.body


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def format_exception_for_logging(exc: Exception) -> Dict[str, Any]:
    """Format exception for structured logging."""
    if isinstance(exc, AbFirstException):
        return {
            "exception_type": type(exc).__name__,
            "error_code": exc.error_code,
            "message": exc.message,
            "category": exc.category.value,
            "severity": exc.severity.value,
            "details": exc.details,
            "traceback": traceback.format_exc()
        }

    return {
        "exception_type": type(exc).__name__,
        "message": str(exc),
        "traceback": traceback.format_exc()
    }
