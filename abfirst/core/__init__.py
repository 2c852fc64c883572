"""Core - exceptions and logging"""
from .exceptions import (
    AbFirstException,
    ConfigurationException,
    MissingConfigException,
    FetchException,
    ErrorCategory,
    ErrorSeverity,
    format_exception_for_logging,
)
from .logging import configure_logging, get_logger, set_request_id, set_page_id

__all__ = [
    "AbFirstException",
    "ConfigurationException",
    "MissingConfigException",
    "FetchException",
    "ErrorCategory",
    "ErrorSeverity",
    "format_exception_for_logging",
    "configure_logging",
    "get_logger",
    "set_request_id",
    "set_page_id",
]
