"""
AB FIRST - Structured Logging
JSON and console log formatting with request context.
"""

import sys
import logging
import json
from datetime import datetime
from typing import Optional
from contextvars import ContextVar

# Context variables for request tracking
_request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
_page_id: ContextVar[Optional[str]] = ContextVar('page_id', default=None)


def get_request_id() -> Optional[str]:
    return _request_id.get()


def set_request_id(request_id: str):
    _request_id.set(request_id)


def get_page_id() -> Optional[str]:
    return _page_id.get()


def set_page_id(page_id):
    _page_id.set(str(page_id) if page_id is not None else None)


_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'taskName', 'message'
}


class StructuredFormatter(logging.Formatter):
    """
    JSON structured log formatter.
    """

    def __init__(self, include_extras: bool = True):
        super().__init__()
        self.include_extras = include_extras

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        page_id = get_page_id()
        if page_id:
            log_data["page_id"] = page_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_extras:
            extras = {
                k: v for k, v in record.__dict__.items()
                if k not in _RESERVED_ATTRS
            }
            if extras:
                log_data["extra"] = extras

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with colors.
    """

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')
        timestamp = datetime.utcnow().strftime('%Y-%m-%d %H:%M:%S')

        msg = f"{color}{timestamp} [{record.levelname:8}]{self.RESET} {record.getMessage()}"

        request_id = get_request_id()
        if request_id:
            msg = f"{msg} [req:{request_id[:8]}]"

        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


class AbFirstLogger:
    """
    Structured logger wrapper with convenience methods.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, **kwargs):
        self._logger.log(level, message, extra=kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, **kwargs)

    def api_call(self, service: str, method: str, duration_ms: int, status, **kwargs):
        self._log(logging.DEBUG, "API call", service=service, method=method,
                  duration_ms=duration_ms, status=status, **kwargs)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    include_extras: bool = True,
    logger_name: Optional[str] = None
):
    """
    Configure logging for the host application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Use JSON format (for production)
        include_extras: Include extra fields in JSON output
        logger_name: Logger to configure (root logger if omitted)
    """
    target = logging.getLogger(logger_name)
    target.setLevel(getattr(logging, level.upper()))

    target.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if json_output:
        handler.setFormatter(StructuredFormatter(include_extras=include_extras))
    else:
        handler.setFormatter(ConsoleFormatter())

    target.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return target


def get_logger(name: str) -> AbFirstLogger:
    """Get a structured logger instance."""
    return AbFirstLogger(name)
