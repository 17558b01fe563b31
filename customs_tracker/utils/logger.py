"""
Logging utilities for Customs Process Tracker

Provides structured logging configuration and per-request log context for the
API, the execution controller and the CLI.
"""

import contextvars
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from pathlib import Path


# Context is stored per asyncio task so concurrent requests don't mix values
_log_context: contextvars.ContextVar = contextvars.ContextVar("customs_tracker_log_context", default={})

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'message', 'exc_info', 'exc_text',
    'stack_info', 'taskName'
}


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured JSON logging.

    Formats log records as JSON with additional context fields for better
    observability and log aggregation.
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        if self.include_extra:
            extra_fields = {
                key: value for key, value in record.__dict__.items()
                if key not in _RESERVED_ATTRS
            }
            if extra_fields:
                log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ExecutionContextFilter(logging.Filter):
    """
    Filter to add request context to log records.

    Adds execution_id, user_id, component and any other values set through
    set_log_context() or LoggerContext to every record passing the handler.
    Values already present on the record (from ``extra=``) win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context to log record."""
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def setup_logger(
    name: str,
    level: str = "INFO",
    structured: bool = True,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with appropriate configuration.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Whether to use structured JSON logging
        log_file: Optional log file path

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Reconfigure in place so the CLI can override the import-time defaults
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(log_level)

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    context_filter = ExecutionContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get())


def set_log_context(**kwargs) -> contextvars.Token:
    """
    Set context variables for the current task.

    Args:
        **kwargs: Context variables to set

    Returns:
        Token that can be passed to reset_log_context
    """
    context = dict(_log_context.get())
    context.update(kwargs)
    return _log_context.set(context)


def reset_log_context(token: contextvars.Token):
    _log_context.reset(token)


def clear_log_context():
    """Clear all context variables for the current task."""
    _log_context.set({})


class LoggerContext:
    """
    Context manager for temporary log context.

    Sets context variables on entry and restores the previous context on exit.
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._token: Optional[contextvars.Token] = None

    def __enter__(self):
        self._token = set_log_context(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            reset_log_context(self._token)
            self._token = None


# Default logger instance for the tracker
tracker_logger = setup_logger(
    "customs_tracker",
    level="INFO",
    structured=True
)
