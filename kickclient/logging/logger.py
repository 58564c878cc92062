"""
Structured logging for the Kick integration client.

Provides JSON and console logging formats with configurable levels,
file rotation, and masking of credentials and bearer tokens.
"""

import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "kickclient"

SENSITIVE_KEYS = {
    'token', 'password', 'secret', 'authorization', 'credential',
    'access_token', 'client_secret', 'api_key'
}

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {
    'message', 'asctime', 'extra_data'
}


def mask_value(key: str, value: Any) -> Any:
    """Mask a value whose key looks sensitive."""
    key_lower = key.lower()
    if not any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
        return value
    # For tokens, show only first/last few characters
    if isinstance(value, str) and len(value) > 8:
        return f"{value[:4]}...{value[-4:]}"
    return "[REDACTED]"


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect context fields attached to a record, masked."""
    context = {
        key: value for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith('_')
    }
    extra_data = getattr(record, 'extra_data', None)
    if extra_data:
        context.update(extra_data)
    return {key: mask_value(key, value) for key, value in context.items()}


class JsonFormatter(logging.Formatter):
    """Formatter for JSON log lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        log_data.update(record_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Formatter for console output with colors and structured data."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')
        reset = self.COLORS['RESET']

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        message = f"{timestamp} {color}{record.levelname:<8}{reset} [{record.name}] {record.getMessage()}"

        context = record_context(record)
        if context:
            message += " | " + ", ".join(f"{key}={value}" for key, value in context.items())

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


class StructuredLogger:
    """
    Logger wrapper that takes context as keyword arguments.

    Context values under sensitive keys are masked before they reach any
    handler.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(self, level: int, message: str, exc_info: bool = False, **context):
        filtered_context = {key: mask_value(key, value) for key, value in context.items()}
        extra = {'extra_data': filtered_context} if filtered_context else {}
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, **context)

    def critical(self, message: str, **context):
        self._log(logging.CRITICAL, message, **context)

    def exception(self, message: str, **context):
        """Log an error with the current traceback."""
        self._log(logging.ERROR, message, exc_info=True, **context)


def configure_logging(
    level: Optional[str] = None,
    format_type: Optional[str] = None,
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    enable_console: bool = True
) -> logging.Logger:
    """
    Attach handlers to the package logger.

    Module loggers (``kickclient.*``) propagate into these handlers.

    Args:
        level: Log level (uses LOG_LEVEL if not specified)
        format_type: 'json' or 'console' (uses LOG_FORMAT if not specified)
        log_file: Rotating JSON log file (uses LOG_FILE if not specified)
        max_file_size: Maximum file size before rotation (bytes)
        backup_count: Number of backup files to keep
        enable_console: Whether to log to stderr

    Returns:
        The configured package logger
    """
    level = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    format_type = format_type or os.getenv('LOG_FORMAT', 'console')
    log_file = log_file or os.getenv('LOG_FILE')

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level))
    package_logger.propagate = False

    # Clear any existing handlers
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console_handler = logging.StreamHandler()
        if format_type == "json":
            console_handler.setFormatter(JsonFormatter())
        else:
            console_handler.setFormatter(ConsoleFormatter())
        package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        # Always use JSON format for file output
        file_handler.setFormatter(JsonFormatter())
        package_logger.addHandler(file_handler)

    return package_logger


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """
    Get or create a structured logger instance.

    Args:
        name: Logger name, normally under the ``kickclient`` namespace

    Returns:
        StructuredLogger instance
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]
