"""
Logging module for the Kick integration client.

Structured logging with JSON and console output formats, configurable
levels and file rotation.
"""

from .logger import (
    ConsoleFormatter,
    JsonFormatter,
    StructuredLogger,
    configure_logging,
    get_logger
)

__all__ = [
    'ConsoleFormatter',
    'JsonFormatter',
    'StructuredLogger',
    'configure_logging',
    'get_logger'
]
