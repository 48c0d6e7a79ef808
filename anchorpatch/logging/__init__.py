"""Structured logging for anchorpatch.

This module provides a centralized logging configuration with support for:
- Human-readable console output on stderr (the default)
- Structured JSON output for log collectors
- Context propagation (target file, hunk index) via contextvars
- Per-module log level control
- Optional rotating log file

Quick Start:
    >>> from anchorpatch.logging import configure_logging, LogConfig, LogLevel
    >>> configure_logging(LogConfig(level=LogLevel.DEBUG))

Binding run context:
    >>> from anchorpatch.logging import bind_context, clear_context
    >>> bind_context(target="src/app.py")
    >>> # ... all logs will include target
    >>> clear_context()
"""
import structlog

from .config import (
    LogConfig,
    LogFormat,
    LogLevel,
    configure_logging,
    ensure_configured,
    is_configured,
)
from .context import bind_context, clear_context, get_context, unbind_context


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    If logging hasn't been configured yet, it is configured with default
    settings first.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        A bound logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("hunk_applied", hunk=2, first=10, last=12)
    """
    ensure_configured()
    return structlog.get_logger(name)


__all__ = [
    # Configuration
    "LogConfig",
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "is_configured",
    # Logger
    "get_logger",
    # Context management
    "bind_context",
    "unbind_context",
    "clear_context",
    "get_context",
]
