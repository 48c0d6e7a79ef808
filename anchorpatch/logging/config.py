"""Logging setup for anchorpatch.

Log events go to stderr, where they share the stream with the per-hunk
``FAIL:``/``AMBIGUOUS:``/``SKIP:`` diagnostics, and optionally to a rotating
log file. The two sinks are rendered independently:

- stderr: ``plain`` renders compact ``level event key=value`` lines without
  timestamps (colored only when stderr is a terminal); ``json`` renders one
  JSON object per line for wrappers that parse the tool's stderr.
- log file: always JSON lines with an ISO timestamp, whatever the console
  format is.
"""
import logging
import logging.handlers
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TextIO

import structlog

from .processors import add_logger_name, inject_context


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_int(self) -> int:
        return getattr(logging, self.value)


class LogFormat(str, Enum):
    """Rendering of log events on stderr."""
    PLAIN = "plain"
    JSON = "json"


@dataclass
class LogConfig:
    """Logging settings, usually taken from the ``log:`` block of the config file.

    Attributes:
        level: Level for every ``anchorpatch`` logger. WARNING keeps a normal
            run down to failed hunks only.
        format: How events are rendered on stderr.
        log_file: If set, events are also appended to this file as JSON lines.
        max_bytes: Size at which the log file is rotated.
        backup_count: Rotated log files to keep.
        module_levels: Per-logger overrides, e.g. DEBUG for the matcher alone.
    """
    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.PLAIN
    log_file: Optional[Path] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    module_levels: dict[str, LogLevel] = field(default_factory=dict)


_configured: bool = False


def _drop_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.pop("timestamp", None)
    return event_dict


# Shared by structlog loggers and by foreign stdlib records.
_PRE_CHAIN: list = [
    structlog.contextvars.merge_contextvars,
    inject_context,
    add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _formatter(*processors: Any) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *processors],
    )


def _console_formatter(config: LogConfig, stream: TextIO) -> structlog.stdlib.ProcessorFormatter:
    if config.format == LogFormat.JSON:
        return _formatter(structlog.processors.JSONRenderer())
    isatty = getattr(stream, "isatty", None)
    return _formatter(
        _drop_timestamp,
        structlog.dev.ConsoleRenderer(
            colors=bool(isatty and isatty()),
            exception_formatter=structlog.dev.plain_traceback,
        ),
    )


def _file_handler(config: LogConfig) -> logging.Handler:
    config.log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        config.log_file,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def _install_handlers(config: LogConfig) -> None:
    root = logging.getLogger()
    root.setLevel(config.level.to_int())

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    # Resolved at call time so a redirected stderr is honored.
    stream = sys.stderr
    console = logging.StreamHandler(stream)
    console.setFormatter(_console_formatter(config, stream))
    root.addHandler(console)

    if config.log_file:
        root.addHandler(_file_handler(config))

    for module_name, level in config.module_levels.items():
        logging.getLogger(module_name).setLevel(level.to_int())


def configure_logging(config: Optional[LogConfig] = None) -> None:
    """(Re)configure structlog and the stdlib handlers it writes through.

    Safe to call more than once; each call replaces the previous handlers.

    Example:
        >>> configure_logging(LogConfig(level=LogLevel.INFO, log_file=Path("logs/anchorpatch.log")))
    """
    global _configured

    config = config or LogConfig()
    _install_handlers(config)

    structlog.configure(
        processors=_PRE_CHAIN + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True


def is_configured() -> bool:
    return _configured


def ensure_configured() -> None:
    """Install the default configuration unless one is already in place."""
    if not _configured:
        configure_logging()
