"""Custom structlog processors for anchorpatch.

Processors are functions that transform log event dictionaries as they
pass through the logging pipeline.
"""
from typing import Any

from .context import get_context


def inject_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Inject values bound via bind_context() into the log event.

    Explicit keys on the event win over bound context values.
    """
    for key, value in get_context().items():
        if key not in event_dict:
            event_dict[key] = value
    return event_dict


def add_logger_name(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add a 'logger' field naming the logger that produced the event."""
    record = event_dict.get("_record")
    if record is not None:
        event_dict["logger"] = record.name
    elif hasattr(logger, "name"):
        event_dict["logger"] = logger.name
    return event_dict
