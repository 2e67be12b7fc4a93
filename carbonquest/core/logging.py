"""Structured logging setup using structlog with per-call correlation IDs."""

import logging
import uuid
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Correlation ID shared by every log line emitted during one tracker call
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def add_correlation_id(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add correlation ID to log event if set."""
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines when True, human-readable console output otherwise
    """
    level = getattr(logging, log_level.upper())

    logging.basicConfig(format="%(message)s", level=level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_correlation_id,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # ConsoleRenderer formats exceptions itself
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID for the current context.

    Args:
        correlation_id: Unique ID for tracing one tracker call
    """
    correlation_id_var.set(correlation_id)


def new_correlation_id() -> str:
    """Generate and set a fresh correlation ID.

    Returns:
        The short hex ID now bound to the current context
    """
    correlation_id = uuid.uuid4().hex[:12]
    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """Get correlation ID from the current context.

    Returns:
        Current correlation ID or empty string if not set
    """
    return correlation_id_var.get()
