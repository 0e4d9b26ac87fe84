"""
Structured Logging Configuration.

Configures structlog for:
- JSON output for machine-read benchmark logs
- Colored console output for interactive runs
- Temporary context binding (workload name, thread id)
"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import partial
from typing import Any, Literal

import structlog
from structlog.types import EventDict, WrappedLogger

# Context variable for additional log context
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


class LogContext:
    """
    Context manager for adding temporary context to logs.

    Usage:
        with LogContext(workload="fill_context_edges"):
            logger.info("Preparing workload")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._token = None

    def __enter__(self):
        current = _log_context.get().copy()
        current.update(self._context)
        self._token = _log_context.set(current)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token:
            _log_context.reset(self._token)
        return False


def add_log_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add context variables to log events."""
    context = _log_context.get()
    if context:
        for key, value in context.items():
            event_dict.setdefault(key, value)
    return event_dict


def add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ISO timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
    service_name: str = "mdbench",
) -> EventDict:
    """Add service information to log events."""
    event_dict["service"] = service_name
    return event_dict


def configure_logging(
    level: str = "INFO",
    format: Literal["json", "console"] = "console",
    service_name: str = "mdbench",
) -> None:
    """
    Configure structlog for the benchmark.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format ("json" or "console")
        service_name: Value of the "service" key on every event
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_timestamp,
        partial(add_service_info, service_name=service_name),
        add_log_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Results go to stdout, logs to stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("neo4j").setLevel(logging.WARNING)

