"""Structured logging configuration for the request queue.

Every queue gets its own structlog logger with the queue name bound at
construction. Each drive cycle binds the method, url and attempt number
of the head entry on top of that, so a nack followed by an ack reads as
one retry story:

    queue.cycle.started  queue=billing method=POST url=.../charge attempt=1
    queue.nack           queue=billing method=POST url=.../charge attempt=1 reason='503'
    queue.cycle.started  queue=billing method=POST url=.../charge attempt=2
    queue.ack            queue=billing method=POST url=.../charge attempt=2 outcome=resolved

Push, skip, cycle and ack events are logged at DEBUG. Exchange failures
and nacks are logged at INFO. Middleware failures are WARNING, and
listener failures are ERROR.

Examples:
    Configure logging::

        from fetch_queue.observability.logging import configure_logging

        configure_logging(level="DEBUG", json_output=True)

    Get a logger with queue context already bound::

        from fetch_queue.observability.logging import get_logger

        log = get_logger("fetch_queue.core.engine", queue="billing")
        log.info("queue.nack", url="https://api/charge", attempt=1, reason="503")

    Output (JSON)::

        {
            "queue": "billing",
            "url": "https://api/charge",
            "attempt": 1,
            "reason": "503",
            "event": "queue.nack",
            "level": "info",
            "timestamp": "2024-01-01T00:00:00.000000Z"
        }
"""

import logging
import sys
from typing import IO, Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Configure structured logging for the queue engine.

    Call once at application startup.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, emit JSON lines; if False, use console format
        stream: Where log lines are written. Defaults to stdout.
    """
    stream = stream or sys.stdout
    log_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", stream=stream, level=log_level)

    processors: list[object] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **context: Any) -> Any:
    """Get a structured logger, optionally with context bound.

    Args:
        name: Logger name (typically __name__ from the calling module)
        **context: Key/value pairs included in every event, e.g. ``queue``

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name, **context)
