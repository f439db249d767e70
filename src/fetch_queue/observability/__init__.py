"""Observability utilities for the request queue.

- Prometheus metrics for queue throughput, retries and failures
- Structured logging with contextual information
"""

from fetch_queue.observability.logging import configure_logging, get_logger
from fetch_queue.observability.metrics import (
    record_exchange_time,
    record_nack,
    record_settled,
    record_unhandled_error,
    set_queue_depth,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "record_settled",
    "record_nack",
    "record_unhandled_error",
    "record_exchange_time",
    "set_queue_depth",
]
