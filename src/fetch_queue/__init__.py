"""
Serialized HTTP request queue with pluggable middleware.

This package pushes outbound requests through a single-concurrency queue,
running request, response, error and post-action middleware around each
exchange. Post-action middleware can ask for a retry by raising.
"""

from fetch_queue.config import QueueConfig, TransportConfig
from fetch_queue.core.engine import RequestQueue, connect_middleware, create_queue
from fetch_queue.core.middleware import combine_middleware
from fetch_queue.deferred import Deferred
from fetch_queue.exceptions import (
    FetchQueueError,
    Nack,
    RejectedError,
    RequestValidationError,
    UnknownEventError,
)
from fetch_queue.models import EngineState, ResponsePayload

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "RequestQueue",
    "create_queue",
    "connect_middleware",
    "combine_middleware",
    "QueueConfig",
    "TransportConfig",
    "Deferred",
    "EngineState",
    "ResponsePayload",
    "FetchQueueError",
    "Nack",
    "RejectedError",
    "RequestValidationError",
    "UnknownEventError",
]
