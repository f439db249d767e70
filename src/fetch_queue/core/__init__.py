"""Core queue logic.

This package contains the execution core of the request queue:
- Engine: FIFO queue, busy/idle state and the drive loop
- Exchange: request validation and response payload construction
- Middleware: default stages and composition helpers

The core is transport-agnostic; any async callable honoring the transport
protocol can be injected.
"""

from fetch_queue.core.middleware import combine_middleware

__all__ = ["combine_middleware"]
