"""Transports for the request queue.

All transports implement the Transport protocol defined in base.py.

Available transports:
    - HttpxTransport: httpx.AsyncClient based transport
"""

from fetch_queue.transport.base import Transport, TransportOptions, TransportResponse
from fetch_queue.transport.httpx_transport import HttpxResponse, HttpxTransport

__all__ = [
    "Transport",
    "TransportOptions",
    "TransportResponse",
    "HttpxTransport",
    "HttpxResponse",
]
