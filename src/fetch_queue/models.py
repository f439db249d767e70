"""Core type definitions for the request queue.

This module provides the data structures passed between the queue engine,
the transport and the middleware stages: the engine state, the response
payload handed to response middleware, and the per-cycle outcome record.

Examples:
    Reading a payload in a response middleware::

        def response_middleware(payload: ResponsePayload, request: dict) -> Any:
            if not payload.ok:
                return {"status": payload.status, "error": payload.text}
            return payload.body if payload.has_json_body else payload.text
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

# Marker for a payload whose content-type never asked for JSON decoding
_NO_BODY = object()


class EngineState(str, Enum):
    """Busy/idle state of a queue engine.

    Attributes:
        IDLE: No drive loop is running; the next push starts one.
        BUSY: A drive loop is running and will pick up new pushes.
    """

    IDLE = "idle"
    BUSY = "busy"


class ResponsePayload:
    """Response data handed to the response middleware.

    Built by the exchange step from the raw transport response after the
    body text has been read.

    Attributes:
        response: The raw transport response object
        headers: Response headers (case-insensitive lookup when the
            transport provides it)
        ok: True for 2xx status codes
        status: HTTP status code
        status_text: HTTP reason phrase
        url: Final URL of the response
        text: Response body decoded as text
    """

    def __init__(
        self,
        response: Any,
        headers: Mapping[str, str],
        ok: bool,
        status: int,
        status_text: str,
        url: str,
        text: str,
        body: Any = _NO_BODY,
    ) -> None:
        self.response = response
        self.headers = headers
        self.ok = ok
        self.status = status
        self.status_text = status_text
        self.url = url
        self.text = text
        self._body = body

    @property
    def has_json_body(self) -> bool:
        """True when the content-type asked for JSON decoding."""
        return self._body is not _NO_BODY

    @property
    def body(self) -> Any:
        """Decoded JSON body, ``{}`` if decoding failed, None if not JSON."""
        return None if self._body is _NO_BODY else self._body

    def __repr__(self) -> str:
        return f"ResponsePayload(status={self.status}, url={self.url!r})"


def is_skip(request: Any) -> bool:
    """True when the request stage asked for the exchange to be skipped.

    Only ``None`` and ``False`` skip. An empty mapping is still a request
    and goes on to the exchange, where it fails validation.
    """
    return request is None or request is False


class CycleOutcome:
    """Result of one drive cycle.

    Attributes:
        request: Descriptor produced by the request middleware (None on skip)
        error: Value produced by the error middleware, if any
        result: Value produced by the response middleware, if any
        acknowledged: False when the post-action stage asked for a retry
    """

    def __init__(
        self,
        request: Any,
        error: Any = None,
        result: Any = None,
        acknowledged: bool = True,
    ) -> None:
        self.request = request
        self.error = error
        self.result = result
        self.acknowledged = acknowledged

    @property
    def skipped(self) -> bool:
        """True when no exchange was attempted for this cycle."""
        return is_skip(self.request)
