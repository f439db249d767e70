"""Single HTTP exchange for a queued request.

make_request validates a request descriptor, hands it to the transport and
turns the transport response into a ResponsePayload for the response
middleware. Failures are raised, never returned; the queue engine routes
them through the error middleware.

Examples:
    >>> payload = await make_request(transport, {"url": "http://api/", "method": "GET"})
    >>> payload.status
    200
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from fetch_queue.exceptions import RequestValidationError
from fetch_queue.models import ResponsePayload
from fetch_queue.transport.base import Transport, TransportOptions

JSON_CONTENT_TYPE = re.compile(r"application/json")


async def make_request(
    transport: Transport,
    request: Mapping[str, Any],
    json_content_type: re.Pattern[str] = JSON_CONTENT_TYPE,
) -> ResponsePayload:
    """Perform one exchange for ``request``.

    Args:
        transport: Transport used to send the request
        request: Request descriptor (url, method, headers, body, credentials)
        json_content_type: Pattern deciding whether the body is decoded as JSON

    Returns:
        The response payload

    Raises:
        RequestValidationError: If the descriptor has no url. The transport
            is not called.
        Exception: Whatever the transport raises
    """
    url = request.get("url")
    if not url:
        raise RequestValidationError("url")

    options: TransportOptions = {
        "method": request.get("method") or "GET",
        "body": request.get("body"),
        "headers": request.get("headers") or {},
        "credentials": request.get("credentials"),
    }
    response = await transport(url, options)
    text = await response.text()

    payload_kwargs: dict[str, Any] = {}
    content_type = get_header(response.headers, "content-type")
    if content_type and json_content_type.search(content_type):
        try:
            payload_kwargs["body"] = json.loads(text)
        except ValueError:
            payload_kwargs["body"] = {}

    return ResponsePayload(
        response=response,
        headers=response.headers,
        ok=response.ok,
        status=response.status,
        status_text=response.status_text,
        url=response.url,
        text=text,
        **payload_kwargs,
    )


def get_header(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Look up a header value case-insensitively.

    Args:
        headers: Header mapping; may already be case-insensitive
        name: Header name

    Returns:
        The header value if present, None otherwise
    """
    if not headers:
        return None

    value = headers.get(name)
    if value is not None:
        return value

    name = name.lower()
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None
