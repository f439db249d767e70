"""Transport protocol for the request queue.

The queue engine never talks to the network itself. It calls an injected
transport once per exchange:

    ``await transport(url, options) -> TransportResponse``

where ``options`` carries ``method``, ``body``, ``headers`` and
``credentials``. Any async callable with that shape works, which keeps the
engine testable with in-memory fakes.

Examples:
    A fake transport for tests::

        class StaticResponse:
            status = 200
            status_text = "OK"
            ok = True
            headers = {"content-type": "text/plain"}
            url = "http://test/"

            async def text(self) -> str:
                return "hello"

        async def transport(url: str, options: TransportOptions) -> StaticResponse:
            return StaticResponse()

Requirements:
    1. **One exchange per call**: the engine calls the transport at most
       once per drive cycle and never concurrently.
    2. **Failures raise**: network or protocol failures must raise; the
       engine routes them through the error middleware.
    3. **HTTP errors do not raise**: 4xx/5xx responses are returned with
       ``ok`` set to False.
"""

from collections.abc import Mapping
from typing import Any, Protocol, TypedDict, runtime_checkable


class TransportOptions(TypedDict):
    """Options bundle passed to a transport for one exchange."""

    method: str
    body: Any
    headers: Mapping[str, str]
    credentials: Any


@runtime_checkable
class TransportResponse(Protocol):
    """Response returned by a transport.

    ``headers`` should support case-insensitive ``get``; a plain dict works
    as long as header names are lowercase.
    """

    status: int
    status_text: str
    ok: bool
    headers: Mapping[str, str]
    url: str

    async def text(self) -> str:
        """Return the response body decoded as text."""
        ...


@runtime_checkable
class Transport(Protocol):
    """Async callable performing one HTTP exchange."""

    async def __call__(self, url: str, options: TransportOptions) -> TransportResponse:
        """Send one request.

        Args:
            url: Target URL
            options: Method, body, headers and credentials

        Returns:
            The transport response

        Raises:
            Exception: Any network or protocol failure
        """
        ...
