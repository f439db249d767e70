"""Default transport built on httpx.

HttpxTransport adapts ``httpx.AsyncClient`` to the transport protocol
expected by the queue engine. HTTP error statuses are returned as regular
responses; connection and protocol failures propagate as httpx exceptions.

Examples:
    Using the transport with a queue::

        from fetch_queue import create_queue
        from fetch_queue.transport.httpx_transport import HttpxTransport

        async with HttpxTransport() as transport:
            queue = create_queue(transport)
            payload = await queue.get({"url": "https://example.com/"})

    Sharing an existing client::

        client = httpx.AsyncClient(base_url="https://api.example.com")
        transport = HttpxTransport(client=client)
        # the caller keeps ownership of ``client``
"""

from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from fetch_queue.config import TransportConfig
from fetch_queue.transport.base import TransportOptions


class HttpxResponse:
    """Transport response backed by an ``httpx.Response``.

    Attributes:
        raw: The wrapped httpx response
    """

    def __init__(self, raw: httpx.Response) -> None:
        self.raw = raw

    @property
    def status(self) -> int:
        return self.raw.status_code

    @property
    def status_text(self) -> str:
        return self.raw.reason_phrase

    @property
    def ok(self) -> bool:
        return self.raw.is_success

    @property
    def headers(self) -> httpx.Headers:
        return self.raw.headers

    @property
    def url(self) -> str:
        return str(self.raw.url)

    async def text(self) -> str:
        await self.raw.aread()
        return self.raw.text


class HttpxTransport:
    """Transport sending each exchange through an ``httpx.AsyncClient``.

    Attributes:
        config: Transport configuration
        client: The client used for every exchange
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Transport configuration (defaults if not provided).
                Ignored when ``client`` is given.
            client: Existing client to use. It is not closed by aclose().
        """
        self.config = config or TransportConfig()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout_seconds),
            follow_redirects=self.config.follow_redirects,
            headers=self.config.default_headers,
        )

    async def __call__(self, url: str, options: TransportOptions) -> HttpxResponse:
        """Send one request and return the wrapped response."""
        kwargs: dict[str, Any] = {"headers": dict(options.get("headers") or {})}

        body = options.get("body")
        if isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif isinstance(body, (Mapping, list)):
            kwargs["json"] = body

        auth = _as_auth(options.get("credentials"))
        if auth is not None:
            kwargs["auth"] = auth

        response = await self.client.request(options.get("method") or "GET", url, **kwargs)
        return HttpxResponse(response)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def _as_auth(credentials: Any) -> httpx.Auth | tuple[str, str] | None:
    """Map opaque credentials to httpx auth.

    Basic-auth tuples and ``httpx.Auth`` instances are used as is; any other
    value is not understood by this transport and is ignored.
    """
    if isinstance(credentials, httpx.Auth):
        return credentials
    if (
        isinstance(credentials, tuple)
        and len(credentials) == 2
        and all(isinstance(part, str) for part in credentials)
    ):
        return credentials
    return None
