"""Scenario 3: Failures and Unhandled Errors

This module tests how failures surface to callers:
- Application errors raised through the transport reject the future
- Error middleware can map failures to other values
- Middleware exceptions go to unhandled-error listeners, not callers
- A failing or skipped entry never blocks the rest of the queue
"""

from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from fetch_queue import QueueConfig, RejectedError, RequestValidationError, create_queue
from fetch_queue.models import ResponsePayload
from fetch_queue.transport import HttpxTransport

HOST = "http://testserver"


@pytest.fixture
def hits() -> list[str]:
    return []


@pytest.fixture
def app(hits: list[str]) -> FastAPI:
    test_app = FastAPI()

    @test_app.get("/ok/{name}")
    async def ok(name: str):
        hits.append(name)
        return {"name": name}

    @test_app.get("/crash")
    async def crash():
        hits.append("crash")
        raise RuntimeError("SOME_ERROR")

    return test_app


@pytest_asyncio.fixture
async def http_transport(app: FastAPI):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=HOST) as client:
        yield HttpxTransport(client=client)


@pytest.mark.asyncio
async def test_transport_failure_rejects(http_transport, hits: list[str]) -> None:
    queue = create_queue(http_transport)

    with pytest.raises(RuntimeError, match="SOME_ERROR"):
        await queue.get({"url": f"{HOST}/crash"})
    payload = await queue.get({"url": f"{HOST}/ok/after"})

    assert payload.body == {"name": "after"}
    assert hits == ["crash", "after"]


@pytest.mark.asyncio
async def test_error_middleware_maps_failure(http_transport) -> None:
    def to_problem(error: Exception, request: dict[str, Any]) -> dict[str, str]:
        return {"url": request["url"], "reason": str(error)}

    queue = create_queue(http_transport, QueueConfig(error_middleware=to_problem))

    with pytest.raises(RejectedError) as exc_info:
        await queue.get({"url": f"{HOST}/crash"})

    assert exc_info.value.value == {"url": f"{HOST}/crash", "reason": "SOME_ERROR"}


@pytest.mark.asyncio
async def test_missing_url_never_reaches_server(http_transport, hits: list[str]) -> None:
    queue = create_queue(http_transport)

    with pytest.raises(RequestValidationError, match="^Field url is required in request$"):
        await queue.post({"body": {"a": 1}})

    assert hits == []


@pytest.mark.asyncio
async def test_request_middleware_failure_is_isolated(http_transport, hits: list[str]) -> None:
    errors: list[BaseException] = []

    def guard(request: dict[str, Any]) -> dict[str, Any]:
        if "forbidden" in request["url"]:
            raise PermissionError("blocked by guard")
        return request

    queue = create_queue(http_transport, QueueConfig(request_middleware=guard))
    queue.on_unhandled_error(errors.append)

    blocked = queue.get({"url": f"{HOST}/ok/forbidden"})
    allowed = queue.get({"url": f"{HOST}/ok/allowed"})

    assert await blocked is None
    assert (await allowed).body == {"name": "allowed"}
    assert hits == ["allowed"]
    assert len(errors) == 1
    assert isinstance(errors[0], PermissionError)


@pytest.mark.asyncio
async def test_skipped_request_resolves_none(http_transport, hits: list[str]) -> None:
    def only_even(request: dict[str, Any]) -> dict[str, Any] | None:
        return request if int(request["url"].rsplit("/", 1)[1]) % 2 == 0 else None

    queue = create_queue(http_transport, QueueConfig(request_middleware=only_even))

    results = [await queue.get({"url": f"{HOST}/ok/{i}"}) for i in range(4)]

    assert results[1] is None
    assert results[3] is None
    assert isinstance(results[0], ResponsePayload)
    assert isinstance(results[2], ResponsePayload)
    assert hits == ["0", "2"]


@pytest.mark.asyncio
async def test_response_middleware_failure_notifies(http_transport) -> None:
    errors: list[BaseException] = []

    def strict(payload: ResponsePayload, request: dict[str, Any]) -> Any:
        raise KeyError("missing field")

    queue = create_queue(http_transport, QueueConfig(response_middleware=strict))
    queue.on("unhandledError", errors.append)

    assert await queue.get({"url": f"{HOST}/ok/x"}) is None
    assert len(errors) == 1
    assert isinstance(errors[0], KeyError)


@pytest.mark.asyncio
async def test_error_middleware_failure_notifies(http_transport) -> None:
    errors: list[BaseException] = []

    def broken(error: Exception, request: dict[str, Any]) -> Any:
        raise ValueError("Foo bar")

    queue = create_queue(http_transport, QueueConfig(error_middleware=broken))
    queue.on_unhandled_error(errors.append)

    assert await queue.get({"url": f"{HOST}/crash"}) is None
    assert [str(e) for e in errors] == ["Foo bar"]
