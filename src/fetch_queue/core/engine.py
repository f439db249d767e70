"""Queue engine: single-concurrency request queue with middleware stages.

The engine keeps pushed request descriptors in FIFO order and processes
them one at a time. Each drive cycle takes the head of the queue through:

1. request middleware (may replace the descriptor or skip the exchange)
2. the transport exchange
3. response middleware on success, error middleware on failure
4. post-action middleware, which acknowledges by returning or asks for a
   retry (nack) by raising

On acknowledgement the head is removed and the caller's future is settled.
On nack the head stays in place and the whole pipeline runs again for it.
Middleware exceptions never reach the caller: they are reported to
``unhandled_error`` listeners and the cycle carries on.

Examples:
    Basic usage::

        from fetch_queue import create_queue
        from fetch_queue.transport import HttpxTransport

        async with HttpxTransport() as transport:
            queue = create_queue(transport)
            first = queue.get({"url": "https://example.com/a"})
            second = queue.post({"url": "https://example.com/b", "body": {"x": 1}})
            await first   # always settles before ``second``
            await second

    Retrying on server errors::

        from fetch_queue import Nack, QueueConfig, RequestQueue

        def retry_5xx(error, payload, request):
            if payload is not None and payload.status >= 500:
                raise Nack("server error")

        queue = RequestQueue(transport, QueueConfig(post_action_middleware=retry_5xx))
"""

import asyncio
import inspect
import re
import time
from collections import deque
from collections.abc import Callable, MutableMapping
from typing import Any

from fetch_queue.config import QueueConfig
from fetch_queue.core.exchange import make_request
from fetch_queue.core.middleware import maybe_await
from fetch_queue.deferred import Deferred
from fetch_queue.exceptions import UnknownEventError
from fetch_queue.models import CycleOutcome, EngineState, is_skip
from fetch_queue.observability.logging import get_logger
from fetch_queue.observability.metrics import (
    record_exchange_time,
    record_nack,
    record_settled,
    record_unhandled_error,
    set_queue_depth,
)
from fetch_queue.transport.base import Transport

UNHANDLED_ERROR_EVENTS = {"unhandled_error", "unhandledError"}

ErrorListener = Callable[[BaseException], Any]


def apply_default_request(request: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Fill in method and headers and attach a Deferred, in place."""
    request["method"] = request.get("method") or "GET"
    request["headers"] = request.get("headers") or {}
    request["_deferred"] = Deferred()
    return request


class RequestQueue:
    """Single-concurrency request queue.

    Attributes:
        transport: Transport performing the exchanges
        config: Middleware and naming configuration
    """

    def __init__(self, transport: Transport, config: QueueConfig | None = None) -> None:
        """Initialize the queue.

        Args:
            transport: Async callable ``(url, options) -> response``
            config: Queue configuration (uses defaults if not provided)
        """
        self.transport = transport
        self.config = config or QueueConfig()
        self._json_content_type = re.compile(self.config.json_content_type)
        self._queue: deque[MutableMapping[str, Any]] = deque()
        self._state = EngineState.IDLE
        self._idle = asyncio.Event()
        self._idle.set()
        self._driver: asyncio.Task[None] | None = None
        self._listeners: list[ErrorListener] = []
        self._listener_tasks: set[asyncio.Future[Any]] = set()
        self._attempt = 0
        self._log = get_logger(__name__, queue=self.config.name)

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return f"RequestQueue(name={self.config.name!r}, state={self._state.value}, pending={len(self)})"

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is EngineState.IDLE

    def push(self, request: MutableMapping[str, Any]) -> "asyncio.Future[Any]":
        """Queue a request and return a future for its outcome.

        The descriptor is modified in place: ``method`` defaults to GET,
        ``headers`` to an empty dict, and ``_deferred`` is attached. Problems
        with the request are reported through the returned future.

        Must be called from code running inside an event loop.

        Args:
            request: Request descriptor with at least a ``url``

        Returns:
            Future resolved with the response middleware result or rejected
            with the error middleware result

        Raises:
            RuntimeError: If no event loop is running. Nothing is queued.
        """
        if not isinstance(request, MutableMapping):
            deferred = Deferred()
            deferred.reject(
                TypeError(f"request must be a mutable mapping, got {type(request).__name__}")
            )
            return deferred.future

        request = apply_default_request(request)
        self._queue.append(request)
        set_queue_depth(self.config.name, len(self._queue))
        self._log.debug(
            "queue.push",
            method=request["method"],
            url=request.get("url"),
            pending=len(self._queue),
        )

        if self._state is EngineState.IDLE:
            self._start()

        return request["_deferred"].future

    def get(self, request: MutableMapping[str, Any]) -> "asyncio.Future[Any]":
        """Queue a GET request."""
        return self._push_with_method("GET", request)

    def head(self, request: MutableMapping[str, Any]) -> "asyncio.Future[Any]":
        """Queue a HEAD request."""
        return self._push_with_method("HEAD", request)

    def post(self, request: MutableMapping[str, Any]) -> "asyncio.Future[Any]":
        """Queue a POST request."""
        return self._push_with_method("POST", request)

    def put(self, request: MutableMapping[str, Any]) -> "asyncio.Future[Any]":
        """Queue a PUT request."""
        return self._push_with_method("PUT", request)

    def patch(self, request: MutableMapping[str, Any]) -> "asyncio.Future[Any]":
        """Queue a PATCH request."""
        return self._push_with_method("PATCH", request)

    def delete(self, request: MutableMapping[str, Any]) -> "asyncio.Future[Any]":
        """Queue a DELETE request."""
        return self._push_with_method("DELETE", request)

    del_ = delete

    def on_unhandled_error(self, callback: ErrorListener) -> None:
        """Register a listener for middleware failures.

        Listeners are notified and forgotten: their return value and their
        own exceptions never affect the request being processed. A listener
        returning an awaitable has it scheduled as a task.
        """
        self._listeners.append(callback)

    def on(self, event: str, callback: ErrorListener) -> None:
        """Subscribe to a queue event.

        Raises:
            UnknownEventError: If the queue never emits ``event``
        """
        if event not in UNHANDLED_ERROR_EVENTS:
            raise UnknownEventError(event)
        self.on_unhandled_error(callback)

    async def wait_idle(self) -> None:
        """Wait until every queued request has been settled."""
        await self._idle.wait()

    def _push_with_method(
        self, method: str, request: MutableMapping[str, Any]
    ) -> "asyncio.Future[Any]":
        if isinstance(request, MutableMapping):
            request["method"] = method
        return self.push(request)

    def _start(self) -> None:
        self._state = EngineState.BUSY
        self._idle.clear()
        self._driver = asyncio.get_running_loop().create_task(self._drive())

    async def _drive(self) -> None:
        while True:
            await self._run_cycle()
            # the last ack and the switch to idle happen in the same step
            if not self._queue:
                break
            # give pushes and settled callers a turn before the next cycle
            await asyncio.sleep(0)

        self._state = EngineState.IDLE
        self._driver = None
        self._idle.set()
        self._log.debug("queue.idle")

    async def _run_cycle(self) -> CycleOutcome:
        """Take the head of the queue through every stage once."""
        self._state = EngineState.BUSY
        original = self._queue[0]
        self._attempt += 1
        log = self._log.bind(
            method=original.get("method"),
            url=original.get("url"),
            attempt=self._attempt,
        )
        log.debug("queue.cycle.started")

        request: Any = None
        try:
            request = await maybe_await(self.config.request_middleware(original))
        except Exception as e:
            self._emit_unhandled_error(e, stage="request")

        error: Any = None
        result: Any = None
        if not is_skip(request):
            start_time = time.perf_counter()
            try:
                payload = await make_request(self.transport, request, self._json_content_type)
            except Exception as e:
                record_exchange_time(self.config.name, time.perf_counter() - start_time)
                log.info("queue.request.failed", error=str(e), error_type=type(e).__name__)
                try:
                    error = await maybe_await(self.config.error_middleware(e, request))
                except Exception as mw_error:
                    self._emit_unhandled_error(mw_error, stage="error")
            else:
                record_exchange_time(self.config.name, time.perf_counter() - start_time)
                try:
                    result = await maybe_await(self.config.response_middleware(payload, request))
                except Exception as mw_error:
                    self._emit_unhandled_error(mw_error, stage="response")
        else:
            log.debug("queue.request.skipped")

        try:
            await maybe_await(self.config.post_action_middleware(error, result, request))
        except Exception as e:
            record_nack(self.config.name)
            log.info("queue.nack", reason=str(e), error_type=type(e).__name__)
            return CycleOutcome(request, error=error, result=result, acknowledged=False)

        self._queue.popleft()
        self._attempt = 0
        set_queue_depth(self.config.name, len(self._queue))

        deferred: Deferred = original["_deferred"]
        if error is not None:
            outcome = "rejected"
            deferred.reject(error)
        else:
            outcome = "skipped" if is_skip(request) else "resolved"
            deferred.resolve(result)
        record_settled(self.config.name, outcome)
        log.debug("queue.ack", outcome=outcome)

        return CycleOutcome(request, error=error, result=result)

    def _emit_unhandled_error(self, error: BaseException, stage: str) -> None:
        record_unhandled_error(self.config.name, stage)
        self._log.warning(
            "queue.middleware.failed",
            stage=stage,
            error=str(error),
            error_type=type(error).__name__,
        )

        for listener in list(self._listeners):
            try:
                notified = listener(error)
            except Exception as e:
                record_unhandled_error(self.config.name, "listener")
                self._log.error(
                    "queue.listener.failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if inspect.isawaitable(notified):
                task = asyncio.ensure_future(notified)
                self._listener_tasks.add(task)
                task.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, task: "asyncio.Future[Any]") -> None:
        self._listener_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            record_unhandled_error(self.config.name, "listener")
            self._log.error(
                "queue.listener.failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )


def create_queue(transport: Transport, config: QueueConfig | None = None) -> RequestQueue:
    """Create a request queue.

    Args:
        transport: Transport performing the exchanges
        config: Queue configuration (uses defaults if not provided)

    Returns:
        A new, idle RequestQueue
    """
    return RequestQueue(transport, config)


def connect_middleware(
    request: Callable[..., Any] | None = None,
    response: Callable[..., Any] | None = None,
    error: Callable[..., Any] | None = None,
    post_action: Callable[..., Any] | None = None,
    **config_kwargs: Any,
) -> Callable[[Transport], RequestQueue]:
    """Bind middleware stages into a reusable queue factory.

    Stages left as None keep their defaults. Extra keyword arguments are
    passed to QueueConfig.

    Examples:
        >>> make_queue = connect_middleware(request=add_auth, post_action=retry_5xx)
        >>> queue = make_queue(transport)
    """
    stages = {
        "request_middleware": request,
        "response_middleware": response,
        "error_middleware": error,
        "post_action_middleware": post_action,
    }
    config = QueueConfig(
        **{key: fn for key, fn in stages.items() if fn is not None},
        **config_kwargs,
    )

    def factory(transport: Transport) -> RequestQueue:
        return RequestQueue(transport, config)

    return factory
