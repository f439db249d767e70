"""Single-use completion handle bound to one queued request.

A Deferred owns an ``asyncio.Future`` handed back to the caller of
``push``. The queue engine settles it exactly once, when the request is
acknowledged by the post-action stage.

Examples:
    >>> deferred = Deferred()
    >>> deferred.resolve(42)
    >>> deferred.reject(RuntimeError("late"))  # ignored
    >>> await deferred.future
    42
"""

import asyncio
from typing import Any

from fetch_queue.exceptions import RejectedError


class Deferred:
    """Promise-like wrapper around a single settlement slot.

    Attributes:
        future: Future resolved or rejected by this handle.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Create the handle and its future.

        Args:
            loop: Event loop owning the future. Defaults to the running loop.

        Raises:
            RuntimeError: If no loop is given and none is running.
        """
        if loop is None:
            loop = asyncio.get_running_loop()
        self.future: asyncio.Future[Any] = loop.create_future()

    @property
    def settled(self) -> bool:
        """True once the future has been resolved or rejected."""
        return self.future.done()

    def resolve(self, value: Any = None) -> None:
        """Resolve the future with ``value``. No-op if already settled."""
        if self.future.done():
            return
        self.future.set_result(value)

    def reject(self, error: Any) -> None:
        """Reject the future with ``error``. No-op if already settled.

        Values that are not exceptions are wrapped in RejectedError.
        """
        if self.future.done():
            return
        if not isinstance(error, BaseException):
            error = RejectedError(error)
        self.future.set_exception(error)
