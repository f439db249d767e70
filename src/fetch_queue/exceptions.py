"""Custom exceptions for the request queue.

This module defines the exception hierarchy used by the queue engine to
signal validation failures, non-exception rejections and retry requests.

Examples:
    Handling a missing url::

        from fetch_queue.exceptions import RequestValidationError

        try:
            await queue.push({"method": "GET"})
        except RequestValidationError as e:
            logger.warning("request.invalid", field=e.field, error=str(e))

    Asking the queue to retry the current request::

        from fetch_queue.exceptions import Nack

        def post_action(error, result, request):
            if result is not None and result.status == 503:
                raise Nack("upstream unavailable")
"""

from typing import Any


class FetchQueueError(Exception):
    """Base exception for all queue-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class RequestValidationError(FetchQueueError):
    """A request descriptor is missing a required field.

    Raised by the exchange step before the transport is invoked. It is
    routed through the error middleware like any transport failure, so
    callers usually observe it as the rejection of the future returned by
    ``push``.

    Attributes:
        message: Human-readable error description.
        field: Name of the missing field.
    """

    def __init__(self, field: str) -> None:
        super().__init__(f"Field {field} is required in request")
        self.field = field


class RejectedError(FetchQueueError):
    """A request future was rejected with a value that is not an exception.

    Error middleware may map a transport failure to any value. Futures can
    only carry exceptions, so such values are wrapped in this error.

    Attributes:
        message: Human-readable error description.
        value: The value produced by the error middleware.

    Examples:
        Recovering the original value::

            try:
                await queue.get({"url": url})
            except RejectedError as e:
                problem = e.value
    """

    def __init__(self, value: Any) -> None:
        super().__init__(f"Request rejected with {value!r}")
        self.value = value


class Nack(FetchQueueError):
    """Negative acknowledgement raised from a post-action middleware.

    The queue keeps the current head entry and runs the whole pipeline for
    it again on the next cycle. Any exception raised from a post-action
    middleware has the same effect; this class only makes the intent
    explicit.
    """

    def __init__(self, message: str = "Request not acknowledged") -> None:
        super().__init__(message)


class UnknownEventError(FetchQueueError, ValueError):
    """Subscription to an event the queue never emits.

    Attributes:
        message: Human-readable error description.
        event: The rejected event name.
    """

    def __init__(self, event: str) -> None:
        super().__init__(f"Unknown queue event: {event}")
        self.event = event
