"""Middleware stages and composition helpers.

The queue engine threads every request through four stages:

1. request ``(descriptor) -> descriptor | None``
2. response ``(payload, descriptor) -> Any``
3. error ``(error, descriptor) -> Any``
4. post-action ``(error, result, descriptor) -> None``; raising means nack

Each stage may be a plain function or return an awaitable. The defaults
defined here pass values through untouched.

Examples:
    Chaining several response transforms::

        from fetch_queue.core.middleware import combine_middleware

        def status_only(payload, request):
            return payload.status

        def as_label(status, request):
            return f"{request['method']} -> {status}"

        response_middleware = combine_middleware(status_only, as_label)
"""

import inspect
from collections.abc import Callable
from typing import Any


def default_request(request: Any) -> Any:
    """Identity request stage."""
    return request


def default_response(payload: Any, request: Any) -> Any:  # noqa: ARG001
    """Identity response stage."""
    return payload


def default_error(error: Any, request: Any) -> Any:  # noqa: ARG001
    """Identity error stage."""
    return error


def default_post_action(error: Any, result: Any, request: Any) -> None:  # noqa: ARG001
    """Acknowledge every request."""
    return None


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


def combine_middleware(*fns: Callable[..., Any]) -> Callable[..., Any]:
    """Compose middleware so each stage feeds the next.

    The first function receives all arguments. Every following function
    receives the previous result as its first argument and the remaining
    original arguments unchanged.

    Args:
        *fns: Middleware functions, applied left to right

    Returns:
        The composed middleware

    Raises:
        ValueError: If no function is given

    Examples:
        >>> double = lambda n, *rest: n * 2
        >>> combine_middleware(double, double, double)(2, "a", "b")
        16
    """
    if not fns:
        raise ValueError("combine_middleware requires at least one function")

    def combined(*args: Any) -> Any:
        rest = args[1:]
        value = fns[0](*args)
        for fn in fns[1:]:
            value = fn(value, *rest)
        return value

    return combined
