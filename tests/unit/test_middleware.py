"""Unit tests for middleware defaults and composition."""

import asyncio

import pytest

from fetch_queue.core.middleware import (
    combine_middleware,
    default_error,
    default_post_action,
    default_request,
    default_response,
    maybe_await,
)


class TestDefaults:
    """Tests for the default stages."""

    def test_default_request_is_identity(self) -> None:
        request = {"url": "http://testserver/"}
        assert default_request(request) is request

    def test_default_response_is_identity(self) -> None:
        payload = object()
        assert default_response(payload, {}) is payload

    def test_default_error_is_identity(self) -> None:
        error = RuntimeError("boom")
        assert default_error(error, {}) is error

    def test_default_post_action_acknowledges(self) -> None:
        assert default_post_action(None, None, None) is None


class TestMaybeAwait:
    """Tests for maybe_await."""

    @pytest.mark.asyncio
    async def test_plain_value(self) -> None:
        assert await maybe_await(5) == 5

    @pytest.mark.asyncio
    async def test_coroutine(self) -> None:
        async def value() -> int:
            return 7

        assert await maybe_await(value()) == 7

    @pytest.mark.asyncio
    async def test_future(self) -> None:
        future = asyncio.get_running_loop().create_future()
        future.set_result("done")
        assert await maybe_await(future) == "done"


class TestCombineMiddleware:
    """Tests for combine_middleware."""

    def test_returns_callable(self) -> None:
        assert callable(combine_middleware(lambda: None))

    def test_requires_a_function(self) -> None:
        with pytest.raises(ValueError, match="at least one"):
            combine_middleware()

    def test_goes_through_all_functions(self) -> None:
        visited: list[str] = []

        def fn1(*args):
            visited.append("fn1")

        def fn2(*args):
            visited.append("fn2")

        def fn3(*args):
            visited.append("fn3")

        combine_middleware(fn1, fn2, fn3)()

        assert visited == ["fn1", "fn2", "fn3"]

    def test_passes_result_as_first_argument(self) -> None:
        calls: list[int] = []

        def double(arg):
            calls.append(arg)
            return arg * 2

        result = combine_middleware(double, double, double)(2)

        assert calls == [2, 4, 8]
        assert result == 16

    def test_passes_rest_arguments_unchanged(self) -> None:
        calls: list[tuple] = []

        def double(*args):
            calls.append(args)
            return args[0] * 2

        combine_middleware(double, double, double)(2, "a", "b")

        assert calls == [(2, "a", "b"), (4, "a", "b"), (8, "a", "b")]

    def test_single_function_receives_all_arguments(self) -> None:
        combined = combine_middleware(lambda *args: args)
        assert combined(1, 2, 3) == (1, 2, 3)

    def test_combines_response_stages(self) -> None:
        """Typical use: chain response transforms sharing the request."""
        request = {"method": "POST"}

        def status_only(payload, req):
            return payload["status"]

        def as_label(status, req):
            return f"{req['method']} -> {status}"

        combined = combine_middleware(status_only, as_label)

        assert combined({"status": 201}, request) == "POST -> 201"
