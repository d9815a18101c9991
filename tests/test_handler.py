"""Tests for roost.handler — Flow, Handler protocol and from_callback."""

import anyio
import pytest

from roost.handler import Flow, Handler, from_callback
from roost.http.headers import Headers, QueryParams
from roost.http.request import Request
from roost.http.response import Response


def _request() -> Request:
    return Request(method="GET", path="/", headers=Headers(), query=QueryParams(), original_path="/")


class TestHandlerProtocol:
    def test_class_with_handle(self) -> None:
        class Hello:
            def handle(self, request: Request, response: Response) -> None:
                response.send("hi")

        assert isinstance(Hello(), Handler)

    def test_object_without_handle(self) -> None:
        assert not isinstance(object(), Handler)


class TestFromCallback:
    def test_returns_named_class(self) -> None:
        def greet(request: Request, response: Response) -> None:
            pass

        cls = from_callback(greet)
        assert isinstance(cls, type)
        assert cls.__name__.startswith("CallbackHandler[")
        assert "greet" in cls.__name__
        assert isinstance(cls(), Handler)

    async def test_two_arg_callback_returns_none(self) -> None:
        handler = from_callback(lambda req, res: res.send("hi"))()
        response = Response()
        assert await handler.handle(_request(), response) is None
        assert response.text == "hi"

    async def test_next_means_continue(self) -> None:
        def middleware(request: Request, response: Response, next) -> None:
            next()

        assert await from_callback(middleware)().handle(_request(), Response()) is Flow.CONTINUE

    async def test_awaited_next_means_continue(self) -> None:
        async def middleware(request: Request, response: Response, next) -> None:
            await next()

        assert await from_callback(middleware)().handle(_request(), Response()) is Flow.CONTINUE

    async def test_send_without_next_means_stop(self) -> None:
        def handler(request: Request, response: Response, next) -> None:
            response.send("done")

        assert await from_callback(handler)().handle(_request(), Response()) is Flow.STOP

    async def test_next_with_error_raises(self) -> None:
        def handler(request: Request, response: Response, next) -> None:
            next(ValueError("bad input"))

        with pytest.raises(ValueError, match="bad input"):
            await from_callback(handler)().handle(_request(), Response())

    async def test_callback_exception_propagates(self) -> None:
        async def handler(request: Request, response: Response, next) -> None:
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await from_callback(handler)().handle(_request(), Response())

    async def test_waits_for_deferred_next(self) -> None:
        events: list[str] = []

        async def handler(request: Request, response: Response, next) -> None:
            async def later() -> None:
                await anyio.sleep(0.01)
                events.append("next")
                next()

            tg.start_soon(later)

        async with anyio.create_task_group() as tg:
            flow = await from_callback(handler)().handle(_request(), Response())
            events.append("settled")

        assert flow is Flow.CONTINUE
        assert events == ["next", "settled"]

    async def test_first_signal_wins(self) -> None:
        def handler(request: Request, response: Response, next) -> None:
            response.send("done")
            next()

        assert await from_callback(handler)().handle(_request(), Response()) is Flow.STOP
