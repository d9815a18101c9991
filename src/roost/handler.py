"""Handler protocol, Flow result and the callback adapter.

A handler is any object with a ``handle(request, response)`` method.
No base class required; the dispatch wrapper checks the shape::

    class Hello:
        def handle(self, request: Request, response: Response) -> None:
            response.send("Hello world!")

    class RequireToken:
        @inject
        def __init__(self, tokens: TokenStore) -> None:
            self.tokens = tokens

        async def handle(self, request: Request, response: Response) -> Flow:
            if not await self.tokens.check(request.headers.get("authorization")):
                response.send("Unauthorized", status=401)
                return Flow.STOP
            return Flow.CONTINUE

``handle`` may be sync or async. Returning a ``Flow`` states explicitly
whether the chain goes on; returning ``None`` lets the dispatch wrapper
infer it (continue unless the response was finalized).
"""

from collections.abc import Awaitable, Callable, Generator
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import anyio

from roost._internal.invoke import invoke, positional_arity
from roost.http.request import Request
from roost.http.response import Response


class Flow(Enum):
    """What a handler wants the chain to do next."""

    CONTINUE = "continue"
    STOP = "stop"


type HandleResult = Flow | None


@runtime_checkable
class Handler(Protocol):
    """Protocol for roost handlers and middleware."""

    def handle(self, request: Request, response: Response) -> HandleResult | Awaitable[HandleResult]: ...


class _Ready:
    """Already-complete awaitable, so ``next()`` and ``await next()`` both work."""

    __slots__ = ()

    def __await__(self) -> Generator[Any, None, None]:
        return iter(())


_READY = _Ready()


def from_callback(callback: Callable[..., Any]) -> type[Handler]:
    """Wrap a plain ``(request, response, next)`` callback in a handler class.

    The returned class can be registered like any injectable handler::

        server.get("/", from_callback(lambda req, res: res.send("hi")))

    Completion rules for the generated ``handle``:

    - the callback calls ``next()`` -> ``Flow.CONTINUE``
    - the callback calls ``next(exc)`` -> *exc* is raised
    - the response gets finalized without ``next()`` -> ``Flow.STOP``

    A three-argument callback that returns without doing either is
    waited on until one of them happens (it may call ``next`` later
    from a task it started). Two-argument callbacks have no ``next``;
    they complete when they return.
    """
    takes_next = positional_arity(callback) >= 3

    class CallbackHandler:
        async def handle(self, request: Request, response: Response) -> HandleResult:
            if not takes_next:
                await invoke(callback, request, response)
                return None

            settled = anyio.Event()
            continued = False
            error: BaseException | None = None

            def next_(exc: BaseException | None = None) -> _Ready:
                nonlocal continued, error
                if not settled.is_set():
                    continued = exc is None
                    error = exc
                    settled.set()
                return _READY

            response.on_finish(lambda _response: settled.set())
            await invoke(callback, request, response, next_)
            await settled.wait()

            if error is not None:
                raise error
            return Flow.CONTINUE if continued else Flow.STOP

    name = getattr(callback, "__qualname__", None) or type(callback).__name__
    CallbackHandler.__name__ = f"CallbackHandler[{name}]"
    CallbackHandler.__qualname__ = CallbackHandler.__name__
    return CallbackHandler
