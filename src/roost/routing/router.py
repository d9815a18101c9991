"""Ordered route table.

Layers are kept in registration order. For a request, the router walks
the table, runs the callbacks of the first matching layer in order and
moves on to the next matching layer only when the last callback of the
current one calls ``next()``. When the table is exhausted it calls the
``out`` continuation it was given: the parent server's ``next`` for a
nested server, the "no route matched" fallback at the top level.
"""

import logging
from collections.abc import Awaitable, Callable

from roost.http.request import Request
from roost.http.response import Response
from roost.routing.route import Layer, LayerMatch, Next

logger = logging.getLogger("roost.dispatch")


class Continuation:
    """The ``next`` callable handed to a callback.

    Proceeds at most once. A second call is logged and ignored so the
    following callback can never run twice for one request.
    """

    __slots__ = ("_called", "_label", "_proceed")

    def __init__(self, proceed: Callable[[], Awaitable[None]], label: str = "") -> None:
        self._proceed = proceed
        self._label = label
        self._called = False

    @property
    def called(self) -> bool:
        return self._called

    async def __call__(self) -> None:
        if self._called:
            logger.warning("next() called more than once after %s; ignoring", self._label or "callback")
            return
        self._called = True
        await self._proceed()


class Router:
    """Ordered layer table.

    Usage::

        router = Router()
        router.add(layer)
        router.compile()
        await router.handle(request, response, out)
    """

    __slots__ = ("_compiled", "_layers")

    def __init__(self) -> None:
        self._layers: list[Layer] = []
        self._compiled = False

    def add(self, layer: Layer) -> None:
        """Append a layer. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add layers after compilation."
            raise RuntimeError(msg)
        self._layers.append(layer)

    def compile(self) -> None:
        """Freeze the table. No more layers can be added."""
        self._compiled = True

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)

    async def handle(self, request: Request, response: Response, out: Next) -> None:
        """Run the chain for *request*, calling *out* if it falls off the end."""
        layers = tuple(self._layers)

        async def run_from(index: int) -> None:
            for position in range(index, len(layers)):
                match = layers[position].match(request.method, request.path)
                if match is None:
                    continue

                async def after_layer(position: int = position) -> None:
                    await run_from(position + 1)

                await _run_layer(match, match.request_for(request), response, after_layer)
                return
            await out()

        await run_from(0)


async def _run_layer(
    match: LayerMatch,
    request: Request,
    response: Response,
    after: Callable[[], Awaitable[None]],
) -> None:
    """Run one layer's callbacks in order; *after* follows the last one."""
    callbacks = match.layer.callbacks
    label = f"{match.layer.method or 'USE'} {match.layer.path}"

    async def run_callback(index: int) -> None:
        if index == len(callbacks):
            await after()
            return

        async def proceed() -> None:
            await run_callback(index + 1)

        await callbacks[index](request, response, Continuation(proceed, label))

    await run_callback(0)
