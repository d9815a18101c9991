"""Server — the mount point and composition root.

A ``Server`` binds handler references to (method, path) pairs, owns an
injection scope, and can be nested beneath another server. It is also
the ASGI application.

Mutable during setup, frozen on the first request or ``listen()``::

    server = Server()
    server.get_scope().register(Database, PostgresDatabase, singleton=True)
    server.use(RequestLogger)
    server.get("/", Home)
    server.use("/api", ApiServer)
    await server.listen(3000)

Nested servers are ordinary subclasses that register their routes in
``__init__``. They are resolved through the parent's scope, so they take
it as an injected dependency::

    class ApiServer(Server):
        @inject
        def __init__(self, scope: InjectionScope) -> None:
            super().__init__(scope)
            self.get("/v1", Version)
"""

import inspect
import logging
import re
import threading
from collections.abc import Callable
from typing import Any, Self

from roost._internal.asgi import Receive, Scope, Send
from roost._internal.invoke import invoke
from roost.config import ServerConfig
from roost.context import request_var, scope_var
from roost.dispatch import DispatchWrapper
from roost.errors import BindError, ConfigurationError, RegistrationClosed
from roost.handler import from_callback
from roost.http.request import Request
from roost.http.response import Response
from roost.injection import InjectionScope
from roost.routing.params import compile_path
from roost.routing.route import Layer, Next, PathConfig, describe
from roost.routing.router import Router
from roost.server.errors import ErrorReporter, handle_internal_error, respond_not_found
from roost.server.sender import send_response
from roost.server.transport import HTTPServerHandle, start_transport

logger = logging.getLogger("roost.server")

type PathPattern = str | re.Pattern[str]
type PathLike = PathPattern | tuple[PathPattern, ...] | list[PathPattern] | PathConfig

HTTP_SERVER = HTTPServerHandle
"""Scope key the live transport is published under once ``listen()`` succeeds."""


class Server:
    """A composable router with its own injection scope.

    Thread safety:
        Registration is single-threaded setup work. The freeze transition
        uses a Lock + double-check so concurrent first requests compile
        the route table exactly once. A thread lock rather than an async
        one, since the freeze never awaits and may also be reached from
        a thread other than the event loop's (e.g. a sync test setup).
    """

    __slots__ = (
        "_error_reporters",
        "_freeze_lock",
        "_frozen",
        "_listen_handle",
        "_router",
        "_scope",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, scope: InjectionScope | None = None, config: ServerConfig | None = None) -> None:
        self.config: ServerConfig = config or ServerConfig()
        self._scope = scope if scope is not None else InjectionScope()
        self._router = Router()
        self._error_reporters: list[ErrorReporter] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._listen_handle: HTTPServerHandle | None = None
        self._frozen = False
        self._freeze_lock = threading.Lock()

    # -- Scope --

    @property
    def scope(self) -> InjectionScope:
        """The scope this server was constructed with."""
        return self._scope

    def get_scope(self) -> InjectionScope:
        """Scope to register providers on before handlers resolve."""
        return self._scope

    def configure_scope(self, scope: InjectionScope) -> Any:
        """Hook run on the fresh child scope of every forwarded request.

        Override in nested servers to bind per-request providers. May be
        sync or async. The top-level server never calls it.
        """
        return None

    # -- Registration --

    def register(self, method: str | None, path: PathLike, *refs: Any, prefix: bool = False) -> Self:
        """Bind *refs* to *method* and *path*; returns the server for chaining.

        *method* ``None`` matches every method. With *prefix* the layer
        matches *path* and everything below it (how ``use`` mounts).
        Plain functions in *refs* are wrapped with ``from_callback``.
        """
        self._check_not_frozen()
        if not refs:
            msg = f"No handler given for {method or 'USE'} {describe(path)}."
            raise ConfigurationError(msg)

        eager = False
        if isinstance(path, PathConfig):
            eager = path.eager
            path = path.path

        callbacks = tuple(DispatchWrapper(_adapt(ref), self, eager=eager) for ref in refs)
        verb = method.upper() if method is not None else None
        for source in _path_forms(path):
            pattern = source if isinstance(source, re.Pattern) else compile_path(source, prefix=prefix)
            self._router.add(
                Layer(path=describe(source), pattern=pattern, method=verb, prefix=prefix, callbacks=callbacks)
            )
        logger.debug("Registered %s %s -> %s", verb or "USE", describe(path), ", ".join(c.label for c in callbacks))
        return self

    def get(self, path: PathLike, *refs: Any) -> Self:
        return self.register("GET", path, *refs)

    def post(self, path: PathLike, *refs: Any) -> Self:
        return self.register("POST", path, *refs)

    def put(self, path: PathLike, *refs: Any) -> Self:
        return self.register("PUT", path, *refs)

    def patch(self, path: PathLike, *refs: Any) -> Self:
        return self.register("PATCH", path, *refs)

    def delete(self, path: PathLike, *refs: Any) -> Self:
        return self.register("DELETE", path, *refs)

    def head(self, path: PathLike, *refs: Any) -> Self:
        return self.register("HEAD", path, *refs)

    def options(self, path: PathLike, *refs: Any) -> Self:
        return self.register("OPTIONS", path, *refs)

    def all(self, path: PathLike, *refs: Any) -> Self:
        """Exact-path registration matching every method."""
        return self.register(None, path, *refs)

    def use(self, *args: Any) -> Self:
        """Prefix registration for middleware and nested servers.

        ``use(Ref)`` mounts at ``/``; ``use("/api", ApiServer)`` mounts
        below ``/api``, where the nested server sees ``/api/v1`` as ``/v1``.
        """
        if args and _is_path(args[0]):
            return self.register(None, args[0], *args[1:], prefix=True)
        return self.register(None, "/", *args, prefix=True)

    @property
    def routes(self) -> tuple[Layer, ...]:
        return self._router.layers

    # -- Hooks --

    def on_error(self, func: ErrorReporter) -> ErrorReporter:
        """Register a reporter called with every contained handler failure.

        Usage::

            @server.on_error
            async def report(error: HandlerExecutionError, request: Request):
                await sentry.capture(error.original)
        """
        self._check_not_frozen()
        self._error_reporters.append(func)
        return func

    @property
    def error_reporters(self) -> tuple[ErrorReporter, ...]:
        return tuple(self._error_reporters)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Serving --

    @property
    def listening(self) -> bool:
        return self._listen_handle is not None and not self._listen_handle.closed

    async def listen(self, port: int | str | None = None, host: str | None = None) -> HTTPServerHandle:
        """Bind the transport and return once it accepts connections.

        The handle is published into this server's scope under
        ``HTTP_SERVER``. Raises ``BindError`` if the socket cannot be
        bound, ``RuntimeError`` if the server is already listening.
        """
        if self.listening:
            msg = "Server is already listening; close() it before listening again."
            raise RuntimeError(msg)
        self._ensure_frozen()

        host = host or self.config.host
        port_number = _port_number(port if port is not None else self.config.port, host)
        handle = await start_transport(self, host=host, port=port_number, config=self.config)
        self._listen_handle = handle
        self._scope.register_instance(HTTP_SERVER, handle)
        return handle

    async def close(self) -> None:
        """Stop the transport started by ``listen()`` (no-op if not listening)."""
        if self._listen_handle is not None:
            await self._listen_handle.close()

    async def handle(
        self,
        request: Request,
        response: Response,
        next: Next,
        *,
        scope: InjectionScope | None = None,
    ) -> None:
        """Run this server's route table for *request*.

        Called with a fresh child *scope* when the server is nested;
        *next* continues the parent's chain if nothing here matches or
        the last matching callback continues. Without *scope* the
        server's own scope is used.
        """
        self._ensure_frozen()
        if scope is None:
            scope = self._scope
        else:
            await invoke(self.configure_scope, scope)

        parent = scope_var.get(None)
        token = scope_var.set(scope)

        async def out() -> None:
            if parent is None:
                await next()
                return
            restored = scope_var.set(parent)
            try:
                await next()
            finally:
                scope_var.reset(restored)

        try:
            await self._router.handle(request, response, out)
        finally:
            scope_var.reset(token)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return
        if scope["type"] != "http":
            return

        self._ensure_frozen()
        request = Request.from_asgi(scope, receive)
        response = Response()
        token = request_var.set(request)

        async def not_found() -> None:
            respond_not_found(request, response)

        try:
            await self.handle(request, response, not_found)
        except Exception as exc:
            handle_internal_error(exc, request, response, generic_body=self.config.server_error_body)
        finally:
            request_var.reset(token)

        if not response.finished:
            response.end()
        await send_response(response, send, method=request.method)

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the server at startup (before the first HTTP request),
        then runs startup/shutdown hooks and signals completion.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._router.compile()
            self._frozen = True
            logger.debug("%s frozen with %d layers", type(self).__name__, len(self._router.layers))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                f"Cannot register on {type(self).__name__} after it has started serving requests. "
                "Register routes and hooks before the first request or listen()."
            )
            raise RegistrationClosed(msg)

    def __repr__(self) -> str:
        state = "listening" if self.listening else "frozen" if self._frozen else "open"
        return f"<{type(self).__name__} {len(self._router.layers)} layers {state}>"


def _adapt(ref: Any) -> Any:
    """Plain functions become handler classes; everything else resolves as-is."""
    if inspect.isfunction(ref) or inspect.ismethod(ref):
        return from_callback(ref)
    return ref


def _is_path(value: Any) -> bool:
    if isinstance(value, str | re.Pattern | PathConfig):
        return True
    return isinstance(value, tuple | list) and all(isinstance(v, str | re.Pattern) for v in value)


def _path_forms(path: Any) -> tuple[PathPattern, ...]:
    if isinstance(path, str | re.Pattern):
        return (path,)
    if isinstance(path, tuple | list) and path and all(isinstance(p, str | re.Pattern) for p in path):
        return tuple(path)
    msg = f"Invalid route path {path!r}; expected a string, a compiled regex or a sequence of them."
    raise ConfigurationError(msg)


def _port_number(port: int | str, host: str) -> int:
    try:
        number = int(port)
    except (TypeError, ValueError):
        raise BindError(host, 0, f"invalid port {port!r}") from None
    return number
