"""HTTP transport: binds the listening socket and drives uvicorn.

``start_transport`` returns only once uvicorn reports it is accepting
connections. The socket is bound here rather than by uvicorn so that a
bind failure (port in use, permission denied, bad address) surfaces as
``BindError`` to the caller instead of a log line and a process exit.
"""

import asyncio
import logging
import socket
from typing import Any

import uvicorn

from roost.config import ServerConfig
from roost.errors import BindError

logger = logging.getLogger("roost.server")


class HTTPServerHandle:
    """The live transport of a listening server.

    Published into the server's injection scope under ``HTTP_SERVER``,
    so handlers can ask for it as a constructor dependency::

        class Shutdown:
            @inject
            def __init__(self, transport: HTTPServerHandle) -> None:
                self.transport = transport
    """

    __slots__ = ("_server", "_socket", "_task", "host", "port")

    def __init__(
        self,
        server: uvicorn.Server,
        task: asyncio.Task[None],
        sock: socket.socket,
        host: str,
        port: int,
    ) -> None:
        self._server = server
        self._task = task
        self._socket = sock
        self.host = host
        self.port = port

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}"

    @property
    def closed(self) -> bool:
        return self._task.done()

    async def close(self) -> None:
        """Stop accepting connections and wait for uvicorn to shut down."""
        if self._task.done():
            return
        logger.info("Stopping server on %s", self.url)
        self._server.should_exit = True
        try:
            await self._task
        except BindError as exc:
            logger.warning("Server on %s stopped with an error: %s", self.url, exc)
        finally:
            self._socket.close()

    async def wait_closed(self) -> None:
        """Wait until the transport stops (after ``close()`` or a signal)."""
        await asyncio.shield(self._task)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "listening"
        return f"<HTTPServerHandle {self.url} {state}>"


def bind_socket(host: str, port: int) -> socket.socket:
    """Create a bound, non-blocking TCP socket; ``BindError`` on failure."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise BindError(host, port, exc.strerror or str(exc)) from exc
    sock.setblocking(False)
    sock.set_inheritable(True)
    return sock


async def start_transport(app: Any, *, host: str, port: int, config: ServerConfig) -> HTTPServerHandle:
    """Serve *app* with uvicorn on *host*:*port* and wait until it is accepting.

    Raises ``BindError`` if the socket cannot be bound or uvicorn stops
    before it starts accepting (for example a failing startup hook, on
    which uvicorn raises ``SystemExit``).
    """
    sock = bind_socket(host, port)
    bound_port = sock.getsockname()[1]

    uv_config = uvicorn.Config(
        app,
        lifespan="on",
        log_config=None,
        log_level=config.log_level,
        access_log=config.access_log,
        backlog=config.backlog,
    )
    server = uvicorn.Server(uv_config)

    async def serve() -> None:
        # uvicorn exits the process when lifespan startup fails.
        try:
            await server.serve(sockets=[sock])
        except SystemExit as exc:
            raise BindError(host, bound_port, "server stopped during startup") from exc

    task = asyncio.create_task(serve())

    while not server.started:
        if task.done():
            sock.close()
            error = None if task.cancelled() else task.exception()
            if isinstance(error, BindError):
                raise error
            detail = str(error) if error is not None else "server stopped during startup"
            raise BindError(host, bound_port, detail) from error
        await asyncio.sleep(config.startup_poll_interval)

    handle = HTTPServerHandle(server, task, sock, host, bound_port)
    logger.info("Listening on %s", handle.url)
    return handle
