"""Roost exception hierarchy.

Shared across Router, Server, dispatch and handlers so every module
raises and catches the same types.
"""

from dataclasses import dataclass
from typing import Any


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when a registration or server configuration is invalid."""


class RegistrationClosed(ConfigurationError, RuntimeError):  # noqa: N818
    """Raised when a route is registered after the server froze.

    A server freezes on its first request or when ``listen()`` is called.
    """


class ResolutionError(RoostError):
    """The injection scope could not produce an instance for a reference.

    Covers a missing provider, an unmet constructor dependency, a
    constructor that raised, and a resolved object that is neither a
    handler nor a server. The original failure is kept as ``__cause__``.
    """

    def __init__(self, ref: Any, detail: str) -> None:
        self.ref = ref
        self.detail = detail
        super().__init__(f"Could not resolve {describe_ref(ref)}: {detail}")


class HandlerExecutionError(RoostError):
    """A handler's ``handle`` raised or its awaitable failed.

    Contained by the dispatch wrapper: the client only ever sees a
    generic 500 body, the original exception goes to the logs.
    """

    def __init__(self, ref: Any, original: BaseException) -> None:
        self.ref = ref
        self.original = original
        super().__init__(f"{describe_ref(ref)} failed: {original!r}")


class BindError(RoostError, OSError):
    """``Server.listen`` could not acquire the transport."""

    def __init__(self, host: str, port: int, detail: str) -> None:
        self.host = host
        self.port = port
        super().__init__(f"Cannot listen on {host}:{port}: {detail}")


class ResponseAlreadySent(RoostError, RuntimeError):  # noqa: N818
    """Raised when writing to a response that was already finalized."""


@dataclass(frozen=True, slots=True)
class HTTPError(RoostError):
    """An error that maps directly to an HTTP status code.

    Handlers may raise it; the dispatch wrapper answers with the status
    and detail instead of treating it as a handler failure.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no layer matched, or a handler signalled a missing resource."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


def describe_ref(ref: Any) -> str:
    """Human-readable name for a handler reference or token."""
    name = getattr(ref, "__qualname__", None) or getattr(ref, "__name__", None)
    return name if isinstance(name, str) else repr(ref)
