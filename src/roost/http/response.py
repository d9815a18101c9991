"""Mutable HTTP response writer.

One ``Response`` travels through the whole callback chain of a request.
Callbacks set status and headers, then finalize it with ``send()``,
``json()``, ``redirect()`` or ``end()``. Finalizing is synchronous: the
bytes are handed to the transport after the chain returns, but
``finished`` flips the moment a callback sends, so the dispatch wrapper
can tell whether a handler answered without racing the event loop.
"""

import json as json_module
from collections.abc import Callable
from typing import Any, Self

from roost.errors import ResponseAlreadySent

_DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"


class Response:
    """A response under construction.

    Usage::

        response.status = 201
        response.set_header("X-Request-Id", rid).send("created")
    """

    __slots__ = ("_body", "_content_type", "_finish_callbacks", "_finished", "headers", "status")

    def __init__(self) -> None:
        self.status: int = 200
        self.headers: list[tuple[str, str]] = []
        self._content_type: str | None = None
        self._body: bytes = b""
        self._finished = False
        self._finish_callbacks: list[Callable[[Response], Any]] = []

    # -- State --

    @property
    def finished(self) -> bool:
        """True once a callback finalized the response."""
        return self._finished

    @property
    def headers_sent(self) -> bool:
        """Alias of ``finished``: headers are committed once the response is final."""
        return self._finished

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def text(self) -> str:
        return self._body.decode("utf-8")

    @property
    def content_type(self) -> str:
        return self._content_type or _DEFAULT_CONTENT_TYPE

    # -- Headers --

    def set_status(self, status: int) -> Self:
        """Set the status code; chainable."""
        self._check_open()
        self.status = status
        return self

    def set_header(self, name: str, value: str) -> Self:
        """Replace every header called *name* with a single value."""
        self._check_open()
        lowered = name.lower()
        self.headers = [(n, v) for n, v in self.headers if n.lower() != lowered]
        self.headers.append((name, value))
        return self

    def add_header(self, name: str, value: str) -> Self:
        """Append a header, keeping existing ones with the same name."""
        self._check_open()
        self.headers.append((name, value))
        return self

    def get_header(self, name: str) -> str | None:
        lowered = name.lower()
        for n, v in self.headers:
            if n.lower() == lowered:
                return v
        return None

    # -- Finalizers --

    def send(
        self,
        body: str | bytes = b"",
        *,
        status: int | None = None,
        content_type: str | None = None,
    ) -> None:
        """Set the body and finalize the response.

        Raises ``ResponseAlreadySent`` if the response was already final.
        """
        self._check_open()
        if status is not None:
            self.status = status
        if content_type is not None:
            self._content_type = content_type
        self._body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        self._finish()

    def json(self, obj: Any, *, status: int | None = None) -> None:
        """Serialize *obj* as JSON and finalize."""
        self.send(
            json_module.dumps(obj),
            status=status,
            content_type="application/json",
        )

    def redirect(self, url: str, status: int = 302) -> None:
        """Finalize as a redirect to *url*."""
        self.set_header("Location", url)
        self.send(b"", status=status)

    def end(self) -> None:
        """Finalize with whatever body is set (empty by default)."""
        self._check_open()
        self._finish()

    def on_finish(self, callback: Callable[["Response"], Any]) -> None:
        """Run *callback* (synchronously) when the response is finalized.

        Runs immediately if the response is already final.
        """
        if self._finished:
            callback(self)
            return
        self._finish_callbacks.append(callback)

    # -- Internal --

    def _check_open(self) -> None:
        if self._finished:
            msg = "Response already sent; headers and body can no longer change."
            raise ResponseAlreadySent(msg)

    def _finish(self) -> None:
        self._finished = True
        callbacks, self._finish_callbacks = self._finish_callbacks, []
        for callback in callbacks:
            callback(self)

    def __repr__(self) -> str:
        state = "finished" if self._finished else "open"
        return f"<Response {self.status} {state}>"
