"""Immutable HTTP request.

Frozen metadata with async body access. A request forwarded into a
mounted server is a new ``Request`` whose ``path`` is relative to the
mount point; body cache and ``state`` are shared with the original.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import Any

from roost._internal.asgi import Receive, Scope
from roost.http.headers import Headers, QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is relative to the server currently handling the request,
    ``base_path`` is the mount prefix consumed so far and
    ``original_path`` never changes. ``state`` is a plain dict shared by
    every callback in the chain (middleware results, auth info, ...).
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str] = field(default_factory=dict)
    base_path: str = ""
    original_path: str = ""
    http_version: str = "1.1"
    client: tuple[str, int] | None = None
    state: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: body cache, shared across mounted copies
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Full original URL (path + query string)."""
        qs = self.query.raw
        if qs:
            return f"{self.original_path}?{qs.decode('latin-1')}"
        return self.original_path

    # -- Derived requests --

    def matched(self, path_params: dict[str, str]) -> Request:
        """Copy carrying the parameters captured by the matching layer."""
        return replace(self, path_params={**self.path_params, **path_params})

    def mounted(self, prefix: str, path_params: dict[str, str] | None = None) -> Request:
        """Copy as seen from a server mounted at *prefix*.

        ``/api/v1`` mounted at ``/api`` becomes path ``/v1`` with
        ``base_path`` ``/api``.
        """
        prefix = prefix.rstrip("/")
        remainder = self.path[len(prefix) :] or "/"
        if not remainder.startswith("/"):
            remainder = "/" + remainder
        return replace(
            self,
            path=remainder,
            base_path=self.base_path + prefix,
            path_params={**self.path_params, **(path_params or {})},
        )

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first read."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        path = scope["path"] or "/"
        return cls(
            method=scope["method"].upper(),
            path=path,
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            original_path=path,
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
