"""Layer, LayerMatch and PathConfig frozen dataclasses."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from roost.http.request import Request
from roost.http.response import Response

# The "continue to the next callback" signal handed to every callback
type Next = Callable[[], Awaitable[None]]

# A function bound into the route table
type Callback = Callable[[Request, Response, Next], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class PathConfig:
    """Structured path form.

    ``eager=True`` resolves every handler reference of the registration
    once, when it is registered, instead of on the first matching
    request::

        server.get(PathConfig("/health", eager=True), HealthCheck)
    """

    path: str | re.Pattern[str] | tuple[str | re.Pattern[str], ...]
    eager: bool = False


@dataclass(frozen=True, slots=True)
class Layer:
    """One registration in the route table.

    Created at registration time and never mutated. ``method`` is
    ``None`` for ``use``/``all`` layers, which match every method.
    ``prefix`` layers match the path and everything below it.
    """

    path: str
    pattern: re.Pattern[str]
    method: str | None
    prefix: bool
    callbacks: tuple[Callback, ...]

    def match(self, method: str, path: str) -> LayerMatch | None:
        """Match a request method and (mount-relative) path."""
        if self.method is not None and self.method != method:
            if not (self.method == "GET" and method == "HEAD"):
                return None
        found = self.pattern.match(path)
        if found is None:
            return None
        return LayerMatch(
            layer=self,
            path_params={k: v for k, v in found.groupdict().items() if v is not None},
            matched_path=found.group(0) if self.prefix else path,
        )


@dataclass(frozen=True, slots=True)
class LayerMatch:
    """Result of a successful layer match."""

    layer: Layer
    path_params: dict[str, str]
    matched_path: str

    def request_for(self, request: Request) -> Request:
        """The request as the matched layer's callbacks should see it."""
        if self.layer.prefix:
            return request.mounted(self.matched_path, self.path_params)
        return request.matched(self.path_params)


def describe(value: Any) -> str:
    """Readable form of a registered path (string, regex or tuple)."""
    if isinstance(value, re.Pattern):
        return f"re:{value.pattern}"
    if isinstance(value, tuple):
        return ", ".join(describe(v) for v in value)
    return str(value)
