"""Request-scoped context via ContextVar.

Provides:
- ``scope_var``: the ``InjectionScope`` active for the current request.
  The top-level server sets its own scope; a nested server sets the
  fresh child scope it was handed for this request.
- ``request_var``: the current top-level ``Request``.

Thread safety:
    ``ContextVar`` is task-local under asyncio, so two requests in
    flight never see each other's scope.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roost.http.request import Request
    from roost.injection import InjectionScope

scope_var: ContextVar[InjectionScope] = ContextVar("roost_scope")
"""The active injection scope. Set by the server before dispatch."""

request_var: ContextVar[Request] = ContextVar("roost_request")
"""The current request. Set by the ASGI entry point before dispatch."""


def get_scope() -> InjectionScope:
    """Return the injection scope active for the current request.

    Raises ``LookupError`` if called outside a request.
    """
    return scope_var.get()


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request.
    """
    return request_var.get()
