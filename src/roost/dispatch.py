"""Dispatch wrapper — the callback bound into the route table per handler reference.

One ``DispatchWrapper`` exists per handler reference of a registration.
For every matching request it:

1. resolves the reference through the active injection scope, once,
   and caches the resulting ``Unit``;
2. forwards into a nested server (``Mount``) with a fresh child scope,
   or runs the handler (``Leaf``);
3. for a leaf, decides whether the chain continues.

Continuation rules for a leaf, in order:

- ``handle`` returned ``Flow.CONTINUE`` or ``Flow.STOP``: that wins.
- ``handle`` returned ``None``: continue unless the response is finished.
- ``handle`` raised: the error is contained and the chain stops.

``Response.send()`` finalizes synchronously, so the "is it finished"
check does not depend on how long a write takes. One scheduler
checkpoint still runs before the check so that work the handler
scheduled without awaiting gets a turn.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, assert_never

import anyio
import anyio.lowlevel

from roost._internal.invoke import invoke
from roost.context import scope_var
from roost.errors import HandlerExecutionError, HTTPError, ResolutionError, describe_ref
from roost.handler import Flow
from roost.server.errors import respond_execution_error, respond_http_error, respond_resolution_error
from roost.units import Leaf, Mount, Unit, aresolve_unit, prebuilt_unit, resolve_unit

if TYPE_CHECKING:
    from roost.http.request import Request
    from roost.http.response import Response
    from roost.injection import InjectionScope
    from roost.mount import Server
    from roost.routing.route import Next

logger = logging.getLogger("roost.dispatch")


class DispatchWrapper:
    """Route-table callback owning resolution, invocation and continuation.

    Created by ``Server.register``; *owner* is the server the
    registration belongs to. With ``eager=True`` the reference is
    resolved right away through the owner's scope, so a provider
    registered later cannot change the cached instance.
    """

    __slots__ = ("_lock", "_owner", "_ref", "_unit")

    def __init__(self, ref: Any, owner: Server, *, eager: bool = False) -> None:
        self._ref = ref
        self._owner = owner
        self._lock: anyio.Lock | None = None
        self._unit: Unit | None = prebuilt_unit(ref)
        if eager and self._unit is None:
            self._unit = resolve_unit(owner.scope, ref)
            logger.debug("Eagerly resolved %s -> %r", self.label, self._unit)

    @property
    def ref(self) -> Any:
        return self._ref

    @property
    def unit(self) -> Unit | None:
        """The cached unit, or ``None`` before the first resolution."""
        return self._unit

    @property
    def label(self) -> str:
        return describe_ref(self._ref)

    async def __call__(self, request: Request, response: Response, next: Next) -> None:
        config = self._owner.config
        scope = scope_var.get(self._owner.scope)

        try:
            unit = await self._resolve(scope)
        except ResolutionError as exc:
            respond_resolution_error(
                exc,
                request,
                response,
                expose=config.expose_resolution_errors,
                generic_body=config.server_error_body,
            )
            return

        match unit:
            case Mount(server=server):
                await server.handle(request, response, next, scope=scope.create_child())
            case Leaf(handler=handler):
                await self._run_leaf(handler, request, response, next)
            case _:
                assert_never(unit)

    async def _resolve(self, scope: InjectionScope) -> Unit:
        if self._unit is not None:
            return self._unit

        if not self._owner.config.single_flight:
            unit = await aresolve_unit(scope, self._ref)
            # Concurrent first requests may each resolve; the first result is kept.
            if self._unit is None:
                self._unit = unit
            return self._unit

        if self._lock is None:
            self._lock = anyio.Lock()
        async with self._lock:
            if self._unit is None:
                self._unit = await aresolve_unit(scope, self._ref)
                logger.debug("Resolved %s -> %r", self.label, self._unit)
        return self._unit

    async def _run_leaf(self, handler: Any, request: Request, response: Response, next: Next) -> None:
        try:
            flow = await invoke(handler.handle, request, response)
        except HTTPError as exc:
            respond_http_error(exc, request, response)
            return
        except Exception as exc:
            await respond_execution_error(
                HandlerExecutionError(self._ref, exc),
                request,
                response,
                generic_body=self._owner.config.server_error_body,
                reporters=self._owner.error_reporters,
            )
            return

        await anyio.lowlevel.checkpoint()

        if flow is Flow.CONTINUE or (flow is None and not response.finished):
            await next()
        elif flow is not Flow.STOP and flow is not None:
            logger.warning(
                "%s.handle returned %r; expected Flow or None, stopping the chain",
                self.label,
                flow,
            )

    def __repr__(self) -> str:
        state = "resolved" if self._unit is not None else "pending"
        return f"<DispatchWrapper {self.label} {state}>"
