"""Resolved units — what a handler reference turns into.

Resolution produces a tagged value instead of a bare instance, so the
dispatch wrapper branches with an exhaustive ``match``::

    match unit:
        case Mount(server=server): ...
        case Leaf(handler=handler): ...
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from roost._internal.invoke import invoke
from roost.errors import ResolutionError
from roost.handler import Handler

if TYPE_CHECKING:
    from roost.injection import InjectionScope
    from roost.mount import Server


@dataclass(frozen=True, slots=True)
class Leaf:
    """A handler: the chain continues or stops after it runs."""

    handler: Handler


@dataclass(frozen=True, slots=True)
class Mount:
    """A nested server: the request is forwarded into its own table."""

    server: Server


type Unit = Leaf | Mount


def classify(ref: Any, instance: Any) -> Unit:
    """Tag a resolved *instance*; raises ``ResolutionError`` for anything else."""
    from roost.mount import Server

    if isinstance(instance, Server):
        return Mount(instance)
    if isinstance(instance, Handler) and callable(instance.handle):
        return Leaf(instance)
    detail = f"{type(instance).__name__} is neither a Server nor has a handle(request, response) method"
    raise ResolutionError(ref, detail)


def prebuilt_unit(ref: Any) -> Unit | None:
    """Tag *ref* directly when it is already an instance (no resolution needed)."""
    if isinstance(ref, type):
        return None
    from roost.mount import Server

    if isinstance(ref, Server):
        return Mount(ref)
    if isinstance(ref, Handler):
        return Leaf(ref)
    return None


def resolve_unit(scope: InjectionScope, ref: Any) -> Unit:
    """Resolve *ref* synchronously (used for eager registrations)."""
    instance = scope.resolve(ref)
    if _is_awaitable(instance):
        msg = "resolution returned an awaitable; eager registration needs a synchronous scope"
        raise ResolutionError(ref, msg)
    return classify(ref, instance)


async def aresolve_unit(scope: InjectionScope, ref: Any) -> Unit:
    """Resolve *ref*, awaiting the scope if its resolution is asynchronous."""
    try:
        instance = await invoke(scope.resolve, ref)
    except ResolutionError:
        raise
    except Exception as exc:
        raise ResolutionError(ref, str(exc) or type(exc).__name__) from exc
    return classify(ref, instance)


def _is_awaitable(value: Any) -> bool:
    if inspect.isawaitable(value):
        if inspect.iscoroutine(value):
            value.close()
        return True
    return False
