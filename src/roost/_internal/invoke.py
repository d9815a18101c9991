"""Invoke helpers — call sync or async callables uniformly.

Handlers, callbacks, lifecycle hooks and scope resolution can each be
plain functions or coroutines. Anything that calls user code goes
through ``invoke`` so the sync/async check lives in one place.

Usage::

    from roost._internal.invoke import invoke

    flow = await invoke(handler.handle, request, response)
"""

import inspect
from collections.abc import Callable
from typing import Any


async def invoke(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def positional_arity(func: Callable[..., Any]) -> int:
    """Number of positional parameters *func* accepts (``*args`` counts as many)."""
    params = inspect.signature(func).parameters.values()
    count = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return 1_000
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count
