"""Injection scopes — the provider registry handlers are resolved from.

``InjectionScope`` is a thin adapter over an ``injector.Injector``. The
container does the real work (constructor discovery through ``@inject``,
auto-binding of concrete classes, singleton caching); the adapter only
fixes the small contract the dispatch engine needs:

- ``register`` a class, factory or ready-made instance under a key,
- ``resolve`` a key, failing with ``ResolutionError``,
- ``create_child`` a scope that inherits every registration of its
  parent and can override any of them without touching the parent.

Every scope registers itself under ``InjectionScope``, so a handler can
ask for "the scope I was resolved from" as a constructor dependency::

    class Login:
        @inject
        def __init__(self, scope: InjectionScope) -> None:
            self.scope = scope
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Self, TypeVar, overload

from injector import (
    CallableProvider,
    ClassProvider,
    Injector,
    InstanceProvider,
    singleton as singleton_scope,
)

from roost.errors import ResolutionError

T = TypeVar("T")

_MISSING: Any = object()


class InjectionScope:
    """A node in the injection scope tree.

    Usage::

        scope = InjectionScope()
        scope.register(Database, PostgresDatabase, singleton=True)
        scope.register(Settings, instance=Settings(debug=True))

        request_scope = scope.create_child()
        request_scope.register(Settings, instance=Settings(debug=False))
        request_scope.resolve(Settings).debug  # False
        scope.resolve(Settings).debug          # True
    """

    __slots__ = ("_injector", "_parent")

    def __init__(self, injector: Injector | None = None, *, parent: InjectionScope | None = None) -> None:
        self._injector = injector if injector is not None else Injector()
        self._parent = parent
        self._injector.binder.bind(InjectionScope, to=InstanceProvider(self))

    @property
    def parent(self) -> InjectionScope | None:
        return self._parent

    @property
    def injector(self) -> Injector:
        """The underlying ``injector.Injector`` (for modules and advanced bindings)."""
        return self._injector

    # -- Registration --

    def register(
        self,
        key: Any,
        to: type[Any] | None = None,
        *,
        factory: Callable[..., Any] | None = None,
        instance: Any = _MISSING,
        singleton: bool = False,
    ) -> Self:
        """Bind *key* in this scope; returns the scope for chaining.

        Exactly one of *to* (a class), *factory* (a callable, whose own
        ``@inject`` parameters are injected) or *instance* may be given.
        With none of them, *key* is bound to itself as a class.
        """
        given = [to is not None, factory is not None, instance is not _MISSING]
        if sum(given) > 1:
            msg = "Pass only one of 'to', 'factory' or 'instance'."
            raise TypeError(msg)

        if instance is not _MISSING:
            self._injector.binder.bind(key, to=InstanceProvider(instance))
            return self

        if factory is not None:
            provider: Any = CallableProvider(factory)
        else:
            provider = ClassProvider(to if to is not None else key)
        self._injector.binder.bind(key, to=provider, scope=singleton_scope if singleton else None)
        return self

    def register_instance(self, key: Any, value: Any) -> Self:
        """Shorthand for ``register(key, instance=value)``."""
        return self.register(key, instance=value)

    # -- Resolution --

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: Any) -> Any: ...

    def resolve(self, key: Any) -> Any:
        """Produce an instance for *key*.

        Raises ``ResolutionError`` (with the container's exception as
        ``__cause__``) for a missing provider, an unmet constructor
        dependency, or a constructor that raised.
        """
        try:
            return self._injector.get(key)
        except Exception as exc:
            raise ResolutionError(key, str(exc) or type(exc).__name__) from exc

    # -- Tree --

    def create_child(self) -> InjectionScope:
        """A new scope that inherits this one and can override it independently."""
        return InjectionScope(self._injector.create_child_injector(), parent=self)

    def depth(self) -> int:
        """Distance from the root scope (the root is 0)."""
        node, depth = self._parent, 0
        while node is not None:
            node, depth = node._parent, depth + 1
        return depth

    def __repr__(self) -> str:
        return f"<InjectionScope depth={self.depth()}>"


