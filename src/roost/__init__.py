"""Roost: request routing with constructor-injected handlers and middleware.

Handlers are classes resolved through an injection scope, registered
with the familiar ``(method, path, handlers...)`` calls. Nested servers
mount whole route tables below a prefix, each request getting its own
child scope.

Basic usage::

    from injector import inject
    from roost import Server, Request, Response

    class Hello:
        def handle(self, request: Request, response: Response) -> None:
            response.send("Hello world!")

    server = Server()
    server.get("/", Hello)
    await server.listen(3000)
"""

__version__ = "0.1.0"
__all__ = [
    "HTTP_SERVER",
    "BindError",
    "ConfigurationError",
    "Flow",
    "HTTPError",
    "HTTPServerHandle",
    "Handler",
    "HandlerExecutionError",
    "InjectionScope",
    "NotFound",
    "PathConfig",
    "RegistrationClosed",
    "Request",
    "ResolutionError",
    "Response",
    "ResponseAlreadySent",
    "RoostError",
    "Server",
    "ServerConfig",
    "from_callback",
    "get_request",
    "get_scope",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "HTTP_SERVER": "roost.mount",
    "BindError": "roost.errors",
    "ConfigurationError": "roost.errors",
    "Flow": "roost.handler",
    "HTTPError": "roost.errors",
    "HTTPServerHandle": "roost.server.transport",
    "Handler": "roost.handler",
    "HandlerExecutionError": "roost.errors",
    "InjectionScope": "roost.injection",
    "NotFound": "roost.errors",
    "PathConfig": "roost.routing.route",
    "RegistrationClosed": "roost.errors",
    "Request": "roost.http.request",
    "ResolutionError": "roost.errors",
    "Response": "roost.http.response",
    "ResponseAlreadySent": "roost.errors",
    "RoostError": "roost.errors",
    "Server": "roost.mount",
    "ServerConfig": "roost.config",
    "from_callback": "roost.handler",
    "get_request": "roost.context",
    "get_scope": "roost.context",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module 'roost' has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
