"""Nested Servers — whole route tables mounted below a prefix.

Demonstrates:
- ``use(path, ServerSubclass)`` nesting, with the prefix stripped
- a nested server resolved through its parent's scope
- ``configure_scope`` binding a provider on the per-request child scope,
  invisible to the parent and to sibling servers

Run:
    python app.py
    curl localhost:8080/api/v1
"""

import asyncio
from dataclasses import dataclass

from injector import inject

from roost import InjectionScope, Request, Response, Server, from_callback, get_scope


@dataclass(frozen=True)
class ApiVersion:
    name: str


class VersionInfo:
    def handle(self, request: Request, response: Response) -> None:
        version = get_scope().resolve(ApiVersion)
        response.json({"version": version.name, "mounted_at": request.base_path})


class ApiServer(Server):
    @inject
    def __init__(self, scope: InjectionScope) -> None:
        super().__init__(scope)
        self.get("/v1", from_callback(lambda req, res: res.send("You found the API!")))
        self.get("/version", VersionInfo)

    def configure_scope(self, scope: InjectionScope) -> None:
        scope.register_instance(ApiVersion, ApiVersion("v1"))


class WebsiteServer(Server):
    @inject
    def __init__(self, scope: InjectionScope) -> None:
        super().__init__(scope)
        self.get("/", from_callback(lambda req, res: res.send("You found the website!")))


def leaked_version(request: Request, response: Response) -> None:
    """Answers whether the API's per-request binding is visible out here."""
    scope = get_scope()
    response.json({"depth": scope.depth(), "has_api_version": _has_binding(scope)})


def _has_binding(scope: InjectionScope) -> bool:
    return scope.injector.binder.has_explicit_binding_for(ApiVersion)


server = Server()
server.use("/", WebsiteServer)
server.use("/api", ApiServer)
server.get("/scope", leaked_version)


async def main() -> None:
    handle = await server.listen(8080)
    print(f"Started server on {handle.url}")
    await handle.wait_closed()


if __name__ == "__main__":
    asyncio.run(main())
