"""Dependency Injection — middleware and handlers built by the scope.

Demonstrates:
- binding an interface to an implementation on the server's scope
- middleware that inspects a header and either answers 401 or lets the
  chain continue
- a handler whose constructor asks for a dependency

Run:
    python app.py
    curl -H "Authorization: Bearer hello" localhost:8080/
"""

import asyncio
import re
from abc import ABC, abstractmethod

from injector import inject

from roost import Request, Response, Server


class Database(ABC):
    """Storage behaviors; handlers only know this interface."""

    @abstractmethod
    async def check_user_auth(self, token: str) -> bool: ...

    @abstractmethod
    async def user_name(self, token: str) -> str: ...


class MemoryDatabase(Database):
    """Accepts a single hard-coded token. Illustration only."""

    _users = {"hello": "Ada"}

    async def check_user_auth(self, token: str) -> bool:
        return token in self._users

    async def user_name(self, token: str) -> str:
        return self._users[token]


_BEARER = re.compile(r"^Bearer\s+", re.IGNORECASE)


def bearer_token(request: Request) -> str:
    return _BEARER.sub("", request.headers.get("authorization", ""))


class RequireAccessToken:
    """Answers 401 unless the request carries a known access token."""

    @inject
    def __init__(self, database: Database) -> None:
        self.database = database

    async def handle(self, request: Request, response: Response) -> None:
        token = bearer_token(request)
        if not token:
            response.send("Unauthorized. No access token provided.", status=401)
            return
        if not await self.database.check_user_auth(token):
            response.send("Unauthorized. Invalid access token.", status=401)


class HelloUser:
    @inject
    def __init__(self, database: Database) -> None:
        self.database = database

    async def handle(self, request: Request, response: Response) -> None:
        name = await self.database.user_name(bearer_token(request))
        response.send(f"Hello {name}!")


server = Server()
server.get_scope().register(Database, MemoryDatabase, singleton=True)
server.get("/", RequireAccessToken, HelloUser)


async def main() -> None:
    handle = await server.listen(8080)
    print(f"Started server on {handle.url}")
    await handle.wait_closed()


if __name__ == "__main__":
    asyncio.run(main())
