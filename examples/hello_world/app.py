"""Hello World — the simplest roost server.

Demonstrates a handler class, a plain callback, a path parameter and the
"first handler that sends wins" chain rule.

Run:
    python app.py
"""

import asyncio

from roost import Request, Response, Server


class HelloWorld:
    def handle(self, request: Request, response: Response) -> None:
        response.send("Hello world!")


class Greet:
    def handle(self, request: Request, response: Response) -> None:
        response.send(f"Hello, {request.path_params['name']}!")


class NeverReached:
    def handle(self, request: Request, response: Response) -> None:
        response.send("unreachable")


def status(request: Request, response: Response) -> None:
    response.json({"status": "ok"})


server = Server()
server.get("/", HelloWorld, NeverReached)
server.get("/greet/{name}", Greet)
server.get("/status", status)


async def main() -> None:
    handle = await server.listen(8080)
    print(f"Started server on {handle.url}")
    await handle.wait_closed()


if __name__ == "__main__":
    asyncio.run(main())
