"""ASGI response sending: translates a finished roost Response to ASGI messages."""

from roost._internal.asgi import Send
from roost.http.response import Response


def _body_allowed(status: int, method: str) -> bool:
    """Whether a status code (and request method) permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    if method == "HEAD":
        return False
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Translate a roost Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        lowered = name.lower()
        if lowered in ("content-type", "content-length"):
            continue
        raw_headers.append((lowered.encode("latin-1"), value.encode("latin-1")))

    content_type = response.get_header("content-type")
    if content_type is not None:
        raw_headers[0] = (b"content-type", content_type.encode("latin-1"))

    body = response.body if _body_allowed(response.status, method) else b""
    length = len(response.body) if method == "HEAD" else len(body)
    raw_headers.append((b"content-length", str(length).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
