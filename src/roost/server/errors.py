"""Error pipeline for roost requests.

Turns contained failures into responses. Every function here leaves the
response finalized (unless something already finalized it) and never
raises, so one failing request cannot disturb the rest of the server.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from roost._internal.invoke import invoke
from roost.errors import HandlerExecutionError, HTTPError, NotFound, ResolutionError
from roost.http.request import Request
from roost.http.response import Response

logger = logging.getLogger("roost.server")

type ErrorReporter = Callable[[HandlerExecutionError, Request], Any]

_TEXT = "text/plain; charset=utf-8"


def respond_resolution_error(
    exc: ResolutionError,
    request: Request,
    response: Response,
    *,
    expose: bool,
    generic_body: str,
) -> None:
    """Answer a request whose handler reference could not be resolved.

    The resolution message goes into the body when *expose* is set, which
    favors developer feedback over information hiding.
    """
    logger.error(
        "Resolution failed for %s %s: %s",
        request.method,
        request.original_path,
        exc,
        exc_info=exc.__cause__ or exc,
    )
    if response.finished:
        return
    response.send(str(exc) if expose else generic_body, status=500, content_type=_TEXT)


async def respond_execution_error(
    exc: HandlerExecutionError,
    request: Request,
    response: Response,
    *,
    generic_body: str,
    reporters: Sequence[ErrorReporter] = (),
) -> None:
    """Log and report a failed handler; the client gets a generic 500."""
    logger.error(
        "500 %s %s: %s",
        request.method,
        request.original_path,
        exc,
        exc_info=exc.original,
    )
    for reporter in reporters:
        try:
            await invoke(reporter, exc, request)
        except Exception:
            logger.exception("Error reporter %r failed", reporter)

    if response.finished:
        logger.warning(
            "%s failed after finalizing the response for %s %s",
            exc.ref,
            request.method,
            request.original_path,
        )
        return
    response.send(generic_body, status=500, content_type=_TEXT)


def respond_http_error(exc: HTTPError, request: Request, response: Response) -> None:
    """Answer with the status and detail carried by an ``HTTPError``."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.original_path, exc.detail)
    if response.finished:
        return
    for name, value in exc.headers:
        response.set_header(name, value)
    response.send(exc.detail or f"Error {exc.status}", status=exc.status, content_type=_TEXT)


def respond_not_found(request: Request, response: Response) -> None:
    """Fallback once the chain falls off the end of the top-level table."""
    respond_http_error(
        NotFound(f"No route matches {request.method} {request.original_path!r}"),
        request,
        response,
    )


def handle_internal_error(exc: Exception, request: Request, response: Response, *, generic_body: str) -> None:
    """Last-resort handler for an exception that escaped the chain."""
    logger.error("500 %s %s", request.method, request.original_path, exc_info=exc)
    if not response.finished:
        response.send(generic_body, status=500, content_type=_TEXT)
