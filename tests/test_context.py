"""Tests for roost.context — request-scoped ContextVars."""

import pytest

from roost.context import get_request, get_scope, request_var, scope_var
from roost.http.request import Request
from roost.http.response import Response
from roost.injection import InjectionScope
from roost.mount import Server
from roost.testing import TestClient


class TestOutsideRequest:
    def test_get_request_raises(self) -> None:
        with pytest.raises(LookupError):
            get_request()

    def test_get_scope_raises(self) -> None:
        with pytest.raises(LookupError):
            get_scope()

    def test_set_and_reset(self) -> None:
        scope = InjectionScope()
        token = scope_var.set(scope)
        try:
            assert get_scope() is scope
        finally:
            scope_var.reset(token)


class TestDuringRequest:
    async def test_request_and_scope_available(self) -> None:
        seen: dict[str, object] = {}

        class Capture:
            def handle(self, request: Request, response: Response) -> None:
                seen["request"] = get_request()
                seen["scope"] = get_scope()
                response.send("ok")

        server = Server()
        server.get("/capture", Capture)

        async with TestClient(server) as client:
            await client.get("/capture")

        assert isinstance(seen["request"], Request)
        assert seen["request"].original_path == "/capture"  # type: ignore[attr-defined]
        assert seen["scope"] is server.get_scope()

    async def test_reset_after_request(self) -> None:
        server = Server()
        server.get("/", lambda req, res: res.send("ok"))

        async with TestClient(server) as client:
            await client.get("/")

        assert request_var.get(None) is None
        assert scope_var.get(None) is None
