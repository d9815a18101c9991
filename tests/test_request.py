"""Tests for roost.http.request — Request construction and mounting."""

import dataclasses

import pytest

from roost.http.request import Request


def _scope(path: str = "/", query: bytes = b"", headers: list | None = None) -> dict:
    return {
        "type": "http",
        "method": "get",
        "path": path,
        "headers": headers or [],
        "query_string": query,
        "http_version": "1.1",
        "client": ("10.0.0.1", 5000),
    }


def _receive_body(*chunks: bytes):
    messages = [{"type": "http.request", "body": c, "more_body": i < len(chunks) - 1} for i, c in enumerate(chunks)]

    async def receive() -> dict:
        return messages.pop(0)

    return receive


class TestFromAsgi:
    def test_basic_fields(self) -> None:
        request = Request.from_asgi(_scope("/users", b"a=1", [(b"x-token", b"t")]), _receive_body(b""))
        assert request.method == "GET"
        assert request.path == "/users"
        assert request.original_path == "/users"
        assert request.base_path == ""
        assert request.query["a"] == "1"
        assert request.headers["X-Token"] == "t"
        assert request.client == ("10.0.0.1", 5000)

    def test_url_includes_query(self) -> None:
        request = Request.from_asgi(_scope("/search", b"q=bird"), _receive_body(b""))
        assert request.url == "/search?q=bird"

    def test_frozen(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b""))
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.path = "/other"  # type: ignore[misc]


class TestMounted:
    def test_strips_prefix(self) -> None:
        request = Request.from_asgi(_scope("/api/v1"), _receive_body(b""))
        mounted = request.mounted("/api")
        assert mounted.path == "/v1"
        assert mounted.base_path == "/api"
        assert mounted.original_path == "/api/v1"

    def test_exact_prefix_becomes_root(self) -> None:
        request = Request.from_asgi(_scope("/api"), _receive_body(b""))
        assert request.mounted("/api").path == "/"

    def test_root_mount_keeps_path(self) -> None:
        request = Request.from_asgi(_scope("/api/v1"), _receive_body(b""))
        mounted = request.mounted("")
        assert mounted.path == "/api/v1"
        assert mounted.base_path == ""

    def test_nested_mounts_accumulate_base_path(self) -> None:
        request = Request.from_asgi(_scope("/a/b/c"), _receive_body(b""))
        mounted = request.mounted("/a").mounted("/b")
        assert mounted.path == "/c"
        assert mounted.base_path == "/a/b"

    def test_state_shared(self) -> None:
        request = Request.from_asgi(_scope("/api/v1"), _receive_body(b""))
        request.mounted("/api").state["user"] = "ada"
        assert request.state["user"] == "ada"

    def test_params_merged(self) -> None:
        request = Request.from_asgi(_scope("/orgs/7/repos"), _receive_body(b""))
        mounted = request.mounted("/orgs/7", {"org": "7"}).matched({"repo": "x"})
        assert mounted.path_params == {"org": "7", "repo": "x"}


class TestBody:
    async def test_body_joined_and_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b"ab", b"cd"))
        assert await request.body() == b"abcd"
        assert await request.body() == b"abcd"

    async def test_json(self) -> None:
        request = Request.from_asgi(_scope(), _receive_body(b'{"a": 1}'))
        assert await request.json() == {"a": 1}

    async def test_body_cache_shared_with_mounted_copy(self) -> None:
        request = Request.from_asgi(_scope("/api/x"), _receive_body(b"payload"))
        assert await request.mounted("/api").text() == "payload"
        assert await request.text() == "payload"
