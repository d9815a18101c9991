"""Tests for roost.http.headers — Headers and QueryParams."""

from roost.http.headers import Headers, QueryParams


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"Content-Type", b"text/plain"),))
        assert headers["content-type"] == "text/plain"
        assert headers["CONTENT-TYPE"] == "text/plain"
        assert "Content-Type" in headers

    def test_multiple_values(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("ACCEPT") == ["a", "b"]
        assert len(headers) == 1

    def test_missing(self) -> None:
        headers = Headers()
        assert headers.get("authorization") is None
        assert headers.get_list("authorization") == []

    def test_raw_preserved(self) -> None:
        raw = ((b"x-a", b"1"),)
        assert Headers(raw).raw == raw


class TestQueryParams:
    def test_parse(self) -> None:
        query = QueryParams(b"page=2&tag=a&tag=b")
        assert query["page"] == "2"
        assert query.get_list("tag") == ["a", "b"]

    def test_blank_values_kept(self) -> None:
        query = QueryParams(b"flag=&x=1")
        assert query["flag"] == ""

    def test_case_sensitive(self) -> None:
        query = QueryParams(b"Page=1")
        assert "page" not in query
        assert "Page" in query

    def test_empty(self) -> None:
        query = QueryParams()
        assert len(query) == 0
        assert query.raw == b""
