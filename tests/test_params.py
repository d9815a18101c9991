"""Tests for roost.routing.params — path compilation and converters."""

import pytest

from roost.errors import ConfigurationError
from roost.routing.params import compile_path, convert_param


class TestCompileExact:
    def test_static(self) -> None:
        pattern = compile_path("/users", prefix=False)
        assert pattern.match("/users")
        assert pattern.match("/users/")
        assert not pattern.match("/users/1")

    def test_root(self) -> None:
        pattern = compile_path("/", prefix=False)
        assert pattern.match("/")
        assert not pattern.match("/a")

    def test_param(self) -> None:
        found = compile_path("/users/{id}", prefix=False).match("/users/42")
        assert found is not None
        assert found.group("id") == "42"

    def test_int_param_rejects_text(self) -> None:
        assert not compile_path("/users/{id:int}", prefix=False).match("/users/abc")

    def test_path_param(self) -> None:
        found = compile_path("/files/{rest:path}", prefix=False).match("/files/a/b.txt")
        assert found is not None
        assert found.group("rest") == "a/b.txt"

    def test_special_characters_escaped(self) -> None:
        pattern = compile_path("/a.b", prefix=False)
        assert pattern.match("/a.b")
        assert not pattern.match("/axb")


class TestCompilePrefix:
    def test_segment_boundary(self) -> None:
        pattern = compile_path("/api", prefix=True)
        assert pattern.match("/api")
        assert pattern.match("/api/v1")
        assert not pattern.match("/apix")

    def test_root_prefix_matches_everything(self) -> None:
        pattern = compile_path("/", prefix=True)
        found = pattern.match("/anything/below")
        assert found is not None
        assert found.group(0) == ""

    def test_matched_prefix(self) -> None:
        found = compile_path("/orgs/{org}", prefix=True).match("/orgs/7/repos")
        assert found is not None
        assert found.group(0) == "/orgs/7"
        assert found.group("org") == "7"


class TestInvalidPaths:
    def test_angle_bracket_syntax(self) -> None:
        with pytest.raises(ConfigurationError, match="<param>"):
            compile_path("/share/<slug>", prefix=False)

    def test_malformed_braces(self) -> None:
        with pytest.raises(ConfigurationError, match="Malformed"):
            compile_path("/a/{b", prefix=False)

    def test_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown converter"):
            compile_path("/a/{b:uuid}", prefix=False)


class TestConvertParam:
    def test_int(self) -> None:
        assert convert_param("42", "int") == 42

    def test_float(self) -> None:
        assert convert_param("1.5", "float") == 1.5

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            convert_param("x", "int")
