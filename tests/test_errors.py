"""Tests for roost.errors — exception hierarchy and error messages."""

import dataclasses

import pytest

from roost.errors import (
    BindError,
    ConfigurationError,
    HandlerExecutionError,
    HTTPError,
    NotFound,
    RegistrationClosed,
    ResolutionError,
    ResponseAlreadySent,
    RoostError,
    describe_ref,
)


class Widget:
    pass


class TestHierarchy:
    def test_configuration_error_is_roost_error(self) -> None:
        assert issubclass(ConfigurationError, RoostError)

    def test_registration_closed_is_runtime_error(self) -> None:
        assert issubclass(RegistrationClosed, ConfigurationError)
        assert issubclass(RegistrationClosed, RuntimeError)

    def test_bind_error_is_os_error(self) -> None:
        assert issubclass(BindError, OSError)
        assert issubclass(BindError, RoostError)

    def test_response_already_sent_is_runtime_error(self) -> None:
        assert issubclass(ResponseAlreadySent, RuntimeError)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)


class TestResolutionError:
    def test_message_names_reference(self) -> None:
        err = ResolutionError(Widget, "no provider")
        assert str(err) == "Could not resolve Widget: no provider"
        assert err.ref is Widget
        assert err.detail == "no provider"

    def test_nested_class_uses_qualname(self) -> None:
        class Inner:
            pass

        assert "TestResolutionError" in str(ResolutionError(Inner, "x"))


class TestHandlerExecutionError:
    def test_keeps_original(self) -> None:
        original = ValueError("boom")
        err = HandlerExecutionError(Widget, original)
        assert err.original is original
        assert err.ref is Widget
        assert "Widget failed" in str(err)
        assert "boom" in str(err)


class TestBindError:
    def test_message(self) -> None:
        err = BindError("127.0.0.1", 80, "Permission denied")
        assert str(err) == "Cannot listen on 127.0.0.1:80: Permission denied"
        assert err.host == "127.0.0.1"
        assert err.port == 80


class TestHTTPError:
    def test_status_and_detail(self) -> None:
        err = HTTPError(status=400, detail="Bad request body")
        assert err.status == 400
        assert err.detail == "Bad request body"

    def test_str_with_detail(self) -> None:
        assert str(HTTPError(status=400, detail="Bad request body")) == "400: Bad request body"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=503)) == "503"

    def test_frozen(self) -> None:
        err = HTTPError(status=400)
        with pytest.raises(dataclasses.FrozenInstanceError):
            err.status = 500  # type: ignore[misc]

    def test_not_found_defaults(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"


class TestDescribeRef:
    def test_class(self) -> None:
        assert describe_ref(Widget) == "Widget"

    def test_function(self) -> None:
        def handler() -> None:
            pass

        assert describe_ref(handler).endswith("handler")

    def test_token_without_name(self) -> None:
        token = object()
        assert describe_ref(token) == repr(token)
