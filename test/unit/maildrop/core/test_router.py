"""Tests for custom router with request injection and response handling."""

import inspect
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel
from robyn import Request, Response
from robyn.robyn import HttpMethod

from maildrop.core.router import (
    HTTP_METHODS,
    Router,
    build_handler_signature,
    empty_response,
    method_name,
    parse_response,
)


class SampleModel(BaseModel):
    """Sample Pydantic model for testing."""

    name: str
    value: int


# -----------------------------------------------------------------------------
# Signature Tests
# -----------------------------------------------------------------------------


class TestBuildHandlerSignature:
    """Tests for the signature exposed to Robyn."""

    def test_request_prepended_when_missing(self) -> None:
        async def handler(global_dependencies) -> None:
            pass

        sig = build_handler_signature(inspect.signature(handler))

        assert list(sig.parameters) == ["request", "global_dependencies"]
        assert sig.parameters["request"].annotation is Request

    def test_request_not_duplicated(self) -> None:
        async def handler(request, global_dependencies) -> None:
            pass

        sig = build_handler_signature(inspect.signature(handler))

        assert list(sig.parameters) == ["request", "global_dependencies"]


@pytest.mark.parametrize(
    ("method", "expected"),
    [(HttpMethod.GET, "get"), (HttpMethod.POST, "post"), (HttpMethod.OPTIONS, "options")],
)
def test_method_name(method, expected: str) -> None:
    assert method_name(method) == expected


@pytest.mark.parametrize(
    "method",
    [HttpMethod.POST, HttpMethod.GET, HttpMethod.HEAD, HttpMethod.TRACE, HttpMethod.CONNECT, HttpMethod.OPTIONS],
)
def test_method_is_routable(method) -> None:
    assert method in HTTP_METHODS


def test_route_registers_every_method() -> None:
    """Verify one handler is registered on the endpoint for each HTTP method."""
    fake_router = SimpleNamespace(**{method_name(m): MagicMock() for m in HTTP_METHODS})

    async def handler(request) -> None:
        pass

    assert Router.route(fake_router, "/inbound")(handler) is handler

    for method in HTTP_METHODS:
        register = getattr(fake_router, method_name(method))
        register.assert_called_once_with("/inbound")
        register.return_value.assert_called_once_with(handler)


def test_route_skips_methods_router_lacks() -> None:
    fake_router = SimpleNamespace(post=MagicMock())

    async def handler(request) -> None:
        pass

    Router.route(fake_router, "/inbound")(handler)

    fake_router.post.assert_called_once_with("/inbound")


# -----------------------------------------------------------------------------
# parse_response Tests
# -----------------------------------------------------------------------------


class TestParseResponse:
    """Tests for parse_response function."""

    def test_response_passthrough(self) -> None:
        original = empty_response(403)
        assert parse_response(original) is original

    def test_none_is_empty_200(self) -> None:
        result = parse_response(None)
        assert result.status_code == 200
        assert result.description == ""

    def test_pydantic_model_to_json(self) -> None:
        result = parse_response(SampleModel(name="test", value=123))

        assert result.status_code == 200
        assert result.headers["content-type"] == "application/json"
        assert "test" in result.description
        assert "123" in result.description

    def test_dict_to_json(self) -> None:
        result = parse_response({"key": "value"})

        assert result.status_code == 200
        assert result.headers["content-type"] == "application/json"
        assert "value" in result.description

    def test_other_to_string(self) -> None:
        result = parse_response("plain text")
        assert result.description == "plain text"

    @pytest.mark.parametrize("input_val", [empty_response(200), SampleModel(name="x", value=1), {"a": 1}, "text", 123])
    def test_always_returns_response(self, input_val) -> None:
        assert isinstance(parse_response(input_val), Response)


@pytest.mark.parametrize("status", [200, 403, 405])
def test_empty_response(status: int) -> None:
    response = empty_response(status)
    assert response.status_code == status
    assert response.description == ""
