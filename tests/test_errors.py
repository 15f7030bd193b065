"""Tests for error classification and tool error payloads."""

from __future__ import annotations

import asyncio
import json

import httpx
from pydantic import BaseModel, ValidationError

from orshot_mcp.errors import (
    ErrorKind,
    OrshotAPIError,
    RequestResult,
    ToolError,
    classify_exception,
    make_tool_error,
    result_error,
    tool_error,
)


class _Strict(BaseModel):
    n: int


def _validation_error() -> ValidationError:
    try:
        _Strict(n="not a number")
    except ValidationError as exc:
        return exc
    raise AssertionError("expected ValidationError")


class TestClassifyException:
    """Tests for classify_exception."""

    def test_auth_statuses(self):
        assert classify_exception(OrshotAPIError(401, "x")) == ErrorKind.AUTH_ERROR
        assert classify_exception(OrshotAPIError(403, "x")) == ErrorKind.AUTH_ERROR

    def test_not_found(self):
        assert classify_exception(OrshotAPIError(404, "x")) == ErrorKind.NOT_FOUND

    def test_server_error_is_transport(self):
        assert classify_exception(OrshotAPIError(500, "x")) == ErrorKind.TRANSPORT_ERROR

    def test_timeouts(self):
        assert classify_exception(asyncio.TimeoutError()) == ErrorKind.TIMEOUT
        assert classify_exception(httpx.ReadTimeout("slow")) == ErrorKind.TIMEOUT

    def test_network_and_decode_errors(self):
        assert classify_exception(httpx.ConnectError("refused")) == ErrorKind.TRANSPORT_ERROR
        decode = json.JSONDecodeError("Expecting value", "<html>", 0)
        assert classify_exception(decode) == ErrorKind.TRANSPORT_ERROR

    def test_validation_error(self):
        assert classify_exception(_validation_error()) == ErrorKind.VALIDATION_ERROR

    def test_unknown(self):
        assert classify_exception(RuntimeError("?")) == ErrorKind.UNKNOWN


class TestOrshotAPIError:
    def test_str_and_retryable(self):
        exc = OrshotAPIError(404, "Template not found")
        assert str(exc) == "HTTP 404: Template not found"
        assert exc.retryable is False
        assert OrshotAPIError(502, "bad gateway").retryable is True


class TestRequestResult:
    """Tests for RequestResult constructors."""

    def test_success(self):
        result = RequestResult.success({"url": "u"}, status_code=200, attempts=1)
        assert result.ok is True
        assert result.value == {"url": "u"}
        assert result.status_code == 200

    def test_failure_from_api_error(self):
        result = RequestResult.failure(OrshotAPIError(401, "Invalid key"), attempts=1)
        assert result.ok is False
        assert result.kind == ErrorKind.AUTH_ERROR
        assert result.status_code == 401
        assert result.error == "HTTP 401: Invalid key"
        assert result.value is None

    def test_failure_without_status(self):
        result = RequestResult.failure(asyncio.TimeoutError(), attempts=3)
        assert result.kind == ErrorKind.TIMEOUT
        assert result.status_code is None
        assert result.error == "TimeoutError"
        assert result.attempts == 3


class TestToolErrors:
    """Tests for tool error payloads."""

    def test_tool_error_shape(self):
        err = tool_error(ErrorKind.VALIDATION_ERROR, "bad input")
        ToolError.model_validate(err)
        assert err["error"] == "bad input"
        assert err["category"] == "VALIDATION_ERROR"
        assert err["retryable"] is False
        assert err["hint"]

    def test_transient_kinds_are_retryable(self):
        assert tool_error(ErrorKind.TIMEOUT, "x")["retryable"] is True
        assert tool_error(ErrorKind.TRANSPORT_ERROR, "x")["retryable"] is True
        assert tool_error(ErrorKind.AUTH_ERROR, "x")["retryable"] is False

    def test_custom_hint(self):
        assert tool_error(ErrorKind.NOT_FOUND, "x", hint="look here")["hint"] == "look here"

    def test_result_error_appends_upstream_detail(self):
        result = RequestResult.failure(OrshotAPIError(401, "Invalid API key"), attempts=1)
        err = result_error(result, "Failed to generate")
        assert err["error"] == "Failed to generate: HTTP 401: Invalid API key"
        assert err["category"] == "AUTH_ERROR"
        assert "API key" in err["hint"]

    def test_make_tool_error(self):
        err = make_tool_error(RuntimeError("kaboom"))
        assert err["category"] == "UNKNOWN"
        assert err["error"] == "kaboom"

    def test_make_tool_error_empty_message_uses_type_name(self):
        assert make_tool_error(asyncio.TimeoutError())["error"] == "TimeoutError"
