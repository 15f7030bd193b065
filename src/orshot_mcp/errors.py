"""Structured error handling — error kinds, request results, and tool error model."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

T = TypeVar("T")

NON_RETRYABLE_STATUS = frozenset({401, 403, 404})


class ErrorKind(str, Enum):
    """Categories of errors for diagnostics."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    AUTH_ERROR = "AUTH_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


class OrshotAPIError(Exception):
    """Raised when the Orshot API answers a single attempt with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")

    @property
    def retryable(self) -> bool:
        return self.status_code not in NON_RETRYABLE_STATUS


@dataclass
class RequestResult(Generic[T]):
    """Outcome of one wrapped API call, after retries.

    Exactly one of ``value`` / ``error`` is meaningful: ``ok`` tells which.
    """

    value: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None
    status_code: int | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is None

    @classmethod
    def success(cls, value: T, *, status_code: int, attempts: int) -> RequestResult[T]:
        return cls(value=value, status_code=status_code, attempts=attempts)

    @classmethod
    def failure(cls, exc: Exception, *, attempts: int) -> RequestResult[T]:
        return cls(
            error=str(exc) or type(exc).__name__,
            kind=classify_exception(exc),
            status_code=getattr(exc, "status_code", None),
            attempts=attempts,
        )


def classify_exception(exc: Exception) -> ErrorKind:
    """Map an exception raised during a request to an ErrorKind."""
    if isinstance(exc, OrshotAPIError):
        if exc.status_code in (401, 403):
            return ErrorKind.AUTH_ERROR
        if exc.status_code == 404:
            return ErrorKind.NOT_FOUND
        return ErrorKind.TRANSPORT_ERROR
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, (httpx.HTTPError, json.JSONDecodeError)):
        return ErrorKind.TRANSPORT_ERROR
    if isinstance(exc, ValidationError):
        return ErrorKind.VALIDATION_ERROR
    return ErrorKind.UNKNOWN


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False


_HINTS: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION_ERROR: "Fix the input and call the tool again",
    ErrorKind.NOT_FOUND: "Template not found — list templates with get_library_templates or get_studio_templates",
    ErrorKind.AUTH_ERROR: "Check your API key — it may be invalid, expired, or lack permission",
    ErrorKind.TRANSPORT_ERROR: "Please check your API key and template ID, or try again later",
    ErrorKind.TIMEOUT: "Request timed out — try again or raise ORSHOT_API_TIMEOUT",
    ErrorKind.UNKNOWN: "Unexpected error — see server logs",
}

_RETRYABLE_KINDS = {ErrorKind.TRANSPORT_ERROR, ErrorKind.TIMEOUT}


def tool_error(kind: ErrorKind, message: str, hint: str | None = None) -> dict:
    """Create a serialisable ToolError dict for a known failure."""
    return ToolError(
        error=message,
        category=kind.value,
        hint=hint or _HINTS[kind],
        retryable=kind in _RETRYABLE_KINDS,
    ).model_dump(mode="json")


def result_error(result: RequestResult, message: str) -> dict:
    """Turn a failed RequestResult into a ToolError dict.

    The upstream error text is appended so the caller can tell
    "upstream says no" apart from "we couldn't tell".
    """
    kind = result.kind or ErrorKind.UNKNOWN
    detail = f"{message}: {result.error}" if result.error else message
    return tool_error(kind, detail)


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    kind = classify_exception(error)
    return tool_error(kind, str(error) or type(error).__name__)
