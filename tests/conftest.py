"""Shared test fixtures for orshot-mcp."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from orshot_mcp.client import OrshotClient
from orshot_mcp.config import ServerConfig

TEST_API_KEY = "test-key-not-real"


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Patch tool modules so FunctionTool objects become directly callable."""
    import importlib
    import pkgutil

    import orshot_mcp.tools as tools_pkg

    modules = [
        importlib.import_module(info.name)
        for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + ".")
    ]

    for mod in modules:
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Start every test from a known environment with a dummy API key."""
    import os

    for key in list(os.environ):
        if key.startswith("ORSHOT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.setenv("ORSHOT_API_KEY", TEST_API_KEY)


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real .env files."""
    monkeypatch.setattr("orshot_mcp.dotenv.DEFAULT_ENV_PATH", tmp_path / "nonexistent.env")
    monkeypatch.setattr("orshot_mcp.dotenv.LOCAL_ENV_PATH", tmp_path / "nonexistent-local.env")


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config and client singletons between tests."""
    import orshot_mcp.client as client_mod
    import orshot_mcp.config as cfg_mod

    cfg_mod._config = None
    client_mod._client = None
    yield
    cfg_mod._config = None
    client_mod._client = None


Route = Callable[[httpx.Request], Any] | tuple[int, Any] | Exception


class FakeOrshotAPI:
    """Routing table for httpx.MockTransport.

    Each route holds a queue of replies; the last reply repeats. A reply is
    ``(status, payload)``, an exception to raise, or a callable taking the
    request and returning either of those (or an ``httpx.Response``).
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Route]] = {}
        self.calls: list[httpx.Request] = []

    def add(self, method: str, path: str, *replies: Route) -> FakeOrshotAPI:
        self.routes.setdefault((method, path), []).extend(replies)
        return self

    def calls_to(self, method: str, path: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.method == method and c.url.path == path]

    def _build(self, request: httpx.Request, reply: Any) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        if callable(reply):
            return self._build(request, reply(request))
        status, payload = reply
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        return self._build(request, reply)


@pytest.fixture()
def fake_api() -> FakeOrshotAPI:
    return FakeOrshotAPI()


@pytest.fixture()
def make_client(fake_api):
    """Factory for an OrshotClient wired to ``fake_api``."""

    def _make(**overrides: Any) -> OrshotClient:
        cfg = ServerConfig(api_key=TEST_API_KEY, **overrides)
        return OrshotClient(cfg, transport=httpx.MockTransport(fake_api))

    return _make


@pytest.fixture()
def api(fake_api, make_client, monkeypatch):
    """Install a fake-backed client as the process-wide client for tool tests."""
    client = make_client()
    monkeypatch.setattr("orshot_mcp.client._client", client)
    return fake_api


@pytest.fixture()
def no_sleep():
    """Patch the retry backoff sleep so retry tests run instantly."""
    with patch("orshot_mcp.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep
