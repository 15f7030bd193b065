"""Tests for the server entry-point and health payload."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from orshot_mcp import __version__
from orshot_mcp.server import _log_uncaught, health_payload, main
from tests.conftest import unwrap_tool


class TestHealthPayload:
    def test_fields(self):
        payload = health_payload()
        assert payload["status"] == "healthy"
        assert payload["service"] == "orshot-mcp-server"
        assert payload["version"] == __version__
        assert payload["timestamp"]


@pytest.fixture(autouse=True)
def _restore_package_logger():
    pkg = logging.getLogger("orshot_mcp")
    handlers, level, propagate = list(pkg.handlers), pkg.level, pkg.propagate
    yield
    pkg.handlers = handlers
    pkg.setLevel(level)
    pkg.propagate = propagate


class TestMain:
    """Tests for main()."""

    def test_invalid_config_exits(self, monkeypatch, capsys):
        monkeypatch.setenv("ORSHOT_API_TIMEOUT", "999")

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Configuration validation failed" in capsys.readouterr().err

    def test_stdio_run(self, monkeypatch):
        monkeypatch.setenv("ORSHOT_ENVIRONMENT", "test")
        with patch("orshot_mcp.server.app.run") as run, patch("orshot_mcp.server.sys.excepthook"):
            main()
        run.assert_called_once_with()

    def test_http_run(self, monkeypatch):
        monkeypatch.setenv("ORSHOT_ENVIRONMENT", "test")
        monkeypatch.setenv("ORSHOT_MCP_TRANSPORT", "http")
        monkeypatch.setenv("PORT", "8123")
        with patch("orshot_mcp.server.app.run") as run, patch("orshot_mcp.server.sys.excepthook"):
            main()
        run.assert_called_once_with(transport="http", host="127.0.0.1", port=8123)

    def test_run_failure_exits(self, monkeypatch):
        monkeypatch.setenv("ORSHOT_ENVIRONMENT", "test")
        with patch("orshot_mcp.server.app.run", side_effect=OSError("port in use")), \
                patch("orshot_mcp.server.sys.excepthook"):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1


class TestExcepthook:
    def test_logs_critical(self, caplog):
        pkg = logging.getLogger("orshot_mcp")
        with patch.object(pkg, "propagate", True), caplog.at_level(logging.CRITICAL, logger="orshot_mcp"):
            try:
                raise RuntimeError("boom")
            except RuntimeError as exc:
                _log_uncaught(RuntimeError, exc, exc.__traceback__)
        assert "Uncaught exception" in caplog.text


EXPECTED_TOOLS = {
    "generate_image",
    "generate_image_from_library",
    "generate_image_from_studio",
    "get_library_templates",
    "get_studio_templates",
    "get_template_modifications",
    "check_api_status",
    "get_orshot_docs",
    "list_docs_topics",
}


class TestToolModules:
    """Every tool module imports cleanly and exposes its tools."""

    def test_all_tool_modules_import(self):
        import importlib
        import pkgutil

        import orshot_mcp.tools as tools_pkg

        names = {info.name for info in pkgutil.walk_packages(tools_pkg.__path__, "orshot_mcp.tools.")}
        assert names == {
            "orshot_mcp.tools.docs",
            "orshot_mcp.tools.generate",
            "orshot_mcp.tools.helpers",
            "orshot_mcp.tools.status",
            "orshot_mcp.tools.templates",
        }

        exposed = set()
        for name in names:
            module = importlib.import_module(name)
            exposed |= {
                attr for attr, obj in vars(module).items()
                if callable(unwrap_tool(obj)) and attr in EXPECTED_TOOLS
            }
        assert exposed == EXPECTED_TOOLS

