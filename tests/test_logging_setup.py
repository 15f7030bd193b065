"""Tests for logging configuration and formatters."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from orshot_mcp import __version__
from orshot_mcp.config import ServerConfig
from orshot_mcp.logging_setup import PACKAGE_LOGGER, JsonFormatter, TextFormatter, configure_logging


def _record(msg: str = "hello %s", args=("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord("orshot_mcp.client", logging.WARNING, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture()
def restore_package_logger():
    pkg = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(pkg.handlers), pkg.level, pkg.propagate
    yield pkg
    pkg.handlers = handlers
    pkg.setLevel(level)
    pkg.propagate = propagate


class TestJsonFormatter:
    def test_fields(self):
        line = JsonFormatter("production").format(_record(templateId="123"))
        entry = json.loads(line)
        assert entry["level"] == "warning"
        assert entry["message"] == "hello world"
        assert entry["logger"] == "orshot_mcp.client"
        assert entry["service"] == "orshot-mcp-server"
        assert entry["version"] == __version__
        assert entry["environment"] == "production"
        assert entry["meta"] == {"templateId": "123"}

    def test_no_meta_without_extra(self):
        entry = json.loads(JsonFormatter("production").format(_record()))
        assert "meta" not in entry

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "orshot_mcp", logging.ERROR, __file__, 1, "failed", None, sys.exc_info(),
            )
        entry = json.loads(JsonFormatter("production").format(record))
        assert "RuntimeError: boom" in entry["exception"]


class TestTextFormatter:
    def test_appends_extra_as_json(self):
        line = TextFormatter().format(_record(status=500))
        assert "WARNING orshot_mcp.client: hello world" in line
        assert line.endswith('{"status": 500}')


class TestConfigureLogging:
    """configure_logging installs exactly one stderr handler."""

    def test_production_uses_json(self, restore_package_logger):
        pkg = configure_logging(ServerConfig(environment="production", log_level="DEBUG"))
        assert pkg is restore_package_logger
        assert len(pkg.handlers) == 1
        handler = pkg.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr
        assert isinstance(handler.formatter, JsonFormatter)
        assert pkg.level == logging.DEBUG
        assert pkg.propagate is False

    def test_development_uses_text_and_replaces_handler(self, restore_package_logger):
        configure_logging(ServerConfig(environment="production"))
        pkg = configure_logging(ServerConfig(environment="development"))
        assert len(pkg.handlers) == 1
        assert isinstance(pkg.handlers[0].formatter, TextFormatter)
