"""Logging setup — stderr only, JSON lines in production."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from . import __version__
from .config import ServerConfig

PACKAGE_LOGGER = "orshot_mcp"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields under ``meta``."""

    def __init__(self, environment: str) -> None:
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "service": "orshot-mcp-server",
            "version": __version__,
            "environment": self.environment,
        }
        meta = _extra_fields(record)
        if meta:
            entry["meta"] = meta
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable line with ``extra=`` fields appended as JSON."""

    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        meta = _extra_fields(record)
        if meta:
            line = f"{line} {json.dumps(meta, default=str)}"
        return line


def configure_logging(config: ServerConfig) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Stdout is left untouched because the stdio transport owns it.
    Calling this twice replaces the previous handler.
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if config.environment == "production":
        handler.setFormatter(JsonFormatter(config.environment))
    else:
        handler.setFormatter(TextFormatter())

    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(config.log_level)
    pkg_logger.propagate = False
    return pkg_logger
