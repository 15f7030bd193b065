"""Main FastMCP server — mounts all sub-servers."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastmcp import FastMCP
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from . import __version__
from .client import close_client
from .config import get_config
from .logging_setup import configure_logging
from .tools.docs import docs_server
from .tools.generate import generate_server
from .tools.status import status_server
from .tools.templates import templates_server

logger = logging.getLogger(__name__)

SERVICE_NAME = "orshot-mcp-server"


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — closes the shared Orshot HTTP pool."""
    yield {}
    await close_client()
    logger.info("Lifespan shutdown: closed Orshot client")


app = FastMCP(
    "orshot",
    instructions=(
        "Orshot image, PDF and video generation. Discover library and studio "
        "templates, inspect their modification fields, and render them. "
        "Studio templates can be referenced by numeric ID or by name; URL "
        "values are auto-mapped onto image fields."
    ),
    lifespan=_lifespan,
)

app.mount(generate_server)
app.mount(templates_server)
app.mount(status_server)
app.mount(docs_server)


def health_payload() -> dict:
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.custom_route("/health", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    """Static liveness payload for HTTP transports."""
    return JSONResponse(health_payload())


def _log_uncaught(exc_type, exc, tb) -> None:
    """Log unmodeled failures; the interpreter then exits with status 1."""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc, tb))


def main() -> None:
    """Entry-point for ``orshot-mcp`` console script."""
    try:
        cfg = get_config()
    except ValidationError as exc:
        print(f"Configuration validation failed:\n{exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(cfg)
    sys.excepthook = _log_uncaught

    if not cfg.api_key and cfg.require_api_key:
        logger.warning("ORSHOT_API_KEY not set. API key must be provided in requests.")
    elif cfg.api_key:
        logger.info("Orshot API key loaded from environment")

    logger.info(
        "Starting %s v%s", SERVICE_NAME, __version__,
        extra={
            "environment": cfg.environment,
            "transport": cfg.transport,
            "apiBase": cfg.base_url,
            "autoMapping": cfg.auto_mapping_enabled,
        },
    )

    try:
        if cfg.transport == "stdio":
            app.run()
        else:
            app.run(transport=cfg.transport, host=cfg.host, port=cfg.port)
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down")
    except Exception:
        logger.critical("Server startup error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
