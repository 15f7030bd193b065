"""Documentation tools — 2 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging

import httpx
from fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..config import get_config
from ..docs import DOCS_TOPICS, fetch_docs, truncate_docs
from ..errors import ErrorKind, make_tool_error, tool_error
from ..types import DocsTopic

logger = logging.getLogger(__name__)
docs_server = FastMCP("docs")


@docs_server.tool(
    annotations=ToolAnnotations(readOnlyHint=True, idempotentHint=True, openWorldHint=True)
)
async def get_orshot_docs(topic: DocsTopic) -> dict:
    """Fetch the latest Orshot documentation page for a topic.

    Use this to learn about API endpoints, parameters and best practices.
    Call list_docs_topics for the available topics.

    Args:
        topic: Documentation topic key, e.g. "studio-render".

    Returns:
        Dict with topic, source url and content (truncated to ~8000 chars).
    """
    try:
        info = DOCS_TOPICS.get(topic)
        if info is None:
            return tool_error(ErrorKind.VALIDATION_ERROR, f"Unknown documentation topic: {topic}")

        logger.info("Fetching docs for topic: %s", topic, extra={"url": info["url"]})
        async with httpx.AsyncClient() as http:
            content = await fetch_docs(info["url"], http, timeout=get_config().request_timeout)
        if not content:
            return tool_error(
                ErrorKind.TRANSPORT_ERROR,
                f'Failed to fetch documentation for "{topic}".',
                hint=f"View the docs directly at {info['url']} ({info['description']})",
            )
        return {
            "topic": topic,
            "source": info["url"],
            "description": info["description"],
            "content": truncate_docs(content, info["url"]),
        }
    except Exception as exc:
        return make_tool_error(exc)


@docs_server.tool(
    annotations=ToolAnnotations(readOnlyHint=True, idempotentHint=True, openWorldHint=False)
)
async def list_docs_topics() -> dict:
    """List the Orshot documentation topics get_orshot_docs can fetch.

    Returns:
        Dict with topics (key → description) and a usage example.
    """
    return {
        "topics": {key: info["description"] for key, info in DOCS_TOPICS.items()},
        "usage": 'get_orshot_docs(topic="studio-render")',
    }
