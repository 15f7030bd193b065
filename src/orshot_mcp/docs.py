"""Orshot documentation topics and a lightweight HTML → markdown-ish extractor."""

from __future__ import annotations

import html
import logging
import re

import httpx

logger = logging.getLogger(__name__)

MAX_DOCS_CHARS = 8000
DOCS_USER_AGENT = "Orshot-MCP-Server/1.0"

DOCS_TOPICS: dict[str, dict[str, str]] = {
    "introduction": {
        "url": "https://orshot.com/docs",
        "description": "Introduction to Orshot and getting started",
    },
    "studio-render": {
        "url": "https://orshot.com/docs/api-reference/render-from-studio-template",
        "description": "How to render images from Studio templates",
    },
    "library-render": {
        "url": "https://orshot.com/docs/api-reference/render-from-template",
        "description": "How to render images from Library templates",
    },
    "studio-templates-list": {
        "url": "https://orshot.com/docs/api-reference/studio-templates-list",
        "description": "How to list all Studio templates",
    },
    "modifications": {
        "url": "https://orshot.com/docs/definitions/modifications",
        "description": "Understanding template modifications",
    },
    "response-format": {
        "url": "https://orshot.com/docs/definitions/response-format",
        "description": "Available response formats (png, jpg, pdf, mp4, etc.)",
    },
    "response-type": {
        "url": "https://orshot.com/docs/definitions/response-type",
        "description": "Response types (base64, url, binary)",
    },
    "dynamic-urls": {
        "url": "https://orshot.com/docs/integrations/dynamic-urls",
        "description": "Using Dynamic URLs for image generation",
    },
    "webhooks": {
        "url": "https://orshot.com/docs/integrations/webhooks",
        "description": "Setting up webhooks for render notifications",
    },
    "video-generation": {
        "url": "https://orshot.com/docs/dynamic-parameters/video",
        "description": "Video generation parameters and options",
    },
    "quick-start": {
        "url": "https://orshot.com/docs/quick-start/get-api-key",
        "description": "Quick start guide to get API key",
    },
}

_DROP_BLOCKS = re.compile(
    r"<(script|style|nav|header|footer)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL,
)

# (pattern, replacement) applied in order; later rules see earlier output.
_CONVERSIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"<h1[^>]*>(.*?)</h1>", re.I | re.S), r"\n# \1\n"),
    (re.compile(r"<h2[^>]*>(.*?)</h2>", re.I | re.S), r"\n## \1\n"),
    (re.compile(r"<h3[^>]*>(.*?)</h3>", re.I | re.S), r"\n### \1\n"),
    (re.compile(r"<h4[^>]*>(.*?)</h4>", re.I | re.S), r"\n#### \1\n"),
    (re.compile(r"<pre[^>]*>(.*?)</pre>", re.I | re.S), "\n```\n\\1\n```\n"),
    (re.compile(r"<li[^>]*>(.*?)</li>", re.I | re.S), r"- \1\n"),
    (re.compile(r"<p[^>]*>(.*?)</p>", re.I | re.S), r"\1\n\n"),
    (re.compile(r"<br\s*/?>", re.I), "\n"),
    (re.compile(r"<code[^>]*>(.*?)</code>", re.I | re.S), r"`\1`"),
    (re.compile(r"<(strong|b)(?:\s[^>]*)?>(.*?)</\1>", re.I | re.S), r"**\2**"),
    (re.compile(r"<(em|i)(?:\s[^>]*)?>(.*?)</\1>", re.I | re.S), r"*\2*"),
)
_ANY_TAG = re.compile(r"<[^>]+>")
_BLANK_RUNS = re.compile(r"\n{3,}")


def html_to_text(page: str) -> str:
    """Reduce an HTML docs page to readable markdown-like text."""
    text = _DROP_BLOCKS.sub("", page)
    for pattern, replacement in _CONVERSIONS:
        text = pattern.sub(replacement, text)
    text = _ANY_TAG.sub("", text)
    text = html.unescape(text)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


def truncate_docs(content: str, source_url: str, limit: int = MAX_DOCS_CHARS) -> str:
    if len(content) <= limit:
        return content
    return f"{content[:limit]}\n\n... (truncated, view full docs at {source_url})"


async def fetch_docs(url: str, client: httpx.AsyncClient, *, timeout: float = 30.0) -> str | None:
    """Fetch a docs page and return its text, or None on any failure."""
    try:
        response = await client.get(
            url,
            headers={"User-Agent": DOCS_USER_AGENT, "Accept": "text/html,application/xhtml+xml"},
            timeout=timeout,
            follow_redirects=True,
        )
    except httpx.HTTPError as exc:
        logger.error("Error fetching docs", extra={"url": url, "error": str(exc)})
        return None
    if not response.is_success:
        logger.error("Failed to fetch docs from %s", url, extra={"status": response.status_code})
        return None
    return html_to_text(response.text)
