"""Shared type aliases and helpers for tool parameters."""

from __future__ import annotations

import json
from typing import Annotated, Literal

from pydantic import Field


def decode_json_object(value: dict | str | None) -> dict | None:
    """Return *value* as a dict, decoding it when a client sent it as a JSON string.

    Some MCP clients serialize object arguments (``modifications``,
    ``data``) to strings before sending them. ``None`` and an empty string
    both mean "no fields".

    Raises:
        ValueError: *value* is neither a dict nor a string holding a JSON object.
    """
    if value is None or isinstance(value, dict):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    if not value.strip():
        return None
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"not valid JSON ({exc.msg} at position {exc.pos})") from exc
    if not isinstance(decoded, dict):
        raise ValueError(f"expected a JSON object, got {type(decoded).__name__}")
    return decoded


# ── Literal enums ────────────────────────────────────────────────────────────

ResponseType = Literal["base64", "url", "binary"]
LibraryFormat = Literal["png", "jpg", "webp", "pdf"]
StudioFormat = Literal["png", "jpg", "webp", "pdf", "mp4", "webm", "gif"]
TemplateTypeParam = Literal["library", "studio", "auto"]
ColorMode = Literal["rgb", "cmyk"]
DocsTopic = Literal[
    "introduction", "studio-render", "library-render", "studio-templates-list",
    "modifications", "response-format", "response-type", "dynamic-urls",
    "webhooks", "video-generation", "quick-start",
]

VIDEO_FORMATS = frozenset({"mp4", "webm", "gif"})

# ── Annotated aliases ────────────────────────────────────────────────────────

ApiKeyParam = Annotated[str | None, Field(
    description="Orshot API key for authentication (optional if ORSHOT_API_KEY is set)",
)]
LibraryTemplateId = Annotated[str, Field(
    min_length=1,
    description="Library template ID, e.g. 'website-screenshot', 'tweet-image', 'testimonial-screenshot'",
)]
StudioTemplateRef = Annotated[str, Field(
    min_length=1,
    description="Studio template numeric ID or template name",
)]
AnyTemplateRef = Annotated[str, Field(
    min_length=1,
    description=(
        "Template ID or name — library vs studio is auto-detected. Numeric IDs are "
        "likely studio templates; studio templates can also be referenced by name."
    ),
)]
ScaleParam = Annotated[float | None, Field(
    ge=0.5, le=3, description="Scale factor for the output (1 = original size, 2 = double size)",
)]
QualityParam = Annotated[int | None, Field(ge=1, le=100, description="Image quality for jpg/webp (1-100)")]
IncludePagesParam = Annotated[list[int] | None, Field(
    description="Multi-page templates: page numbers to render, e.g. [1, 3]",
)]
FileNameParam = Annotated[str | None, Field(
    description="Custom output file name without extension; carousel pages get -page-N suffixes",
)]
WebhookParam = Annotated[str | None, Field(
    description="Webhook URL notified when rendering completes",
)]
