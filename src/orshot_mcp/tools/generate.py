"""Generation tools — 3 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..automap import FieldMapper
from ..client import OrshotClient, get_client
from ..errors import ErrorKind, make_tool_error, result_error, tool_error
from ..formatting import format_generation
from ..models import GenerationRequest, PdfOptions, ResponseSpec, VideoOptions
from ..resolver import TemplateResolver
from ..types import (
    VIDEO_FORMATS,
    AnyTemplateRef,
    ApiKeyParam,
    FileNameParam,
    IncludePagesParam,
    LibraryFormat,
    LibraryTemplateId,
    QualityParam,
    ResponseType,
    ScaleParam,
    StudioFormat,
    StudioTemplateRef,
    WebhookParam,
    decode_json_object,
)
from ..validators import is_url
from .helpers import check_template_id, check_template_reference, require_api_key

logger = logging.getLogger(__name__)
generate_server = FastMCP("generate")

_GENERATE_ANNOTATIONS = ToolAnnotations(
    readOnlyHint=False,
    destructiveHint=False,
    idempotentHint=False,
    openWorldHint=True,
)


def _coerce_fields(value: dict | str | None, name: str) -> tuple[dict | None, dict | None]:
    try:
        decoded = decode_json_object(value)
    except ValueError as exc:
        return None, tool_error(ErrorKind.VALIDATION_ERROR, f"{name} must be a JSON object: {exc}")
    return decoded or {}, None


async def _render_library(
    client: OrshotClient,
    *,
    template_id: str,
    modifications: dict,
    format: str,
    response_type: str,
    scale: float | None,
    api_key: str,
    template_type: str | None = None,
) -> dict:
    request = GenerationRequest(
        templateId=template_id,
        modifications=modifications,
        response=ResponseSpec(type=response_type, format=format, scale=scale),
    )
    result = await client.render_library(request.to_body(), api_key)
    if not result.ok:
        return result_error(
            result,
            "Failed to generate image from library template. "
            "Please check your API key and template ID, or try again later",
        )
    return format_generation(
        result.value or {}, response_type,
        label="Image from library template",
        template_type=template_type,
    )


async def _render_studio(
    client: OrshotClient,
    *,
    template_ref: str,
    fields: dict,
    format: str,
    response_type: str,
    scale: float | None,
    include_pages: list[int] | None,
    file_name: str | None,
    quality: int | None,
    pdf_options: PdfOptions | None,
    video_options: VideoOptions | None,
    webhook: str | None,
    api_key: str,
    template_type: str | None = None,
) -> dict:
    """Resolve → auto-map → render; each step depends on the previous one."""
    if webhook and not is_url(webhook):
        return tool_error(ErrorKind.VALIDATION_ERROR, f"Invalid webhook URL: {webhook}")

    resolved_id = await TemplateResolver(client).resolve_studio_template_id(template_ref, api_key)
    if not resolved_id:
        return tool_error(
            ErrorKind.NOT_FOUND,
            f'Studio template "{template_ref}" not found. Please check the template ID or name.',
        )
    resolved_id, err = check_template_id(resolved_id)
    if err:
        return err

    mapped = await FieldMapper(client, client.config).auto_map(resolved_id, fields, api_key)

    request = GenerationRequest(
        templateId=resolved_id,
        modifications=mapped,
        response=ResponseSpec(
            type=response_type,
            format=format,
            scale=scale,
            includePages=include_pages or None,
            fileName=file_name or None,
            quality=quality,
        ),
        pdfOptions=pdf_options if format == "pdf" else None,
        videoOptions=video_options if format in VIDEO_FORMATS else None,
        webhook=webhook or None,
    )
    result = await client.render_studio(request.to_body(), api_key)
    if not result.ok:
        return result_error(
            result,
            "Failed to generate image from studio template. "
            "Please check your API key and template ID",
        )
    out = format_generation(
        result.value or {}, response_type,
        label="Studio image",
        template_type=template_type,
        webhook=webhook,
    )
    out["template_id"] = resolved_id
    out["modifications"] = mapped
    return out


@generate_server.tool(annotations=_GENERATE_ANNOTATIONS)
async def generate_image_from_library(
    template_id: LibraryTemplateId,
    modifications: Annotated[dict[str, Any] | str | None, Field(
        description="Modifications to apply, e.g. text replacements, colors, URLs",
    )] = None,
    format: LibraryFormat = "png",
    response_type: ResponseType = "url",
    scale: ScaleParam = None,
    api_key: ApiKeyParam = None,
) -> dict:
    """Generate an image from an Orshot library template.

    Library templates are pre-designed utility templates such as
    website-screenshot, tweet-image or testimonial-screenshot.

    Args:
        template_id: Library template slug.
        modifications: Key/value overrides for the template.
        format: Output format — png, jpg, webp or pdf.
        response_type: "url" (download link), "base64" or "binary".
        scale: Output scale factor (0.5–3).
        api_key: Orshot API key; falls back to ORSHOT_API_KEY.

    Returns:
        Dict with success, url or raw_response, task_id, status and message.
    """
    try:
        template_id, err = check_template_id(template_id)
        if err:
            return err
        key, err = require_api_key(api_key)
        if err:
            return err
        fields, err = _coerce_fields(modifications, "modifications")
        if err:
            return err

        return await _render_library(
            get_client(),
            template_id=template_id,
            modifications=fields,
            format=format,
            response_type=response_type,
            scale=scale,
            api_key=key,
        )
    except Exception as exc:
        return make_tool_error(exc)


@generate_server.tool(annotations=_GENERATE_ANNOTATIONS)
async def generate_image_from_studio(
    template_id: StudioTemplateRef,
    data: Annotated[dict[str, Any] | str | None, Field(
        description="Data to populate the template; URLs are auto-mapped onto image fields",
    )] = None,
    format: StudioFormat = "png",
    response_type: ResponseType = "url",
    scale: ScaleParam = None,
    include_pages: IncludePagesParam = None,
    file_name: FileNameParam = None,
    quality: QualityParam = None,
    pdf_options: Annotated[PdfOptions | None, Field(
        description="PDF options (only applied when format is 'pdf')",
    )] = None,
    video_options: Annotated[VideoOptions | None, Field(
        description="Video options (only applied when format is mp4, webm or gif)",
    )] = None,
    webhook: WebhookParam = None,
    api_key: ApiKeyParam = None,
) -> dict:
    """Generate an image, PDF or video from an Orshot Studio template.

    The template may be referenced by numeric ID or by name. URL values in
    ``data`` are moved onto the template's image fields when their keys
    don't match. Supports multi-page templates, PDF and video options.

    Args:
        template_id: Studio template ID or name.
        data: Values for the template's modification fields.
        format: png, jpg, webp, pdf, mp4, webm or gif.
        response_type: "url" (download link), "base64" or "binary".
        scale: Output scale factor (0.5–3).
        include_pages: Page numbers to render for multi-page templates.
        file_name: Output file name without extension.
        quality: jpg/webp quality (1-100).
        pdf_options: Margin, page range, color mode and DPI for PDFs.
        video_options: Trim, mute and loop settings for videos.
        webhook: URL notified when rendering completes.
        api_key: Orshot API key; falls back to ORSHOT_API_KEY.

    Returns:
        Dict with success, url or raw_response, task_id, status, the
        resolved template_id, the (mapped) modifications and a message.
    """
    try:
        template_ref, err = check_template_reference(template_id)
        if err:
            return err
        key, err = require_api_key(api_key)
        if err:
            return err
        fields, err = _coerce_fields(data, "data")
        if err:
            return err

        return await _render_studio(
            get_client(),
            template_ref=template_ref,
            fields=fields,
            format=format,
            response_type=response_type,
            scale=scale,
            include_pages=include_pages,
            file_name=file_name,
            quality=quality,
            pdf_options=pdf_options,
            video_options=video_options,
            webhook=webhook,
            api_key=key,
        )
    except Exception as exc:
        return make_tool_error(exc)


@generate_server.tool(annotations=_GENERATE_ANNOTATIONS)
async def generate_image(
    template_id: AnyTemplateRef,
    modifications: Annotated[dict[str, Any] | str | None, Field(
        description="Modifications/data for the template; URLs are auto-mapped for studio templates",
    )] = None,
    format: StudioFormat = "png",
    response_type: ResponseType = "url",
    scale: ScaleParam = None,
    include_pages: IncludePagesParam = None,
    file_name: FileNameParam = None,
    quality: QualityParam = None,
    pdf_options: Annotated[PdfOptions | None, Field(
        description="PDF options (studio templates with format 'pdf' only)",
    )] = None,
    video_options: Annotated[VideoOptions | None, Field(
        description="Video options (studio templates with a video format only)",
    )] = None,
    webhook: WebhookParam = None,
    api_key: ApiKeyParam = None,
) -> dict:
    """Generate from any Orshot template, detecting library vs studio automatically.

    Numeric IDs are checked against studio templates first; slugs against
    the library first, then studio names. Studio renders get URL
    auto-mapping and support video formats, PDF options and multi-page
    templates.

    Args:
        template_id: Library slug, studio ID or studio template name.
        modifications: Values for the template's fields.
        format: Output format; video formats are studio-only.
        response_type: "url" (download link), "base64" or "binary".
        scale: Output scale factor (0.5–3).
        include_pages: Studio multi-page selection.
        file_name: Studio output file name.
        quality: jpg/webp quality (1-100).
        pdf_options: Studio PDF options.
        video_options: Studio video options.
        webhook: Studio render completion webhook.
        api_key: Orshot API key; falls back to ORSHOT_API_KEY.

    Returns:
        Dict with success, template_type, url or raw_response, task_id,
        status and message.
    """
    try:
        template_ref, err = check_template_reference(template_id)
        if err:
            return err
        key, err = require_api_key(api_key)
        if err:
            return err
        fields, err = _coerce_fields(modifications, "modifications")
        if err:
            return err

        client = get_client()
        template_type = await TemplateResolver(client).resolve_type(template_ref, key)
        if template_type is None:
            return tool_error(
                ErrorKind.NOT_FOUND,
                f'Template "{template_ref}" not found in either library or studio templates. '
                "Please check the template ID.",
            )

        if template_type == "library":
            if format in VIDEO_FORMATS:
                return tool_error(
                    ErrorKind.VALIDATION_ERROR,
                    f"Format '{format}' is only available for studio templates",
                )
            template_ref, err = check_template_id(template_ref)
            if err:
                return err
            return await _render_library(
                client,
                template_id=template_ref,
                modifications=fields,
                format=format,
                response_type=response_type,
                scale=scale,
                api_key=key,
                template_type="library",
            )

        return await _render_studio(
            client,
            template_ref=template_ref,
            fields=fields,
            format=format,
            response_type=response_type,
            scale=scale,
            include_pages=include_pages,
            file_name=file_name,
            quality=quality,
            pdf_options=pdf_options,
            video_options=video_options,
            webhook=webhook,
            api_key=key,
            template_type="studio",
        )
    except Exception as exc:
        return make_tool_error(exc)
