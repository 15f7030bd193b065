"""Template discovery tools — 3 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..client import OrshotClient, get_client
from ..errors import ErrorKind, make_tool_error, result_error, tool_error
from ..formatting import format_library_templates, format_modifications, format_studio_templates
from ..resolver import TemplateResolver
from ..types import ApiKeyParam, TemplateTypeParam
from .helpers import check_template_reference, require_api_key

logger = logging.getLogger(__name__)
templates_server = FastMCP("templates")

_READ_ONLY = ToolAnnotations(readOnlyHint=True, idempotentHint=True, openWorldHint=True)


@templates_server.tool(annotations=_READ_ONLY)
async def get_library_templates(api_key: ApiKeyParam = None) -> dict:
    """List the library templates available to this API key.

    Args:
        api_key: Orshot API key; falls back to ORSHOT_API_KEY.

    Returns:
        Dict with count, templates and a markdown summary in message.
    """
    try:
        key, err = require_api_key(api_key)
        if err:
            return err

        result = await get_client().list_library_templates(key)
        if not result.ok:
            return result_error(result, "Failed to fetch library templates")

        templates = [t for t in result.value if isinstance(t, dict)]
        if not templates:
            return {"count": 0, "templates": [], "message": "No library templates found for your account."}
        return {
            "count": len(templates),
            "templates": templates,
            "message": format_library_templates(templates),
        }
    except Exception as exc:
        return make_tool_error(exc)


@templates_server.tool(annotations=_READ_ONLY)
async def get_studio_templates(api_key: ApiKeyParam = None) -> dict:
    """List the Studio templates created in this Orshot account.

    Either the ID or the name of a listed template can be passed to the
    generation tools.

    Args:
        api_key: Orshot API key; falls back to ORSHOT_API_KEY.

    Returns:
        Dict with count, templates and a markdown summary in message.
    """
    try:
        key, err = require_api_key(api_key)
        if err:
            return err

        result = await get_client().list_studio_templates(key)
        if not result.ok:
            return result_error(result, "Failed to fetch studio templates")

        templates = [t for t in result.value if isinstance(t, dict)]
        if not templates:
            return {
                "count": 0,
                "templates": [],
                "message": (
                    "No studio templates found for your account. "
                    "You may need to create templates in Orshot Studio first."
                ),
            }
        return {
            "count": len(templates),
            "templates": templates,
            "message": format_studio_templates(templates),
        }
    except Exception as exc:
        return make_tool_error(exc)


async def _library_modifications(client: OrshotClient, template_id: str, key: str) -> list[dict]:
    """Fields embedded in the listing, else the dedicated endpoint."""
    resolver = TemplateResolver(client)
    template = await resolver.find_library_template(template_id, key)
    if template and template.get("modifications"):
        return list(template["modifications"])

    result = await client.get_library_modifications(template_id, key)
    if not result.ok:
        logger.warning(
            "Error fetching library template modifications",
            extra={"templateId": template_id, "error": result.error},
        )
        return []
    return result.value


async def _studio_modifications(client: OrshotClient, template_ref: str, key: str) -> list[dict]:
    """Fields embedded in the listing, else the dedicated endpoint by resolved ID."""
    resolver = TemplateResolver(client)
    template = await resolver.find_studio_template(template_ref, key)
    if template and template.get("modifications"):
        return list(template["modifications"])

    resolved_id = await resolver.resolve_studio_template_id(template_ref, key)
    if not resolved_id:
        return []
    result = await client.get_studio_modifications(resolved_id, key)
    if not result.ok:
        logger.warning(
            "Error fetching studio template modifications",
            extra={"templateId": resolved_id, "error": result.error},
        )
        return []
    return result.value


@templates_server.tool(annotations=_READ_ONLY)
async def get_template_modifications(
    template_id: Annotated[str, Field(min_length=1, description="Template ID or name")],
    template_type: Annotated[TemplateTypeParam, Field(
        description='"library", "studio", or "auto" to detect',
    )] = "auto",
    api_key: ApiKeyParam = None,
) -> dict:
    """Show the customizable fields a template declares.

    Works for library and studio templates; studio templates may be
    referenced by name.

    Args:
        template_id: Template ID or name.
        template_type: Which listing to use, or "auto" to detect.
        api_key: Orshot API key; falls back to ORSHOT_API_KEY.

    Returns:
        Dict with template_type, modifications and a markdown summary.
    """
    try:
        template_ref, err = check_template_reference(template_id)
        if err:
            return err
        key, err = require_api_key(api_key)
        if err:
            return err

        client = get_client()
        detected = template_type
        if template_type == "auto":
            detected = await TemplateResolver(client).resolve_type(template_ref, key)
            if detected is None:
                return tool_error(
                    ErrorKind.NOT_FOUND,
                    f'Template "{template_ref}" not found in either library or studio templates.',
                )

        if detected == "library":
            modifications = await _library_modifications(client, template_ref, key)
        else:
            modifications = await _studio_modifications(client, template_ref, key)
        modifications = [m for m in modifications if isinstance(m, dict)]

        if not modifications:
            return {
                "template_type": detected,
                "modifications": [],
                "message": (
                    f'No modifications found for {detected} template "{template_ref}". '
                    "This template may not have any customizable elements."
                ),
            }
        return {
            "template_type": detected,
            "modifications": modifications,
            "message": format_modifications(modifications, detected, template_ref),
        }
    except Exception as exc:
        return make_tool_error(exc)
