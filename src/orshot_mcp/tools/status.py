"""API status tool — 1 tool on a FastMCP sub-server."""

from __future__ import annotations

from fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..client import get_client
from ..errors import ErrorKind, make_tool_error
from ..types import ApiKeyParam
from .helpers import require_api_key

status_server = FastMCP("status")


def _status_hint(status_code: int) -> str:
    if status_code == 401:
        return "Please check your API key."
    if status_code == 403:
        return "API key valid but insufficient permissions."
    if status_code == 404:
        return "API endpoint not found."
    if status_code >= 500:
        return "Orshot server error. Try again later."
    return "Unknown error occurred."


@status_server.tool(
    annotations=ToolAnnotations(readOnlyHint=True, idempotentHint=True, openWorldHint=True)
)
async def check_api_status(api_key: ApiKeyParam = None) -> dict:
    """Check connectivity to the Orshot API and whether the API key is accepted.

    Makes a single request (no retries) against the library listing.

    Args:
        api_key: Orshot API key; falls back to ORSHOT_API_KEY.

    Returns:
        Dict with connected, api_key_valid, status_code, base_url,
        template_count (when connected), error and hint (when not).
    """
    try:
        key, err = require_api_key(api_key)
        if err:
            return err

        client = get_client()
        result = await client.list_library_templates(key, retries=1)
        if result.ok:
            return {
                "connected": True,
                "api_key_valid": True,
                "status_code": result.status_code,
                "base_url": client.base_url,
                "template_count": len(result.value),
                "message": "Connected successfully! Your Orshot API integration is working correctly.",
            }

        if result.status_code is None:
            return {
                "connected": False,
                "api_key_valid": None,
                "status_code": None,
                "base_url": client.base_url,
                "error": result.error,
                "category": (result.kind or ErrorKind.UNKNOWN).value,
                "hint": (
                    "Network error — check connectivity, firewalls and DNS, "
                    "or the Orshot service may be unavailable."
                ),
            }
        return {
            "connected": False,
            "api_key_valid": result.status_code != 401,
            "status_code": result.status_code,
            "base_url": client.base_url,
            "error": result.error,
            "category": (result.kind or ErrorKind.UNKNOWN).value,
            "hint": _status_hint(result.status_code),
        }
    except Exception as exc:
        return make_tool_error(exc)
