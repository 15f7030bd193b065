"""Helpers shared by the tool sub-servers — API key resolution and input checks."""

from __future__ import annotations

from ..config import get_config
from ..errors import ErrorKind, tool_error
from ..validators import validate_api_key, validate_template_id

NO_API_KEY_MESSAGE = (
    "No API key provided. Please provide an api_key parameter or set the "
    "ORSHOT_API_KEY environment variable."
)


def require_api_key(api_key: str | None) -> tuple[str | None, dict | None]:
    """Pick the explicit key or the configured default, then validate it.

    Returns:
        ``(key, None)`` on success, ``(None, tool_error_dict)`` otherwise.
    """
    cfg = get_config()
    candidate = (api_key or "").strip() or cfg.api_key
    if not candidate:
        return None, tool_error(ErrorKind.VALIDATION_ERROR, NO_API_KEY_MESSAGE)
    check = validate_api_key(candidate, cfg.max_api_key_length)
    if not check.is_valid:
        return None, tool_error(ErrorKind.VALIDATION_ERROR, f"Invalid API key: {check.error}")
    return check.sanitized, None


def check_template_id(template_id: str) -> tuple[str | None, dict | None]:
    """Strict slug/ID validation for identifiers sent upstream verbatim."""
    check = validate_template_id(template_id, get_config().max_template_id_length)
    if not check.is_valid:
        return None, tool_error(ErrorKind.VALIDATION_ERROR, f"Invalid template ID: {check.error}")
    return check.sanitized, None


def check_template_reference(reference: str) -> tuple[str | None, dict | None]:
    """Looser check for references that may be studio display names."""
    ref = (reference or "").strip()
    if not ref:
        return None, tool_error(ErrorKind.VALIDATION_ERROR, "Invalid template ID: Template ID cannot be empty")
    limit = get_config().max_template_id_length
    if len(ref) > limit:
        return None, tool_error(
            ErrorKind.VALIDATION_ERROR,
            f"Invalid template ID: Template ID is too long (max {limit} characters)",
        )
    return ref, None
