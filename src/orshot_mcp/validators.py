"""Input validation for template IDs, API keys and URL values.

Pure functions apart from logging the validation outcome. Limits are
passed in by the caller (from :class:`~orshot_mcp.config.ServerConfig`).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 10

_TEMPLATE_ID_RE = re.compile(r"[A-Za-z0-9_-]+")
_STUDIO_ID_RE = re.compile(r"[0-9]+")


@dataclass
class ValidationResult:
    """Outcome of a single validation check."""

    is_valid: bool
    sanitized: str = ""
    error: str | None = None


def _log_outcome(kind: str, result: ValidationResult) -> ValidationResult:
    if result.is_valid:
        logger.debug("Validation passed: %s", kind)
    else:
        logger.warning("Validation failed: %s", kind, extra={"error": result.error})
    return result


def validate_template_id(template_id: object, max_length: int = 100) -> ValidationResult:
    """Check that *template_id* is a non-empty ``[A-Za-z0-9_-]`` string.

    Library slugs and numeric studio IDs both pass. Studio display names
    containing spaces do not; callers that accept names resolve them first.
    """
    if not isinstance(template_id, str) or not template_id:
        result = ValidationResult(False, error="Template ID is required and must be a string")
        return _log_outcome("template-id", result)

    sanitized = template_id.strip()
    if not sanitized:
        result = ValidationResult(False, error="Template ID cannot be empty")
    elif len(sanitized) > max_length:
        result = ValidationResult(
            False, error=f"Template ID is too long (max {max_length} characters)"
        )
    elif not _TEMPLATE_ID_RE.fullmatch(sanitized):
        result = ValidationResult(False, error="Template ID contains invalid characters")
    else:
        result = ValidationResult(True, sanitized=sanitized)
    return _log_outcome("template-id", result)


def validate_api_key(api_key: object, max_length: int = 200) -> ValidationResult:
    """Length-only sanity check of an API key; the remote API is the real judge."""
    if not isinstance(api_key, str) or not api_key:
        return _log_outcome("api-key", ValidationResult(False, error="API key is required"))

    trimmed = api_key.strip()
    if len(trimmed) < MIN_API_KEY_LENGTH:
        result = ValidationResult(False, error="API key appears to be too short")
    elif len(trimmed) > max_length:
        result = ValidationResult(False, error="API key is too long")
    else:
        result = ValidationResult(True, sanitized=trimmed)
    return _log_outcome("api-key", result)


def is_url(value: object) -> bool:
    """Return True iff *value* is an absolute http(s) URL with a host."""
    if not isinstance(value, str) or not value:
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and bool(parsed.hostname)


def is_likely_studio_template(template_id: str) -> bool:
    """Studio templates have all-digit IDs; library templates use slugs."""
    return bool(_STUDIO_ID_RE.fullmatch(template_id))
