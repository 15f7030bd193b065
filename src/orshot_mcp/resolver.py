"""Template type resolution — library vs studio, and studio name → numeric ID.

This is a heuristic, not an authoritative lookup: the order of listing
checks matters, and every check re-fetches the relevant listing so a
rename on the remote side is picked up on the next call. A failed listing
fetch is treated as "not in this listing".
"""

from __future__ import annotations

import logging
from typing import Literal

from .client import OrshotClient
from .validators import is_likely_studio_template

logger = logging.getLogger(__name__)

TemplateKind = Literal["library", "studio"]


def _name_matches(template: dict, name: str) -> bool:
    candidate = template.get("name")
    return isinstance(candidate, str) and candidate.lower() == name.lower()


def studio_matches(template: dict, template_id: str, *, numeric: bool) -> bool:
    """Match a studio descriptor by ID (string or int) or case-insensitive name.

    Integer IDs are only compared when *template_id* is all digits.
    """
    tid = template.get("id")
    if tid == template_id:
        return True
    if numeric and isinstance(tid, int) and not isinstance(tid, bool) and tid == int(template_id):
        return True
    return _name_matches(template, template_id)


def library_matches(template: dict, template_id: str) -> bool:
    """Library descriptors match on exact ``id`` or ``template_id``."""
    return template.get("id") == template_id or template.get("template_id") == template_id


class TemplateResolver:
    """Resolve template references against the live Orshot listings."""

    def __init__(self, client: OrshotClient) -> None:
        self.client = client

    async def _studio_listing(self, api_key: str) -> list[dict]:
        result = await self.client.list_studio_templates(api_key)
        if not result.ok:
            logger.warning("Studio template listing unavailable: %s", result.error)
            return []
        return [t for t in result.value if isinstance(t, dict)]

    async def _library_listing(self, api_key: str) -> list[dict]:
        result = await self.client.list_library_templates(api_key)
        if not result.ok:
            logger.warning("Library template listing unavailable: %s", result.error)
            return []
        return [t for t in result.value if isinstance(t, dict)]

    async def find_studio_template(self, template_id: str, api_key: str) -> dict | None:
        """Return the studio descriptor for an ID or name, or None."""
        numeric = is_likely_studio_template(template_id)
        for template in await self._studio_listing(api_key):
            if studio_matches(template, template_id, numeric=numeric):
                return template
        return None

    async def find_library_template(self, template_id: str, api_key: str) -> dict | None:
        """Return the library descriptor for a slug, or None."""
        for template in await self._library_listing(api_key):
            if library_matches(template, template_id):
                return template
        return None

    async def resolve_type(self, template_id: str, api_key: str) -> TemplateKind | None:
        """Decide whether *template_id* names a library or a studio template.

        1. All-digit IDs check the studio listing first.
        2. Then the library listing (``id`` / ``template_id``).
        3. Non-numeric IDs fall back to the studio listing (ID or name).

        Returns:
            ``"library"``, ``"studio"``, or None when no listing matches.
        """
        numeric = is_likely_studio_template(template_id)

        if numeric and await self.find_studio_template(template_id, api_key) is not None:
            logger.info(
                "Template operation: resolve-type",
                extra={"templateId": template_id, "templateType": "studio"},
            )
            return "studio"

        if await self.find_library_template(template_id, api_key) is not None:
            logger.info(
                "Template operation: resolve-type",
                extra={"templateId": template_id, "templateType": "library"},
            )
            return "library"

        if not numeric and await self.find_studio_template(template_id, api_key) is not None:
            logger.info(
                "Template operation: resolve-type",
                extra={"templateId": template_id, "templateType": "studio"},
            )
            return "studio"

        logger.info("Template not found in any listing", extra={"templateId": template_id})
        return None

    async def resolve_studio_template_id(self, name_or_id: str, api_key: str) -> str | None:
        """Return the canonical numeric studio ID for a name or ID.

        All-digit input is returned as-is without a fetch.
        """
        if is_likely_studio_template(name_or_id):
            return name_or_id

        for template in await self._studio_listing(api_key):
            if template.get("id") is None:
                continue
            if _name_matches(template, name_or_id) or template.get("id") == name_or_id:
                resolved = str(template.get("id"))
                logger.debug('Resolved template name "%s" to ID: %s', name_or_id, resolved)
                return resolved
        return None
