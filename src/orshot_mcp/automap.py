"""Auto-mapping of URL values onto a studio template's image-like fields.

Callers often pass a photo URL under a generic key (``img``, ``photo``,
``url``) that the template doesn't declare. The mapper fetches the
template's declared modification fields and moves each URL value onto the
most plausible image slot. Matching is driven by the :data:`FIELD_ROLES`
table rather than inline conditionals.

Best-effort by nature: with several ambiguously named image fields a URL
can land on the wrong one, and a URL stays where it is when nothing
resembles an image slot. Mapping never fails the calling operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .client import OrshotClient
from .config import ServerConfig
from .validators import is_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldRole:
    """A semantic slot type recognised from a field's key or description."""

    name: str
    tokens: tuple[str, ...]

    def matches(self, declared: dict) -> bool:
        haystacks = (field_key(declared) or "").lower(), field_description(declared).lower()
        return any(token in text for text in haystacks for token in self.tokens)


FIELD_ROLES: tuple[FieldRole, ...] = (
    FieldRole("image", ("image", "url", "photo", "picture", "media", "src")),
)

_ROLES_BY_NAME = {role.name: role for role in FIELD_ROLES}


@dataclass
class MappingOutcome:
    """Result of a pure mapping pass."""

    fields: dict
    moved: dict[str, str] = field(default_factory=dict)  # source key -> target key
    fallback_used: bool = False


def field_key(declared: dict) -> str | None:
    key = declared.get("key") or declared.get("id")
    return str(key) if key is not None and key != "" else None


def field_description(declared: dict) -> str:
    text = declared.get("description") or declared.get("helpText") or ""
    return text if isinstance(text, str) else ""


def fields_with_role(declared: list[dict], role: str) -> list[str]:
    """Keys of declared fields matching *role*, in declaration order."""
    matcher = _ROLES_BY_NAME[role]
    keys: list[str] = []
    for item in declared:
        key = field_key(item)
        if key and key not in keys and matcher.matches(item):
            keys.append(key)
    return keys


def map_url_fields(declared: list[dict], inputs: dict, *, fallback: bool = True) -> MappingOutcome:
    """Re-key URL values in *inputs* onto image-like *declared* fields.

    - A URL whose key is already a declared field stays put.
    - Any other URL moves to the first image-like field not yet populated
      or claimed in this pass; the original key is removed.
    - Fallback: if exactly one URL remains in the result, exactly one
      image-like field is declared, and that field is still empty, the
      URL is copied onto it (original key kept).

    Non-URL values are never touched.
    """
    declared = [d for d in declared if isinstance(d, dict)]
    declared_keys = {k for k in (field_key(d) for d in declared) if k}
    image_keys = fields_with_role(declared, "image")

    mapped = dict(inputs)
    outcome = MappingOutcome(fields=mapped)
    claimed = {k for k in image_keys if mapped.get(k)}

    # Unlike a plain "first matching field wins" rule, URLs never overwrite a
    # declared key or an image field already filled in this pass.
    for key, value in inputs.items():
        if not is_url(value) or key in declared_keys:
            continue
        target = next((k for k in image_keys if k not in claimed), None)
        if target is None:
            logger.debug("No free image field for URL under %r", key)
            continue
        claimed.add(target)
        del mapped[key]
        mapped[target] = value
        outcome.moved[key] = target
        logger.debug("Auto-mapped URL to field", extra={"url": value, "field": target})

    if fallback and len(image_keys) == 1:
        url_values = [v for v in mapped.values() if is_url(v)]
        target = image_keys[0]
        if len(url_values) == 1 and not mapped.get(target):
            mapped[target] = url_values[0]
            outcome.fallback_used = True
            logger.warning(
                "Auto-mapped single URL to single image field by fallback",
                extra={"url": url_values[0], "field": target},
            )

    return outcome


class FieldMapper:
    """Applies :func:`map_url_fields` using the template's live field list."""

    def __init__(self, client: OrshotClient, config: ServerConfig) -> None:
        self.client = client
        self.config = config

    async def auto_map(self, template_id: str, fields: dict, api_key: str) -> dict:
        """Return *fields* with URL values moved onto image fields.

        Identity when auto-mapping is disabled, when the template declares
        no fields, or when anything goes wrong.
        """
        if not self.config.auto_mapping_enabled:
            logger.debug("Auto-mapping is disabled, returning input as-is")
            return fields
        if not any(is_url(v) for v in fields.values()):
            return fields

        try:
            result = await self.client.get_studio_modifications(template_id, api_key, retries=1)
            if not result.ok:
                logger.warning(
                    "Failed to fetch template modifications for auto-mapping",
                    extra={"templateId": template_id, "status": result.status_code, "error": result.error},
                )
                return fields

            declared = result.value
            if not declared:
                logger.info(
                    "No modifications found for template, using input as-is",
                    extra={"templateId": template_id},
                )
                return fields

            outcome = map_url_fields(
                declared, fields, fallback=self.config.auto_mapping_fallback,
            )
        except Exception:
            logger.warning(
                "Error in auto-mapping modifications", exc_info=True,
                extra={"templateId": template_id},
            )
            return fields

        if outcome.moved or outcome.fallback_used:
            logger.info(
                "Auto-mapping applied for template %s", template_id,
                extra={"mappedFields": sorted(set(outcome.moved.values()))},
            )
        return outcome.fields
