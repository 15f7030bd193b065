"""Human-readable rendering of Orshot responses for tool replies."""

from __future__ import annotations

from datetime import datetime

DATA_PREVIEW_CHARS = 100


def truncate_data(response: dict) -> dict:
    """Copy of *response* with a long base64 ``data`` field shortened."""
    shown = dict(response)
    data = shown.get("data")
    if isinstance(data, str) and len(data) > DATA_PREVIEW_CHARS:
        shown["data"] = (
            f"{data[:DATA_PREVIEW_CHARS]}... (truncated, total length: {len(data)})"
        )
    return shown


def format_generation(
    response: dict,
    response_type: str,
    *,
    label: str,
    template_type: str | None = None,
    webhook: str | None = None,
) -> dict:
    """Shape a successful render response into a tool result.

    URL responses get a markdown link; base64 and binary responses carry
    the raw response with ``data`` truncated for readability.
    """
    result: dict = {
        "success": bool(response.get("success", True)),
        "template_type": template_type,
        "task_id": response.get("task_id"),
        "status": response.get("status"),
    }

    url = response.get("url")
    if response_type == "url" and url:
        lines = [
            f"{label} generated successfully!",
            "",
            f"**[View Generated Image]({url})**",
            "",
        ]
        if template_type:
            lines.append(f"Template Type: {template_type.capitalize()}")
        lines.append(f"Task ID: {response.get('task_id') or 'Not available'}")
        lines.append(f"Status: {response.get('status') or 'Unknown'}")
        if webhook:
            lines.append(f"Webhook notifications will be sent to: {webhook}")
        result["url"] = url
        result["message"] = "\n".join(lines)
        return result

    result["raw_response"] = truncate_data(response)
    if url:
        result["url"] = url
    result["message"] = f"{label} generated successfully!"
    if webhook:
        result["message"] += f" Webhook notifications will be sent to: {webhook}"
    return result


def _format_date(value: object) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value


def format_library_templates(templates: list[dict]) -> str:
    blocks = []
    for index, template in enumerate(templates, start=1):
        mods = template.get("modifications") or []
        mod_lines = "\n".join(
            f"  - {m.get('key')}: {m.get('description') or 'No description'}" for m in mods
        ) or "  - No modifications available"
        blocks.append(
            f"{index}. **{template.get('title') or 'Untitled'}**\n"
            f"   ID: {template.get('id')}\n"
            f"   Description: {template.get('description') or 'No description'}\n"
            f"   Available Modifications:\n{mod_lines}"
        )
    return f"Found {len(templates)} library template(s):\n\n" + "\n\n".join(blocks)


def format_studio_templates(templates: list[dict]) -> str:
    blocks = []
    for index, template in enumerate(templates, start=1):
        mods = template.get("modifications") or []
        mod_lines = "\n".join(
            f"    - {m.get('key') or m.get('id')}: {m.get('helpText') or 'No description'}"
            + (f' (e.g., "{m["example"]}")' if m.get("example") else "")
            for m in mods
        ) or "    - No modifications available"
        width, height = template.get("canvas_width"), template.get("canvas_height")
        lines = [
            f"{index}. **{template.get('name') or 'Untitled'}**",
            f"   ID: {template.get('id')}",
            f"   Description: {template.get('description') or 'No description'}",
            f"   Dimensions: {f'{width}×{height}px' if width and height else 'Unknown'}",
        ]
        if created := _format_date(template.get("created_at")):
            lines.append(f"   Created: {created}")
        if updated := _format_date(template.get("updated_at")):
            lines.append(f"   Updated: {updated}")
        if template.get("thumbnail_url"):
            lines.append(f"   Thumbnail: {template['thumbnail_url']}")
        lines.append(f"   Available Modifications:\n{mod_lines}")
        blocks.append("\n".join(lines))

    first = templates[0]
    tip = (
        f"**Tip**: You can use either the template ID ({first.get('id')}) or "
        f'name ("{first.get("name")}") when generating images!'
    )
    return f"Found {len(templates)} studio template(s):\n\n" + "\n\n".join(blocks) + f"\n\n{tip}"


def format_modifications(modifications: list[dict], template_type: str, template_id: str) -> str:
    blocks = []
    for index, mod in enumerate(modifications, start=1):
        key = mod.get("key") or mod.get("id")
        description = mod.get("helpText") or mod.get("description") or "No description"
        example = f' (e.g., "{mod["example"]}")' if mod.get("example") else ""
        kind = f" [{mod['type']}]" if mod.get("type") else ""
        blocks.append(f"{index}. **{key}**{kind}{example}\n   {description}")
    return (
        f'Found {len(modifications)} modification(s) for {template_type} template "{template_id}":\n\n'
        + "\n\n".join(blocks)
    )
