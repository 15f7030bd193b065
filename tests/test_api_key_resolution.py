"""Every API-backed tool falls back to ORSHOT_API_KEY and rejects a missing key."""

from __future__ import annotations

import pytest

import orshot_mcp.tools.generate as generate_mod
import orshot_mcp.tools.status as status_mod
import orshot_mcp.tools.templates as templates_mod
from orshot_mcp.tools.helpers import NO_API_KEY_MESSAGE, require_api_key
from tests.conftest import TEST_API_KEY, unwrap_tool

TOOL_CALLS = [
    (unwrap_tool(generate_mod.generate_image), {"template_id": "website-screenshot"}),
    (unwrap_tool(generate_mod.generate_image_from_library), {"template_id": "website-screenshot"}),
    (unwrap_tool(generate_mod.generate_image_from_studio), {"template_id": "123"}),
    (unwrap_tool(templates_mod.get_library_templates), {}),
    (unwrap_tool(templates_mod.get_studio_templates), {}),
    (unwrap_tool(templates_mod.get_template_modifications), {"template_id": "123"}),
    (unwrap_tool(status_mod.check_api_status), {}),
]


@pytest.mark.parametrize("tool,kwargs", TOOL_CALLS, ids=[getattr(t, "__name__", str(i)) for i, (t, _) in enumerate(TOOL_CALLS)])
async def test_missing_key_is_validation_error(api, monkeypatch, tool, kwargs):
    monkeypatch.delenv("ORSHOT_API_KEY")

    result = await tool(**kwargs)

    assert result["category"] == "VALIDATION_ERROR"
    assert result["error"] == NO_API_KEY_MESSAGE
    assert api.calls == []


class TestRequireApiKey:
    """Tests for require_api_key."""

    def test_configured_default(self):
        assert require_api_key(None) == (TEST_API_KEY, None)

    def test_explicit_key_wins(self):
        assert require_api_key("  explicit-key-123 ") == ("explicit-key-123", None)

    def test_blank_explicit_key_falls_back(self):
        assert require_api_key("   ") == (TEST_API_KEY, None)

    def test_too_long(self):
        key, err = require_api_key("k" * 300)
        assert key is None
        assert err["error"] == "Invalid API key: API key is too long"
