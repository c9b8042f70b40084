"""
Tests for ha_mcp/content.py - Content Helpers

Covers annotated text blocks, resource links and the compatibility-mode
gating of tool results.
"""

import json

from ha_mcp.content import create_resource_link, create_text_content, error_result, to_json, tool_result


class TestTextContent:
    def test_plain_text_has_no_annotations(self):
        block = create_text_content("hello")

        assert block.type == "text"
        assert block.text == "hello"
        assert block.annotations is None

    def test_annotations(self):
        block = create_text_content("hello", audience=["user", "assistant"], priority=0.9)

        assert block.annotations.audience == ["user", "assistant"]
        assert block.annotations.priority == 0.9

    def test_priority_only(self):
        block = create_text_content("hello", priority=0.5)

        assert block.annotations.audience is None
        assert block.annotations.priority == 0.5


class TestResourceLink:
    def test_link_fields(self):
        link = create_resource_link(
            "ha://entity/light.kitchen",
            "light.kitchen",
            "Entity details and relationships",
            mime_type="application/json",
            audience=["assistant"],
            priority=0.6,
        )

        assert link.type == "resource_link"
        assert str(link.uri) == "ha://entity/light.kitchen"
        assert link.mimeType == "application/json"
        assert link.annotations.priority == 0.6


class TestToJson:
    def test_pretty_printed(self):
        assert to_json({"a": 1}) == '{\n  "a": 1\n}'

    def test_non_ascii_preserved(self):
        assert "°C" in to_json({"unit": "°C"})

    def test_unserializable_values_stringified(self):
        from datetime import date

        assert json.loads(to_json({"day": date(2024, 6, 1)})) == {"day": "2024-06-01"}


class TestToolResult:
    """Tests for compatibility-mode gating of tool results."""

    LINK = create_resource_link("ha://summary", "summary", "Home summary")

    def test_compat_mode_text_only(self):
        result = tool_result("done", structured={"ok": True}, links=[self.LINK])

        assert len(result.content) == 1
        assert result.content[0].text == "done"
        assert result.structuredContent is None
        assert result.isError is False

    def test_full_protocol_includes_links_and_structure(self, full_protocol):
        result = tool_result("done", structured={"ok": True}, links=[self.LINK])

        assert [block.type for block in result.content] == ["text", "resource_link"]
        assert result.structuredContent == {"ok": True}

    def test_lists_are_wrapped(self, full_protocol):
        result = tool_result("[]", structured=[{"entity_id": "light.a"}])

        assert result.structuredContent == {"result": [{"entity_id": "light.a"}]}

    def test_empty_list_is_still_structured(self, full_protocol):
        assert tool_result("[]", structured=[]).structuredContent == {"result": []}

    def test_annotations_kept_in_compat_mode(self):
        result = tool_result("done", audience=["user"], priority=0.7)

        assert result.content[0].annotations.priority == 0.7


class TestErrorResult:
    def test_error_shape(self):
        result = error_result("Entity not found")

        assert result.isError is True
        assert result.content[0].text == "Error: Entity not found"
        assert result.content[0].annotations.audience == ["user"]
        assert result.content[0].annotations.priority == 1.0

    def test_no_structured_content(self, full_protocol):
        assert error_result("boom").structuredContent is None
