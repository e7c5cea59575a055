"""Tests for parsing model replies."""

import pytest

from archgen.enhance.errors import ResponseParseError
from archgen.enhance.parser import extract_json_object, parse_enhancement_response


class TestExtractJsonObject:
    def test_fenced_block_first(self):
        text = 'Ignore {"this": 1}\n```json\n{"nodes": [], "edges": []}\n```\n'
        assert extract_json_object(text) == {"nodes": [], "edges": []}

    def test_untagged_fence(self):
        text = '```\n{"a": 1}\n```'
        assert extract_json_object(text) == {"a": 1}

    def test_bare_object_with_surrounding_text(self):
        text = 'Sure! {"a": {"b": [1, 2]}} Hope this helps. {"c": 3}'
        assert extract_json_object(text) == {"a": {"b": [1, 2]}}

    def test_non_json_fence_falls_back_to_brace_scan(self):
        text = "```\nplain text\n```\nResult: {\"ok\": true}"
        assert extract_json_object(text) == {"ok": True}

    def test_broken_json_raises(self):
        with pytest.raises(ResponseParseError):
            extract_json_object("```json\n{not json}\n```")

    def test_no_object(self):
        with pytest.raises(ResponseParseError) as exc_info:
            extract_json_object("I cannot help with that.")
        assert exc_info.value.raw_response == "I cannot help with that."


class TestParseEnhancementResponse:
    def test_valid_reply(self):
        text = """```json
{
  "nodes": [{"id": "api", "label": "API Gateway", "type": "service"}, {"id": "cache"}],
  "edges": [{"source": "api", "target": "cache", "type": "uses"}],
  "metadata": {"summary": "Added a cache"}
}
```"""
        graph = parse_enhancement_response(text)

        assert [n.id for n in graph.nodes] == ["api", "cache"]
        assert graph.nodes[1].label == "cache"
        assert graph.nodes[1].type == "module"
        assert graph.edges[0].id == "uses:api->cache"
        assert graph.metadata == {"summary": "Added a cache"}

    def test_truncated_json(self):
        with pytest.raises(ResponseParseError):
            parse_enhancement_response('{"nodes": [{"id": "a"}], "edges": [')

    def test_empty_reply(self):
        with pytest.raises(ResponseParseError):
            parse_enhancement_response("   ")

    @pytest.mark.parametrize("payload,key", [('{"nodes": []}', "edges"), ('{"edges": []}', "nodes")])
    def test_missing_lists(self, payload, key):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_enhancement_response(payload)
        assert key in str(exc_info.value)

    def test_node_without_id(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_enhancement_response('{"nodes": [{"label": "x"}], "edges": []}')
        assert "nodes.0.id" in str(exc_info.value)

    def test_edge_without_source(self):
        with pytest.raises(ResponseParseError):
            parse_enhancement_response('{"nodes": [], "edges": [{"target": "b"}]}')
