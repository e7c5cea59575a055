"""Tests for additive merge and failure-tolerant enhancement."""

import json
import logging

import pytest

from archgen.enhance.enhancer import enhance_diagram, merge_diagrams
from archgen.enhance.errors import APIError
from archgen.enhance.parser import EnhancedGraph
from archgen.enhance.prompts import SYSTEM_PROMPT
from archgen.enhance.providers import Completion, ProviderKind
from archgen.graph.models import Edge, Node
from archgen.output.excalidraw import determine_layer


class FakeProvider:
    kind = ProviderKind.CLAUDE
    model = "fake-model"

    def __init__(self, content="", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def complete(self, prompt, system=None):
        self.calls.append((prompt, system))
        if self.error:
            raise self.error
        return Completion(content=self.content, usage={"total_tokens": 10})


class TestMergeDiagrams:
    def test_appends_new_elements(self, small_diagram):
        enhanced = EnhancedGraph(
            nodes=[Node(id="cache", type="database")],
            edges=[Edge(source="src/app.ts", target="cache", type="uses")],
        )

        merged = merge_diagrams(small_diagram, enhanced, "fake-model")

        assert merged.node_ids() == small_diagram.node_ids() + ["cache"]
        assert merged.edges[-1].id == "uses:src/app.ts->cache"

    def test_existing_ids_keep_label_and_type(self, small_diagram):
        enhanced = EnhancedGraph(
            nodes=[Node(id="src/db.ts", label="Database", type="service", description="Postgres")],
            edges=[],
        )

        merged = merge_diagrams(small_diagram, enhanced, "fake-model")

        node = merged.get_node("src/db.ts")
        assert node.label == "db.ts"
        assert node.type == "database"
        assert node.description == "Postgres"
        assert merged.node_ids() == small_diagram.node_ids()

    def test_existing_node_metadata_is_unioned(self, small_diagram):
        original = small_diagram.model_copy(deep=True)
        original.nodes[2].metadata["language"] = "typescript"
        enhanced = EnhancedGraph(
            nodes=[
                Node(
                    id="src/db.ts",
                    metadata={"layer": "infrastructure", "language": "sql"},
                )
            ],
            edges=[],
        )

        merged = merge_diagrams(original, enhanced, "fake-model")

        node = merged.get_node("src/db.ts")
        assert node.metadata == {"language": "typescript", "layer": "infrastructure"}
        assert original.nodes[2].metadata == {"language": "typescript"}
        assert determine_layer(node) == "infrastructure"

    def test_existing_description_is_not_overwritten(self, small_diagram):
        original = small_diagram.model_copy(deep=True)
        original.nodes[0].description = "Entry point"
        enhanced = EnhancedGraph(
            nodes=[Node(id="src/app.ts", description="Something else")], edges=[]
        )

        merged = merge_diagrams(original, enhanced, "fake-model")

        assert merged.get_node("src/app.ts").description == "Entry point"

    def test_subset_merge_is_idempotent(self, small_diagram):
        enhanced = EnhancedGraph(
            nodes=list(small_diagram.nodes[:2]),
            edges=list(small_diagram.edges[:1]),
        )

        merged = merge_diagrams(small_diagram, enhanced, "fake-model")

        assert merged.nodes == small_diagram.nodes
        assert merged.edges == small_diagram.edges
        assert merged.metadata.repository == small_diagram.metadata.repository

    def test_records_provenance_without_mutating_original(self, small_diagram):
        merged = merge_diagrams(small_diagram, EnhancedGraph(nodes=[], edges=[]), "fake-model")

        assert merged.metadata.enhanced is True
        assert merged.metadata.ai_model == "fake-model"
        assert merged.metadata.enhanced_at is not None
        assert small_diagram.metadata.enhanced is None

    def test_duplicate_new_ids_added_once(self, small_diagram):
        enhanced = EnhancedGraph(nodes=[Node(id="x"), Node(id="x", label="again")], edges=[])

        merged = merge_diagrams(small_diagram, enhanced, "m")

        assert merged.node_ids().count("x") == 1
        assert merged.get_node("x").label == "x"


class TestEnhanceDiagram:
    def test_success(self, small_diagram):
        reply = json.dumps({
            "nodes": [{"id": "queue", "label": "Queue", "type": "external"}],
            "edges": [{"source": "src/app.ts", "target": "queue", "type": "uses"}],
        })
        provider = FakeProvider(content=f"```json\n{reply}\n```")

        result = enhance_diagram(small_diagram, provider, context="note")

        assert result.node_ids()[-1] == "queue"
        assert result.metadata.ai_model == "fake-model"
        prompt, system = provider.calls[0]
        assert system == SYSTEM_PROMPT
        assert "note" in prompt

    @pytest.mark.parametrize(
        "content",
        ['{"nodes": [{"id": "a"}], "edges": [', "not json at all", '{"nodes": "x", "edges": []}'],
    )
    def test_malformed_reply_returns_original(self, small_diagram, content, caplog):
        with caplog.at_level(logging.WARNING):
            result = enhance_diagram(small_diagram, FakeProvider(content=content))

        assert result is small_diagram
        assert "AI enhancement failed" in caplog.text

    def test_provider_error_returns_original(self, small_diagram):
        provider = FakeProvider(error=APIError("timeout", status_code=504))

        assert enhance_diagram(small_diagram, provider) is small_diagram

    def test_unexpected_error_returns_original(self, small_diagram):
        provider = FakeProvider(error=RuntimeError("socket closed"))

        assert enhance_diagram(small_diagram, provider) is small_diagram
