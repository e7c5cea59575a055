"""Diagram enhancement through a model provider."""

import logging

from ..graph.models import Diagram, Node, utc_timestamp
from ..source.models import RepoInfo
from .parser import EnhancedGraph, parse_enhancement_response
from .prompts import SYSTEM_PROMPT, build_enhancement_prompt
from .providers import CompletionProvider

logger = logging.getLogger(__name__)


def _merge_node(existing: Node, suggested: Node) -> Node:
    """Union model metadata into an existing node; existing keys win."""
    update: dict = {"metadata": {**suggested.metadata, **existing.metadata}}
    if existing.description is None and suggested.description:
        update["description"] = suggested.description
    return existing.model_copy(update=update)


def merge_diagrams(original: Diagram, enhanced: EnhancedGraph, ai_model: str) -> Diagram:
    """Additively merge model-suggested elements into a diagram.

    Nodes and edges whose id is not yet present are appended in the order
    the model returned them. A node already present keeps its id, label and
    type; the model's metadata keys are added without overwriting existing
    ones, and its description is used only when the node has none. Existing
    edges are kept as they are. The original diagram is not modified.

    Args:
        original: The diagram produced by static analysis.
        enhanced: The parsed model reply.
        ai_model: Name of the model that produced the reply.

    Returns:
        A new Diagram with enhancement provenance in its metadata.
    """
    nodes = list(original.nodes)
    positions = {node.id: index for index, node in enumerate(nodes)}
    for node in enhanced.nodes:
        if node.id in positions:
            index = positions[node.id]
            nodes[index] = _merge_node(nodes[index], node)
        else:
            positions[node.id] = len(nodes)
            nodes.append(node)

    edges = list(original.edges)
    seen_edges = {edge.id for edge in original.edges}
    for edge in enhanced.edges:
        if edge.id not in seen_edges:
            seen_edges.add(edge.id)
            edges.append(edge)

    metadata = original.metadata.model_copy(
        update={"enhanced": True, "enhanced_at": utc_timestamp(), "ai_model": ai_model}
    )
    return Diagram(nodes=nodes, edges=edges, metadata=metadata)


def enhance_diagram(
    diagram: Diagram,
    provider: CompletionProvider,
    repo_info: RepoInfo | None = None,
    context: str = "",
) -> Diagram:
    """Ask a provider to enhance a diagram and merge its suggestions.

    Any failure while building the prompt, calling the provider or parsing
    the reply is logged as a warning and the original diagram is returned.

    Args:
        diagram: The diagram to enhance.
        provider: The configured completion provider.
        repo_info: Descriptive repository metadata for the prompt.
        context: Free-text note appended to the prompt.

    Returns:
        The merged diagram, or the original one on failure.
    """
    try:
        prompt = build_enhancement_prompt(diagram, repo_info, context)
        completion = provider.complete(prompt, system=SYSTEM_PROMPT)
        if completion.usage:
            logger.info("Enhancement token usage: %s", completion.usage)
        enhanced = parse_enhancement_response(completion.content)
    except Exception as e:
        logger.warning("AI enhancement failed, using unenhanced diagram: %s", e)
        return diagram

    merged = merge_diagrams(diagram, enhanced, provider.model)
    logger.info(
        "Enhancement added %d node(s) and %d edge(s)",
        len(merged.nodes) - len(diagram.nodes),
        len(merged.edges) - len(diagram.edges),
    )
    return merged
