"""SVG and PNG rendering through Graphviz."""

import logging

import graphviz

from ..errors import RenderError
from ..graph.models import Diagram
from .styles import STROKE_COLOR, edge_color, node_color

logger = logging.getLogger(__name__)

DASHED_EDGE_TYPES = {"implements", "contains"}
DEFAULT_FILL = "#f5f5f5"


def build_digraph(diagram: Diagram) -> graphviz.Digraph:
    """Build a styled top-down Graphviz graph of the diagram.

    Graphviz names are generated so that ids containing ports or quotes
    cannot break the DOT source. Dangling edge targets become plain nodes.
    """
    dot = graphviz.Digraph("architecture", comment=diagram.metadata.repository)
    dot.attr(rankdir="TB", bgcolor="transparent", nodesep="0.5", ranksep="0.75")
    dot.attr(
        "node",
        shape="box",
        style="rounded,filled",
        fontname="Helvetica",
        fontsize="12",
        color=STROKE_COLOR,
    )
    dot.attr("edge", fontname="Helvetica", fontsize="10")

    names: dict[str, str] = {}

    def name_of(node_id: str) -> str:
        if node_id not in names:
            names[node_id] = f"n{len(names)}"
        return names[node_id]

    for node in diagram.nodes:
        dot.node(name_of(node.id), label=node.label, fillcolor=node_color(node.type))

    for edge in diagram.edges:
        attrs = {"color": edge_color(edge.type)}
        if edge.label:
            attrs["label"] = edge.label
        if edge.type in DASHED_EDGE_TYPES:
            attrs["style"] = "dashed"
        for endpoint in (edge.source, edge.target):
            if endpoint not in names:
                dot.node(name_of(endpoint), label=endpoint, fillcolor=DEFAULT_FILL)
        dot.edge(name_of(edge.source), name_of(edge.target), **attrs)

    return dot


def _pipe(diagram: Diagram, format: str) -> bytes:
    """Render through the dot engine, mapping engine failures to RenderError."""
    dot = build_digraph(diagram)
    try:
        return dot.pipe(format=format)
    except (graphviz.ExecutableNotFound, graphviz.CalledProcessError) as e:
        raise RenderError(f"Graphviz failed to render {format}: {e}", format=format) from e


def render_svg(diagram: Diagram) -> str:
    """Render the diagram as an SVG document.

    Raises:
        RenderError: If the Graphviz engine is missing or fails.
    """
    logger.debug("Rendering SVG for %d nodes", len(diagram.nodes))
    return _pipe(diagram, "svg").decode("utf-8")


def render_png(diagram: Diagram) -> bytes:
    """Render the diagram as PNG bytes.

    Raises:
        RenderError: If the Graphviz engine is missing or fails.
    """
    logger.debug("Rendering PNG for %d nodes", len(diagram.nodes))
    return _pipe(diagram, "png")
