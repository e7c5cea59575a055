"""Excalidraw scene renderer.

Nodes are placed on a fixed grid. The default layered layout stacks five
architectural layers top to bottom; the levels layout stacks breadth-first
levels instead. Within a row, nodes run left to right centered on x=0.
"""

import zlib
from datetime import datetime
from typing import Any

from ..errors import RenderError
from ..graph.levels import group_by_level
from ..graph.models import Diagram, Edge, Node
from .styles import STROKE_COLOR, edge_color, node_color

NODE_WIDTH = 200
NODE_HEIGHT = 100
HORIZONTAL_PADDING = 100
LAYER_PADDING = 150

NODE_FONT_SIZE = 16
LABEL_FONT_SIZE = 12

LAYERS = ["core", "application", "interface", "infrastructure", "external"]
DEFAULT_LAYER = "application"

NODE_TYPE_TO_LAYER = {
    "domain": "core",
    "service": "application",
    "controller": "interface",
    "repository": "infrastructure",
    "util": "infrastructure",
    "config": "infrastructure",
    "external": "external",
}

LAYOUTS = ("layered", "levels")

Position = tuple[float, float]


def determine_layer(node: Node) -> str:
    """Choose the architectural layer of a node.

    The node type table wins, then an explicit `layer` hint in metadata,
    then any external entry in `metadata["dependencies"]`.
    """
    layer = NODE_TYPE_TO_LAYER.get(node.type)
    if layer:
        return layer

    hint = node.metadata.get("layer")
    if isinstance(hint, str) and hint in LAYERS:
        return hint

    dependencies = node.metadata.get("dependencies")
    if isinstance(dependencies, list):
        for dep in dependencies:
            if isinstance(dep, dict) and "external" in (dep.get("type"), dep.get("source")):
                return "external"

    return DEFAULT_LAYER


def _place_row(node_ids: list[str], y: float, positions: dict[str, Position]) -> None:
    """Lay out one row of nodes left to right, centered on x=0."""
    total_width = len(node_ids) * (NODE_WIDTH + HORIZONTAL_PADDING) - HORIZONTAL_PADDING
    x = -total_width / 2
    for node_id in node_ids:
        positions[node_id] = (x, y)
        x += NODE_WIDTH + HORIZONTAL_PADDING


def layered_positions(diagram: Diagram) -> dict[str, Position]:
    """Compute top-left positions with one row per non-empty layer."""
    rows: dict[str, list[str]] = {layer: [] for layer in LAYERS}
    for node in diagram.nodes:
        rows[determine_layer(node)].append(node.id)

    positions: dict[str, Position] = {}
    y = 0.0
    for layer in LAYERS:
        if not rows[layer]:
            continue
        _place_row(rows[layer], y, positions)
        y += NODE_HEIGHT + LAYER_PADDING
    return positions


def level_positions(diagram: Diagram) -> dict[str, Position]:
    """Compute top-left positions with one row per breadth-first level."""
    positions: dict[str, Position] = {}
    for index, node_ids in enumerate(group_by_level(diagram)):
        _place_row(node_ids, index * (NODE_HEIGHT + LAYER_PADDING), positions)
    return positions


def _seed(element_id: str) -> int:
    """Derive a stable element seed from its id."""
    return zlib.crc32(element_id.encode("utf-8"))


def _updated(diagram: Diagram) -> int:
    """Get the generation time in epoch milliseconds, or 0 if unparseable."""
    try:
        generated = datetime.fromisoformat(diagram.metadata.generated_at)
    except ValueError:
        return 0
    return int(generated.timestamp() * 1000)


def _base_element(element_id: str, element_type: str, updated: int) -> dict[str, Any]:
    """Build the fields shared by every Excalidraw element."""
    return {
        "id": element_id,
        "type": element_type,
        "angle": 0,
        "strokeWidth": 1,
        "strokeStyle": "solid",
        "fillStyle": "solid",
        "roughness": 1,
        "opacity": 100,
        "groupIds": [],
        "seed": _seed(element_id),
        "version": 1,
        "versionNonce": 0,
        "isDeleted": False,
        "boundElements": [],
        "updated": updated,
        "link": None,
        "locked": False,
    }


def _node_elements(node: Node, position: Position, updated: int) -> list[dict[str, Any]]:
    """Build the rectangle and bound text for a node."""
    x, y = position
    rect_id = f"node-{node.id}"
    text_id = f"{rect_id}-text"

    rect = _base_element(rect_id, "rectangle", updated)
    rect.update({
        "x": x,
        "y": y,
        "width": NODE_WIDTH,
        "height": NODE_HEIGHT,
        "strokeColor": STROKE_COLOR,
        "backgroundColor": node_color(node.type),
        "roundness": {"type": 3},
    })
    rect["boundElements"].append({"id": text_id, "type": "text"})

    text = _base_element(text_id, "text", updated)
    text.update({
        "x": x,
        "y": y,
        "width": NODE_WIDTH,
        "height": NODE_HEIGHT,
        "strokeColor": STROKE_COLOR,
        "backgroundColor": "transparent",
        "text": node.label,
        "rawText": node.label,
        "fontSize": NODE_FONT_SIZE,
        "fontFamily": 1,
        "textAlign": "center",
        "verticalAlign": "middle",
        "containerId": rect_id,
    })

    return [rect, text]


def _edge_elements(
    edge: Edge, source: Position, target: Position, updated: int
) -> list[dict[str, Any]]:
    """Build the arrow, and its label when the edge has one."""
    # Bottom-center of the source to top-center of the target
    start_x = source[0] + NODE_WIDTH / 2
    start_y = source[1] + NODE_HEIGHT
    end_x = target[0] + NODE_WIDTH / 2
    end_y = target[1]
    dx = end_x - start_x
    dy = end_y - start_y
    color = edge_color(edge.type)

    arrow_id = f"edge-{edge.id}"
    arrow = _base_element(arrow_id, "arrow", updated)
    arrow.update({
        "x": start_x,
        "y": start_y,
        "width": abs(dx),
        "height": abs(dy),
        "strokeColor": color,
        "backgroundColor": "transparent",
        "points": [[0, 0], [dx, dy]],
        "lastCommittedPoint": None,
        "startBinding": {"elementId": f"node-{edge.source}", "focus": 0, "gap": 1},
        "endBinding": {"elementId": f"node-{edge.target}", "focus": 0, "gap": 1},
        "startArrowhead": None,
        "endArrowhead": "arrow",
    })
    elements = [arrow]

    if edge.label:
        width = len(edge.label) * LABEL_FONT_SIZE * 0.55
        height = LABEL_FONT_SIZE * 1.35
        label = _base_element(f"{arrow_id}-label", "text", updated)
        label.update({
            "x": start_x + dx / 2 - width / 2,
            "y": start_y + dy / 2 - height / 2,
            "width": width,
            "height": height,
            "strokeColor": color,
            "backgroundColor": "transparent",
            "text": edge.label,
            "rawText": edge.label,
            "fontSize": LABEL_FONT_SIZE,
            "fontFamily": 1,
            "textAlign": "center",
            "verticalAlign": "middle",
        })
        elements.append(label)

    return elements


def render_elements(diagram: Diagram, layout: str = "layered") -> list[dict[str, Any]]:
    """Build the Excalidraw elements for a diagram.

    Edges whose endpoints have no position (dangling imports) are skipped.

    Raises:
        RenderError: If the layout name is unknown.
    """
    if layout == "layered":
        positions = layered_positions(diagram)
    elif layout == "levels":
        positions = level_positions(diagram)
    else:
        raise RenderError(
            f"Unknown layout: {layout} (expected one of {', '.join(LAYOUTS)})",
            format="excalidraw",
        )

    updated = _updated(diagram)
    elements: list[dict[str, Any]] = []
    rects: dict[str, dict[str, Any]] = {}

    for node in diagram.nodes:
        position = positions.get(node.id)
        if position is None:
            continue
        node_elements = _node_elements(node, position, updated)
        rects[node.id] = node_elements[0]
        elements.extend(node_elements)

    for edge in diagram.edges:
        source = positions.get(edge.source)
        target = positions.get(edge.target)
        if source is None or target is None:
            continue
        edge_elements = _edge_elements(edge, source, target, updated)
        for endpoint in {edge.source, edge.target}:
            rects[endpoint]["boundElements"].append({"id": edge_elements[0]["id"], "type": "arrow"})
        elements.extend(edge_elements)

    return elements


def render_excalidraw(diagram: Diagram, layout: str = "layered") -> dict[str, Any]:
    """Render a diagram as an Excalidraw scene document.

    Args:
        diagram: The diagram to render.
        layout: "layered" (architectural layers) or "levels" (BFS levels).

    Returns:
        The scene as a JSON-serializable dict.

    Raises:
        RenderError: If the layout name is unknown.
    """
    return {
        "type": "excalidraw",
        "version": 2,
        "source": "archgen",
        "elements": render_elements(diagram, layout),
        "appState": {"viewBackgroundColor": "#ffffff", "gridSize": None},
        "files": {},
    }
