"""Output format dispatch and writing."""

import json
import logging
from pathlib import Path
from typing import Literal

from ..errors import RenderError
from ..graph.models import Diagram
from .excalidraw import render_excalidraw
from .image import render_png, render_svg
from .mermaid import render_mermaid

logger = logging.getLogger(__name__)

OutputFormat = Literal["json", "mermaid", "svg", "png", "excalidraw"]
FORMATS = ("json", "mermaid", "svg", "png", "excalidraw")


def render_json(diagram: Diagram) -> str:
    """Serialize the diagram with stable field order."""
    return json.dumps(diagram.model_dump(mode="json", exclude_none=True), indent=2)


def render(
    diagram: Diagram,
    format: OutputFormat = "json",
    layout: str = "layered",
) -> str | bytes:
    """Render a diagram in the requested format.

    Args:
        diagram: The diagram to render.
        format: One of json, mermaid, svg, png, excalidraw.
        layout: Excalidraw layout, ignored by the other formats.

    Returns:
        Text for every format except png, which returns bytes.

    Raises:
        RenderError: If the format is unknown or the renderer fails.
    """
    if format == "json":
        return render_json(diagram)
    if format == "mermaid":
        return render_mermaid(diagram)
    if format == "svg":
        return render_svg(diagram)
    if format == "png":
        return render_png(diagram)
    if format == "excalidraw":
        return json.dumps(render_excalidraw(diagram, layout), indent=2)

    raise RenderError(
        f"Unsupported output format: {format} (expected one of {', '.join(FORMATS)})",
        format=format,
    )


def write_output(data: str | bytes, path: str | Path) -> Path:
    """Write rendered output, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data, encoding="utf-8")
    logger.info("Wrote %s", path)
    return path
