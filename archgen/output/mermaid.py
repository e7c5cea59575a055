"""Mermaid flowchart renderer."""

import re

from ..graph.models import Diagram
from .styles import MERMAID_EDGE_CLASSES, MERMAID_NODE_CLASSES

INDENT = "    "
UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_]")


class MermaidIds:
    """Maps diagram ids onto Mermaid-safe identifiers.

    Characters outside [A-Za-z0-9_] become underscores. Two ids that
    sanitize to the same string are kept apart with a numeric suffix.
    """

    def __init__(self):
        self._ids: dict[str, str] = {}
        self._used: set[str] = set()

    def __getitem__(self, raw_id: str) -> str:
        if raw_id not in self._ids:
            safe = UNSAFE_ID_CHARS.sub("_", raw_id) or "_"
            # "end" closes a subgraph in Mermaid
            if safe.lower() == "end":
                safe += "_"
            candidate = safe
            counter = 2
            while candidate in self._used:
                candidate = f"{safe}_{counter}"
                counter += 1
            self._ids[raw_id] = candidate
            self._used.add(candidate)
        return self._ids[raw_id]


def _escape(text: str) -> str:
    """Replace characters that end a label with Mermaid entity codes."""
    return text.replace('"', "#quot;").replace("|", "#124;")


def render_mermaid(diagram: Diagram) -> str:
    """Render a diagram as a top-down Mermaid flowchart.

    Args:
        diagram: The diagram to render.

    Returns:
        The Mermaid source text.
    """
    ids = MermaidIds()
    lines = ["graph TD"]

    for node in diagram.nodes:
        suffix = f":::{node.type}" if node.type in MERMAID_NODE_CLASSES else ""
        lines.append(f'{INDENT}{ids[node.id]}["{_escape(node.label)}"]{suffix}')

    for edge in diagram.edges:
        suffix = f":::{edge.type}" if edge.type in MERMAID_EDGE_CLASSES else ""
        arrow = f"-->|{_escape(edge.label)}|" if edge.label else "-->"
        lines.append(f"{INDENT}{ids[edge.source]} {arrow} {ids[edge.target]}{suffix}")

    return "\n".join(lines)
