"""Colour and class tables shared by the renderers."""

DEFAULT_NODE_COLOR = "#ffffff"
DEFAULT_EDGE_COLOR = "#666666"
STROKE_COLOR = "#666666"

NODE_COLORS: dict[str, str] = {
    "service": "#e6f3ff",
    "controller": "#fff0e6",
    "repository": "#f0ffe6",
    "model": "#ffe6e6",
    "util": "#f0e6ff",
    "config": "#e6fff0",
    "domain": "#e6f3ff",
    "external": "#f5f5f5",
    "database": "#ffe6e6",
    "component": "#f0e6ff",
    "module": "#e6fff0",
    "interface": "#fff0e6",
    "class": "#f0ffe6",
}

EDGE_COLORS: dict[str, str] = {
    "depends": "#999999",
    "uses": "#666666",
    "implements": "#999999",
    "extends": "#666666",
    "contains": "#999999",
    "calls": "#666666",
    "inheritance": "#666666",
}

# Mermaid classDef suffixes; unmapped types get none
MERMAID_NODE_CLASSES = {
    "service",
    "database",
    "component",
    "external",
    "interface",
    "class",
    "function",
}
MERMAID_EDGE_CLASSES = {"depends", "uses", "implements", "extends", "contains"}


def node_color(node_type: str) -> str:
    """Get the fill colour for a node type."""
    return NODE_COLORS.get(node_type, DEFAULT_NODE_COLOR)


def edge_color(edge_type: str) -> str:
    """Get the stroke colour for an edge type."""
    return EDGE_COLORS.get(edge_type, DEFAULT_EDGE_COLOR)
