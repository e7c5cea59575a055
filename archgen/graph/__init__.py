"""Graph layer: diagram model, builder and generation."""

from .builder import DiagramBuilder, add_file, infer_node_type
from .generator import GeneratorOptions, describe_repository, generate_diagram
from .levels import compute_levels, group_by_level
from .models import Diagram, DiagramMetadata, Edge, Node
from .node_types import DiagramType, EdgeType, NodeType

__all__ = [
    "Diagram",
    "DiagramMetadata",
    "Edge",
    "Node",
    "DiagramType",
    "EdgeType",
    "NodeType",
    "DiagramBuilder",
    "add_file",
    "infer_node_type",
    "GeneratorOptions",
    "describe_repository",
    "generate_diagram",
    "compute_levels",
    "group_by_level",
]
