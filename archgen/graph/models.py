"""Pydantic models for architecture diagrams."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, model_validator

from .node_types import DiagramType, EdgeType, NodeType

DIAGRAM_VERSION = "1.0.0"


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class Node(BaseModel):
    """A vertex: a file, module, class, interface or function."""

    id: str = Field(min_length=1)
    label: str = ""
    type: str = NodeType.MODULE.value
    description: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def default_label(self) -> "Node":
        """Fall back to the id when no label is given."""
        if not self.label:
            self.label = self.id
        return self


class Edge(BaseModel):
    """A typed, directed relationship between two node ids."""

    id: str = ""
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    type: str = EdgeType.DEPENDS.value
    label: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def default_id(self) -> "Edge":
        """Derive the id from type and endpoints when none is given."""
        if not self.id:
            self.id = edge_id(self.type, self.source, self.target)
        return self


class DiagramMetadata(BaseModel):
    """Run metadata attached to a diagram."""

    type: DiagramType = DiagramType.FUNCTIONAL
    version: str = DIAGRAM_VERSION
    generated_at: str = Field(default_factory=utc_timestamp)
    repository: str = ""
    enhanced: bool | None = None
    enhanced_at: str | None = None
    ai_model: str | None = None


class Diagram(BaseModel):
    """The complete graph produced by one generation call."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    metadata: DiagramMetadata = Field(default_factory=DiagramMetadata)

    def node_ids(self) -> list[str]:
        """Get node ids in discovery order."""
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> Node | None:
        """Get a node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def symbol_id(path: str, name: str) -> str:
    """Build the id of a class, interface or function declared in a file."""
    return f"{path}#{name}"


def edge_id(edge_type: str, source: str, target: str) -> str:
    """Build a deterministic edge id."""
    if isinstance(edge_type, EdgeType):
        edge_type = edge_type.value
    return f"{edge_type}:{source}->{target}"
