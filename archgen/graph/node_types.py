"""Node and edge type definitions for architecture diagrams."""

from enum import Enum


class NodeType(str, Enum):
    """Types of nodes in an architecture diagram."""

    # Whole-file nodes
    MODULE = "module"
    SERVICE = "service"
    COMPONENT = "component"
    DATABASE = "database"
    EXTERNAL = "external"
    CONTROLLER = "controller"
    REPOSITORY = "repository"
    MODEL = "model"
    UTIL = "util"
    CONFIG = "config"
    DOMAIN = "domain"

    # Symbol nodes
    INTERFACE = "interface"
    CLASS = "class"
    FUNCTION = "function"


class EdgeType(str, Enum):
    """Types of edges in an architecture diagram."""

    DEPENDS = "depends"
    USES = "uses"
    IMPLEMENTS = "implements"
    EXTENDS = "extends"
    CONTAINS = "contains"  # Module -> symbol
    CALLS = "calls"
    INHERITANCE = "inheritance"


class DiagramType(str, Enum):
    """Kinds of diagram a generation call can produce."""

    FUNCTIONAL = "functional"
    DEPLOYMENT = "deployment"
