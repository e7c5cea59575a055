"""Builder for converting analyzed files into diagram nodes and edges."""

import posixpath
from pathlib import Path, PurePosixPath
from typing import Any, Callable

from ..analysis.analyzer import analyze_content, detect_language
from ..analysis.models import FileAnalysis
from ..analysis.patterns import FACTORY, OBSERVER, SINGLETON
from .models import Diagram, DiagramMetadata, Edge, Node, edge_id, symbol_id
from .node_types import DiagramType, EdgeType, NodeType

# (import target, importing file path) -> resolved path, or None when unresolved
Resolver = Callable[[str, str], str | None]

SOURCE_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".py"]
INDEX_FILES = ["index.ts", "index.tsx", "index.js", "index.jsx", "__init__.py"]

# Checked in order against the file name; first match wins
FILENAME_TYPE_ORDER = [
    NodeType.SERVICE,
    NodeType.CONTROLLER,
    NodeType.REPOSITORY,
    NodeType.MODEL,
    NodeType.UTIL,
    NodeType.CONFIG,
    NodeType.DOMAIN,
    NodeType.EXTERNAL,
    NodeType.DATABASE,
    NodeType.COMPONENT,
    NodeType.MODULE,
    NodeType.INTERFACE,
    NodeType.CLASS,
]

# Checked in order against the whole path for deployment diagrams
DEPLOYMENT_TYPE_RULES = [
    (("docker", "container"), NodeType.SERVICE),
    (("database", "db"), NodeType.DATABASE),
    (("api", "service"), NodeType.SERVICE),
    (("client", "frontend"), NodeType.COMPONENT),
    (("external", "third-party"), NodeType.EXTERNAL),
]


class DiagramBuilder:
    """Accumulates nodes and edges for a single generation call.

    Nodes and edges are keyed by id; adding an element whose id already
    exists replaces it in place. `processed` records the file paths that
    have already contributed a module node.
    """

    def __init__(self):
        """Initialize an empty builder."""
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        self.processed: set[str] = set()

    @property
    def nodes(self) -> list[Node]:
        """Get nodes in discovery order."""
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        """Get edges in discovery order."""
        return list(self._edges.values())

    def has_node(self, node_id: str) -> bool:
        """Check whether a node id is present."""
        return node_id in self._nodes

    def add_node(self, node: Node) -> str:
        """Add a node, returning its id."""
        self._nodes[node.id] = node
        return node.id

    def add_edge(
        self,
        edge_type: EdgeType,
        source: str,
        target: str,
        label: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Add a typed edge, returning its id."""
        new_id = edge_id(edge_type, source, target)
        self._edges[new_id] = Edge(
            id=new_id,
            source=source,
            target=target,
            type=edge_type.value,
            label=label,
            metadata=metadata or {},
        )
        return new_id

    def build(self, metadata: DiagramMetadata) -> Diagram:
        """Freeze the accumulated elements into a Diagram."""
        return Diagram(nodes=self.nodes, edges=self.edges, metadata=metadata)


def infer_node_type(
    path: str,
    analysis: FileAnalysis | None = None,
    diagram_type: DiagramType = DiagramType.FUNCTIONAL,
) -> NodeType:
    """Choose the type of a whole-file node.

    Functional diagrams match the file name against a fixed vocabulary, then
    fall back to detected design patterns, then to "service". Deployment
    diagrams match the whole path against deployment keywords.

    Args:
        path: Relative file path.
        analysis: The file's structural summary, if it was read.
        diagram_type: The kind of diagram being generated.

    Returns:
        The node type.
    """
    if diagram_type == DiagramType.DEPLOYMENT:
        lowered = path.lower()
        for keywords, node_type in DEPLOYMENT_TYPE_RULES:
            if any(keyword in lowered for keyword in keywords):
                return node_type
        return NodeType.SERVICE

    filename = PurePosixPath(path).name.lower()
    for node_type in FILENAME_TYPE_ORDER:
        if node_type.value in filename:
            return node_type

    if analysis is not None:
        patterns = set(analysis.patterns)
        for cls in analysis.classes:
            patterns.update(cls.patterns)

        if SINGLETON in patterns or FACTORY in patterns:
            return NodeType.SERVICE
        if OBSERVER in patterns:
            return NodeType.COMPONENT
        for cls in analysis.classes:
            lowered = cls.name.lower()
            if "database" in lowered or "db" in lowered:
                return NodeType.DATABASE

    return NodeType.SERVICE


def import_base_path(target: str, importing_path: str) -> str:
    """Join a relative import target onto the importing file's directory."""
    joined = posixpath.join(posixpath.dirname(importing_path), target)
    return posixpath.normpath(joined)


def _candidates(base: str) -> list[str]:
    """List the file paths an extensionless import base may refer to."""
    candidates = [base]
    candidates.extend(base + ext for ext in SOURCE_EXTENSIONS)
    candidates.extend(posixpath.join(base, index) for index in INDEX_FILES)
    return candidates


def _resolve(target: str, importing_path: str, exists: Callable[[str], bool]) -> str | None:
    """Resolve a relative import to a repository path, or None."""
    # Only path-relative imports are resolved; bare specifiers are packages
    if not target.startswith("."):
        return None

    base = import_base_path(target, importing_path)
    for candidate in _candidates(base):
        if exists(candidate):
            return candidate
    return base


def make_local_resolver(root: str | Path) -> Resolver:
    """Create a resolver that probes the local filesystem under root."""
    root = Path(root)

    def resolve(target: str, importing_path: str) -> str | None:
        return _resolve(target, importing_path, lambda p: (root / p).is_file())

    return resolve


def make_listing_resolver(paths: set[str]) -> Resolver:
    """Create a resolver that probes a known set of file paths."""

    def resolve(target: str, importing_path: str) -> str | None:
        return _resolve(target, importing_path, lambda p: p in paths)

    return resolve


def add_file(
    builder: DiagramBuilder,
    rel_path: str,
    content: str | None,
    resolve: Resolver,
    diagram_type: DiagramType = DiagramType.FUNCTIONAL,
    metadata: dict[str, Any] | None = None,
) -> bool:
    """Add one file and its declarations to the builder.

    Args:
        builder: The builder for the current generation call.
        rel_path: File path relative to the repository root.
        content: File text, or None when it could not be read.
        resolve: Resolver for relative import targets.
        diagram_type: The kind of diagram being generated.
        metadata: Extra metadata for the module node (size, sha, ...).

    Returns:
        False if the path was already processed, True otherwise.
    """
    if rel_path in builder.processed:
        return False
    builder.processed.add(rel_path)

    analysis = analyze_content(content) if content is not None else None

    node_metadata: dict[str, Any] = {"path": rel_path, "language": detect_language(rel_path)}
    node_metadata.update(metadata or {})

    resolved: list[tuple[str, str]] = []
    if analysis is not None:
        unresolved = []
        for dependency in analysis.dependencies:
            target = resolve(dependency, rel_path)
            if target is None:
                unresolved.append(dependency)
            else:
                resolved.append((dependency, target))

        if analysis.module_name:
            node_metadata["module_name"] = analysis.module_name
        if analysis.patterns:
            node_metadata["patterns"] = analysis.patterns
        if unresolved:
            node_metadata["unresolved_imports"] = unresolved

    module_id = rel_path
    builder.add_node(
        Node(
            id=module_id,
            label=PurePosixPath(rel_path).name,
            type=infer_node_type(rel_path, analysis, diagram_type).value,
            metadata=node_metadata,
        )
    )

    if analysis is None:
        return True

    for interface in analysis.interfaces:
        interface_id = builder.add_node(
            Node(
                id=symbol_id(rel_path, interface.name),
                label=interface.name,
                type=NodeType.INTERFACE.value,
                metadata={
                    "path": rel_path,
                    "extends": interface.extends,
                    "methods": interface.methods,
                    "properties": interface.properties,
                },
            )
        )
        builder.add_edge(EdgeType.CONTAINS, module_id, interface_id, label="contains")
        for parent in interface.extends:
            builder.add_edge(
                EdgeType.EXTENDS, interface_id, symbol_id(rel_path, parent), label="extends"
            )

    for cls in analysis.classes:
        class_id = builder.add_node(
            Node(
                id=symbol_id(rel_path, cls.name),
                label=cls.name,
                type=NodeType.CLASS.value,
                metadata={
                    "path": rel_path,
                    "parent": cls.parent,
                    "implements": cls.implements,
                    "methods": cls.methods,
                    "properties": cls.properties,
                    "patterns": cls.patterns,
                },
            )
        )
        builder.add_edge(EdgeType.CONTAINS, module_id, class_id, label="contains")
        if cls.parent:
            builder.add_edge(
                EdgeType.EXTENDS, class_id, symbol_id(rel_path, cls.parent), label="extends"
            )
        for interface_name in cls.implements:
            builder.add_edge(
                EdgeType.IMPLEMENTS,
                class_id,
                symbol_id(rel_path, interface_name),
                label="implements",
            )

    for function in analysis.functions:
        function_id = builder.add_node(
            Node(
                id=symbol_id(rel_path, function.name),
                label=function.name,
                type=NodeType.FUNCTION.value,
                metadata={
                    "path": rel_path,
                    "params": function.params,
                    "return_type": function.return_type,
                    "async": function.is_async,
                    "exported": function.is_exported,
                },
            )
        )
        builder.add_edge(EdgeType.CONTAINS, module_id, function_id, label="contains")

    for dependency, target in resolved:
        builder.add_edge(
            EdgeType.DEPENDS,
            module_id,
            target,
            label="imports",
            metadata={"type": "import", "source": dependency},
        )

    return True
