"""Breadth-first level assignment over a diagram."""

from collections import deque

import networkx as nx

from .models import Diagram


def to_networkx(diagram: Diagram) -> nx.DiGraph:
    """Build a DiGraph of the diagram, dropping edges with unknown endpoints."""
    graph = nx.DiGraph()
    graph.add_nodes_from(diagram.node_ids())

    for edge in diagram.edges:
        if edge.source in graph and edge.target in graph and edge.source != edge.target:
            graph.add_edge(edge.source, edge.target, edge_type=edge.type)

    return graph


def compute_levels(diagram: Diagram) -> dict[str, int]:
    """Assign every node its breadth-first distance from the source set.

    All nodes with no incoming edges start together at level 0, so a node's
    level does not depend on node order. Nodes only reachable through a
    cycle are then seeded at level 0 one at a time, in diagram order.

    Args:
        diagram: The diagram to lay out.

    Returns:
        Mapping of node id to level, in diagram order.
    """
    graph = to_networkx(diagram)
    levels: dict[str, int] = {}

    def _bfs(starts: list[str]) -> None:
        """Expand levels outward from the given level-0 nodes."""
        queue = deque(starts)
        for start in starts:
            levels[start] = 0
        while queue:
            current = queue.popleft()
            for successor in graph.successors(current):
                if successor not in levels:
                    levels[successor] = levels[current] + 1
                    queue.append(successor)

    _bfs([node_id for node_id in graph.nodes if graph.in_degree(node_id) == 0])

    for node_id in graph.nodes:
        if node_id not in levels:
            _bfs([node_id])

    return {node_id: levels[node_id] for node_id in graph.nodes}


def group_by_level(diagram: Diagram) -> list[list[str]]:
    """Get node ids grouped by level, top level first."""
    levels = compute_levels(diagram)
    if not levels:
        return []

    groups: list[list[str]] = [[] for _ in range(max(levels.values()) + 1)]
    for node_id, level in levels.items():
        groups[level].append(node_id)
    return groups
