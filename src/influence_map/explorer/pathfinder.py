"""Minimum-hop path search over the loaded subgraph."""

import logging
from collections import deque
from dataclasses import dataclass, field

from influence_map.explorer.graph_store import GraphStore
from influence_map.models import edge_key

logger = logging.getLogger(__name__)


@dataclass
class PathResult:
    """A path as alternating nodes and the edges between them."""

    node_ids: list[str] = field(default_factory=list)
    edge_ids: list[str] = field(default_factory=list)

    @property
    def hops(self) -> int:
        return len(self.edge_ids)

    @property
    def element_ids(self) -> list[str]:
        """Nodes and edges interleaved in path order."""
        elements: list[str] = []
        for i, node_id in enumerate(self.node_ids):
            elements.append(node_id)
            if i < len(self.edge_ids):
                elements.append(self.edge_ids[i])
        return elements


class PathFinder:
    """Breadth-first search on the undirected view of the graph.

    Edge direction and weights are ignored: the result has the minimum
    number of hops among paths through currently loaded nodes.
    """

    def __init__(self, graph: GraphStore) -> None:
        self.graph = graph

    def find_path(self, start_id: str, end_id: str) -> PathResult | None:
        """Find a minimum-hop path, or None if either end is missing or unreachable."""
        if start_id not in self.graph or end_id not in self.graph:
            logger.debug(f"Path endpoints not loaded: {start_id} -> {end_id}")
            return None
        if start_id == end_id:
            return None

        parents: dict[str, str | None] = {start_id: None}
        queue: deque[str] = deque([start_id])
        while queue:
            current = queue.popleft()
            if current == end_id:
                break
            for neighbor in self.graph.neighborhood(current):
                if neighbor not in parents:
                    parents[neighbor] = current
                    queue.append(neighbor)

        if end_id not in parents:
            logger.debug(f"No path between {start_id} and {end_id}")
            return None

        node_ids: list[str] = []
        cursor: str | None = end_id
        while cursor is not None:
            node_ids.append(cursor)
            cursor = parents[cursor]
        node_ids.reverse()

        edge_ids = []
        for a, b in zip(node_ids, node_ids[1:]):
            edge_ids.append(edge_key(a, b) if self.graph.has_edge(a, b) else edge_key(b, a))

        logger.debug(f"Path {start_id} -> {end_id}: {len(edge_ids)} hops")
        return PathResult(node_ids=node_ids, edge_ids=edge_ids)
