"""Authoritative in-memory graph of loaded entities and influence edges.

The store is independent of any renderer: nodes and edges are plain records
keyed by id, and renderers consume snapshots built from them.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from influence_map.models import Entity, InfluenceType, Relationship, TrustLevel, edge_key

logger = logging.getLogger(__name__)


@dataclass
class GraphNode:
    """A loaded entity and its live graph annotations."""

    entity: Entity
    is_root: bool = False
    connection_count: int = 1
    expanded: bool = False

    @property
    def id(self) -> str:
        return self.entity.id


@dataclass
class GraphEdge:
    """A directed influence edge, one per (source, target) pair."""

    source: str
    target: str
    influence_type: InfluenceType
    trust_level: TrustLevel

    @property
    def id(self) -> str:
        return edge_key(self.source, self.target)


class GraphStore:
    """Deduplicated nodes and directed edges plus the expansion record.

    Edges are keyed by the directed pair alone. When the store sends several
    categories for the same pair, the first one seen is kept and the rest are
    dropped.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}
        # node id -> neighbor ids, insertion ordered (dict used as ordered set)
        self._adjacency: dict[str, dict[str, None]] = {}
        self._expansions: set[str] = set()

    # ------------------------------------------------------------------
    # Expansion record
    # ------------------------------------------------------------------

    def try_begin_expansion(self, entity_id: str) -> bool:
        """Claim the expansion of ``entity_id``.

        Returns False if it was already claimed. The check and the insert
        happen without yielding, so overlapping callers cannot both win.
        """
        if entity_id in self._expansions:
            return False
        self._expansions.add(entity_id)
        return True

    def is_expanded(self, entity_id: str) -> bool:
        return entity_id in self._expansions

    def release_expansion(self, entity_id: str) -> None:
        """Forget a claimed expansion so it can be retried."""
        self._expansions.discard(entity_id)
        node = self._nodes.get(entity_id)
        if node is not None:
            node.expanded = False

    def mark_expanded(self, entity_id: str) -> None:
        node = self._nodes.get(entity_id)
        if node is not None:
            node.expanded = True

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def add_entity(self, entity: Entity, is_root: bool = False) -> bool:
        """Insert a node for ``entity``. Returns False if it already exists."""
        if entity.id in self._nodes:
            return False
        self._nodes[entity.id] = GraphNode(
            entity=entity,
            is_root=is_root,
            connection_count=1,
            expanded=entity.id in self._expansions,
        )
        self._adjacency.setdefault(entity.id, {})
        return True

    def add_relationship(self, rel: Relationship) -> bool:
        """Insert an edge for ``rel``. Returns False if the directed pair exists."""
        existing = self._edges.get(rel.edge_id)
        if existing is not None:
            if existing.influence_type != rel.influence_type:
                logger.debug(
                    f"Dropped {rel.influence_type.value} edge {rel.edge_id}: "
                    f"pair already loaded as {existing.influence_type.value}"
                )
            return False
        self._edges[rel.edge_id] = GraphEdge(
            source=rel.source_id,
            target=rel.target_id,
            influence_type=rel.influence_type,
            trust_level=rel.trust_level,
        )
        self._adjacency.setdefault(rel.source_id, {})[rel.target_id] = None
        self._adjacency.setdefault(rel.target_id, {})[rel.source_id] = None
        return True

    def neighborhood(self, entity_id: str) -> list[str]:
        """Neighbors of ``entity_id`` in either direction, in edge insertion order."""
        return [n for n in self._adjacency.get(entity_id, {}) if n in self._nodes]

    def has_edge(self, source: str, target: str) -> bool:
        return edge_key(source, target) in self._edges

    def upstream(self, entity_id: str) -> list[str]:
        """Neighbors with an edge into ``entity_id``."""
        return [n for n in self.neighborhood(entity_id) if self.has_edge(n, entity_id)]

    def degree(self, entity_id: str) -> int:
        return len(self._adjacency.get(entity_id, {}))

    def recompute_degrees(self) -> None:
        """Set every node's connection count to its current degree."""
        for node in self._nodes.values():
            node.connection_count = self.degree(node.id)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get_node(self, entity_id: str) -> GraphNode | None:
        return self._nodes.get(entity_id)

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        return self._edges.get(edge_id)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._nodes

    def nodes(self) -> Iterator[GraphNode]:
        return iter(list(self._nodes.values()))

    def edges(self) -> Iterator[GraphEdge]:
        return iter(list(self._edges.values()))

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def reset(self) -> None:
        """Drop all nodes, edges and expansion claims."""
        self._nodes.clear()
        self._edges.clear()
        self._adjacency.clear()
        self._expansions.clear()
