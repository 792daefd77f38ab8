"""Semantic zoom: a continuous filter level replaces geometric zoom.

While a node is focused, the filter level (0.0-1.0) decides how many of the
focus node's downstream neighbors are shown. Upstream neighbors (the ones
with an edge into the focus) are always shown.

Level -> visible downstream count (defaults):

    0.00 -> 1
    0.50 -> 26
    0.94 -> 47
    >= 0.95 -> all
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from influence_map.config import settings
from influence_map.explorer.graph_store import GraphStore

logger = logging.getLogger(__name__)


class NodeClass(str, Enum):
    """Visibility class of a node under semantic zoom."""

    FOCUS = "focus"
    NEIGHBOR = "neighbor"
    HIDDEN = "hidden"
    DIMMED = "dimmed"


class EdgeClass(str, Enum):
    """Visibility class of an edge under semantic zoom."""

    VISIBLE = "visible"
    HIDDEN = "hidden"
    DIMMED = "dimmed"


def clamp_level(level: float) -> float:
    return max(0.0, min(1.0, level))


def visible_count(
    level: float,
    min_visible: int | None = None,
    max_visible: int | None = None,
    unbounded_threshold: float | None = None,
) -> int | None:
    """Maximum downstream neighbors shown at ``level``; None means unbounded.

    Non-decreasing on [0, 1]. ``visible_count(0)`` is ``min_visible``.
    """
    min_visible = settings.min_visible if min_visible is None else min_visible
    max_visible = settings.max_visible if max_visible is None else max_visible
    if unbounded_threshold is None:
        unbounded_threshold = settings.unbounded_threshold

    level = clamp_level(level)
    if level >= unbounded_threshold:
        return None
    # Round half up
    raw = min_visible + level * (max_visible - min_visible)
    return max(min_visible, math.floor(raw + 0.5))


@dataclass
class ZoomClassification:
    """Result of classifying the loaded graph around one focus node."""

    focus_id: str
    level: float
    max_visible: int | None
    upstream: list[str] = field(default_factory=list)
    visible_downstream: list[str] = field(default_factory=list)
    hidden_downstream: list[str] = field(default_factory=list)
    node_classes: dict[str, NodeClass] = field(default_factory=dict)
    edge_classes: dict[str, EdgeClass] = field(default_factory=dict)

    @property
    def visible_ids(self) -> list[str]:
        """Focus plus every neighbor-classed node."""
        return [self.focus_id, *self.upstream, *self.visible_downstream]


class SemanticZoomClassifier:
    """Partitions the loaded graph into visibility classes around a focus."""

    def __init__(
        self,
        graph: GraphStore,
        min_visible: int | None = None,
        max_visible: int | None = None,
        unbounded_threshold: float | None = None,
    ) -> None:
        self.graph = graph
        self.min_visible = settings.min_visible if min_visible is None else min_visible
        self.max_visible = settings.max_visible if max_visible is None else max_visible
        self.unbounded_threshold = (
            settings.unbounded_threshold if unbounded_threshold is None else unbounded_threshold
        )

    def visible_count(self, level: float) -> int | None:
        return visible_count(
            level,
            min_visible=self.min_visible,
            max_visible=self.max_visible,
            unbounded_threshold=self.unbounded_threshold,
        )

    def classify(self, focus_id: str, level: float) -> ZoomClassification | None:
        """Classify every loaded node and edge. Returns None if the focus is not loaded.

        Reads the graph only, so repeated calls with the same inputs give the
        same result.
        """
        if focus_id not in self.graph:
            logger.debug(f"Semantic zoom skipped, focus not loaded: {focus_id}")
            return None

        max_visible = self.visible_count(level)

        def connections(node_id: str) -> int:
            node = self.graph.get_node(node_id)
            return node.connection_count if node else 0

        # Stable sort: ties keep the neighborhood's enumeration order
        neighbors = sorted(
            self.graph.neighborhood(focus_id),
            key=connections,
            reverse=True,
        )

        # Split before filtering: upstream is never truncated
        upstream: list[str] = []
        downstream: list[str] = []
        for node_id in neighbors:
            if self.graph.has_edge(node_id, focus_id):
                upstream.append(node_id)
            else:
                downstream.append(node_id)

        if max_visible is None:
            visible_down, hidden_down = downstream, []
        else:
            visible_down, hidden_down = downstream[:max_visible], downstream[max_visible:]

        visible = set(upstream) | set(visible_down)
        hidden = set(hidden_down)
        fully_visible = visible | {focus_id}

        node_classes: dict[str, NodeClass] = {}
        for node in self.graph.nodes():
            if node.id == focus_id:
                node_classes[node.id] = NodeClass.FOCUS
            elif node.id in visible:
                node_classes[node.id] = NodeClass.NEIGHBOR
            elif node.id in hidden:
                node_classes[node.id] = NodeClass.HIDDEN
            else:
                node_classes[node.id] = NodeClass.DIMMED

        edge_classes: dict[str, EdgeClass] = {}
        for edge in self.graph.edges():
            if edge.source in hidden or edge.target in hidden:
                edge_classes[edge.id] = EdgeClass.HIDDEN
            elif edge.source in fully_visible and edge.target in fully_visible:
                edge_classes[edge.id] = EdgeClass.VISIBLE
            else:
                edge_classes[edge.id] = EdgeClass.DIMMED

        return ZoomClassification(
            focus_id=focus_id,
            level=level,
            max_visible=max_visible,
            upstream=upstream,
            visible_downstream=visible_down,
            hidden_downstream=hidden_down,
            node_classes=node_classes,
            edge_classes=edge_classes,
        )
