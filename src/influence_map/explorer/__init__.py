"""Graph interaction engine: lazy loading, semantic zoom, layout and paths."""

from influence_map.explorer.cache import EntityCache
from influence_map.explorer.graph_store import GraphEdge, GraphNode, GraphStore
from influence_map.explorer.interaction import (
    Focused,
    Idle,
    InteractionStateMachine,
    Mode,
    PathWaitingEnd,
    PathWaitingStart,
)
from influence_map.explorer.layout import LayoutCoordinator, Viewport
from influence_map.explorer.loader import ExpansionLoader
from influence_map.explorer.pathfinder import PathFinder, PathResult
from influence_map.explorer.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from influence_map.explorer.semantic_zoom import (
    EdgeClass,
    NodeClass,
    SemanticZoomClassifier,
    ZoomClassification,
    visible_count,
)
from influence_map.explorer.session import ExplorerSession, GraphSnapshot, Signal

__all__ = [
    "AsyncioScheduler",
    "EdgeClass",
    "EntityCache",
    "ExpansionLoader",
    "ExplorerSession",
    "Focused",
    "GraphEdge",
    "GraphNode",
    "GraphSnapshot",
    "GraphStore",
    "Idle",
    "InteractionStateMachine",
    "LayoutCoordinator",
    "ManualScheduler",
    "Mode",
    "NodeClass",
    "PathFinder",
    "PathResult",
    "PathWaitingEnd",
    "PathWaitingStart",
    "Scheduler",
    "SemanticZoomClassifier",
    "Signal",
    "Viewport",
    "ZoomClassification",
    "visible_count",
]
