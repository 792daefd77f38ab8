"""Explorer session: one user's view onto the influence graph.

Owns the cache, graph, layout and interaction state for a single root, and
turns user gestures into expansions, classifications and viewport changes.
Renderers read ``snapshot()`` and subscribe to the session's signals.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

from influence_map.config import settings
from influence_map.errors import EntityNotFoundError, ErrorKind
from influence_map.explorer.cache import EntityCache
from influence_map.explorer.graph_store import GraphStore
from influence_map.explorer.interaction import (
    Focused,
    InteractionStateMachine,
    PathWaitingEnd,
    PathWaitingStart,
)
from influence_map.explorer.layout import LayoutCoordinator, Viewport
from influence_map.explorer.loader import ExpansionLoader
from influence_map.explorer.pathfinder import PathFinder, PathResult
from influence_map.explorer.scheduler import AsyncioScheduler, Scheduler
from influence_map.explorer.semantic_zoom import SemanticZoomClassifier, ZoomClassification
from influence_map.models import Entity, InfluenceType
from influence_map.storage.base import EntityStore

logger = logging.getLogger(__name__)

LEVEL_KEY = "semantic_zoom:level"

HIGHLIGHT = "highlight"
DIMMED = "dimmed"
PATH_START = "path_start"
PATH_END = "path_end"
FILTERED = "filtered"


class Signal:
    """Minimal synchronous event: handlers run in connection order."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[Callable[..., None]] = []

    def connect(self, handler: Callable[..., None]) -> None:
        self._handlers.append(handler)

    def disconnect(self, handler: Callable[..., None]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, *args: Any) -> None:
        for handler in list(self._handlers):
            handler(*args)


@dataclass
class NodeView:
    id: str
    display_label: str
    attributes: dict[str, Any]
    visibility_class: str | None
    markers: list[str]
    position: tuple[float, float] | None
    expanded: bool = False


@dataclass
class EdgeView:
    id: str
    source: str
    target: str
    category: str
    trust: str
    confidence: float
    visibility_class: str | None
    markers: list[str]


@dataclass
class GraphSnapshot:
    """Read-only view of the session for renderers."""

    mode: str
    focus_id: str | None
    filter_level: float | None
    visible_count: int | None
    node_count: int
    viewport: dict[str, Any]
    category_filter: str | None = None
    loading: bool = False
    nodes: list[NodeView] = field(default_factory=list)
    edges: list[EdgeView] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ExplorerSession:
    """Wires the explorer components together for one root entity."""

    def __init__(
        self,
        store: EntityStore,
        scheduler: Scheduler | None = None,
        session_id: str | None = None,
        cache: EntityCache | None = None,
        viewport: Viewport | None = None,
        default_level: float | None = None,
        filter_step: float | None = None,
        zoom_factor: float | None = None,
        level_debounce_seconds: float | None = None,
        layout_animation_seconds: float | None = None,
    ) -> None:
        self.id = session_id or str(uuid.uuid4())
        self.store = store
        self.scheduler = scheduler or AsyncioScheduler()
        self.filter_step = settings.filter_step if filter_step is None else filter_step
        self.zoom_factor = settings.zoom_factor if zoom_factor is None else zoom_factor
        self.level_debounce_seconds = (
            settings.level_debounce_seconds
            if level_debounce_seconds is None
            else level_debounce_seconds
        )

        self.on_focus_changed = Signal("focus_changed")
        self.on_path_result = Signal("path_result")
        self.on_loading_changed = Signal("loading_changed")
        self.on_error = Signal("error")
        self.on_node_count_changed = Signal("node_count_changed")
        self.on_root_loaded = Signal("root_loaded")

        self.cache = cache or EntityCache()
        self.graph = GraphStore()
        self.layout = LayoutCoordinator(
            self.graph,
            self.scheduler,
            on_settled=self._on_layout_settled,
            viewport=viewport,
            animation_seconds=layout_animation_seconds,
        )
        self.classifier = SemanticZoomClassifier(self.graph)
        self.pathfinder = PathFinder(self.graph)
        self.machine = InteractionStateMachine(default_level)
        self.loader = ExpansionLoader(
            store,
            self.graph,
            self.cache,
            self.layout,
            generation=lambda: self.generation,
            on_error=self.on_error.emit,
            on_loading_changed=self._set_loading,
            on_root_loaded=self.on_root_loaded.emit,
        )

        self.generation = 0
        self.root_id: str | None = None
        self.loading = False
        self.last_error: ErrorKind | None = None
        self.category_filter: InfluenceType | None = None
        self.classification: ZoomClassification | None = None
        self.path: PathResult | None = None
        self._path_start: str | None = None

        self.on_error.connect(self._remember_error)

    # ------------------------------------------------------------------
    # Root lifecycle
    # ------------------------------------------------------------------

    async def load_root(self, entity_id: str) -> Entity | None:
        """Switch to a new root: reset graph, view and state, then expand it.

        The cache survives the switch. Expansions still in flight for the
        previous root are discarded when they return.
        """
        was_focused = self.machine.focus_id is not None
        self.generation += 1
        self.scheduler.cancel(LEVEL_KEY)
        self.layout.reset()
        self.graph.reset()
        self.machine.reset()
        self._clear_focus()
        self._clear_path()
        self.category_filter = None
        self._enable_user_gestures()
        self.root_id = entity_id
        self.last_error = None
        if was_focused:
            self.on_focus_changed.emit(None)
        logger.info(f"Session {self.id}: loading root {entity_id}")
        return await self.loader.expand(entity_id, is_root=True)

    async def require_entity(self, entity_id: str) -> Entity:
        """Resolve an entity or raise ``EntityNotFoundError``."""
        entity = await self.loader.resolve_entity(entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_id)
        return entity

    async def retry(self, entity_id: str) -> Entity | None:
        """Release a failed expansion and run it again."""
        self.graph.release_expansion(entity_id)
        is_root = entity_id == self.root_id
        if is_root:
            self.last_error = None
        logger.info(f"Session {self.id}: retrying expansion of {entity_id}")
        entity = await self.loader.expand(entity_id, is_root=is_root)
        if entity is not None and isinstance(self.machine.state, Focused):
            self._apply_semantic_zoom()
        return entity

    def close(self) -> None:
        """Cancel pending work and drop cached data."""
        self.generation += 1
        self.scheduler.cancel_all()
        self.cache.clear()
        logger.info(f"Session {self.id} closed")

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    async def select(self, node_id: str) -> bool:
        """Select a loaded node. Returns False if the gesture was ignored."""
        if node_id not in self.graph:
            logger.debug(f"Ignoring selection of unloaded node {node_id}")
            return False

        new_state = self.machine.select(node_id)
        if new_state is None:
            return False

        if isinstance(new_state, Focused):
            await self._focus(node_id)
        elif isinstance(new_state, PathWaitingEnd):
            self._clear_path()
            self._path_start = node_id
            await self.loader.expand(node_id)
        elif isinstance(new_state, PathWaitingStart):
            start_id = self._path_start
            await self.loader.expand(node_id)
            self._run_path(start_id, node_id)
        return True

    async def _focus(self, node_id: str) -> None:
        self.scheduler.cancel(LEVEL_KEY)
        self.layout.viewport.user_zoom_enabled = False
        # The new focus is the only focus-classed node while its neighborhood loads
        self.classification = None
        self._apply_semantic_zoom()
        await self.loader.expand(node_id, skip_layout_animation=True)
        # Another gesture may have replaced the focus while loading
        if self.machine.focus_id != node_id:
            return
        self._apply_semantic_zoom()
        self.layout.lock_zoom()
        node = self.graph.get_node(node_id)
        self.on_focus_changed.emit(node.entity if node else None)

    def dismiss(self) -> None:
        """Background dismiss: back to idle with all classes cleared."""
        was_focused = self.machine.focus_id is not None
        self.machine.dismiss()
        self._clear_focus()
        self._clear_path()
        self._enable_user_gestures()
        if was_focused:
            self.on_focus_changed.emit(None)

    def adjust_level(self, delta: float) -> float | None:
        """Move the filter level; reclassification is debounced.

        Returns the new level, or None if nothing is focused or the level is
        already at the limit.
        """
        state = self.machine.adjust_level(delta)
        if state is None:
            return None
        self.scheduler.schedule(LEVEL_KEY, self.level_debounce_seconds, self._apply_semantic_zoom)
        return state.level

    def flush_level(self) -> bool:
        """Apply a pending level change now. Returns False if none was pending."""
        return self.scheduler.flush(LEVEL_KEY)

    def report_zoom(self, zoom: float) -> float:
        """Zoom change reported by the renderer; returns the zoom in effect."""
        return self.layout.on_zoom_event(zoom)

    def zoom_in(self) -> float:
        """Zoom button: steps the filter level when focused, else geometric zoom."""
        if isinstance(self.machine.state, Focused):
            self.adjust_level(self.filter_step)
            return self.machine.state.level
        return self.layout.zoom_by(self.zoom_factor)

    def zoom_out(self) -> float:
        if isinstance(self.machine.state, Focused):
            self.adjust_level(-self.filter_step)
            return self.machine.state.level
        return self.layout.zoom_by(1 / self.zoom_factor)

    def toggle_path(self) -> bool:
        """Enter or leave path mode. Returns True if path mode is now active."""
        was_focused = self.machine.focus_id is not None
        self.machine.toggle_path()
        self._clear_focus()
        if not self.machine.in_path_mode:
            self._clear_path()
        self._enable_user_gestures()
        if was_focused:
            self.on_focus_changed.emit(None)
        return self.machine.in_path_mode

    def toggle_category_filter(self, category: InfluenceType | None) -> InfluenceType | None:
        """Show only one influence category; the same category again clears it."""
        if category is None or category == self.category_filter:
            self.category_filter = None
        else:
            self.category_filter = category
        return self.category_filter

    def fit(self) -> bool:
        """Fit the whole graph, leaving semantic zoom first."""
        if isinstance(self.machine.state, Focused):
            self.dismiss()
        return self.layout.fit()

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _on_layout_settled(self) -> None:
        self.graph.recompute_degrees()
        self.on_node_count_changed.emit(self.graph.node_count)
        if isinstance(self.machine.state, Focused):
            self._apply_semantic_zoom()

    def _apply_semantic_zoom(self) -> None:
        state = self.machine.state
        if not isinstance(state, Focused):
            return
        classification = self.classifier.classify(state.focus_id, state.level)
        if classification is None:
            return
        self.classification = classification
        self.layout.arrange_focus(classification)
        self.layout.schedule_recenter(self._visible_ids)
        logger.debug(
            f"Semantic zoom on {state.focus_id} at {state.level:.2f}: "
            f"{len(classification.upstream)} upstream, "
            f"{len(classification.visible_downstream)} shown, "
            f"{len(classification.hidden_downstream)} hidden"
        )

    def _visible_ids(self) -> list[str]:
        return self.classification.visible_ids if self.classification else []

    def _run_path(self, start_id: str | None, end_id: str) -> None:
        result = None
        if start_id is not None:
            result = self.pathfinder.find_path(start_id, end_id)
        self._path_start = None
        if result is None:
            self.path = None
            self.on_path_result.emit(None)
            return
        self.path = result
        self.on_path_result.emit(result.element_ids)

    def _clear_focus(self) -> None:
        self.scheduler.cancel(LEVEL_KEY)
        self.layout.cancel_recenter()
        self.layout.unlock_zoom()
        self.classification = None

    def _clear_path(self) -> None:
        self.path = None
        self._path_start = None

    def _enable_user_gestures(self) -> None:
        self.layout.viewport.user_zoom_enabled = True
        self.layout.viewport.user_pan_enabled = True

    def _set_loading(self, loading: bool) -> None:
        self.loading = loading
        self.on_loading_changed.emit(loading)

    def _remember_error(self, kind: ErrorKind) -> None:
        self.last_error = kind

    # ------------------------------------------------------------------
    # Read model
    # ------------------------------------------------------------------

    def snapshot(self) -> GraphSnapshot:
        state = self.machine.state
        classification = self.classification
        path_elements = set(self.path.element_ids) if self.path else set()

        filter_edges: set[str] = set()
        filter_nodes: set[str] = set()
        if self.category_filter is not None:
            for edge in self.graph.edges():
                if edge.influence_type == self.category_filter:
                    filter_nodes.update((edge.source, edge.target))
                else:
                    filter_edges.add(edge.id)

        nodes = []
        for node in self.graph.nodes():
            markers = []
            if node.is_root:
                markers.append("root")
            if self._path_start == node.id or (self.path and self.path.node_ids[0] == node.id):
                markers.append(PATH_START)
            if self.path and self.path.node_ids[-1] == node.id:
                markers.append(PATH_END)
            if self.category_filter is not None and node.id not in filter_nodes:
                markers.append(FILTERED)

            visibility = None
            if classification is not None:
                node_class = classification.node_classes.get(node.id)
                visibility = node_class.value if node_class else DIMMED
            elif self.path is not None:
                visibility = HIGHLIGHT if node.id in path_elements else DIMMED

            nodes.append(
                NodeView(
                    id=node.id,
                    display_label=node.entity.display_label,
                    attributes=node.entity.attributes(),
                    visibility_class=visibility,
                    markers=markers,
                    position=self.layout.positions.get(node.id),
                    expanded=node.expanded,
                )
            )

        edges = []
        for edge in self.graph.edges():
            visibility = None
            if classification is not None:
                edge_class = classification.edge_classes.get(edge.id)
                visibility = edge_class.value if edge_class else DIMMED
            elif self.path is not None:
                visibility = HIGHLIGHT if edge.id in path_elements else DIMMED

            edges.append(
                EdgeView(
                    id=edge.id,
                    source=edge.source,
                    target=edge.target,
                    category=edge.influence_type.value,
                    trust=edge.trust_level.value,
                    confidence=edge.trust_level.confidence,
                    visibility_class=visibility,
                    markers=[FILTERED] if edge.id in filter_edges else [],
                )
            )

        viewport = self.layout.viewport
        level = state.level if isinstance(state, Focused) else None
        return GraphSnapshot(
            mode=state.mode.value,
            focus_id=self.machine.focus_id,
            filter_level=level,
            visible_count=self.classifier.visible_count(level) if level is not None else None,
            node_count=self.graph.node_count,
            viewport={
                "zoom": viewport.zoom,
                "pan_x": viewport.pan_x,
                "pan_y": viewport.pan_y,
                "user_zoom_enabled": viewport.user_zoom_enabled,
                "user_pan_enabled": viewport.user_pan_enabled,
            },
            category_filter=self.category_filter.value if self.category_filter else None,
            loading=self.loading,
            nodes=nodes,
            edges=edges,
        )
