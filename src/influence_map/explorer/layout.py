"""Placement policy and viewport stability.

New neighbors are placed around the node that was expanded: influencers on
the row above, influenced on the row below, each row filled center-outward.
Nodes that already have a position never move during an expansion, so the
viewport does not drift while data streams in.
"""

import asyncio
import logging
from collections.abc import Callable, Container, Iterable
from dataclasses import dataclass

from influence_map.config import settings
from influence_map.explorer.graph_store import GraphStore
from influence_map.explorer.scheduler import Scheduler
from influence_map.explorer.semantic_zoom import ZoomClassification

logger = logging.getLogger(__name__)

RECENTER_KEY = "layout:recenter"

Position = tuple[float, float]


@dataclass
class Viewport:
    """Pan/zoom state in the renderer's convention: screen = model * zoom + pan."""

    width: float
    height: float
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    user_zoom_enabled: bool = True
    user_pan_enabled: bool = True

    def model_center(self) -> Position:
        """Model coordinates currently at the center of the screen."""
        return (
            (self.width / 2 - self.pan_x) / self.zoom,
            (self.height / 2 - self.pan_y) / self.zoom,
        )

    def center_at(self, x: float, y: float) -> None:
        """Pan so that model point (x, y) sits at the screen center."""
        self.pan_x = self.width / 2 - x * self.zoom
        self.pan_y = self.height / 2 - y * self.zoom


def center_outward_offsets() -> Iterable[int]:
    """Column offsets 0, +1, -1, +2, -2, ..."""
    yield 0
    slot = 1
    while True:
        yield slot
        yield -slot
        slot += 1


class LayoutCoordinator:
    """Runs placement passes one at a time and keeps the viewport stable."""

    def __init__(
        self,
        graph: GraphStore,
        scheduler: Scheduler,
        on_settled: Callable[[], None] | None = None,
        viewport: Viewport | None = None,
        row_spacing: float | None = None,
        column_spacing: float | None = None,
        animation_seconds: float | None = None,
        fit_delay_seconds: float | None = None,
        fit_padding: float | None = None,
        zoom_epsilon: float | None = None,
        min_zoom: float | None = None,
        max_zoom: float | None = None,
    ) -> None:
        self.graph = graph
        self.scheduler = scheduler
        self.on_settled = on_settled
        self.viewport = viewport or Viewport(
            width=settings.viewport_width,
            height=settings.viewport_height,
        )
        self.row_spacing = settings.row_spacing if row_spacing is None else row_spacing
        self.column_spacing = settings.column_spacing if column_spacing is None else column_spacing
        self.animation_seconds = (
            settings.layout_animation_seconds if animation_seconds is None else animation_seconds
        )
        self.fit_delay_seconds = (
            settings.fit_delay_seconds if fit_delay_seconds is None else fit_delay_seconds
        )
        self.fit_padding = settings.fit_padding if fit_padding is None else fit_padding
        self.zoom_epsilon = settings.zoom_epsilon if zoom_epsilon is None else zoom_epsilon
        self.min_zoom = settings.min_zoom if min_zoom is None else min_zoom
        self.max_zoom = settings.max_zoom if max_zoom is None else max_zoom

        self.positions: dict[str, Position] = {}
        self.is_running = False
        self.locked_zoom: float | None = None
        self._fitting = False
        self._pending_anchors: list[str] = []
        self._settled = asyncio.Event()
        self._settled.set()

    # ------------------------------------------------------------------
    # Placement passes
    # ------------------------------------------------------------------

    async def run(self, anchor_id: str, *, animate: bool = True) -> bool:
        """Place the new neighbors of ``anchor_id`` and settle.

        If a pass is already running, the anchor is handed to it and this
        call waits for that pass to settle; returns False in that case.
        ``on_settled`` runs once per pass, after the guard is released and
        before any waiting caller resumes.
        """
        if self.is_running:
            logger.debug(f"Layout pass running, deferring anchor {anchor_id}")
            self._pending_anchors.append(anchor_id)
            await self._settled.wait()
            return False

        self.is_running = True
        self._settled.clear()
        try:
            anchors = [anchor_id]
            while anchors:
                for anchor in anchors:
                    self.place_expansion(anchor)
                if animate and self.animation_seconds > 0:
                    await asyncio.sleep(self.animation_seconds)
                # Requests that arrived mid-pass are placed by this same pass
                anchors, self._pending_anchors = self._pending_anchors, []
        finally:
            self.is_running = False

        try:
            if self.on_settled is not None:
                self.on_settled()
        finally:
            self._settled.set()
        return True

    def place_expansion(self, anchor_id: str) -> None:
        """Give unplaced neighbors of ``anchor_id`` positions around it."""
        if anchor_id not in self.graph:
            return
        if anchor_id not in self.positions:
            self.positions[anchor_id] = self._free_slot(0.0, 0.0)

        ax, ay = self.positions[anchor_id]
        upstream = set(self.graph.upstream(anchor_id))
        above: list[str] = []
        below: list[str] = []
        for node_id in self.graph.neighborhood(anchor_id):
            if node_id in self.positions:
                continue
            (above if node_id in upstream else below).append(node_id)

        self._place_row(above, ax, ay - self.row_spacing, avoid_occupied=True)
        self._place_row(below, ax, ay + self.row_spacing, avoid_occupied=True)
        logger.debug(
            f"Placed {len(above)} upstream / {len(below)} downstream around {anchor_id}"
        )

    def arrange_focus(self, classification: ZoomClassification) -> bool:
        """Tree-arrange the focus neighborhood anchored at the focus position.

        Skipped (returns False) while a placement pass is running. The focus
        node itself is never moved.
        """
        if self.is_running:
            return False
        focus_id = classification.focus_id
        if focus_id not in self.positions:
            self.positions[focus_id] = self._free_slot(0.0, 0.0)
        fx, fy = self.positions[focus_id]
        self._place_row(classification.upstream, fx, fy - self.row_spacing)
        self._place_row(classification.visible_downstream, fx, fy + self.row_spacing)
        return True

    def _place_row(
        self,
        node_ids: list[str],
        center_x: float,
        row_y: float,
        avoid_occupied: bool = False,
    ) -> None:
        """Place nodes center-outward along a row: 0=center, 1=right, 2=left, ..."""
        if not node_ids:
            return
        moving = set(node_ids)
        offsets = center_outward_offsets()
        for node_id in node_ids:
            while True:
                x = center_x + next(offsets) * self.column_spacing
                if not avoid_occupied or not self._occupied(x, row_y, moving):
                    break
            self.positions[node_id] = (x, row_y)

    def _occupied(self, x: float, y: float, ignore: Container[str] = ()) -> bool:
        half_col = self.column_spacing / 2
        half_row = self.row_spacing / 2
        for node_id, (px, py) in self.positions.items():
            if node_id in ignore:
                continue
            if abs(px - x) < half_col and abs(py - y) < half_row:
                return True
        return False

    def _free_slot(self, x: float, y: float) -> Position:
        for offset in center_outward_offsets():
            candidate = x + offset * self.column_spacing
            if not self._occupied(candidate, y):
                return (candidate, y)
        raise AssertionError("unreachable")

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def bounding_box(self, node_ids: Iterable[str] | None = None) -> tuple[float, float, float, float] | None:
        """(x1, y1, x2, y2) over placed nodes, or None if none are placed."""
        ids = self.positions.keys() if node_ids is None else node_ids
        points = [self.positions[n] for n in ids if n in self.positions]
        if not points:
            return None
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return min(xs), min(ys), max(xs), max(ys)

    def center_on(self, node_ids: Iterable[str]) -> bool:
        """Pan (no zoom change) so the set's bounding box is centered."""
        box = self.bounding_box(node_ids)
        if box is None:
            return False
        x1, y1, x2, y2 = box
        self.viewport.center_at((x1 + x2) / 2, (y1 + y2) / 2)
        return True

    def fit(self, node_ids: Iterable[str] | None = None, padding: float | None = None) -> bool:
        """Zoom and pan so the set (default: everything) fills the viewport."""
        box = self.bounding_box(node_ids)
        if box is None:
            return False
        padding = self.fit_padding if padding is None else padding
        x1, y1, x2, y2 = box
        avail_w = max(1.0, self.viewport.width - 2 * padding)
        avail_h = max(1.0, self.viewport.height - 2 * padding)
        w, h = x2 - x1, y2 - y1
        candidates = []
        if w > 0:
            candidates.append(avail_w / w)
        if h > 0:
            candidates.append(avail_h / h)
        zoom = min(candidates) if candidates else self.max_zoom

        self._fitting = True
        try:
            self.viewport.zoom = self._clamp_zoom(zoom)
            self.viewport.center_at((x1 + x2) / 2, (y1 + y2) / 2)
        finally:
            self._fitting = False
        if self.locked_zoom is not None:
            self.locked_zoom = self.viewport.zoom
        return True

    def zoom_by(self, factor: float) -> float:
        """Geometric zoom around the screen center (idle navigation)."""
        cx, cy = self.viewport.model_center()
        self.viewport.zoom = self._clamp_zoom(self.viewport.zoom * factor)
        self.viewport.center_at(cx, cy)
        return self.viewport.zoom

    def _clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))

    def schedule_recenter(self, visible_ids: Callable[[], list[str]]) -> None:
        """Re-center on the visible set after a short delay.

        Triggers within the delay window collapse into one re-center. The
        zoom is locked to its value once the re-center has run.
        """

        def recenter() -> None:
            ids = visible_ids()
            if ids and self.center_on(ids):
                self.locked_zoom = self.viewport.zoom
                logger.debug(f"Re-centered viewport on {len(ids)} nodes")

        self.scheduler.schedule(RECENTER_KEY, self.fit_delay_seconds, recenter)

    def cancel_recenter(self) -> None:
        self.scheduler.cancel(RECENTER_KEY)

    def lock_zoom(self) -> None:
        self.locked_zoom = self.viewport.zoom

    def unlock_zoom(self) -> None:
        self.locked_zoom = None

    def on_zoom_event(self, zoom: float) -> float:
        """Apply a zoom change reported by the renderer; returns the zoom in effect.

        While the zoom is locked and no fit is in progress, any change larger
        than the epsilon is reverted to the locked value.
        """
        if self.locked_zoom is not None and not self._fitting:
            if abs(zoom - self.locked_zoom) > self.zoom_epsilon:
                logger.debug(f"Zoom drift {zoom:.4f} reverted to {self.locked_zoom:.4f}")
                self.viewport.zoom = self.locked_zoom
                return self.viewport.zoom
        self.viewport.zoom = zoom
        return zoom

    def reset(self) -> None:
        """Forget positions and viewport locks (new root)."""
        self.cancel_recenter()
        self.positions.clear()
        self._pending_anchors.clear()
        self.locked_zoom = None
        self.viewport.zoom = 1.0
        self.viewport.pan_x = 0.0
        self.viewport.pan_y = 0.0
