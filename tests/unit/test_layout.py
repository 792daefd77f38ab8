"""Unit tests for placement and viewport stability."""

import asyncio

import pytest

from influence_map.explorer.graph_store import GraphStore
from influence_map.explorer.layout import LayoutCoordinator, Viewport
from influence_map.explorer.scheduler import ManualScheduler
from influence_map.explorer.semantic_zoom import SemanticZoomClassifier

from tests.conftest import make_entity, make_rel


def coordinator(graph: GraphStore, scheduler: ManualScheduler | None = None, **kwargs) -> LayoutCoordinator:
    kwargs.setdefault("animation_seconds", 0.0)
    return LayoutCoordinator(
        graph,
        scheduler or ManualScheduler(),
        viewport=Viewport(width=1280, height=800),
        row_spacing=140,
        column_spacing=100,
        fit_padding=40,
        zoom_epsilon=0.001,
        min_zoom=0.1,
        max_zoom=6.0,
        **kwargs,
    )


def star(center: str, upstream: list[str], downstream: list[str], graph: GraphStore | None = None) -> GraphStore:
    graph = graph or GraphStore()
    graph.add_entity(make_entity(center))
    for node_id in upstream:
        graph.add_entity(make_entity(node_id))
        graph.add_relationship(make_rel(node_id, center))
    for node_id in downstream:
        graph.add_entity(make_entity(node_id))
        graph.add_relationship(make_rel(center, node_id))
    return graph


class TestPlacement:
    """Tests for expansion placement."""

    def test_rows_center_outward(self) -> None:
        """Test rows fill center, right, left."""
        graph = star("a", ["u1", "u2"], ["d1", "d2", "d3", "d4"])
        layout = coordinator(graph)

        layout.place_expansion("a")

        assert layout.positions["a"] == (0.0, 0.0)
        assert layout.positions["u1"] == (0.0, -140)
        assert layout.positions["u2"] == (100.0, -140)
        assert layout.positions["d1"] == (0.0, 140)
        assert layout.positions["d2"] == (100.0, 140)
        assert layout.positions["d3"] == (-100.0, 140)
        assert layout.positions["d4"] == (200.0, 140)

    def test_placed_nodes_never_move(self) -> None:
        """Test existing positions survive later expansions."""
        graph = star("a", [], ["b", "c"])
        layout = coordinator(graph)
        layout.place_expansion("a")
        before = dict(layout.positions)

        # b's neighborhood includes a, which is already placed
        star("b", ["c"], ["x"], graph)
        layout.place_expansion("b")

        for node_id, position in before.items():
            assert layout.positions[node_id] == position
        assert "x" in layout.positions

    def test_skips_occupied_slots(self) -> None:
        """Test new nodes skip occupied slots."""
        graph = star("a", [], ["d1"])
        layout = coordinator(graph)
        layout.positions["a"] = (0.0, 0.0)
        layout.positions["other"] = (0.0, 140.0)

        layout.place_expansion("a")

        assert layout.positions["d1"] == (100.0, 140)

    def test_arrange_focus_keeps_focus_position(self) -> None:
        """Test focus arrangement leaves the focus in place."""
        graph = star("a", ["u1"], ["d1", "d2"])
        graph.recompute_degrees()
        layout = coordinator(graph)
        layout.positions.update({"a": (500.0, 300.0), "u1": (0.0, 0.0), "d1": (9.0, 9.0), "d2": (7.0, 7.0)})
        classification = SemanticZoomClassifier(graph, 1, 50, 0.95).classify("a", 1.0)

        assert layout.arrange_focus(classification) is True

        assert layout.positions["a"] == (500.0, 300.0)
        assert layout.positions["u1"] == (500.0, 160.0)
        assert layout.positions["d1"] == (500.0, 440.0)
        assert layout.positions["d2"] == (600.0, 440.0)


class TestReentrancy:
    """Tests for the one-pass-at-a-time guard."""

    @pytest.mark.asyncio
    async def test_concurrent_requests_settle_once(self) -> None:
        """Test overlapping passes settle once."""
        graph = star("a", [], ["b"])
        star("b", [], ["c"], graph)
        settled = []
        layout = coordinator(graph, animation_seconds=0.01)
        layout.on_settled = lambda: settled.append(dict(layout.positions))

        first, second = await asyncio.gather(layout.run("a"), layout.run("b"))

        assert (first, second) == (True, False)
        assert len(settled) == 1
        # The deferred anchor was placed by the running pass
        assert "c" in settled[0]
        assert layout.is_running is False

    @pytest.mark.asyncio
    async def test_arrange_focus_skipped_while_running(self) -> None:
        """Test focus arrangement is skipped during a pass."""
        graph = star("a", [], ["b"])
        graph.recompute_degrees()
        layout = coordinator(graph)
        classification = SemanticZoomClassifier(graph, 1, 50, 0.95).classify("a", 1.0)
        results = []
        layout.on_settled = lambda: results.append(layout.arrange_focus(classification))

        layout.is_running = True
        assert layout.arrange_focus(classification) is False
        layout.is_running = False

        await layout.run("a", animate=False)
        # Guard is released before the settle callback
        assert results == [True]


class TestViewport:
    """Tests for fit, re-center and the zoom lock."""

    def test_fit_two_points(self) -> None:
        """Test fit zooms and centers on two points."""
        layout = coordinator(GraphStore())
        layout.positions.update({"a": (0.0, 0.0), "b": (1000.0, 0.0)})

        assert layout.fit() is True

        assert layout.viewport.zoom == pytest.approx(1.2)
        assert layout.viewport.pan_x == pytest.approx(40.0)
        assert layout.viewport.pan_y == pytest.approx(400.0)

    def test_fit_is_clamped(self) -> None:
        """Test fit respects the zoom limits."""
        layout = coordinator(GraphStore())
        layout.positions.update({"a": (0.0, 0.0), "b": (100000.0, 0.0)})
        layout.fit()
        assert layout.viewport.zoom == pytest.approx(0.1)

        layout.positions = {"solo": (10.0, 10.0)}
        layout.fit()
        assert layout.viewport.zoom == pytest.approx(6.0)

    def test_fit_with_nothing_placed(self) -> None:
        assert coordinator(GraphStore()).fit() is False

    def test_recenter_coalesces_and_locks_zoom(self) -> None:
        """Test re-center triggers collapse and lock the zoom."""
        scheduler = ManualScheduler()
        layout = coordinator(GraphStore(), scheduler)
        layout.positions.update({"a": (100.0, 100.0), "b": (300.0, 100.0)})
        layout.viewport.zoom = 2.0
        calls = []

        def visible() -> list[str]:
            calls.append(1)
            return ["a", "b"]

        for _ in range(3):
            layout.schedule_recenter(visible)
        scheduler.advance(0.1)

        assert calls == [1]
        assert layout.viewport.zoom == 2.0
        assert layout.viewport.pan_x == pytest.approx(640 - 200 * 2.0)
        assert layout.viewport.pan_y == pytest.approx(400 - 100 * 2.0)
        assert layout.locked_zoom == 2.0

    def test_zoom_drift_is_reverted_while_locked(self) -> None:
        """Test drift beyond epsilon is reverted while locked."""
        layout = coordinator(GraphStore())
        layout.viewport.zoom = 1.5
        layout.lock_zoom()

        assert layout.on_zoom_event(2.0) == 1.5
        assert layout.on_zoom_event(1.5005) == 1.5005
        assert layout.viewport.zoom == 1.5005

    def test_zoom_free_when_unlocked(self) -> None:
        """Test zoom events apply when unlocked."""
        layout = coordinator(GraphStore())
        layout.lock_zoom()
        layout.unlock_zoom()

        assert layout.on_zoom_event(3.0) == 3.0

    def test_zoom_by_keeps_center(self) -> None:
        """Test geometric zoom keeps the screen center."""
        layout = coordinator(GraphStore())
        layout.viewport.center_at(50.0, 20.0)

        layout.zoom_by(2.0)

        assert layout.viewport.zoom == 2.0
        cx, cy = layout.viewport.model_center()
        assert cx == pytest.approx(50.0)
        assert cy == pytest.approx(20.0)

    def test_explicit_zero_epsilon_is_kept(self) -> None:
        """A zero epsilon reverts any drift instead of falling back to the default."""
        layout = LayoutCoordinator(GraphStore(), ManualScheduler(), zoom_epsilon=0.0, row_spacing=0.0)
        layout.viewport.zoom = 1.5
        layout.lock_zoom()

        assert layout.zoom_epsilon == 0.0
        assert layout.row_spacing == 0.0
        assert layout.on_zoom_event(1.5005) == 1.5
