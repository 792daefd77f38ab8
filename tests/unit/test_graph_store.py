"""Unit tests for the graph store."""

from influence_map.explorer.graph_store import GraphStore
from influence_map.models import InfluenceType, TrustLevel

from tests.conftest import make_entity, make_rel


def build(edges: list[tuple[str, str]]) -> GraphStore:
    graph = GraphStore()
    for source, target in edges:
        graph.add_entity(make_entity(source))
        graph.add_entity(make_entity(target))
        graph.add_relationship(make_rel(source, target))
    return graph


class TestNodes:
    """Tests for node insertion."""

    def test_add_entity_once(self) -> None:
        """Test adding the same entity twice keeps one node."""
        graph = GraphStore()
        assert graph.add_entity(make_entity("a"), is_root=True) is True
        assert graph.add_entity(make_entity("a")) is False

        node = graph.get_node("a")
        assert node is not None
        assert node.is_root is True
        assert node.connection_count == 1
        assert graph.node_count == 1

    def test_new_node_inherits_expansion_claim(self) -> None:
        """A node claimed before insertion is created already expanded."""
        graph = GraphStore()
        graph.try_begin_expansion("a")
        graph.add_entity(make_entity("a"))

        assert graph.get_node("a").expanded is True

    def test_contains(self) -> None:
        graph = build([("a", "b")])
        assert "a" in graph
        assert "z" not in graph


class TestEdges:
    """Tests for edge deduplication by directed pair."""

    def test_second_category_for_same_pair_is_dropped(self) -> None:
        """Test a second category for a loaded pair is dropped."""
        graph = build([("a", "b")])
        added = graph.add_relationship(
            make_rel("a", "b", InfluenceType.LYRICAL, TrustLevel.SELF_STATED)
        )

        assert added is False
        assert graph.edge_count == 1
        edge = graph.get_edge("a->b")
        assert edge.influence_type == InfluenceType.MUSICAL
        assert edge.trust_level == TrustLevel.WIKIDATA

    def test_reverse_pair_is_a_separate_edge(self) -> None:
        """Test the reverse direction is a separate edge."""
        graph = build([("a", "b"), ("b", "a")])

        assert graph.edge_count == 2
        assert graph.has_edge("a", "b")
        assert graph.has_edge("b", "a")
        # Still one neighbor each way
        assert graph.neighborhood("a") == ["b"]

    def test_no_duplicate_edge_ids(self) -> None:
        """Test edge ids stay unique."""
        graph = build([("a", "b"), ("a", "b"), ("b", "c"), ("a", "b")])
        ids = [e.id for e in graph.edges()]
        assert len(ids) == len(set(ids)) == 2


class TestNeighborhood:
    """Tests for neighborhood queries."""

    def test_insertion_order_both_directions(self) -> None:
        """Test neighborhood keeps edge insertion order in both directions."""
        graph = build([("u", "a"), ("a", "x"), ("v", "a"), ("a", "y")])
        assert graph.neighborhood("a") == ["u", "x", "v", "y"]

    def test_upstream(self) -> None:
        """Test upstream lists only nodes with an edge into the node."""
        graph = build([("u", "a"), ("a", "x"), ("v", "a")])
        assert graph.upstream("a") == ["u", "v"]

    def test_unknown_node_has_no_neighbors(self) -> None:
        """Test unknown node has an empty neighborhood."""
        assert GraphStore().neighborhood("nope") == []

    def test_recompute_degrees(self) -> None:
        """Test connection counts follow the current degree."""
        graph = build([("a", "b"), ("a", "c"), ("c", "a")])
        graph.recompute_degrees()

        assert graph.get_node("a").connection_count == 2
        assert graph.get_node("b").connection_count == 1
        assert graph.get_node("c").connection_count == 1


class TestExpansionRecord:
    """Tests for the compare-and-set expansion claim."""

    def test_first_claim_wins(self) -> None:
        """Test only the first expansion claim succeeds."""
        graph = GraphStore()
        assert graph.try_begin_expansion("a") is True
        assert graph.try_begin_expansion("a") is False
        assert graph.is_expanded("a")

    def test_release_allows_retry(self) -> None:
        """Test released expansion can be claimed again."""
        graph = build([("a", "b")])
        graph.try_begin_expansion("a")
        graph.mark_expanded("a")

        graph.release_expansion("a")

        assert not graph.is_expanded("a")
        assert graph.get_node("a").expanded is False
        assert graph.try_begin_expansion("a") is True

    def test_reset(self) -> None:
        """Test reset drops nodes, edges and claims."""
        graph = build([("a", "b")])
        graph.try_begin_expansion("a")

        graph.reset()

        assert graph.node_count == 0
        assert graph.edge_count == 0
        assert not graph.is_expanded("a")
