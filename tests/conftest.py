"""Pytest configuration and fixtures."""

import pytest

from influence_map.config import Settings, get_test_settings
from influence_map.explorer import (
    EntityCache,
    ExplorerSession,
    GraphStore,
    LayoutCoordinator,
    ManualScheduler,
)
from influence_map.models import Entity, InfluenceType, Relationship, TrustLevel
from influence_map.storage import InMemoryEntityStore


def make_entity(entity_id: str, name: str | None = None, **kwargs) -> Entity:
    """Entity with a readable default name."""
    return Entity(id=entity_id, name=name or entity_id.title(), **kwargs)


def make_rel(
    source: str,
    target: str,
    influence_type: InfluenceType = InfluenceType.MUSICAL,
    trust_level: TrustLevel = TrustLevel.WIKIDATA,
) -> Relationship:
    return Relationship(
        source_id=source,
        target_id=target,
        influence_type=influence_type,
        trust_level=trust_level,
    )


DOWNSTREAM_IDS = [f"d{i:02d}" for i in range(1, 13)]


def hub_entities() -> list[Entity]:
    """Hub "a" with two influencers, twelve influenced and two grand-children via d01."""
    ids = ["a", "u1", "u2", *DOWNSTREAM_IDS, "e1", "e2", "loner"]
    entities = [make_entity(i) for i in ids]
    entities[0] = make_entity("a", "Artist A", name_ja="アーティストA", genres=["rock"])
    return entities


def hub_relationships() -> list[Relationship]:
    rels = [
        make_rel("u1", "a", InfluenceType.LYRICAL, TrustLevel.SELF_STATED),
        make_rel("u2", "a"),
    ]
    rels += [make_rel("a", d) for d in DOWNSTREAM_IDS]
    rels += [make_rel("d01", "e1"), make_rel("d01", "e2")]
    return rels


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with defaults."""
    return get_test_settings()


@pytest.fixture
def hub_store() -> InMemoryEntityStore:
    """Store holding the 2-upstream / 12-downstream hub graph."""
    return InMemoryEntityStore(hub_entities(), hub_relationships())


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual-clock scheduler."""
    return ManualScheduler()


@pytest.fixture
def graph() -> GraphStore:
    return GraphStore()


@pytest.fixture
def cache() -> EntityCache:
    return EntityCache(default_ttl=300.0)


@pytest.fixture
def layout(graph: GraphStore, scheduler: ManualScheduler) -> LayoutCoordinator:
    """Layout coordinator without animation delay."""
    return LayoutCoordinator(graph, scheduler, animation_seconds=0.0)


@pytest.fixture
def session(hub_store: InMemoryEntityStore, scheduler: ManualScheduler) -> ExplorerSession:
    """Explorer session over the hub graph, no animation, manual clock."""
    return ExplorerSession(
        hub_store,
        scheduler=scheduler,
        layout_animation_seconds=0.0,
    )
