"""In-memory entity store for development, demos and tests."""

import logging

from influence_map.models import Entity, Relationship

logger = logging.getLogger(__name__)


class InMemoryEntityStore:
    """Dictionary-backed implementation of the ``EntityStore`` protocol.

    Like the persistent store it keeps one row per
    (source, target, influence_type), so a pair may carry several categories.
    """

    def __init__(
        self,
        entities: list[Entity] | None = None,
        relationships: list[Relationship] | None = None,
    ) -> None:
        self._entities: dict[str, Entity] = {}
        self._relationships: list[Relationship] = []
        self.save_entities_batch(entities or [])
        self.save_relationships_batch(relationships or [])

    def save_entities_batch(self, entities: list[Entity]) -> None:
        """Insert or replace entities."""
        for entity in entities:
            self._entities[entity.id] = entity

    def save_relationships_batch(self, relationships: list[Relationship]) -> None:
        """Insert relationships, skipping exact (pair, category) duplicates."""
        existing = {
            (r.source_id, r.target_id, r.influence_type) for r in self._relationships
        }
        for rel in relationships:
            key = (rel.source_id, rel.target_id, rel.influence_type)
            if key in existing:
                continue
            existing.add(key)
            self._relationships.append(rel)

    async def get_entity(self, entity_id: str) -> Entity | None:
        """Get an entity by id."""
        return self._entities.get(entity_id)

    async def get_relationships_inbound(
        self, entity_id: str
    ) -> list[tuple[Entity, Relationship]]:
        """Relationships into ``entity_id`` with their source entity."""
        results: list[tuple[Entity, Relationship]] = []
        for rel in self._relationships:
            if rel.target_id != entity_id:
                continue
            source = self._entities.get(rel.source_id)
            if source is None:
                logger.debug(f"Dangling relationship source: {rel.source_id}")
                continue
            results.append((source, rel))
        return results

    async def get_relationships_outbound(
        self, entity_id: str
    ) -> list[tuple[Entity, Relationship]]:
        """Relationships out of ``entity_id`` with their target entity."""
        results: list[tuple[Entity, Relationship]] = []
        for rel in self._relationships:
            if rel.source_id != entity_id:
                continue
            target = self._entities.get(rel.target_id)
            if target is None:
                logger.debug(f"Dangling relationship target: {rel.target_id}")
                continue
            results.append((target, rel))
        return results

    async def search_entities(self, text: str, limit: int = 10) -> list[Entity]:
        """Case-insensitive substring search on name and localized name."""
        needle = text.strip().lower()
        if not needle:
            return []
        matches = [
            e for e in self._entities.values()
            if needle in e.name.lower() or (e.name_ja and needle in e.name_ja.lower())
        ]
        matches.sort(key=lambda e: (not e.name.lower().startswith(needle), e.name))
        return matches[:limit]
