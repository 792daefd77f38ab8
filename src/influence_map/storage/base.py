"""Query contract of the entity/relationship store consumed by the explorer."""

from typing import Protocol

from influence_map.models import Entity, Relationship


class EntityStore(Protocol):
    """Read side of the persistent influence store.

    Implementations raise ``TransportError`` for any transport failure and
    return ``None`` (not an exception) for a missing entity.
    """

    async def get_entity(self, entity_id: str) -> Entity | None:
        """Get an entity by id."""
        ...

    async def get_relationships_inbound(
        self, entity_id: str
    ) -> list[tuple[Entity, Relationship]]:
        """Relationships pointing into ``entity_id`` with the resolved source entity."""
        ...

    async def get_relationships_outbound(
        self, entity_id: str
    ) -> list[tuple[Entity, Relationship]]:
        """Relationships leaving ``entity_id`` with the resolved target entity."""
        ...

    async def search_entities(self, text: str, limit: int = 10) -> list[Entity]:
        """Search entities by primary or localized name."""
        ...
