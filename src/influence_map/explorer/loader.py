"""Lazy neighborhood loading.

One expansion fetches an entity and both of its relationship directions,
merges them into the graph store and hands the entity to the layout
coordinator as an anchor. Each entity is expanded at most once per graph.
"""

import asyncio
import logging
from collections.abc import Callable

from influence_map.errors import ErrorKind, TransportError
from influence_map.explorer.cache import EntityCache
from influence_map.explorer.graph_store import GraphStore
from influence_map.explorer.layout import LayoutCoordinator
from influence_map.models import Entity, Relationship
from influence_map.storage.base import EntityStore

logger = logging.getLogger(__name__)

RelationshipRows = list[tuple[Entity, Relationship]]


def entity_cache_key(entity_id: str) -> str:
    return f"entity:{entity_id}"


def influences_cache_key(entity_id: str) -> str:
    return f"influences:{entity_id}"


class ExpansionLoader:
    """Fetches neighborhoods from the store into the graph."""

    def __init__(
        self,
        store: EntityStore,
        graph: GraphStore,
        cache: EntityCache,
        layout: LayoutCoordinator,
        generation: Callable[[], int] | None = None,
        on_error: Callable[[ErrorKind], None] | None = None,
        on_loading_changed: Callable[[bool], None] | None = None,
        on_root_loaded: Callable[[Entity], None] | None = None,
    ) -> None:
        self.store = store
        self.graph = graph
        self.cache = cache
        self.layout = layout
        self._generation = generation or (lambda: 0)
        self.on_error = on_error
        self.on_loading_changed = on_loading_changed
        self.on_root_loaded = on_root_loaded

    async def expand(
        self,
        entity_id: str,
        *,
        is_root: bool = False,
        skip_layout_animation: bool = False,
    ) -> Entity | None:
        """Expand ``entity_id`` once. Returns the entity, or None if skipped or failed.

        A second call for an id that is already claimed returns immediately,
        even while the first call is still awaiting the store.
        """
        if not self.graph.try_begin_expansion(entity_id):
            logger.debug(f"Already expanded: {entity_id}")
            return None

        generation = self._generation()
        if is_root:
            self._set_loading(True)

        try:
            entity = await self.resolve_entity(entity_id)
        except TransportError as e:
            self._handle_failure(entity_id, is_root, e)
            return None

        if self._superseded(generation, entity_id):
            return None

        if entity is None:
            if is_root:
                logger.error(f"Root entity not found: {entity_id}")
                self._set_loading(False)
                self._emit_error(ErrorKind.NOT_FOUND)
            else:
                logger.debug(f"Entity not found, skipping expansion: {entity_id}")
            return None

        added = self.graph.add_entity(entity, is_root=is_root)

        try:
            inbound, outbound = await self.resolve_relationships(entity_id)
        except TransportError as e:
            self._handle_failure(entity_id, is_root, e)
            return None

        if self._superseded(generation, entity_id):
            return None

        added_nodes, added_edges = self._merge(inbound + outbound)
        logger.info(
            f"Expanded {entity_id}: {len(inbound)} inbound, {len(outbound)} outbound, "
            f"{added_nodes} new nodes, {added_edges} new edges"
        )

        self.graph.mark_expanded(entity_id)
        if added or added_nodes or added_edges:
            await self.layout.run(entity_id, animate=not skip_layout_animation)
            if self._superseded(generation, entity_id):
                return None

        if is_root:
            self.layout.fit()
            self._set_loading(False)
            if self.on_root_loaded is not None:
                self.on_root_loaded(entity)

        return entity

    async def resolve_entity(self, entity_id: str) -> Entity | None:
        """Entity detail, from the cache when fresh. Misses are not cached."""
        key = entity_cache_key(entity_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        entity = await self.store.get_entity(entity_id)
        if entity is not None:
            self.cache.set(key, entity)
        return entity

    async def resolve_relationships(self, entity_id: str) -> tuple[RelationshipRows, RelationshipRows]:
        """Inbound and outbound rows, fetched together and cached as one unit."""
        key = influences_cache_key(entity_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        inbound, outbound = await asyncio.gather(
            self.store.get_relationships_inbound(entity_id),
            self.store.get_relationships_outbound(entity_id),
        )
        result = (list(inbound), list(outbound))
        self.cache.set(key, result)
        return result

    def _merge(self, rows: RelationshipRows) -> tuple[int, int]:
        added_nodes = 0
        added_edges = 0
        for counterpart, rel in rows:
            if counterpart is None:
                continue
            if self.graph.add_entity(counterpart):
                added_nodes += 1
            if self.graph.add_relationship(rel):
                added_edges += 1
        return added_nodes, added_edges

    def _superseded(self, generation: int, entity_id: str) -> bool:
        if self._generation() != generation:
            logger.info(f"Discarding stale expansion of {entity_id}: root changed")
            return True
        return False

    def _handle_failure(self, entity_id: str, is_root: bool, error: TransportError) -> None:
        # The id stays claimed; only an explicit retry releases it
        if is_root:
            logger.error(f"Failed to load root {entity_id}: {error}")
            self._set_loading(False)
            self._emit_error(ErrorKind.LOAD_FAILED)
        else:
            logger.warning(f"Failed to expand {entity_id}: {error}")

    def _set_loading(self, loading: bool) -> None:
        if self.on_loading_changed is not None:
            self.on_loading_changed(loading)

    def _emit_error(self, kind: ErrorKind) -> None:
        if self.on_error is not None:
            self.on_error(kind)
