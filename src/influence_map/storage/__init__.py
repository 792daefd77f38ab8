"""Storage layer for the influence map."""

from influence_map.storage.base import EntityStore
from influence_map.storage.memory_store import InMemoryEntityStore
from influence_map.storage.neo4j_client import Neo4jEntityStore
from influence_map.storage.schema import get_all_schema_queries

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "Neo4jEntityStore",
    "get_all_schema_queries",
]
