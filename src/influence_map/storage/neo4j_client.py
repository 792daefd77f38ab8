"""Neo4j-backed entity store."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession
from neo4j.exceptions import DriverError, Neo4jError, ServiceUnavailable

from influence_map.config import settings
from influence_map.errors import TransportError
from influence_map.models import Entity, Relationship
from influence_map.storage.schema import get_all_schema_queries

logger = logging.getLogger(__name__)


class Neo4jEntityStore:
    """Async Neo4j implementation of the ``EntityStore`` protocol."""

    def __init__(
        self,
        uri: str | None = None,
        user: str | None = None,
        password: str | None = None,
        database: str | None = None,
    ) -> None:
        self.uri = uri or settings.neo4j_uri
        self.user = user or settings.neo4j_user
        self.password = password or settings.neo4j_password
        self.database = database or settings.neo4j_database
        self._driver: AsyncDriver | None = None

    async def connect(self) -> None:
        """Establish connection to Neo4j."""
        if self._driver is None:
            self._driver = AsyncGraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
            )
            # Verify connectivity
            try:
                await self._driver.verify_connectivity()
                logger.info(f"Connected to Neo4j at {self.uri}")
            except ServiceUnavailable as e:
                logger.error(f"Failed to connect to Neo4j: {e}")
                raise

    async def close(self) -> None:
        """Close the database connection."""
        if self._driver is not None:
            await self._driver.close()
            self._driver = None
            logger.info("Disconnected from Neo4j")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session."""
        if self._driver is None:
            await self.connect()
        assert self._driver is not None
        async with self._driver.session(database=self.database) as session:
            yield session

    async def setup_schema(self) -> None:
        """Create all constraints and indexes."""
        queries = get_all_schema_queries()
        async with self.session() as session:
            for query in queries:
                try:
                    await session.run(query)
                    logger.debug(f"Executed schema query: {query[:50]}...")
                except Neo4jError as e:
                    # Some indexes might already exist, that's ok
                    logger.warning(f"Schema query warning: {e}")
        logger.info("Schema setup completed")

    async def execute_query(self, query: str, **params: Any) -> list[dict[str, Any]]:
        """Execute a raw Cypher query.

        Driver and server failures surface as ``TransportError``.
        """
        results: list[dict[str, Any]] = []
        try:
            async with self.session() as session:
                result = await session.run(query, **params)
                async for record in result:
                    results.append(dict(record))
        except (Neo4jError, DriverError) as e:
            raise TransportError(f"Neo4j query failed: {e}") from e
        return results

    # ==========================================================================
    # Read operations (EntityStore protocol)
    # ==========================================================================

    async def get_entity(self, entity_id: str) -> Entity | None:
        """Get an artist by ID."""
        records = await self.execute_query(
            "MATCH (a:Artist {id: $id}) RETURN a",
            id=entity_id,
        )
        if not records:
            return None
        return Entity.from_dict(dict(records[0]["a"]))

    async def get_relationships_inbound(
        self, entity_id: str
    ) -> list[tuple[Entity, Relationship]]:
        """Get influencers of an artist with the relationship info."""
        query = """
        MATCH (influencer:Artist)-[r:INFLUENCED]->(a:Artist {id: $id})
        RETURN influencer, r
        """
        records = await self.execute_query(query, id=entity_id)
        results: list[tuple[Entity, Relationship]] = []
        for record in records:
            influencer = Entity.from_dict(dict(record["influencer"]))
            rel_data = dict(record["r"])
            results.append((
                influencer,
                Relationship.from_dict({
                    **rel_data,
                    "source_id": influencer.id,
                    "target_id": entity_id,
                }),
            ))
        return results

    async def get_relationships_outbound(
        self, entity_id: str
    ) -> list[tuple[Entity, Relationship]]:
        """Get artists influenced by an artist with the relationship info."""
        query = """
        MATCH (a:Artist {id: $id})-[r:INFLUENCED]->(influenced:Artist)
        RETURN influenced, r
        """
        records = await self.execute_query(query, id=entity_id)
        results: list[tuple[Entity, Relationship]] = []
        for record in records:
            influenced = Entity.from_dict(dict(record["influenced"]))
            rel_data = dict(record["r"])
            results.append((
                influenced,
                Relationship.from_dict({
                    **rel_data,
                    "source_id": entity_id,
                    "target_id": influenced.id,
                }),
            ))
        return results

    async def search_entities(self, text: str, limit: int = 10) -> list[Entity]:
        """Search artists by name or Japanese name (case-insensitive)."""
        query = """
        MATCH (a:Artist)
        WHERE toLower(a.name) CONTAINS toLower($text)
           OR toLower(coalesce(a.name_ja, '')) CONTAINS toLower($text)
        RETURN a
        ORDER BY a.name
        LIMIT $limit
        """
        records = await self.execute_query(query, text=text, limit=limit)
        return [Entity.from_dict(dict(record["a"])) for record in records]

    # ==========================================================================
    # Write operations (data import)
    # ==========================================================================

    async def save_entities_batch(self, entities: list[Entity]) -> None:
        """Save multiple artists in a single batch operation."""
        if not entities:
            return

        query = """
        UNWIND $items AS item
        MERGE (a:Artist {id: item.id})
        SET a += item.props
        """
        items = []
        for entity in entities:
            props = entity.to_dict()
            entity_id = props.pop("id")
            items.append({"id": entity_id, "props": props})

        await self.execute_query(query, items=items)
        logger.debug(f"Batch saved {len(entities)} artists")

    async def save_relationships_batch(self, relationships: list[Relationship]) -> None:
        """Save multiple influence relationships in a single batch operation."""
        if not relationships:
            return

        query = """
        UNWIND $items AS item
        MATCH (source:Artist {id: item.source_id})
        MATCH (target:Artist {id: item.target_id})
        MERGE (source)-[r:INFLUENCED {influence_type: item.influence_type}]->(target)
        SET r.trust_level = item.trust_level,
            r.id = coalesce(item.id, r.id, randomUUID())
        """
        items = [rel.to_dict() for rel in relationships]
        await self.execute_query(query, items=items)
        logger.debug(f"Batch saved {len(relationships)} relationships")

    async def clear_all(self) -> None:
        """Delete all artists and relationships. Use with caution!"""
        await self.execute_query("MATCH (n:Artist) DETACH DELETE n")
        logger.warning("All artists cleared from Neo4j")
