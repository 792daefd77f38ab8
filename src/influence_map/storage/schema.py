"""Neo4j schema setup - constraints, indexes, and graph structure."""

# Schema setup queries
SCHEMA_QUERIES = [
    # Uniqueness constraints
    "CREATE CONSTRAINT artist_id IF NOT EXISTS FOR (a:Artist) REQUIRE a.id IS UNIQUE",
    "CREATE CONSTRAINT artist_wikidata_id IF NOT EXISTS FOR (a:Artist) REQUIRE a.wikidata_id IS UNIQUE",
    # Name lookups
    "CREATE INDEX artist_name IF NOT EXISTS FOR (a:Artist) ON (a.name)",
    "CREATE INDEX artist_name_ja IF NOT EXISTS FOR (a:Artist) ON (a.name_ja)",
]

# Full-text index for name search (Latin and Japanese names)
FULLTEXT_INDEX_QUERY = """
CREATE FULLTEXT INDEX artist_names IF NOT EXISTS
FOR (a:Artist) ON EACH [a.name, a.name_ja]
"""

# Relationship types used in the graph:
# (influencer:Artist)-[:INFLUENCED {id, influence_type, trust_level}]->(influenced:Artist)
# One relationship per (influencer, influenced, influence_type).


def get_all_schema_queries() -> list[str]:
    """Get all schema setup queries."""
    queries = SCHEMA_QUERIES.copy()
    queries.append(FULLTEXT_INDEX_QUERY)
    return queries
