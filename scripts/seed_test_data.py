#!/usr/bin/env python3
"""Seed sample artists and influences into Neo4j for development."""

import asyncio
import logging
from pathlib import Path

# Add src to path for development
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from influence_map.models import Entity, InfluenceType, Relationship, TrustLevel
from influence_map.storage import Neo4jEntityStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


ARTISTS = [
    Entity(id="robert-johnson", name="Robert Johnson", genres=["blues"], birth_year=1911, death_year=1938, country="US"),
    Entity(id="woody-guthrie", name="Woody Guthrie", genres=["folk"], birth_year=1912, death_year=1967, country="US"),
    Entity(id="muddy-waters", name="Muddy Waters", genres=["blues"], birth_year=1913, death_year=1983, country="US"),
    Entity(id="chuck-berry", name="Chuck Berry", genres=["rock and roll"], birth_year=1926, death_year=2017, country="US"),
    Entity(id="bob-dylan", name="Bob Dylan", genres=["folk", "rock"], birth_year=1941, country="US", wikidata_id="Q392"),
    Entity(id="the-beatles", name="The Beatles", genres=["rock", "pop"], country="GB", wikidata_id="Q1299"),
    Entity(id="the-rolling-stones", name="The Rolling Stones", genres=["rock"], country="GB"),
    Entity(id="jimi-hendrix", name="Jimi Hendrix", genres=["rock", "blues"], birth_year=1942, death_year=1970, country="US"),
    Entity(id="david-bowie", name="David Bowie", genres=["rock", "art pop"], birth_year=1947, death_year=2016, country="GB"),
    Entity(id="kraftwerk", name="Kraftwerk", genres=["electronic"], country="DE"),
    Entity(id="ymo", name="Yellow Magic Orchestra", name_ja="イエロー・マジック・オーケストラ", genres=["electronic", "synth-pop"], country="JP"),
    Entity(id="ryuichi-sakamoto", name="Ryuichi Sakamoto", name_ja="坂本龍一", genres=["electronic", "classical"], birth_year=1952, death_year=2023, country="JP"),
    Entity(id="claude-debussy", name="Claude Debussy", genres=["classical"], birth_year=1862, death_year=1918, country="FR"),
    Entity(id="happy-end", name="Happy End", name_ja="はっぴいえんど", genres=["folk rock"], country="JP"),
    Entity(id="patti-smith", name="Patti Smith", genres=["punk", "rock"], birth_year=1946, country="US"),
    Entity(id="arthur-rimbaud", name="Arthur Rimbaud", genres=["poetry"], birth_year=1854, death_year=1891, country="FR"),
]


def influence(
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


RELATIONSHIPS = [
    influence("robert-johnson", "muddy-waters", trust_level=TrustLevel.EXPERT_DB),
    influence("robert-johnson", "the-rolling-stones", trust_level=TrustLevel.SELF_STATED),
    influence("robert-johnson", "jimi-hendrix"),
    influence("woody-guthrie", "bob-dylan", trust_level=TrustLevel.SELF_STATED),
    influence("woody-guthrie", "bob-dylan", InfluenceType.LYRICAL, TrustLevel.SELF_STATED),
    influence("muddy-waters", "the-rolling-stones", trust_level=TrustLevel.SELF_STATED),
    influence("muddy-waters", "jimi-hendrix"),
    influence("chuck-berry", "the-beatles", trust_level=TrustLevel.EXPERT_DB),
    influence("chuck-berry", "the-rolling-stones", trust_level=TrustLevel.EXPERT_DB),
    influence("bob-dylan", "the-beatles", InfluenceType.LYRICAL, TrustLevel.ACADEMIC),
    influence("bob-dylan", "jimi-hendrix"),
    influence("bob-dylan", "david-bowie"),
    influence("bob-dylan", "patti-smith", InfluenceType.LYRICAL, TrustLevel.SELF_STATED),
    influence("bob-dylan", "happy-end", InfluenceType.LYRICAL, TrustLevel.COMMUNITY),
    influence("the-beatles", "david-bowie"),
    influence("the-beatles", "ymo", trust_level=TrustLevel.COMMUNITY),
    influence("the-beatles", "happy-end", trust_level=TrustLevel.EXPERT_DB),
    influence("kraftwerk", "david-bowie", InfluenceType.AESTHETIC),
    influence("kraftwerk", "ymo", trust_level=TrustLevel.SELF_STATED),
    influence("claude-debussy", "ryuichi-sakamoto", trust_level=TrustLevel.SELF_STATED),
    influence("ymo", "ryuichi-sakamoto", InfluenceType.PERSONAL),
    influence("happy-end", "ymo", InfluenceType.PERSONAL, TrustLevel.EXPERT_DB),
    influence("arthur-rimbaud", "patti-smith", InfluenceType.PHILOSOPHICAL, TrustLevel.SELF_STATED),
    influence("arthur-rimbaud", "bob-dylan", InfluenceType.LYRICAL, TrustLevel.ACADEMIC),
]


async def main(clear: bool = False) -> None:
    """Main entry point."""
    store = Neo4jEntityStore()
    await store.connect()

    try:
        if clear:
            logger.warning("Clearing all data...")
            await store.clear_all()

        logger.info("Setting up Neo4j schema...")
        await store.setup_schema()

        await store.save_entities_batch(ARTISTS)
        await store.save_relationships_batch(RELATIONSHIPS)

        logger.info(
            f"\nSeeding complete:\n"
            f"  Artists: {len(ARTISTS)}\n"
            f"  Influences: {len(RELATIONSHIPS)}"
        )
    finally:
        await store.close()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Seed sample influence data")
    parser.add_argument("--clear", action="store_true", help="Delete existing data first")
    args = parser.parse_args()

    asyncio.run(main(clear=args.clear))
