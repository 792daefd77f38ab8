"""Unit tests for data models."""

from influence_map.models import Entity, InfluenceType, Relationship, TrustLevel


class TestEntity:
    """Tests for Entity model."""

    def test_display_label_prefers_localized_name(self) -> None:
        """Test display label prefers the localized name."""
        assert Entity(id="s", name="Ryuichi Sakamoto", name_ja="坂本龍一").display_label == "坂本龍一"
        assert Entity(id="d", name="Bob Dylan").display_label == "Bob Dylan"

    def test_from_dict(self) -> None:
        """Test entity from Neo4j record."""
        entity = Entity.from_dict({
            "id": "bob-dylan",
            "name": "Bob Dylan",
            "genres": ["folk", "rock"],
            "birth_year": "1941",
        })
        assert entity.genres == ["folk", "rock"]
        assert entity.birth_year == 1941
        assert entity.death_year is None

    def test_to_dict_round_trip(self) -> None:
        """Test entity dictionary conversion."""
        entity = Entity(id="x", name="X", genres=["jazz"], country="US")
        assert Entity.from_dict(entity.to_dict()) == entity


class TestRelationship:
    """Tests for Relationship model."""

    def test_defaults(self) -> None:
        """Test relationship defaults."""
        rel = Relationship(source_id="a", target_id="b")
        assert rel.influence_type == InfluenceType.MUSICAL
        assert rel.trust_level == TrustLevel.WIKIDATA
        assert rel.edge_id == "a->b"

    def test_unknown_values_fall_back(self) -> None:
        """Test unknown category and trust fall back to defaults."""
        rel = Relationship.from_dict({
            "source_id": "a",
            "target_id": "b",
            "influence_type": "telepathic",
            "trust_level": None,
        })
        assert rel.influence_type == InfluenceType.MUSICAL
        assert rel.trust_level == TrustLevel.WIKIDATA

    def test_trust_confidence(self) -> None:
        """Test trust levels map to confidence."""
        assert TrustLevel.SELF_STATED.confidence == 1.0
        assert TrustLevel.EXPERT_DB.confidence == 0.85
        assert TrustLevel.ACADEMIC.confidence == 0.8
        assert TrustLevel.WIKIDATA.confidence == 0.7
        assert TrustLevel.COMMUNITY.confidence == 0.5
