"""Influence relationship model - a directed, typed, trust-weighted edge."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class InfluenceType(str, Enum):
    """Category of influence."""

    MUSICAL = "musical"
    LYRICAL = "lyrical"
    PHILOSOPHICAL = "philosophical"
    AESTHETIC = "aesthetic"
    PERSONAL = "personal"

    @classmethod
    def parse(cls, value: Any) -> "InfluenceType":
        """Parse a stored value, falling back to musical."""
        try:
            return cls(value)
        except ValueError:
            return cls.MUSICAL


class TrustLevel(str, Enum):
    """Provenance of an influence claim."""

    SELF_STATED = "self_stated"  # The influenced artist said so
    EXPERT_DB = "expert_db"  # Curated music database
    WIKIDATA = "wikidata"
    ACADEMIC = "academic"
    COMMUNITY = "community"  # User-contributed

    @property
    def confidence(self) -> float:
        """Rendering confidence weight (edge opacity)."""
        return TRUST_CONFIDENCE[self]

    @classmethod
    def parse(cls, value: Any) -> "TrustLevel":
        """Parse a stored value, falling back to wikidata."""
        try:
            return cls(value)
        except ValueError:
            return cls.WIKIDATA


TRUST_CONFIDENCE: dict[TrustLevel, float] = {
    TrustLevel.SELF_STATED: 1.0,
    TrustLevel.EXPERT_DB: 0.85,
    TrustLevel.WIKIDATA: 0.7,
    TrustLevel.ACADEMIC: 0.8,
    TrustLevel.COMMUNITY: 0.5,
}


def edge_key(source_id: str, target_id: str) -> str:
    """Graph edge id for a directed pair."""
    return f"{source_id}->{target_id}"


@dataclass
class Relationship:
    """
    Represents a directed influence between two entities.

    Example: Woody Guthrie --musical--> Bob Dylan (trust: self_stated)
    """

    source_id: str  # Influencer
    target_id: str  # Influenced
    influence_type: InfluenceType = InfluenceType.MUSICAL
    trust_level: TrustLevel = TrustLevel.WIKIDATA
    id: str | None = None  # Store row id, if any

    @property
    def edge_id(self) -> str:
        """Directed pair key used by the graph store."""
        return edge_key(self.source_id, self.target_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for Neo4j storage."""
        return {
            "id": self.id,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "influence_type": self.influence_type.value,
            "trust_level": self.trust_level.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Relationship":
        """Create from dictionary (Neo4j record)."""
        return cls(
            id=data.get("id"),
            source_id=data["source_id"],
            target_id=data["target_id"],
            influence_type=InfluenceType.parse(data.get("influence_type")),
            trust_level=TrustLevel.parse(data.get("trust_level")),
        )
