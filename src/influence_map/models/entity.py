"""Entity node model - a notable figure in the influence graph."""

from dataclasses import dataclass, field
from typing import Any


def parse_year(value: Any) -> int | None:
    """Parse a year scalar from store records (int, numeric string or None)."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Entity:
    """
    Represents a notable figure (artist, writer, thinker).

    Examples: "Bob Dylan", "Woody Guthrie", "坂本龍一"
    """

    id: str
    name: str  # Primary display name
    name_ja: str | None = None  # Localized name, preferred when present

    # Category tags
    genres: list[str] = field(default_factory=list)

    birth_year: int | None = None
    death_year: int | None = None
    country: str | None = None
    image_url: str | None = None

    # External links
    spotify_url: str | None = None
    youtube_url: str | None = None
    wikidata_id: str | None = None

    @property
    def display_label(self) -> str:
        """Localized name if available, otherwise the primary name."""
        return self.name_ja or self.name

    def attributes(self) -> dict[str, Any]:
        """Attributes exposed to the renderer alongside the label."""
        return {
            "name": self.name,
            "name_ja": self.name_ja,
            "genres": list(self.genres),
            "birth_year": self.birth_year,
            "death_year": self.death_year,
            "image_url": self.image_url,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for Neo4j storage."""
        return {
            "id": self.id,
            "name": self.name,
            "name_ja": self.name_ja,
            "genres": self.genres,
            "birth_year": self.birth_year,
            "death_year": self.death_year,
            "country": self.country,
            "image_url": self.image_url,
            "spotify_url": self.spotify_url,
            "youtube_url": self.youtube_url,
            "wikidata_id": self.wikidata_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Entity":
        """Create from dictionary (Neo4j record)."""
        return cls(
            id=data["id"],
            name=data["name"],
            name_ja=data.get("name_ja"),
            genres=list(data.get("genres") or []),
            birth_year=parse_year(data.get("birth_year")),
            death_year=parse_year(data.get("death_year")),
            country=data.get("country"),
            image_url=data.get("image_url"),
            spotify_url=data.get("spotify_url"),
            youtube_url=data.get("youtube_url"),
            wikidata_id=data.get("wikidata_id"),
        )
