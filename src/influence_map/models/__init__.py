"""Influence map data models."""

from influence_map.models.entity import Entity
from influence_map.models.relationship import (
    TRUST_CONFIDENCE,
    InfluenceType,
    Relationship,
    TrustLevel,
    edge_key,
)

__all__ = [
    "Entity",
    "Relationship",
    "InfluenceType",
    "TrustLevel",
    "TRUST_CONFIDENCE",
    "edge_key",
]
