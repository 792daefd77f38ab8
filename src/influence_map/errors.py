"""Error taxonomy for the explorer.

Only failures of the root entity are surfaced to the user. Everything else
degrades to a partial graph.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """User-visible error states published through ``on_error``."""

    NOT_FOUND = "not_found"  # Root entity does not exist
    LOAD_FAILED = "load_failed"  # Root fetch failed, retryable


class InfluenceMapError(Exception):
    """Base class for all influence map errors."""


class EntityNotFoundError(InfluenceMapError):
    """Requested entity does not exist in the store."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"Entity not found: {entity_id}")
        self.entity_id = entity_id


class TransportError(InfluenceMapError):
    """The entity store could not be reached or failed mid-query."""


class SessionNotFoundError(InfluenceMapError):
    """Unknown explorer session id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id
