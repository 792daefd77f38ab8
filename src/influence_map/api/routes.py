"""API routes for the influence map explorer.

Provides:
- /health
- /v1/entities/search as a selection source
- /v1/sessions/* for driving an explorer session gesture by gesture
"""

import logging
import time
from collections.abc import Callable
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from influence_map.config import settings
from influence_map.errors import EntityNotFoundError, SessionNotFoundError, TransportError
from influence_map.explorer.session import ExplorerSession
from influence_map.models import InfluenceType
from influence_map.storage.base import EntityStore
from influence_map.storage.neo4j_client import Neo4jEntityStore

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    store: str
    store_connected: bool
    sessions: int
    version: str = "0.1.0"


class EntityInfo(BaseModel):
    """Search hit."""

    id: str
    display_label: str
    attributes: dict[str, Any]


class CreateSessionRequest(BaseModel):
    root_id: str


class SelectRequest(BaseModel):
    node_id: str


class LevelRequest(BaseModel):
    delta: float = Field(ge=-1.0, le=1.0)


class ZoomRequest(BaseModel):
    direction: Literal["in", "out"]


class FilterRequest(BaseModel):
    category: InfluenceType | None = None


class RetryRequest(BaseModel):
    entity_id: str


class ViewportRequest(BaseModel):
    """Zoom level the renderer ended up at after a gesture or animation."""

    zoom: float = Field(gt=0.0)


class NodeInfo(BaseModel):
    id: str
    display_label: str
    attributes: dict[str, Any]
    visibility_class: str | None
    markers: list[str]
    position: tuple[float, float] | None
    expanded: bool = False


class EdgeInfo(BaseModel):
    id: str
    source: str
    target: str
    category: str
    trust: str
    confidence: float
    visibility_class: str | None
    markers: list[str]


class SnapshotResponse(BaseModel):
    """Read model of one session."""

    session_id: str
    mode: str
    focus_id: str | None
    filter_level: float | None
    visible_count: int | None
    node_count: int
    viewport: dict[str, Any]
    category_filter: str | None = None
    loading: bool = False
    error: str | None = None
    nodes: list[NodeInfo]
    edges: list[EdgeInfo]


# ============================================================================
# Sessions
# ============================================================================


class SessionRegistry:
    """Live explorer sessions, keyed by session id.

    Sessions not touched for ``idle_seconds`` are closed and dropped the next
    time the registry is used. Clients should still DELETE sessions they are
    done with.
    """

    def __init__(
        self,
        idle_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        **session_options: Any,
    ) -> None:
        self.idle_seconds = settings.session_idle_seconds if idle_seconds is None else idle_seconds
        self.clock = clock
        self.session_options = session_options
        self._sessions: dict[str, ExplorerSession] = {}
        self._last_used: dict[str, float] = {}

    def create(self, store: EntityStore) -> ExplorerSession:
        self.expire_idle()
        session = ExplorerSession(store, **self.session_options)
        self._sessions[session.id] = session
        self._last_used[session.id] = self.clock()
        return session

    def get(self, session_id: str) -> ExplorerSession:
        self.expire_idle()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._last_used[session_id] = self.clock()
        return session

    def remove(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        self._last_used.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.close()

    def expire_idle(self) -> int:
        """Close sessions idle for longer than ``idle_seconds``. Returns how many."""
        if not self.idle_seconds:
            return 0
        now = self.clock()
        expired = [
            sid for sid, used in self._last_used.items() if now - used > self.idle_seconds
        ]
        for sid in expired:
            self.remove(sid)
        if expired:
            logger.info(f"Expired {len(expired)} idle sessions")
        return len(expired)

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        self._last_used.clear()

    def __len__(self) -> int:
        return len(self._sessions)


# ============================================================================
# Helper Functions
# ============================================================================


def get_store(request: Request) -> EntityStore:
    """Get entity store from app state."""
    return request.app.state.store


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_session(request: Request, session_id: str) -> ExplorerSession:
    try:
        return get_registry(request).get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


def to_response(session: ExplorerSession) -> SnapshotResponse:
    snapshot = session.snapshot().to_dict()
    error = session.last_error.value if session.last_error else None
    return SnapshotResponse(session_id=session.id, error=error, **snapshot)


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint."""
    store = get_store(request)
    store_connected = True
    if isinstance(store, Neo4jEntityStore):
        try:
            await store.execute_query("RETURN 1 as n")
        except TransportError:
            store_connected = False

    return HealthResponse(
        status="healthy" if store_connected else "degraded",
        store=type(store).__name__,
        store_connected=store_connected,
        sessions=len(get_registry(request)),
    )


@router.get("/v1/entities/search", response_model=list[EntityInfo])
async def search_entities(
    request: Request,
    q: str,
    limit: int | None = None,
) -> list[EntityInfo]:
    """Search entities by name to pick a root."""
    store = get_store(request)
    limit = min(limit or settings.search_limit, 100)
    try:
        entities = await store.search_entities(q, limit=limit)
    except TransportError as e:
        logger.exception(f"Entity search failed: {e}")
        raise HTTPException(status_code=502, detail=f"Entity store unavailable: {e}")

    return [
        EntityInfo(id=e.id, display_label=e.display_label, attributes=e.attributes())
        for e in entities
    ]


@router.post("/v1/sessions", response_model=SnapshotResponse)
async def create_session(request: Request, body: CreateSessionRequest) -> SnapshotResponse:
    """Open a session rooted at ``root_id``."""
    session = get_registry(request).create(get_store(request))
    try:
        await session.require_entity(body.root_id)
    except EntityNotFoundError:
        get_registry(request).remove(session.id)
        raise HTTPException(status_code=404, detail="Entity not found")
    except TransportError as e:
        get_registry(request).remove(session.id)
        raise HTTPException(status_code=502, detail=f"Entity store unavailable: {e}")

    await session.load_root(body.root_id)
    logger.info(f"Created session {session.id} rooted at {body.root_id}")
    return to_response(session)


@router.get("/v1/sessions/{session_id}/graph", response_model=SnapshotResponse)
async def get_graph(request: Request, session_id: str) -> SnapshotResponse:
    return to_response(get_session(request, session_id))


@router.post("/v1/sessions/{session_id}/select", response_model=SnapshotResponse)
async def select_node(request: Request, session_id: str, body: SelectRequest) -> SnapshotResponse:
    """Tap a node: focus it, or pick a path endpoint in path mode."""
    session = get_session(request, session_id)
    await session.select(body.node_id)
    return to_response(session)


@router.post("/v1/sessions/{session_id}/dismiss", response_model=SnapshotResponse)
async def dismiss(request: Request, session_id: str) -> SnapshotResponse:
    session = get_session(request, session_id)
    session.dismiss()
    return to_response(session)


@router.post("/v1/sessions/{session_id}/level", response_model=SnapshotResponse)
async def adjust_level(request: Request, session_id: str, body: LevelRequest) -> SnapshotResponse:
    """Move the filter level of the focused node by ``delta``."""
    session = get_session(request, session_id)
    session.adjust_level(body.delta)
    # Each request is one gesture; the reply carries classes for the new level
    session.flush_level()
    return to_response(session)


@router.post("/v1/sessions/{session_id}/zoom", response_model=SnapshotResponse)
async def zoom(request: Request, session_id: str, body: ZoomRequest) -> SnapshotResponse:
    """Zoom buttons: filter level steps while focused, geometric zoom otherwise."""
    session = get_session(request, session_id)
    if body.direction == "in":
        session.zoom_in()
    else:
        session.zoom_out()
    session.flush_level()
    return to_response(session)


@router.post("/v1/sessions/{session_id}/viewport", response_model=SnapshotResponse)
async def report_viewport(
    request: Request, session_id: str, body: ViewportRequest
) -> SnapshotResponse:
    """Renderer reports its zoom; drift is reverted while the zoom is locked."""
    session = get_session(request, session_id)
    session.report_zoom(body.zoom)
    return to_response(session)


@router.post("/v1/sessions/{session_id}/path/toggle", response_model=SnapshotResponse)
async def toggle_path(request: Request, session_id: str) -> SnapshotResponse:
    session = get_session(request, session_id)
    session.toggle_path()
    return to_response(session)


@router.post("/v1/sessions/{session_id}/filter", response_model=SnapshotResponse)
async def toggle_filter(request: Request, session_id: str, body: FilterRequest) -> SnapshotResponse:
    session = get_session(request, session_id)
    session.toggle_category_filter(body.category)
    return to_response(session)


@router.post("/v1/sessions/{session_id}/fit", response_model=SnapshotResponse)
async def fit(request: Request, session_id: str) -> SnapshotResponse:
    session = get_session(request, session_id)
    session.fit()
    return to_response(session)


@router.post("/v1/sessions/{session_id}/retry", response_model=SnapshotResponse)
async def retry(request: Request, session_id: str, body: RetryRequest) -> SnapshotResponse:
    """Re-run a failed expansion."""
    session = get_session(request, session_id)
    await session.retry(body.entity_id)
    return to_response(session)


@router.delete("/v1/sessions/{session_id}")
async def delete_session(request: Request, session_id: str) -> dict:
    try:
        get_registry(request).remove(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": True, "session_id": session_id}
