"""FastAPI application for the influence map explorer.

Serves explorer sessions over HTTP so any renderer can drive the graph
interaction engine and draw its snapshots.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from influence_map.api.routes import SessionRegistry, router
from influence_map.config import settings
from influence_map.storage.neo4j_client import Neo4jEntityStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    logger.info("Starting influence map API...")

    # A store injected before startup (tests, demos) is used as-is
    owned_store: Neo4jEntityStore | None = None
    if getattr(app.state, "store", None) is None:
        owned_store = Neo4jEntityStore()
        await owned_store.connect()
        app.state.store = owned_store
        logger.info("Connected to Neo4j")
    else:
        logger.info(f"Using injected store: {type(app.state.store).__name__}")

    if getattr(app.state, "registry", None) is None:
        app.state.registry = SessionRegistry()

    yield

    # Shutdown
    logger.info("Shutting down influence map API...")
    app.state.registry.close_all()
    if owned_store is not None:
        await owned_store.close()
        app.state.store = None
        logger.info("Disconnected from Neo4j")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Influence Map",
        description="Lazy-loading influence graph explorer with semantic zoom",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "influence_map.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
