"""BuildHub API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BuildHubError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and pub/sub client initialized on startup, closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from buildhub.api.error_handlers import register_error_handlers
from buildhub.api.routes import builds, health, repositories
from buildhub.config import get_settings
from buildhub.infrastructure import database
from buildhub.infrastructure.database import init_db
from buildhub.infrastructure.observability import setup_logging
from buildhub.infrastructure.pubsub_client import init_pubsub

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    pubsub = init_pubsub(settings)
    logger.info("BuildHub API started")
    yield
    logger.info("BuildHub API shutting down")
    await pubsub.aclose()
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(
    title="BuildHub API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(builds.router)
app.include_router(repositories.router)

register_error_handlers(app)
