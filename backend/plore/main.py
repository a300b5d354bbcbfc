"""
Plore Sync API

FastAPI application exposing synced workout routes.
"""

from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI

from plore.config import settings
from plore.db.session import init_db, AsyncSessionLocal
from plore.api.v1.router import api_router
from plore.features.health import HttpHealthProvider
from plore.features.workouts.sync import SyncCoordinator, background_sync


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


# === Lifespan ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info("Starting Plore Sync API...")
    await init_db()
    logger.info("Database initialized")

    app.state.coordinator = SyncCoordinator(HttpHealthProvider(), AsyncSessionLocal)

    if settings.background_sync_enabled:
        await background_sync.start(app.state.coordinator)

    yield

    # Shutdown
    if settings.background_sync_enabled:
        await background_sync.stop()
    logger.info("Shutting down...")


# === App Creation ===
app = FastAPI(
    title="Plore Sync API",
    description="Workout GPS route ingestion and projection",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# === Routes ===
app.include_router(api_router, prefix="/api/v1")


# === Health Check ===
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}
