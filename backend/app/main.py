"""Bookmarks Backend - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.routers import bookmarks, platforms
from app.services.classifier import get_url_classifier
from app.services.metadata_extractor import get_metadata_extractor

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()
    logger.info("Starting Bookmarks Backend...")
    if not settings.youtube_api_key:
        logger.info("YOUTUBE_API_KEY not set; YouTube links stay classified as video")

    yield

    # Shutdown: close outbound HTTP clients
    logger.info("Shutting down Bookmarks Backend...")

    try:
        await get_url_classifier().aclose()
    except Exception as e:
        logger.warning(f"Error closing classifier HTTP client: {e}")

    try:
        await get_metadata_extractor().aclose()
    except Exception as e:
        logger.warning(f"Error closing metadata HTTP client: {e}")

    logger.info("Bookmarks Backend shutdown complete")


app = FastAPI(
    title="Bookmarks Backend",
    description="Personal bookmarks with automatic title, cover image, platform and content type",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(bookmarks.router)
app.include_router(platforms.router)


@app.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint for monitoring.

    Reports which optional integrations are configured:
    - storage: Supabase credentials present
    - youtube_api: video/music disambiguation enabled
    """
    settings = get_settings()
    storage_ready = bool(settings.supabase_url and settings.supabase_service_key)
    health = {
        "status": "healthy" if storage_ready else "degraded",
        "services": {
            "storage": {"status": "configured" if storage_ready else "unconfigured"},
            "youtube_api": {
                "status": "configured" if settings.youtube_api_key else "disabled"
            },
        },
    }
    return health
