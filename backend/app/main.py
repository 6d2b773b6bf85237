"""Ollama Explorer Backend -- FastAPI Application Entry Point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_v1_router
from app.config import settings
from app.core.logging import configure_logging
from app.scrapers.scheduler import RefreshScheduler
from app.scrapers.scraper_service import parse_limit, run_scrape_job
from app.services.cache_service import get_cache_service

configure_logging(debug=settings.DEBUG)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    logger.info("Starting Ollama Explorer API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    app.state.scheduler = None
    app.state.startup_task = None
    cache = get_cache_service()
    refresh_limit = parse_limit(settings.REFRESH_LIMIT)

    # Start refresh scheduler (only in non-test environments)
    if settings.ENVIRONMENT != "test" and settings.REFRESH_INTERVAL_MINUTES > 0:
        logger.info("Initializing refresh scheduler...")
        scheduler = RefreshScheduler(cache)
        scheduler.start()
        scheduler.schedule_refresh(
            settings.REFRESH_INTERVAL_MINUTES,
            limit=refresh_limit,
            delay_seconds=settings.REFRESH_INTERVAL_MINUTES * 60,
        )
        app.state.scheduler = scheduler
        logger.info(f"Scheduler started (every {settings.REFRESH_INTERVAL_MINUTES} min)")
    else:
        logger.info("Scheduler disabled")

    if settings.SCRAPE_ON_STARTUP and settings.ENVIRONMENT != "test":
        logger.info("Running initial scrape in background...")
        cache.set_pending()
        app.state.startup_task = asyncio.create_task(run_scrape_job(limit=refresh_limit, cache=cache))

    yield

    # Shutdown
    logger.info("Shutting down Ollama Explorer API server...")

    if app.state.scheduler:
        logger.info("Stopping refresh scheduler...")
        app.state.scheduler.stop()

    task = app.state.startup_task
    if task and not task.done():
        task.cancel()


app = FastAPI(
    title="Ollama Explorer API",
    description="Browsable, filterable catalog of the Ollama model library",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API v1 router
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Ollama Explorer API",
        "version": "0.1.0",
        "description": "Scraped catalog of the Ollama model library",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/v1/health",
        "models": "/api/v1/models",
    }
