"""Scrape trigger and status endpoints.

A scrape runs as a FastAPI background task; the request returns as soon as
the cache has been flagged pending. Clients poll ``/scrape/status`` to
follow progress.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Query

from app.config import settings
from app.schemas import LogLine, ScrapeResponse, ScrapeStatusResponse
from app.scrapers.scraper_service import parse_limit, run_scrape_job
from app.services.cache_service import STATUS_PENDING, CacheService, get_cache

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.api_route("", methods=["GET", "POST"], response_model=ScrapeResponse)
async def trigger_scrape(
    background_tasks: BackgroundTasks,
    limit: Optional[str] = Query(None, description="Maximum number of models, empty for all"),
    save: bool = Query(False, description="Also write a JSON snapshot"),
    cache: CacheService = Depends(get_cache),
):
    """Start a background scrape of the catalog.

    ``limit`` is parsed leniently: missing, zero or non-numeric values
    mean no limit, negative values are treated as 1.
    """
    if cache.is_pending():
        return ScrapeResponse(message="Scraping already in progress", status=STATUS_PENDING)

    parsed_limit = parse_limit(limit)
    save_path = settings.SNAPSHOT_PATH if save else None

    cache.set_pending()
    cache.append_log(f"Scrape requested (limit={parsed_limit or 'all'})")
    background_tasks.add_task(run_scrape_job, limit=parsed_limit, save_path=save_path, cache=cache)

    logger.info("scrape_scheduled", limit=parsed_limit, save=save)
    return ScrapeResponse(message="Scraping started in background", status=STATUS_PENDING)


@router.get("/status", response_model=ScrapeStatusResponse)
async def scrape_status(cache: CacheService = Depends(get_cache)):
    """Return the cache status and the rolling scrape log."""
    data = cache.get()
    return ScrapeStatusResponse(
        status=data.status if data else None,
        last_updated=data.last_updated if data else None,
        model_count=len(data.models) if data else 0,
        logs=[LogLine(**e.to_dict()) for e in cache.get_logs()],
    )
