"""Cache ingest endpoint.

Scrapes run elsewhere (for example ``scripts/run_scraper.py`` on a
developer machine) POST their results here to replace the cached catalog.
"""

import structlog
from fastapi import APIRouter, Depends

from app.schemas import CacheModelsRequest, CacheModelsResponse
from app.services.cache_service import STATUS_READY, CacheService, get_cache

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("", response_model=CacheModelsResponse)
async def cache_models(
    request: CacheModelsRequest,
    cache: CacheService = Depends(get_cache),
):
    """Store a pushed model collection as the ready catalog."""
    models = [m.to_entry() for m in request.models]
    cache.set(models, limit=request.limit, status=STATUS_READY)
    cache.append_log(f"Cached {len(models)} models pushed by client")

    logger.info("cache_models_received", model_count=len(models), limit=request.limit)
    return CacheModelsResponse(
        message=f"Successfully cached {len(models)} models",
        status=STATUS_READY,
    )
