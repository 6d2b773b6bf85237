"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request

from app.schemas import HealthCheckResponse
from app.services.cache_service import CacheService, get_cache

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request, cache: CacheService = Depends(get_cache)):
    """Return service health status.

    ``cache`` is one of:
    - empty: Nothing scraped yet
    - pending: A scrape is running
    - ready: Catalog available
    """
    data = cache.get()
    scheduler = getattr(request.app.state, "scheduler", None)

    return HealthCheckResponse(
        status="ok",
        cache=data.status if data else "empty",
        models=len(data.models) if data else 0,
        scheduler=scheduler.get_jobs_status() if scheduler else {},
    )
