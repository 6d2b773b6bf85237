"""Model catalog API endpoints."""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.schemas import CapabilitiesResponse, ModelSchema, ModelsResponse
from app.services.cache_service import CacheService, get_cache
from app.services.catalog_service import list_capabilities, query_models

router = APIRouter()

CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"


@router.get("", response_model=ModelsResponse)
async def list_models(
    response: Response,
    q: str = Query("", description="Free-text search"),
    capability: Optional[str] = Query(None, description="Exact capability label"),
    sort: str = Query("name", pattern="^(name|capabilities|versions|size|context)$", description="Sort field"),
    order: str = Query("asc", pattern="^(asc|desc)$", description="Sort direction"),
    cache: CacheService = Depends(get_cache),
):
    """Return the cached catalog, filtered and sorted.

    Sort options:
    - name: Alphabetical (default)
    - capabilities: Number of capability labels
    - versions: Number of versions
    - size: Smallest version size
    - context: Largest version context window

    An empty cache yields an empty list with null metadata.
    """
    response.headers["Cache-Control"] = CACHE_CONTROL

    data = cache.get()
    if data is None:
        return ModelsResponse()

    models = query_models(data.models, search=q, capability=capability, sort=sort, order=order)
    age = cache.age_minutes()

    return ModelsResponse(
        models=[ModelSchema.from_entry(m) for m in models],
        last_updated=data.last_updated,
        cache_age_minutes=None if math.isinf(age) else int(age),
        limit=data.limit,
        status=data.status,
    )


@router.get("/capabilities", response_model=CapabilitiesResponse)
async def get_capabilities(cache: CacheService = Depends(get_cache)):
    """List the distinct capability labels in the cached catalog."""
    data = cache.get()
    return CapabilitiesResponse(capabilities=list_capabilities(data.models) if data else [])
