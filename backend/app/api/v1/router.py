"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import cache, health, models, scrape

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(models.router, prefix="/models", tags=["models"])
api_v1_router.include_router(scrape.router, prefix="/scrape", tags=["scrape"])
api_v1_router.include_router(cache.router, prefix="/cache-models", tags=["cache"])
