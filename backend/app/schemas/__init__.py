"""Pydantic schemas for the Ollama Explorer API.

All request/response models are defined here for easy import.
"""

from app.schemas.catalog import (
    CacheModelsRequest,
    CacheModelsResponse,
    CapabilitiesResponse,
    LogLine,
    ModelSchema,
    ModelsResponse,
    ModelVersionSchema,
    ScrapeResponse,
    ScrapeStatusResponse,
)
from app.schemas.health import HealthCheckResponse

__all__ = [
    # Catalog
    "ModelSchema",
    "ModelVersionSchema",
    "ModelsResponse",
    "CapabilitiesResponse",
    # Scrape / cache
    "ScrapeResponse",
    "ScrapeStatusResponse",
    "LogLine",
    "CacheModelsRequest",
    "CacheModelsResponse",
    # Health
    "HealthCheckResponse",
]
