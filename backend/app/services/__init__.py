"""Services module for cache state and catalog operations.

This module contains the in-memory cache, the filter/sort layer over the
scraped catalog and the JSON snapshot export.
"""

from app.services.cache_service import CacheService, CachedData, get_cache_service
from app.services.catalog_service import query_models, list_capabilities
from app.services.snapshot_service import read_snapshot, write_snapshot

__all__ = [
    "CacheService",
    "CachedData",
    "get_cache_service",
    "query_models",
    "list_capabilities",
    "read_snapshot",
    "write_snapshot",
]
