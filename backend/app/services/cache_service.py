"""In-memory catalog cache.

This module provides a singleton cache holding the latest scrape result,
a ready/pending status flag and a rolling buffer of scrape log lines.
Nothing is persisted across process restarts.
"""

import math
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional

import structlog

from app.config import settings
from app.scrapers.base import ModelEntry

logger = structlog.get_logger(__name__)

STATUS_READY = "ready"
STATUS_PENDING = "pending"
CACHE_STATUSES = (STATUS_READY, STATUS_PENDING)


@dataclass
class CachedData:
    """Snapshot of the cache slot."""

    models: List[ModelEntry]
    last_updated: datetime
    limit: Optional[int] = None
    status: str = STATUS_READY


@dataclass
class LogEntry:
    """One line of the rolling scrape log."""

    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp.isoformat(), "message": self.message}


class CacheService:
    """Process-wide read/write slot for the scraped catalog.

    All methods are synchronous; the service is meant to be used from a
    single event loop.
    """

    def __init__(self, log_buffer_size: int = 200):
        """Initialize cache service.

        Args:
            log_buffer_size: Number of log lines kept before the oldest are dropped
        """
        self._data: Optional[CachedData] = None
        self._logs: Deque[LogEntry] = deque(maxlen=max(1, log_buffer_size))
        self.logger = logger.bind(service="cache_service")

    def get(self) -> Optional[CachedData]:
        """Return the current slot, or None when nothing has been cached."""
        return self._data

    def set(
        self,
        models: List[ModelEntry],
        limit: Optional[int] = None,
        status: str = STATUS_READY,
    ) -> CachedData:
        """Replace the cached collection.

        Args:
            models: Scraped models
            limit: Limit the scrape ran with; non-positive values are stored as None
            status: "ready" or "pending"

        Returns:
            The new slot

        Raises:
            ValueError: If status is not a known cache status
        """
        if status not in CACHE_STATUSES:
            raise ValueError(f"Invalid cache status: {status}")

        self._data = CachedData(
            models=list(models),
            last_updated=datetime.now(timezone.utc),
            limit=limit if limit and limit > 0 else None,
            status=status,
        )

        self.logger.info(
            "cache_set",
            model_count=len(self._data.models),
            limit=self._data.limit,
            status=status,
        )
        return self._data

    def set_pending(self) -> CachedData:
        """Flag the slot as pending, creating an empty one if needed."""
        if self._data is not None:
            self._data.status = STATUS_PENDING
        else:
            self._data = CachedData(
                models=[],
                last_updated=datetime.now(timezone.utc),
                status=STATUS_PENDING,
            )

        self.logger.debug("cache_pending", model_count=len(self._data.models))
        return self._data

    def mark_ready(self) -> None:
        """Restore the ready flag without touching models or timestamp."""
        if self._data is not None:
            self._data.status = STATUS_READY
            self.logger.debug("cache_ready")

    def clear(self) -> None:
        """Drop the cached slot. Log lines are kept."""
        self._data = None
        self.logger.info("cache_cleared")

    def has_data(self) -> bool:
        """True when the slot exists and holds at least one model."""
        return self._data is not None and len(self._data.models) > 0

    def is_pending(self) -> bool:
        return self._data is not None and self._data.status == STATUS_PENDING

    def age_minutes(self) -> float:
        """Whole minutes since the last update, ``math.inf`` when empty."""
        if self._data is None:
            return math.inf
        elapsed = datetime.now(timezone.utc) - self._data.last_updated
        return float(math.floor(elapsed.total_seconds() / 60))

    def append_log(self, message: str) -> LogEntry:
        """Add a line to the rolling scrape log."""
        entry = LogEntry(message=message)
        self._logs.append(entry)
        return entry

    def get_logs(self) -> List[LogEntry]:
        return list(self._logs)

    def clear_logs(self) -> None:
        self._logs.clear()


# Global cache instance
_cache_instance: Optional[CacheService] = None


def get_cache_service() -> CacheService:
    """Get or create the global cache service instance.

    This is a singleton factory - the same instance is reused
    across the application.

    Returns:
        CacheService instance
    """
    global _cache_instance

    if _cache_instance is None:
        _cache_instance = CacheService(log_buffer_size=settings.CACHE_LOG_BUFFER_SIZE)
        logger.info("cache_service_initialized", log_buffer_size=settings.CACHE_LOG_BUFFER_SIZE)

    return _cache_instance


async def get_cache() -> CacheService:
    """FastAPI dependency for cache service.

    Usage:
        @router.get("/endpoint")
        async def endpoint(cache: CacheService = Depends(get_cache)):
            ...

    Returns:
        CacheService instance
    """
    return get_cache_service()


def reset_cache_service() -> None:
    """Drop the global instance (used by tests)."""
    global _cache_instance
    _cache_instance = None
