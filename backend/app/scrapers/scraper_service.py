"""Scraper orchestration service.

This service connects the scraper adapter layer with the cache. It handles
the end-to-end flow: fetch listing → fetch detail pages with bounded
concurrency → store the merged collection in the cache.
"""

import asyncio
from typing import Any, Callable, List, Optional

import structlog

from app.config import settings
from app.scrapers.adapters.ollama import OllamaLibraryAdapter
from app.scrapers.base import BaseScraperAdapter, ModelEntry
from app.services.cache_service import CacheService, get_cache_service
from app.services.snapshot_service import write_snapshot

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[str, Optional[int], Optional[int]], None]

MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 8


def parse_limit(raw: Any) -> Optional[int]:
    """Leniently parse a scrape limit from a request parameter.

    Missing, empty, non-integer and zero values mean "no limit";
    negative values are clamped to 1.

    Args:
        raw: Raw parameter value (str, int or None)

    Returns:
        Positive limit, or None for no limit
    """
    if raw is None or isinstance(raw, bool):
        return None

    try:
        value = int(str(raw).strip())
    except ValueError:
        return None

    if value == 0:
        return None
    return max(1, value)


class ScraperService:
    """Service for orchestrating a catalog scrape and caching the result.

    The listing page is fetched first, then every model's detail page with
    at most ``concurrency`` requests in flight.
    """

    def __init__(
        self,
        adapter: Optional[BaseScraperAdapter] = None,
        cache: Optional[CacheService] = None,
        concurrency: Optional[int] = None,
        request_delay: Optional[float] = None,
    ):
        """Initialize scraper service.

        Args:
            adapter: Site adapter (defaults to OllamaLibraryAdapter)
            cache: Cache to write into (defaults to the global instance)
            concurrency: Detail pages in flight, clamped to 1..8
            request_delay: Seconds to wait before each detail request
        """
        self.adapter = adapter or OllamaLibraryAdapter()
        self.cache = cache or get_cache_service()

        if concurrency is None:
            concurrency = settings.SCRAPE_CONCURRENCY
        self.concurrency = min(MAX_CONCURRENCY, max(MIN_CONCURRENCY, int(concurrency)))

        if request_delay is None:
            request_delay = settings.DETAIL_REQUEST_DELAY_SECONDS
        self.request_delay = max(0.0, float(request_delay))

        self.logger = logger.bind(service="scraper_service")

    async def run(
        self,
        limit: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ModelEntry]:
        """Scrape the listing and every model's versions.

        Args:
            limit: Maximum number of models, None for all (negative
                values mean 1, zero means all, as in parse_limit)
            on_progress: Called with (message, current, total)

        Returns:
            Models in listing order, each with its versions filled in

        Raises:
            ScraperError: If the listing page cannot be fetched
        """
        def progress(message: str, current: Optional[int] = None, total: Optional[int] = None):
            self.logger.info("scrape_progress", message=message, current=current, total=total)
            if on_progress:
                on_progress(message, current, total)

        limit = parse_limit(limit)
        progress("Starting scrape")
        listing = await self.adapter.fetch_models()
        models = listing[:limit] if limit else listing

        total = len(models)
        progress(f"Found {len(listing)} models, processing {total}", 0, total)
        progress(f"Fetching detailed info for {total} models")

        semaphore = asyncio.Semaphore(self.concurrency)
        completed = 0

        async def fetch_versions(model: ModelEntry) -> None:
            nonlocal completed
            async with semaphore:
                if self.request_delay:
                    await asyncio.sleep(self.request_delay)
                model.versions = await self.adapter.fetch_model_versions(model.url)

            completed += 1
            if completed <= 2 or completed % 3 == 0:
                progress(
                    f"Got details for {model.name} ({completed}/{total})",
                    completed,
                    total,
                )

        results = await asyncio.gather(
            *(fetch_versions(m) for m in models),
            return_exceptions=True,
        )

        for model, result in zip(models, results):
            if isinstance(result, Exception):
                model.versions = []
                progress(f"Failed to get details for {model.name}: {result}")

        progress(f"Scraping completed! Found {total} models", total, total)
        return models

    async def refresh_cache(
        self,
        limit: Optional[int] = None,
        save_path: Optional[str] = None,
    ) -> List[ModelEntry]:
        """Run a scrape and store the result in the cache.

        Progress lines are mirrored into the cache log buffer. On failure
        the cache is flagged ready again with its previous contents.

        Args:
            limit: Maximum number of models, None for all
            save_path: Also write a JSON snapshot here when set

        Returns:
            The scraped models

        Raises:
            Exception: Whatever the scrape raised, after restoring the cache status
        """
        limit = parse_limit(limit)

        def record(message: str, current: Optional[int] = None, total: Optional[int] = None):
            self.cache.append_log(message)

        try:
            models = await self.run(limit=limit, on_progress=record)
        except Exception as e:
            self.cache.append_log(f"Scraping failed: {e}")
            self.cache.mark_ready()
            self.logger.error("scrape_failed", limit=limit, error=str(e), exc_info=True)
            raise

        data = self.cache.set(models, limit=limit)

        if save_path:
            write_snapshot(save_path, models, limit=data.limit, last_updated=data.last_updated)
            self.cache.append_log(f"Saved snapshot to {save_path}")

        self.logger.info(
            "scrape_cached",
            model_count=len(models),
            limit=limit,
            at=data.last_updated.isoformat(),
        )
        return models

    async def cleanup(self) -> None:
        await self.adapter.cleanup()


async def run_scrape_job(
    limit: Optional[int] = None,
    save_path: Optional[str] = None,
    cache: Optional[CacheService] = None,
) -> None:
    """Background entry point for a cache refresh.

    Catches all exceptions so a failed scrape never takes down the
    caller (background task or scheduler).

    Args:
        limit: Maximum number of models, None for all
        save_path: Optional snapshot path
        cache: Cache to write into (defaults to the global instance)
    """
    service = ScraperService(cache=cache)
    try:
        await service.refresh_cache(limit=limit, save_path=save_path)
    except Exception as e:
        logger.error("scrape_job_failed", limit=limit, error=str(e), exc_info=True)
    finally:
        await service.cleanup()
