"""Tests for scrape orchestration."""

import asyncio
from typing import List, Optional

import httpx
import pytest

from app.core.exceptions import ScraperError
from app.scrapers import scraper_service
from app.scrapers.base import BaseScraperAdapter, ModelEntry, ModelVersion
from app.scrapers.scraper_service import ScraperService, parse_limit, run_scrape_job
from app.services.cache_service import STATUS_PENDING, STATUS_READY


class SlowAdapter(BaseScraperAdapter):
    """In-memory adapter that records how many detail fetches overlap."""

    site_slug = "fake"

    def __init__(self, count: int, fail_on: Optional[str] = None):
        super().__init__(base_url="https://fake.test")
        self.count = count
        self.fail_on = fail_on
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_models(self, limit: Optional[int] = None) -> List[ModelEntry]:
        return [ModelEntry(name=f"m{i}", url=f"/library/m{i}") for i in range(self.count)]

    async def fetch_model_versions(self, model_url: str) -> List[ModelVersion]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if self.fail_on and model_url.endswith(self.fail_on):
                raise RuntimeError("boom")
            return [ModelVersion(name=f"{model_url.rsplit('/', 1)[-1]}:latest", is_latest=True)]
        finally:
            self.in_flight -= 1


class InstantAdapter(BaseScraperAdapter):
    """In-memory adapter that records the order of detail fetches."""

    site_slug = "instant"

    def __init__(self, count: int, events: list):
        super().__init__(base_url="https://fake.test")
        self.count = count
        self.events = events

    async def fetch_models(self, limit: Optional[int] = None) -> List[ModelEntry]:
        return [ModelEntry(name=f"m{i}", url=f"/library/m{i}") for i in range(self.count)]

    async def fetch_model_versions(self, model_url: str) -> List[ModelVersion]:
        self.events.append(("fetch", model_url))
        return []


class TestParseLimit:
    """Tests for lenient limit parsing."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, None),
            ("", None),
            ("abc", None),
            ("0", None),
            (0, None),
            ("5", 5),
            (" 12 ", 12),
            (7, 7),
            ("-3", 1),
            ("2.5", None),
            (True, None),
        ],
    )
    def test_parse_limit(self, raw, expected):
        assert parse_limit(raw) == expected


class TestScraperServiceRun:
    """Tests for ScraperService.run."""

    async def test_run_against_mock_site(self, make_adapter, site_handler, cache):
        service = ScraperService(adapter=make_adapter(site_handler), cache=cache)

        models = await service.run()

        assert [m.name for m in models] == ["llama3.2", "llava", "nomic-embed-text"]
        assert [v.name for v in models[0].versions] == [
            "llama3.2:latest", "llama3.2:1b", "llama3.2:3b",
        ]
        # Detail pages that 404 yield no versions
        assert models[1].versions == []

    async def test_run_respects_limit(self, make_adapter, site_handler, cache):
        service = ScraperService(adapter=make_adapter(site_handler), cache=cache)
        messages = []

        models = await service.run(limit=1, on_progress=lambda msg, cur, tot: messages.append(msg))

        assert len(models) == 1
        assert messages[0] == "Starting scrape"
        assert "Found 3 models, processing 1" in messages
        assert messages[-1] == "Scraping completed! Found 1 models"

    async def test_concurrency_is_bounded(self, cache):
        adapter = SlowAdapter(count=10)
        service = ScraperService(adapter=adapter, cache=cache, concurrency=3)

        models = await service.run()

        assert len(models) == 10
        assert adapter.max_in_flight <= 3
        assert all(m.versions for m in models)

    @pytest.mark.parametrize("requested, expected", [(0, 1), (-4, 1), (3, 3), (50, 8)])
    def test_concurrency_is_clamped(self, cache, requested, expected):
        service = ScraperService(adapter=SlowAdapter(count=0), cache=cache, concurrency=requested)
        assert service.concurrency == expected

    async def test_failed_detail_keeps_model(self, cache):
        adapter = SlowAdapter(count=3, fail_on="m1")
        service = ScraperService(adapter=adapter, cache=cache)
        messages = []

        models = await service.run(on_progress=lambda msg, cur, tot: messages.append(msg))

        assert [m.name for m in models] == ["m0", "m1", "m2"]
        assert models[1].versions == []
        assert any(msg.startswith("Failed to get details for m1") for msg in messages)

    async def test_negative_limit_means_one(self, cache):
        service = ScraperService(adapter=SlowAdapter(count=5), cache=cache)

        models = await service.run(limit=-2)

        assert [m.name for m in models] == ["m0"]

    async def test_zero_limit_means_all(self, cache):
        service = ScraperService(adapter=SlowAdapter(count=5), cache=cache)

        assert len(await service.run(limit=0)) == 5

    async def test_progress_cadence(self, cache):
        service = ScraperService(adapter=SlowAdapter(count=7), cache=cache)
        reported = []

        def on_progress(message, current, total):
            if message.startswith("Got details for"):
                reported.append((current, total))

        await service.run(on_progress=on_progress)

        assert reported == [(1, 7), (2, 7), (3, 7), (6, 7)]

    async def test_request_delay_precedes_each_fetch(self, monkeypatch, cache):
        events = []

        async def fake_sleep(seconds):
            events.append(("sleep", seconds))

        monkeypatch.setattr(scraper_service.asyncio, "sleep", fake_sleep)
        adapter = InstantAdapter(count=3, events=events)
        service = ScraperService(adapter=adapter, cache=cache, concurrency=1, request_delay=0.5)

        await service.run()

        assert events == [
            ("sleep", 0.5), ("fetch", "/library/m0"),
            ("sleep", 0.5), ("fetch", "/library/m1"),
            ("sleep", 0.5), ("fetch", "/library/m2"),
        ]

    async def test_no_sleep_without_delay(self, monkeypatch, cache):
        events = []

        async def fake_sleep(seconds):
            events.append(("sleep", seconds))

        monkeypatch.setattr(scraper_service.asyncio, "sleep", fake_sleep)
        service = ScraperService(adapter=InstantAdapter(count=2, events=events), cache=cache, request_delay=0)

        await service.run()

        assert [e[0] for e in events] == ["fetch", "fetch"]

    async def test_listing_failure_propagates(self, make_adapter, cache):
        service = ScraperService(adapter=make_adapter(lambda r: httpx.Response(500)), cache=cache)

        with pytest.raises(ScraperError):
            await service.run()


class TestRefreshCache:
    """Tests for ScraperService.refresh_cache and run_scrape_job."""

    async def test_refresh_cache_stores_models(self, make_adapter, site_handler, cache):
        cache.set_pending()
        service = ScraperService(adapter=make_adapter(site_handler), cache=cache)

        await service.refresh_cache(limit=2)

        data = cache.get()
        assert data.status == STATUS_READY
        assert data.limit == 2
        assert [m.name for m in data.models] == ["llama3.2", "llava"]
        assert cache.get_logs()[0].message == "Starting scrape"

    async def test_refresh_cache_normalizes_limit(self, make_adapter, site_handler, cache):
        service = ScraperService(adapter=make_adapter(site_handler), cache=cache)

        await service.refresh_cache(limit=-3)

        data = cache.get()
        assert data.limit == 1
        assert [m.name for m in data.models] == ["llama3.2"]

    async def test_refresh_cache_writes_snapshot(self, make_adapter, site_handler, cache, tmp_path):
        target = tmp_path / "out" / "ollama.json"
        service = ScraperService(adapter=make_adapter(site_handler), cache=cache)

        await service.refresh_cache(save_path=str(target))

        assert target.exists()
        assert cache.get_logs()[-1].message == f"Saved snapshot to {target}"

    async def test_refresh_cache_failure_restores_ready(self, make_adapter, cache, sample_models):
        cache.set(sample_models)
        before = cache.get().last_updated
        cache.set_pending()
        service = ScraperService(adapter=make_adapter(lambda r: httpx.Response(500)), cache=cache)

        with pytest.raises(ScraperError):
            await service.refresh_cache()

        data = cache.get()
        assert data.status == STATUS_READY
        assert data.last_updated == before
        assert len(data.models) == len(sample_models)
        assert cache.get_logs()[-1].message.startswith("Scraping failed:")

    async def test_run_scrape_job_swallows_errors(self, monkeypatch, make_adapter, cache):
        adapter = make_adapter(lambda r: httpx.Response(500))
        monkeypatch.setattr(scraper_service, "OllamaLibraryAdapter", lambda: adapter)
        cache.set_pending()

        await run_scrape_job(limit=1, cache=cache)

        assert cache.get().status == STATUS_READY
        assert cache.has_data() is False

    async def test_run_scrape_job_success(self, monkeypatch, make_adapter, site_handler, cache):
        adapter = make_adapter(site_handler)
        monkeypatch.setattr(scraper_service, "OllamaLibraryAdapter", lambda: adapter)
        cache.set_pending()
        assert cache.get().status == STATUS_PENDING

        await run_scrape_job(cache=cache)

        assert cache.get().status == STATUS_READY
        assert len(cache.get().models) == 3
