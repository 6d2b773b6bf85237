"""Ollama model library scraper adapter.

Scrapes the public model catalog at ollama.com/search and the per-model
library pages. Detail pages render the version table twice: a narrow
"mobile" list (``sm:hidden`` anchors with a ``·``-separated info line) and a
wide "desktop" grid (``hidden sm:grid sm:grid-cols-12`` rows with one cell per
field). Both layouts are parsed and merged by version name.
"""

from dataclasses import replace
from typing import Dict, List, Optional

import structlog
from bs4 import BeautifulSoup

from app.config import settings
from app.core.exceptions import ScraperError
from app.scrapers.base import BaseScraperAdapter, ModelEntry, ModelVersion
from app.scrapers.utils.normalizer import (
    node_text,
    split_info_text,
    strip_context_suffix,
)


logger = structlog.get_logger(__name__)


# Listing page selectors
MODEL_ITEM_SELECTOR = "li[x-test-model]"
MODEL_TITLE_SELECTOR = "[x-test-search-response-title]"
MODEL_DESCRIPTION_SELECTOR = 'p:not([class*="space-x-5"])'
MODEL_CAPABILITY_SELECTOR = "[x-test-capability]"
MODEL_PULLS_SELECTOR = "[x-test-pull-count]"
MODEL_TAGS_SELECTOR = "[x-test-tag-count]"
MODEL_UPDATED_SELECTOR = "[x-test-updated]"

# Detail page selectors
MOBILE_ROW_SELECTOR = 'a[href^="/library/"].sm\\:hidden'
DESKTOP_ROW_SELECTOR = "div.hidden.group"
DESKTOP_ROW_CLASSES = ("sm:grid", "sm:grid-cols-12")
VERSION_LINK_SELECTOR = 'a[href^="/library/"]'
VERSION_NAME_SELECTOR = "p.font-medium"
VERSION_INFO_SELECTOR = "p.text-neutral-500"
LATEST_BADGE_SELECTOR = "span.border-blue-500"

VERSION_FIELDS = ("size", "context", "input", "updated", "url")


def merge_versions(versions: List[ModelVersion]) -> List[ModelVersion]:
    """Merge version rows that describe the same tag.

    Rows are keyed by name. The first occurrence fixes the output position;
    later duplicates overwrite a field only with a non-empty value, and the
    latest flag is kept if either row carries it.

    Args:
        versions: Mobile rows followed by desktop rows

    Returns:
        One ModelVersion per distinct name, in first-seen order
    """
    merged: Dict[str, ModelVersion] = {}

    for version in versions:
        existing = merged.get(version.name)
        if existing is None:
            merged[version.name] = replace(version)
            continue

        for field_name in VERSION_FIELDS:
            value = getattr(version, field_name)
            if value:
                setattr(existing, field_name, value)
        existing.is_latest = existing.is_latest or version.is_latest

    return list(merged.values())


class OllamaLibraryAdapter(BaseScraperAdapter):
    """Scraper for the ollama.com model library."""

    site_slug = "ollama"
    site_name = "Ollama"

    def __init__(self, *args, **kwargs):
        """Initialize Ollama adapter."""
        super().__init__(*args, **kwargs)
        self.logger = logger.bind(adapter=self.site_slug)

    @property
    def listing_url(self) -> str:
        return f"{self.base_url}{settings.LISTING_PATH}"

    async def fetch_models(self, limit: Optional[int] = None) -> List[ModelEntry]:
        """Fetch the catalog listing page and parse its model cards.

        Args:
            limit: Maximum number of models, None for all

        Returns:
            List of ModelEntry objects (versions empty)

        Raises:
            ScraperError: If the listing page cannot be fetched
        """
        self.logger.info("fetching_model_listing", url=self.listing_url, limit=limit)

        html = await self._fetch_html(self.listing_url)
        models = self.parse_listing(html, limit=limit)

        self.logger.info("fetched_model_listing", count=len(models))
        return models

    async def fetch_model_versions(self, model_url: str) -> List[ModelVersion]:
        """Fetch and parse a model detail page.

        Failures are logged and yield an empty list so one broken page
        never aborts a whole scrape.

        Args:
            model_url: Absolute or site-relative detail URL

        Returns:
            Merged version rows, empty on failure
        """
        url = self.absolute_url(model_url)

        try:
            html = await self._fetch_html(url)
            versions = self.parse_detail(html)
        except ScraperError as e:
            self.logger.error("fetch_model_versions_failed", url=url, error=e.message)
            return []
        except Exception as e:
            self.logger.error(
                "parse_model_versions_failed",
                url=url,
                error=str(e),
                exc_info=True,
            )
            return []

        self.logger.debug("fetched_model_versions", url=url, count=len(versions))
        return versions

    def parse_listing(self, html: str, limit: Optional[int] = None) -> List[ModelEntry]:
        """Parse model cards from the listing page.

        Args:
            html: Listing page HTML
            limit: Maximum number of cards to read, None for all

        Returns:
            List of ModelEntry objects in page order
        """
        soup = BeautifulSoup(html, "lxml")
        items = soup.select(MODEL_ITEM_SELECTOR)

        if limit is not None:
            items = items[: max(limit, 0)]

        return [self._parse_model_item(item) for item in items]

    def parse_detail(self, html: str) -> List[ModelVersion]:
        """Parse and merge the version rows of a detail page.

        Args:
            html: Detail page HTML

        Returns:
            Merged ModelVersion list (mobile rows take the leading positions)
        """
        soup = BeautifulSoup(html, "lxml")

        versions: List[ModelVersion] = []
        for row in soup.select(MOBILE_ROW_SELECTOR):
            version = self._parse_mobile_row(row)
            if version:
                versions.append(version)

        for row in soup.select(DESKTOP_ROW_SELECTOR):
            version = self._parse_desktop_row(row)
            if version:
                versions.append(version)

        return merge_versions(versions)

    def _parse_model_item(self, item) -> ModelEntry:
        """Parse a single ``li[x-test-model]`` card."""
        link = item.select_one("a")
        href = (link.get("href") if link else None) or ""

        capabilities = [
            text
            for text in (node_text(cap) for cap in item.select(MODEL_CAPABILITY_SELECTOR))
            if text
        ]

        return ModelEntry(
            name=node_text(item.select_one(MODEL_TITLE_SELECTOR)),
            url=self.absolute_url(href),
            description=node_text(item.select_one(MODEL_DESCRIPTION_SELECTOR)),
            capabilities=capabilities,
            pulls=node_text(item.select_one(MODEL_PULLS_SELECTOR)),
            tags=node_text(item.select_one(MODEL_TAGS_SELECTOR)),
            updated=node_text(item.select_one(MODEL_UPDATED_SELECTOR)),
            versions=[],
        )

    def _parse_mobile_row(self, row) -> Optional[ModelVersion]:
        """Parse a narrow-layout version anchor.

        The info line looks like "5.2GB · 128K context window · Text · 1 month ago".
        """
        href = row.get("href") or ""
        if ":" not in href:
            return None

        info = node_text(row.select_one(VERSION_INFO_SELECTOR))
        if not info:
            return None

        parts = split_info_text(info)
        if len(parts) < 3:
            return None

        return ModelVersion(
            name=node_text(row.select_one(VERSION_NAME_SELECTOR)),
            size=parts[0],
            context=strip_context_suffix(parts[1]),
            input=parts[2],
            updated=parts[3] if len(parts) > 3 else "",
            is_latest=row.select_one(LATEST_BADGE_SELECTOR) is not None,
            url=self.absolute_url(href),
        )

    def _parse_desktop_row(self, row) -> Optional[ModelVersion]:
        """Parse a wide-layout grid row (no updated label in this layout)."""
        classes = row.get("class") or []
        if not all(cls in classes for cls in DESKTOP_ROW_CLASSES):
            return None

        link = row.select_one(VERSION_LINK_SELECTOR)
        href = (link.get("href") if link else None) or ""
        if ":" not in href:
            return None

        cells = row.select(VERSION_INFO_SELECTOR)
        if len(cells) < 3:
            return None

        return ModelVersion(
            name=node_text(link),
            size=node_text(cells[0]),
            context=node_text(cells[1]),
            input=node_text(cells[2]),
            updated="",
            is_latest=row.select_one(LATEST_BADGE_SELECTOR) is not None,
            url=self.absolute_url(href),
        )
