"""Base scraper adapter interface.

Site-specific scrapers inherit from BaseScraperAdapter and implement the
abstract listing/detail methods defined here. The dataclasses below are the
normalized records every adapter returns.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import structlog

from app.config import settings
from app.core.exceptions import ScraperError


@dataclass
class ModelVersion:
    """One tagged version row from a model detail page."""

    name: str
    size: str = ""
    context: str = ""
    input: str = ""
    updated: str = ""  # Only present in the mobile layout
    is_latest: bool = False
    url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the wire keys (``isLatest`` is camel-case)."""
        return {
            "name": self.name,
            "size": self.size,
            "context": self.context,
            "input": self.input,
            "updated": self.updated,
            "isLatest": self.is_latest,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelVersion":
        return cls(
            name=data.get("name") or "",
            size=data.get("size") or "",
            context=data.get("context") or "",
            input=data.get("input") or "",
            updated=data.get("updated") or "",
            is_latest=bool(data.get("isLatest", data.get("is_latest", False))),
            url=data.get("url") or "",
        )


@dataclass
class ModelEntry:
    """Normalized catalog entry returned by listing scrapes."""

    name: str
    url: str
    description: str = ""
    capabilities: List[str] = field(default_factory=list)
    pulls: str = ""
    tags: str = ""
    updated: str = ""
    versions: List[ModelVersion] = field(default_factory=list)

    @property
    def has_latest(self) -> bool:
        return any(v.is_latest for v in self.versions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "pulls": self.pulls,
            "tags": self.tags,
            "updated": self.updated,
            "versions": [v.to_dict() for v in self.versions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelEntry":
        return cls(
            name=data.get("name") or "",
            url=data.get("url") or "",
            description=data.get("description") or "",
            capabilities=[c for c in (data.get("capabilities") or []) if c],
            pulls=data.get("pulls") or "",
            tags=data.get("tags") or "",
            updated=data.get("updated") or "",
            versions=[ModelVersion.from_dict(v) for v in (data.get("versions") or [])],
        )


class BaseScraperAdapter(ABC):
    """Abstract base class for HTML scraping adapters.

    Provides a shared httpx client, default headers and the HTML fetch
    helper. Subclasses implement fetch_models() and fetch_model_versions().
    """

    site_slug: str = ""  # Must be overridden in subclass (e.g., "ollama")
    site_name: str = ""

    DEFAULT_HEADERS = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "DNT": "1",
    }

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the adapter.

        Args:
            base_url: Site root without trailing slash (defaults to settings)
            client: Pre-built client (tests inject one with a mock transport)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._client = client
        self._owns_client = client is None
        self.logger = structlog.get_logger(__name__).bind(adapter=self.site_slug)

    @abstractmethod
    async def fetch_models(self, limit: Optional[int] = None) -> List[ModelEntry]:
        """Fetch the catalog listing.

        Args:
            limit: Maximum number of entries, None for all

        Returns:
            List of ModelEntry objects with empty versions

        Raises:
            ScraperError: If the listing page cannot be fetched
        """
        pass

    @abstractmethod
    async def fetch_model_versions(self, model_url: str) -> List[ModelVersion]:
        """Fetch the version rows of one model.

        Args:
            model_url: Absolute or site-relative detail page URL

        Returns:
            List of ModelVersion objects, empty on any failure
        """
        pass

    def absolute_url(self, href: str) -> str:
        """Resolve a site-relative href against the base URL."""
        if href.startswith("http://") or href.startswith("https://"):
            return href
        return f"{self.base_url}{href}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": settings.USER_AGENT, **self.DEFAULT_HEADERS},
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def _fetch_html(self, url: str) -> str:
        """GET a page and return its body.

        Args:
            url: Absolute URL

        Returns:
            Response text

        Raises:
            ScraperError: On transport errors or non-2xx responses
        """
        self.logger.debug("fetching_url", url=url)
        client = self._get_client()

        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScraperError(
                url, f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise ScraperError(url, str(e) or type(e).__name__) from e

        html = response.text
        self.logger.debug("fetched_url", url=url, kilobytes=round(len(html) / 1024))
        return html

    async def cleanup(self) -> None:
        """Close the HTTP client when this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
