"""Catalog Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.scrapers.base import ModelEntry


class ModelVersionSchema(BaseModel):
    """One version row of a model."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: str = ""
    context: str = ""
    input: str = ""
    updated: str = ""
    is_latest: bool = Field(False, alias="isLatest")
    url: str = ""


class ModelSchema(BaseModel):
    """Catalog entry as served to clients."""

    name: str
    url: str = ""
    description: str = ""
    capabilities: List[str] = []
    pulls: str = ""
    tags: str = ""
    updated: str = ""
    versions: List[ModelVersionSchema] = []

    @classmethod
    def from_entry(cls, entry: ModelEntry) -> "ModelSchema":
        return cls.model_validate(entry.to_dict())

    def to_entry(self) -> ModelEntry:
        return ModelEntry.from_dict(self.model_dump(by_alias=True))


class ModelsResponse(BaseModel):
    """Cached catalog with cache metadata."""

    model_config = ConfigDict(populate_by_name=True)

    models: List[ModelSchema] = []
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")
    cache_age_minutes: Optional[int] = Field(None, alias="cacheAgeMinutes")
    limit: Optional[int] = None
    status: Optional[str] = None


class CapabilitiesResponse(BaseModel):
    """Distinct capability labels across the cached catalog."""

    capabilities: List[str] = []


class ScrapeResponse(BaseModel):
    """Acknowledgement for a scrape request."""

    message: str
    status: str


class LogLine(BaseModel):
    timestamp: datetime
    message: str


class ScrapeStatusResponse(BaseModel):
    """Current scrape status with the rolling log."""

    model_config = ConfigDict(populate_by_name=True)

    status: Optional[str] = None
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")
    model_count: int = Field(0, alias="modelCount")
    logs: List[LogLine] = []


class CacheModelsRequest(BaseModel):
    """Models scraped elsewhere and pushed into the cache."""

    models: List[ModelSchema]
    limit: Optional[int] = None


class CacheModelsResponse(BaseModel):
    message: str
    status: str
