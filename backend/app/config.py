"""Application configuration via Pydantic Settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Source site
    OLLAMA_BASE_URL: str = "https://ollama.com"
    LISTING_PATH: str = "/search"
    HTTP_TIMEOUT_SECONDS: float = 30.0
    USER_AGENT: str = "Mozilla/5.0 (compatible; OllamaExplorer/1.0)"

    # Scraping
    SCRAPE_CONCURRENCY: int = 3  # Detail pages in flight, clamped to 1..8
    DETAIL_REQUEST_DELAY_SECONDS: float = 0.0

    # Cache
    CACHE_LOG_BUFFER_SIZE: int = 200

    # Snapshot written when a scrape is requested with save=true
    SNAPSHOT_PATH: str = "data/ollama.json"

    # Periodic refresh (0 disables the scheduler)
    REFRESH_INTERVAL_MINUTES: int = 0
    REFRESH_LIMIT: int = 0  # 0 = all models
    SCRAPE_ON_STARTUP: bool = False

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    @model_validator(mode="after")
    def strip_base_url(self) -> "Settings":
        """Detail hrefs are site-relative, so the base URL must not end with '/'."""
        self.OLLAMA_BASE_URL = self.OLLAMA_BASE_URL.rstrip("/")
        return self


settings = Settings()
