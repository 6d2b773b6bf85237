"""Scraper system for fetching the model catalog.

This package provides:
- Base adapter class and normalized record types
- The ollama.com library adapter (listing, detail pages, layout merge)
- Scraper service orchestrating bounded-concurrency detail fetches
- Scheduler for periodic cache refreshes
"""

from .base import BaseScraperAdapter, ModelEntry, ModelVersion
from .adapters import OllamaLibraryAdapter, merge_versions

__all__ = [
    # Base classes
    "BaseScraperAdapter",
    # Data structures
    "ModelEntry",
    "ModelVersion",
    # Adapters
    "OllamaLibraryAdapter",
    "merge_versions",
]
