"""Site-specific adapter implementations.

Each adapter module implements a class that inherits from BaseScraperAdapter.
"""

from .ollama import OllamaLibraryAdapter, merge_versions

__all__ = [
    "OllamaLibraryAdapter",
    "merge_versions",
]
