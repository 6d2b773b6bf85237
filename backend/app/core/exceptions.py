"""Custom exception classes for the application."""


class ExplorerException(Exception):
    """Base exception for all Ollama Explorer errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ScraperError(ExplorerException):
    """Raised when a page cannot be fetched or parsed."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Scraper error for {source}: {message}")


class SnapshotError(ExplorerException):
    """Raised when a snapshot file has an unexpected shape."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Invalid snapshot {path}: {message}")
