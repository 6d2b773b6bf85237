"""Health check schemas."""

from typing import Dict, Optional

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str
    cache: str
    models: int = 0
    scheduler: Dict[str, Dict[str, Optional[str]]] = {}
