"""Flat JSON snapshot of the catalog.

The snapshot is an export (``{"models": [...], "limit": n, "lastUpdated": iso}``)
that static front-ends can load directly. It is never read back into the
cache automatically.
"""

import json
import os
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

import structlog

from app.core.exceptions import SnapshotError
from app.scrapers.base import ModelEntry

logger = structlog.get_logger(__name__)


def write_snapshot(
    path: str,
    models: Iterable[ModelEntry],
    limit: Optional[int] = None,
    last_updated: Optional[datetime] = None,
) -> str:
    """Write models to a JSON file, creating parent directories.

    Args:
        path: Output file path
        models: Models to export
        limit: Limit the scrape ran with (omitted when None)
        last_updated: Timestamp to record, defaults to now

    Returns:
        Absolute path of the written file
    """
    records = [m.to_dict() for m in models]
    payload = {
        "models": records,
        "lastUpdated": (last_updated or datetime.now(timezone.utc)).isoformat(),
    }
    if limit:
        payload["limit"] = limit

    path = os.path.abspath(path)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    logger.info("snapshot_written", path=path, model_count=len(records))
    return path


def read_snapshot(path: str) -> Tuple[List[ModelEntry], Optional[int]]:
    """Load models from a snapshot file.

    Args:
        path: Snapshot file path

    Returns:
        (models, limit) tuple

    Raises:
        FileNotFoundError: If the file does not exist
        SnapshotError: If the file is not a snapshot object
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotError(path, f"not valid JSON ({e.msg})") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("models"), list):
        raise SnapshotError(path, "expected an object with a 'models' list")

    models = [ModelEntry.from_dict(m) for m in payload["models"] if isinstance(m, dict)]
    limit = payload.get("limit")
    limit = limit if isinstance(limit, int) and limit > 0 else None

    logger.info("snapshot_read", path=path, model_count=len(models))
    return models, limit
