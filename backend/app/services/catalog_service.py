"""Filtering and sorting over a scraped model collection.

Search is a case-insensitive substring match over name, description and
capability labels, with a few keywords that select models by what they
carry rather than by text ("small", "large", "context", "latest").
"""

from typing import Callable, Dict, Iterable, List, Optional

from app.scrapers.base import ModelEntry, ModelVersion
from app.scrapers.utils.normalizer import LabelNormalizer


SORT_FIELDS = ("name", "capabilities", "versions", "size", "context")
SORT_ORDERS = ("asc", "desc")

# Keywords that match any model with at least one version
VERSION_KEYWORDS = ("small", "tiny", "large", "big", "context")
# Keywords that match any model with a version flagged latest
LATEST_KEYWORDS = ("latest", "newest", "recent")


def _smallest_size(model: ModelEntry) -> float:
    sizes = [s for s in (LabelNormalizer.parse_size(v.size) for v in model.versions) if s > 0]
    return min(sizes) if sizes else 0.0


def _largest_context(model: ModelEntry) -> float:
    contexts = [
        c for c in (LabelNormalizer.parse_context(v.context) for v in model.versions) if c > 0
    ]
    return max(contexts) if contexts else 0.0


SORT_KEYS: Dict[str, Callable[[ModelEntry], object]] = {
    "name": lambda m: m.name.lower(),
    "capabilities": lambda m: len(m.capabilities),
    "versions": lambda m: len(m.versions),
    "size": _smallest_size,
    "context": _largest_context,
}


def matches_search(model: ModelEntry, search: str) -> bool:
    """Check a model against a free-text search string.

    Args:
        model: Model to test
        search: Search text (empty matches everything)

    Returns:
        True if the model matches
    """
    term = (search or "").lower()

    if term in model.name.lower() or term in model.description.lower():
        return True
    if any(term in cap.lower() for cap in model.capabilities):
        return True

    if model.versions and any(keyword in term for keyword in VERSION_KEYWORDS):
        return True
    if model.has_latest and any(keyword in term for keyword in LATEST_KEYWORDS):
        return True

    return False


def matches_capability(model: ModelEntry, capability: Optional[str]) -> bool:
    """Exact, case-insensitive capability filter; None passes everything."""
    if not capability:
        return True
    wanted = capability.lower()
    return any(cap.lower() == wanted for cap in model.capabilities)


def filter_models(
    models: Iterable[ModelEntry],
    search: str = "",
    capability: Optional[str] = None,
) -> List[ModelEntry]:
    """Keep models that pass the capability filter and match the search."""
    return [
        m for m in models
        if matches_capability(m, capability) and matches_search(m, search)
    ]


def sort_models(
    models: Iterable[ModelEntry],
    field: str = "name",
    direction: str = "asc",
) -> List[ModelEntry]:
    """Stable sort by one of SORT_FIELDS.

    Args:
        models: Models to sort
        field: Sort field
        direction: "asc" or "desc"

    Returns:
        New sorted list

    Raises:
        ValueError: If field or direction is unknown
    """
    if field not in SORT_KEYS:
        raise ValueError(f"Invalid sort field: {field}")
    if direction not in SORT_ORDERS:
        raise ValueError(f"Invalid sort direction: {direction}")

    return sorted(models, key=SORT_KEYS[field], reverse=direction == "desc")


def query_models(
    models: Iterable[ModelEntry],
    search: str = "",
    capability: Optional[str] = None,
    sort: str = "name",
    order: str = "asc",
) -> List[ModelEntry]:
    """Filter then sort a model collection."""
    return sort_models(filter_models(models, search, capability), sort, order)


def list_capabilities(models: Iterable[ModelEntry]) -> List[str]:
    """Sorted distinct capability labels, lower-cased."""
    return sorted({cap.lower() for m in models for cap in m.capabilities})


def size_range(versions: List[ModelVersion]) -> str:
    """Human-readable size span of a model's versions.

    Returns:
        "N/A" when no version has a size, the single size when all are the
        same label, otherwise "min – max"
    """
    sizes = [v.size for v in versions if v.size]
    if not sizes:
        return "N/A"
    if len(sizes) == 1:
        return sizes[0]

    smallest = min(sizes, key=LabelNormalizer.parse_size)
    largest = max(sizes, key=LabelNormalizer.parse_size)
    return smallest if smallest == largest else f"{smallest} – {largest}"


def max_context(versions: List[ModelVersion]) -> str:
    """Context label with the largest parsed value, or "N/A"."""
    contexts = [v.context for v in versions if v.context]
    if not contexts:
        return "N/A"
    return max(contexts, key=LabelNormalizer.parse_context)
