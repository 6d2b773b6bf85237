"""Command-line scraper runner for the Ollama model library.

Scrapes the catalog (or loads a saved snapshot), prints a summary table of
the queried models, and optionally writes a snapshot and/or pushes the
result into a running backend's cache.

Usage:
    python scripts/run_scraper.py --limit 10
    python scripts/run_scraper.py --limit 20 --out data/ollama.json
    python scripts/run_scraper.py --input data/ollama.json --capability vision --sort size
    python scripts/run_scraper.py --limit 50 --backend-url http://localhost:8000
"""

import argparse
import asyncio
import os
import sys
from typing import Any, Dict, List, Optional

import httpx

# Add backend to path so we can import app modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from app.core.logging import configure_logging
from app.scrapers.base import ModelEntry
from app.scrapers.scraper_service import ScraperService, parse_limit
from app.services.cache_service import CacheService
from app.services.catalog_service import SORT_FIELDS, SORT_ORDERS, max_context, query_models, size_range
from app.services.snapshot_service import read_snapshot, write_snapshot

CACHE_MODELS_ENDPOINT = "/api/v1/cache-models"


async def scrape_models(limit: Optional[int]) -> List[ModelEntry]:
    """Run a scrape with a throwaway cache and print progress lines."""

    def on_progress(message: str, current: Optional[int], total: Optional[int]) -> None:
        print(f"  {message}")

    service = ScraperService(cache=CacheService())
    try:
        return await service.run(limit=limit, on_progress=on_progress)
    finally:
        await service.cleanup()


async def post_models_to_backend(
    models: List[ModelEntry],
    backend_url: str,
    limit: Optional[int] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """POST scraped models to the backend cache endpoint.

    The backend expects CacheModelsRequest JSON:
      {"models": [...], "limit": N}

    Returns:
        Dict with keys "sent", "message", "error".
    """
    url = backend_url.rstrip("/") + CACHE_MODELS_ENDPOINT
    payload = {"models": [m.to_dict() for m in models], "limit": limit}

    client = http_client or httpx.AsyncClient(timeout=60.0)
    try:
        response = await client.post(url, json=payload)
        response.raise_for_status()
        return {"sent": len(models), "message": response.json().get("message"), "error": None}
    except httpx.HTTPStatusError as exc:
        body = exc.response.text[:300]
        return {"sent": len(models), "message": None, "error": f"HTTP {exc.response.status_code}: {body}"}
    except httpx.HTTPError as exc:
        return {"sent": len(models), "message": None, "error": str(exc)}
    finally:
        if http_client is None:
            await client.aclose()


def format_table(models: List[ModelEntry], show: Optional[int] = None) -> str:
    """Render models as a fixed-width summary table.

    Columns: name, capabilities, version count, size range, max context.
    """
    rows = [("NAME", "CAPABILITIES", "VERSIONS", "SIZE", "CONTEXT")]
    shown = models if show is None else models[:max(show, 0)]
    for m in shown:
        rows.append((
            m.name,
            ", ".join(m.capabilities) or "-",
            str(len(m.versions)),
            size_range(m.versions),
            max_context(m.versions),
        ))

    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = ["  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip() for row in rows]
    lines.insert(1, "  ".join("-" * w for w in widths))
    return "\n".join(lines)


async def run(args: argparse.Namespace) -> int:
    """Main async runner. Returns the process exit code."""
    limit = parse_limit(args.limit)

    print(f"\n{'='*70}")
    print("  Ollama Library Scraper")
    print(f"{'='*70}")

    if args.input:
        print(f"  Input : {args.input}")
        models, snapshot_limit = read_snapshot(args.input)
        limit = limit or snapshot_limit
        if limit:
            models = models[:limit]
    else:
        print(f"  Limit : {limit or 'all'}")
        print(f"{'='*70}\n")
        models = await scrape_models(limit)

    queried = query_models(
        models,
        search=args.search,
        capability=args.capability,
        sort=args.sort,
        order=args.order,
    )

    print(f"\n{format_table(queried, args.show)}\n")
    print(f"  Total models: {len(models)}  Matching: {len(queried)}")

    if args.out:
        path = write_snapshot(args.out, models, limit=limit)
        print(f"  Saved snapshot to {path}")

    if args.backend_url:
        result = await post_models_to_backend(models, args.backend_url, limit=limit)
        if result["error"]:
            print(f"  Push to backend failed: {result['error']}")
            return 1
        print(f"  Backend: {result['message']}")

    print(f"{'='*70}\n")
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape the Ollama model library and summarise the result",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py --limit 10
  python scripts/run_scraper.py --input data/ollama.json --search small --sort size
  python scripts/run_scraper.py --limit 50 --backend-url http://localhost:8000
        """,
    )

    parser.add_argument("--limit", default=None, help="Maximum number of models (default: all)")
    parser.add_argument("--out", help="Write a JSON snapshot to this path")
    parser.add_argument("--input", help="Read models from a snapshot instead of scraping")
    parser.add_argument("--backend-url", help="Push the result to this backend's cache")
    parser.add_argument("--search", default="", help="Free-text search over names and descriptions")
    parser.add_argument("--capability", help="Only models with this capability label")
    parser.add_argument("--sort", choices=SORT_FIELDS, default="name", help="Sort field (default: name)")
    parser.add_argument("--order", choices=SORT_ORDERS, default="asc", help="Sort direction (default: asc)")
    parser.add_argument("--show", type=int, default=None, help="Rows to display (default: all)")
    parser.add_argument("--verbose", action="store_true", help="Show scraper log output")

    return parser.parse_args(argv)


def main():
    """Parse arguments and run the scraper."""
    args = parse_args()
    configure_logging(debug=args.verbose)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
