"""Tests for the command-line scraper runner."""

import importlib.util
import json
from pathlib import Path

import httpx
import pytest

from app.services.snapshot_service import write_snapshot

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "run_scraper.py"


@pytest.fixture(scope="module")
def run_scraper():
    spec = importlib.util.spec_from_file_location("run_scraper", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestFormatTable:
    """Tests for the summary table."""

    def test_columns(self, run_scraper, sample_models):
        lines = run_scraper.format_table(sample_models).splitlines()

        assert lines[0].split() == ["NAME", "CAPABILITIES", "VERSIONS", "SIZE", "CONTEXT"]
        assert lines[2].startswith("llama3.2")
        assert "1.3GB – 2.0GB" in lines[2]
        assert lines[-1].split()[:3] == ["Alfred", "-", "0"]

    def test_show_limits_rows(self, run_scraper, sample_models):
        lines = run_scraper.format_table(sample_models, show=1).splitlines()
        assert len(lines) == 3


class TestPostModels:
    """Tests for pushing models to a backend."""

    async def test_posts_cache_models_payload(self, run_scraper, sample_models):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": "Successfully cached 4 models", "status": "ready"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await run_scraper.post_models_to_backend(
                sample_models, "http://backend.test/", limit=4, http_client=client
            )

        assert seen["url"] == "http://backend.test/api/v1/cache-models"
        assert seen["body"]["limit"] == 4
        assert len(seen["body"]["models"]) == 4
        assert result == {"sent": 4, "message": "Successfully cached 4 models", "error": None}

    async def test_reports_http_error(self, run_scraper, sample_models):
        handler = lambda request: httpx.Response(422, text="bad payload")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await run_scraper.post_models_to_backend(
                sample_models, "http://backend.test", http_client=client
            )

        assert result["error"] == "HTTP 422: bad payload"


class TestRunFromSnapshot:
    """Tests for the --input path."""

    async def test_reads_snapshot_and_writes_copy(self, run_scraper, sample_models, tmp_path, capsys):
        source = tmp_path / "in.json"
        target = tmp_path / "out.json"
        write_snapshot(str(source), sample_models)

        args = run_scraper.parse_args([
            "--input", str(source),
            "--capability", "vision",
            "--out", str(target),
        ])
        exit_code = await run_scraper.run(args)

        assert exit_code == 0
        assert "Matching: 1" in capsys.readouterr().out
        assert len(json.loads(target.read_text(encoding="utf-8"))["models"]) == 4
