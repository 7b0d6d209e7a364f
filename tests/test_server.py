"""Tests for the aiohttp API layer."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from io import BytesIO
import json
from pathlib import Path

from aiohttp import test_utils
import pandas as pd
import pytest

from news_feed import pipeline, server
from news_feed.config import AppConfig
from news_feed.core.types import Article, FilterCriteria
from news_feed.errors import ExportError, InvalidRequestError


def _articles(count: int) -> list[Article]:
    newest = datetime(2024, 1, 25, 12, 0, tzinfo=timezone.utc)
    return [
        Article(
            title=f"story-{i}",
            link=f"https://www.cnn.com/{i}",
            source_name="cnn",
            published_at=newest - timedelta(days=i),
            raw={"guid": f"id-{i}"},
        )
        for i in range(count)
    ]


def _config(tmp_path: Path) -> AppConfig:
    path = tmp_path / "articles.xlsx"
    pd.DataFrame(
        {"RSSLink": ["https://www.cnn.com/rss", "https://www.bbc.com/rss", "https://www.cnn.com/world"]}
    ).to_excel(path, index=False, engine="openpyxl")
    cfg = AppConfig()
    cfg.sources.path = str(path)
    return cfg


@pytest.fixture
def stub_aggregate(monkeypatch):
    async def fake_aggregate(sources, cfg, *, transport=None):
        return _articles(25)

    monkeypatch.setattr(pipeline, "aggregate", fake_aggregate)


def _request(cfg: AppConfig, path: str):
    async def _go():
        async with test_utils.TestClient(test_utils.TestServer(server.create_app(cfg))) as client:
            resp = await client.get(path)
            body = await resp.read()
            return resp.status, dict(resp.headers), body

    return asyncio.run(_go())


def test_source_names_endpoint(tmp_path):
    status, headers, body = _request(_config(tmp_path), "/api/sourceNames")

    assert status == 200
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert body == b'["bbc", "cnn"]'


def test_articles_endpoint_returns_requested_page(tmp_path, stub_aggregate):
    status, _, body = _request(_config(tmp_path), "/api/articles?pageNumber=3")

    items = json.loads(body)
    assert status == 200
    assert [item["title"] for item in items] == [f"story-{i}" for i in range(20, 25)]
    assert {item["sourceName"] for item in items} == {"cnn"}
    assert items[0]["guid"] == "id-20"
    assert items[0]["isoDate"] == "2024-01-05T12:00:00Z"


def test_articles_endpoint_defaults_to_first_page(tmp_path, stub_aggregate):
    status, _, body = _request(_config(tmp_path), "/api/articles?pageNumber=0&sourceName=")

    items = json.loads(body)
    assert status == 200
    assert len(items) == 10
    assert items[0]["title"] == "story-0"


def test_articles_endpoint_rejects_bad_dates(tmp_path, stub_aggregate):
    status, _, body = _request(_config(tmp_path), "/api/articles?startDate=soon&endDate=2024-01-02")

    assert status == 400
    assert b'"invalid_request"' in body


def test_config_failure_is_a_request_failure(tmp_path):
    cfg = AppConfig()
    cfg.sources.path = str(tmp_path / "missing.xlsx")

    status, _, body = _request(cfg, "/api/articles")

    assert status == 500
    assert b'"source_config_error"' in body


def test_download_returns_all_matching_rows(tmp_path, stub_aggregate):
    status, headers, body = _request(
        _config(tmp_path), "/api/downloadArticles?startDate=2024-01-06&endDate=2024-01-25&pageNumber=2"
    )

    assert status == 200
    assert headers["Content-Disposition"] == 'attachment; filename="articles.xlsx"'
    assert headers["Content-Type"].startswith(server.XLSX_CONTENT_TYPE)
    frame = pd.read_excel(BytesIO(body), sheet_name="Articles", engine="openpyxl")
    assert len(frame) == 20
    assert list(frame.columns) == ["Date", "Article", "Source"]


def test_download_export_failure_is_distinct(tmp_path, monkeypatch):
    async def failing_export(cfg, criteria, *, transport=None):
        raise ExportError("disk full")

    monkeypatch.setattr(pipeline, "export_articles", failing_export)

    status, _, body = _request(_config(tmp_path), "/api/downloadArticles")

    assert status == 500
    assert b'"export_failed"' in body


def test_parse_criteria_reads_query_parameters():
    criteria = server.parse_criteria(
        {
            "startDate": "2024-01-01",
            "endDate": "2024-01-03T10:00:00Z",
            "sourceName": " cnn ",
            "pageNumber": "2",
        }
    )

    assert criteria == FilterCriteria(
        start_date=datetime(2024, 1, 1).date(),
        end_date=datetime(2024, 1, 3).date(),
        source_name="cnn",
        page_number=2,
    )


def test_parse_criteria_rejects_non_integer_page():
    with pytest.raises(InvalidRequestError):
        server.parse_criteria({"pageNumber": "two"})


def test_unexpected_failure_returns_json_error(tmp_path, stub_aggregate):
    cfg = _config(tmp_path)
    cfg.filters.timezone = "Mars/Olympus"

    for path in ("/api/articles", "/api/downloadArticles"):
        status, headers, body = _request(cfg, path)

        assert status == 500
        assert headers["Content-Type"].startswith("application/json")
        payload = json.loads(body)
        assert payload["code"] == "internal_error"
        assert payload["error"].startswith("Error fetching articles")
