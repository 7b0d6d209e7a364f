"""Tests for concurrent aggregation across feed sources."""

from __future__ import annotations

import asyncio
from datetime import date

from aiohttp import test_utils, web
import httpx

from news_feed.aggregator import aggregate, aggregate_sync, fetch_all
from news_feed.config import FetchConfig
from news_feed.core.filters import filter_and_sort
from news_feed.core.types import FeedSource, FilterCriteria


def _rss(*items: tuple[str, str, str]) -> bytes:
    body = "".join(
        f"<item><title>{title}</title><link>{link}</link><pubDate>{pub}</pubDate></item>"
        for title, link, pub in items
    )
    return (
        '<?xml version="1.0"?><rss version="2.0"><channel><title>t</title>'
        f"{body}</channel></rss>"
    ).encode("utf-8")


SOURCE_A = FeedSource(url="https://www.alpha.com/rss", short_name="alpha")
SOURCE_B = FeedSource(url="https://www.bravo.com/rss", short_name="bravo")
SOURCE_C = FeedSource(url="https://www.charlie.com/rss", short_name="charlie")

ALPHA_DOC = _rss(
    ("A1", "https://www.alpha.com/1", "Mon, 01 Jan 2024 12:00:00 GMT"),
    ("A2", "https://www.alpha.com/2", "Tue, 02 Jan 2024 12:00:00 GMT"),
    ("A3", "https://www.alpha.com/3", "Wed, 03 Jan 2024 12:00:00 GMT"),
)


def _handler(request: httpx.Request):
    host = request.url.host
    if host == "www.alpha.com":
        return httpx.Response(200, content=ALPHA_DOC)
    if host == "www.bravo.com":
        async def _slow():
            await asyncio.sleep(1.0)
            return httpx.Response(200, content=ALPHA_DOC)
        return _slow()
    return httpx.Response(200, content=b"<<< definitely not xml")


def test_failed_sources_contribute_nothing():
    cfg = FetchConfig(timeout_seconds=0.1)

    articles = aggregate_sync(
        [SOURCE_A, SOURCE_B, SOURCE_C], cfg, transport=httpx.MockTransport(_handler)
    )

    assert sorted(a.title for a in articles) == ["A1", "A2", "A3"]
    assert {a.source_name for a in articles} == {"alpha"}


def test_single_day_request_with_timed_out_source():
    cfg = FetchConfig(timeout_seconds=0.1)
    articles = aggregate_sync([SOURCE_A, SOURCE_B], cfg, transport=httpx.MockTransport(_handler))

    day = date(2024, 1, 2)
    result = filter_and_sort(articles, FilterCriteria(start_date=day, end_date=day))

    assert [a.title for a in result] == ["A2"]
    assert result[0].source_name == "alpha"


def test_fetch_all_reports_each_source():
    cfg = FetchConfig(timeout_seconds=0.1)
    results = asyncio.run(
        fetch_all([SOURCE_A, SOURCE_B, SOURCE_C], cfg, transport=httpx.MockTransport(_handler))
    )

    assert [r.source for r in results] == [SOURCE_A, SOURCE_B, SOURCE_C]
    assert [r.ok for r in results] == [True, False, False]


def test_sources_are_fetched_concurrently():
    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.05)
        in_flight -= 1
        return httpx.Response(200, content=ALPHA_DOC)

    sources = [FeedSource(url=f"https://feed{i}.example.com/rss", short_name=f"feed{i}") for i in range(5)]
    articles = aggregate_sync(sources, FetchConfig(), transport=httpx.MockTransport(handler))

    assert peak == 5
    assert len(articles) == 15


def test_every_article_keeps_its_source_binding():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=ALPHA_DOC)

    sources = [SOURCE_A, SOURCE_B]
    results = asyncio.run(fetch_all(sources, FetchConfig(), transport=httpx.MockTransport(handler)))

    for result in results:
        assert {a.source_name for a in result.articles} == {result.source.short_name}


def test_no_sources_means_no_articles():
    assert asyncio.run(aggregate([], FetchConfig())) == []


def test_large_source_lists_are_not_queued_behind_the_connection_pool():
    """Every source is in flight at once, even past httpx's default pool size."""
    source_count = 120
    in_flight = 0
    peak = 0

    async def feed(request: web.Request) -> web.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.5)
        in_flight -= 1
        return web.Response(body=ALPHA_DOC, content_type="application/rss+xml")

    async def _go():
        app = web.Application()
        app.router.add_get("/feed/{n}", feed)
        async with test_utils.TestServer(app) as server:
            sources = [
                FeedSource(url=str(server.make_url(f"/feed/{i}")), short_name=f"feed{i}")
                for i in range(source_count)
            ]
            cfg = FetchConfig(timeout_seconds=3.0, trust_env=False)
            return await fetch_all(sources, cfg)

    results = asyncio.run(_go())

    assert [r.ok for r in results] == [True] * source_count
    assert peak == source_count
