"""
Concurrent fan-out of feed fetches with a full join.

Every source is fetched in its own task; the call returns only after all of
them have settled. Failed sources contribute no articles.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

import httpx

from .config import FetchConfig
from .core.types import Article, FeedSource
from .fetch.fetcher import FeedResult, build_client, fetch_feed
from .logging_utils import log_event


logger = logging.getLogger(__name__)


async def aggregate(
    sources: Iterable[FeedSource],
    cfg: FetchConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Article]:
    """Fetch all sources concurrently and concatenate their articles.

    Args:
        sources: Feed sources to fetch
        cfg: Fetch settings (timeout, headers, proxy handling)
        transport: Optional httpx transport, used to stub the network

    Returns:
        Articles from every source that succeeded, grouped by source in the
        order the sources were given
    """
    results = await fetch_all(sources, cfg, transport=transport)
    articles: list[Article] = []
    for result in results:
        articles.extend(result.articles)

    failed = [r.source.url for r in results if not r.ok]
    log_event(
        logger,
        f"Aggregated {len(articles)} articles from {len(results)} sources "
        f"({len(failed)} failed)",
        event="aggregate_done",
        sources=len(results),
        failed=failed,
        count=len(articles),
    )
    return articles


async def fetch_all(
    sources: Iterable[FeedSource],
    cfg: FetchConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[FeedResult]:
    """Fetch every source concurrently, returning one FeedResult per source."""
    source_list = list(sources)
    if not source_list:
        return []

    async with build_client(cfg, transport=transport) as client:
        tasks = [
            asyncio.create_task(fetch_feed(client, source, cfg.timeout_seconds))
            for source in source_list
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: list[FeedResult] = []
    for source, outcome in zip(source_list, outcomes):
        if isinstance(outcome, BaseException):
            # fetch_feed captures its own errors; this only covers cancellation
            logger.warning("Fetch task for %s did not complete: %r", source.url, outcome)
            results.append(FeedResult(source=source, error=f"{type(outcome).__name__}: {outcome}"))
        else:
            results.append(outcome)
    return results


def aggregate_sync(
    sources: Iterable[FeedSource],
    cfg: FetchConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Article]:
    """Blocking wrapper around aggregate() for callers without an event loop."""
    return asyncio.run(aggregate(sources, cfg, transport=transport))
