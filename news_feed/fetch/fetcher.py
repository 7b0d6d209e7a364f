"""
Retrieval and parsing of a single feed source.

The document is downloaded with httpx and parsed with feedparser. Any failure
(network error, timeout, HTTP error status, unparseable document) is captured
in the returned FeedResult instead of being raised, so one bad source cannot
abort the retrieval of the others.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging

import feedparser
import httpx

from ..config import FetchConfig
from ..core.types import Article, FeedSource
from ..logging_utils import log_event
from .normalizer import to_article


logger = logging.getLogger(__name__)


@dataclass
class FeedResult:
    """Outcome of fetching one feed source.

    Either articles is populated (success, possibly empty) or error is set
    (failure, articles empty), but never both.

    Attributes:
        source: The source that was fetched
        articles: Normalized articles tagged with source.short_name
        error: Error message if the fetch failed, None on success
        status_code: HTTP status code, or None if no response was received
    """
    source: FeedSource
    articles: list[Article] = field(default_factory=list)
    error: str | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FeedParseError(Exception):
    """Raised internally when a downloaded document is not a usable feed."""


def build_client(
    cfg: FetchConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the HTTP client shared by all fetches of one aggregation.

    The connection pool is unbounded so every source gets its own connection
    at once; a queued request would otherwise spend its timeout in the pool.
    """
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=cfg.follow_redirects,
        trust_env=cfg.trust_env,
        transport=transport,
        limits=httpx.Limits(max_connections=None, max_keepalive_connections=None),
    )


async def fetch_feed(
    client: httpx.AsyncClient,
    source: FeedSource,
    timeout: float,
) -> FeedResult:
    """Fetch and parse one source within the timeout.

    Args:
        client: HTTP client to issue the request with
        source: The feed source to retrieve
        timeout: Upper bound in seconds for download plus parse

    Returns:
        FeedResult with articles on success or an error message on failure
    """
    status_code: int | None = None
    try:
        status_code, articles = await asyncio.wait_for(
            _retrieve(client, source), timeout=timeout
        )
    except asyncio.TimeoutError:
        return _failed(source, f"TimeoutError: no complete response within {timeout}s", None)
    except httpx.HTTPStatusError as exc:
        return _failed(source, f"HTTPStatusError: {exc}", exc.response.status_code)
    except Exception as exc:  # noqa: BLE001
        return _failed(source, f"{type(exc).__name__}: {exc}", status_code)

    log_event(
        logger,
        f"Fetched {len(articles)} items from {source.url}",
        event="feed_fetched",
        url=source.url,
        source_name=source.short_name,
        count=len(articles),
    )
    return FeedResult(source=source, articles=articles, error=None, status_code=status_code)


async def _retrieve(client: httpx.AsyncClient, source: FeedSource) -> tuple[int, list[Article]]:
    response = await client.get(source.url)
    response.raise_for_status()
    # Parsing runs in a worker thread so it stays under the timeout
    articles = await asyncio.to_thread(parse_feed, response.content, source)
    return response.status_code, articles


def parse_feed(document: bytes | str, source: FeedSource) -> list[Article]:
    """Parse a feed document into articles tagged with the source's short name.

    Raises:
        FeedParseError: If the document is malformed and yields no entries
    """
    parsed = feedparser.parse(document)
    entries = parsed.get("entries") or []
    if parsed.get("bozo") and not entries:
        reason = parsed.get("bozo_exception")
        raise FeedParseError(f"Invalid RSS/Atom feed: {source.url} ({reason})")
    return [to_article(entry, source) for entry in entries]


def _failed(source: FeedSource, error: str, status_code: int | None) -> FeedResult:
    logger.warning(
        "Error fetching feed from %s: %s",
        source.url,
        error,
        extra={
            "event": "feed_failed",
            "url": source.url,
            "source_name": source.short_name,
            "error": error,
            "status_code": status_code,
        },
    )
    return FeedResult(source=source, articles=[], error=error, status_code=status_code)
