"""
Feed-source registry backed by a spreadsheet.

The workbook is read fresh on every call so that edits are picked up by the
next request without restarting the process. Each row holding a URL in the
configured column becomes a FeedSource; rows with an empty cell or a URL
without a hostname are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlsplit

import pandas as pd

from .config import SourcesConfig
from .core.types import FeedSource
from .errors import SourceConfigError


logger = logging.getLogger(__name__)


def short_name_for(url: str) -> str:
    """Derive a source's short name from its URL.

    The hostname loses a leading "www." and keeps only its first label.

    Raises:
        ValueError: If the URL has no hostname

    Examples:
        >>> short_name_for("https://www.theguardian.com/world/rss")
        'theguardian'
        >>> short_name_for("http://feeds.bbci.co.uk/news/rss.xml")
        'feeds'
    """
    hostname = urlsplit(url.strip()).hostname
    if not hostname:
        raise ValueError(f"No hostname in URL: {url!r}")
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname.split(".")[0]


def read_feed_urls(cfg: SourcesConfig) -> list[str]:
    """Read the non-empty cells of the URL column, in sheet order.

    Raises:
        SourceConfigError: If the workbook cannot be read or lacks the column
    """
    path = Path(cfg.path)
    try:
        frame = pd.read_excel(path, sheet_name=cfg.sheet, dtype=str, engine="openpyxl")
    except FileNotFoundError as exc:
        raise SourceConfigError(f"Feed source workbook not found: {path}") from exc
    except Exception as exc:  # noqa: BLE001
        raise SourceConfigError(f"Could not read feed source workbook {path}: {exc}") from exc

    if cfg.url_column not in frame.columns:
        raise SourceConfigError(
            f"Feed source workbook {path} has no {cfg.url_column!r} column"
        )

    urls: list[str] = []
    for index, value in frame[cfg.url_column].items():
        if pd.isna(value) or not str(value).strip():
            logger.debug("No feed URL in row %s", index)
            continue
        urls.append(str(value).strip())
    return urls


def load_sources(cfg: SourcesConfig) -> list[FeedSource]:
    """Build one FeedSource per distinct feed URL.

    Several feeds from the same publisher share a short name and are all
    kept, so every configured feed is fetched.
    """
    sources: list[FeedSource] = []
    seen_urls: set[str] = set()
    for url in read_feed_urls(cfg):
        if url in seen_urls:
            continue
        try:
            short_name = short_name_for(url)
        except ValueError as exc:
            logger.warning("Skipping malformed feed URL %r: %s", url, exc)
            continue
        seen_urls.add(url)
        sources.append(FeedSource(url=url, short_name=short_name))
    return sources


def list_sources(cfg: SourcesConfig) -> list[FeedSource]:
    """Return the configured sources de-duplicated by short name.

    The first row seen for a short name wins.
    """
    by_name: dict[str, FeedSource] = {}
    for source in load_sources(cfg):
        by_name.setdefault(source.short_name, source)
    return list(by_name.values())


def list_source_names(cfg: SourcesConfig) -> list[str]:
    """Return the sorted, de-duplicated short names of all configured sources."""
    return sorted(source.short_name for source in list_sources(cfg))
