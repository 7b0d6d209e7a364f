"""
Request pipeline shared by the listing and download consumers.

    registry -> aggregate -> filter & sort -> page   (listing)
                                           -> rows   (export)

Both consumers go through collect_articles(); the export simply skips the
paging step. Nothing is cached between calls: every call re-reads the source
workbook and re-fetches every feed.
"""

from __future__ import annotations

import logging

import httpx

from .aggregator import aggregate
from .config import AppConfig
from .core.filters import filter_and_sort
from .core.pager import page_articles
from .core.types import Article, ExportRow, FilterCriteria
from .exporter import render_workbook, to_export_rows
from .logging_utils import log_event
from .sources import list_source_names, load_sources


logger = logging.getLogger(__name__)


async def collect_articles(
    cfg: AppConfig,
    criteria: FilterCriteria,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Article]:
    """Fetch every configured source, then filter and sort the combined set.

    Raises:
        SourceConfigError: If the source workbook cannot be read
    """
    sources = load_sources(cfg.sources)
    logger.info("Fetching %d feed sources", len(sources))
    articles = await aggregate(sources, cfg.fetch, transport=transport)
    return filter_and_sort(articles, criteria, cfg.filters.timezone)


async def list_articles(
    cfg: AppConfig,
    criteria: FilterCriteria,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Article]:
    """Return one page of the filtered, sorted articles."""
    matched = await collect_articles(cfg, criteria, transport=transport)
    page = page_articles(matched, criteria.page_number, cfg.listing.page_size)
    log_event(
        logger,
        f"Sending {len(page)} articles for page {criteria.page_number}",
        event="articles_listed",
        page_number=criteria.page_number,
        matched=len(matched),
        count=len(page),
    )
    return page


async def export_rows(
    cfg: AppConfig,
    criteria: FilterCriteria,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ExportRow]:
    """Return export rows for the full filtered set; page_number is ignored."""
    matched = await collect_articles(cfg, criteria, transport=transport)
    return to_export_rows(matched, cfg.filters.timezone, cfg.export.date_format)


async def export_articles(
    cfg: AppConfig,
    criteria: FilterCriteria,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    """Return the full filtered set as xlsx bytes.

    Raises:
        SourceConfigError: If the source workbook cannot be read
        ExportError: If the workbook cannot be generated
    """
    rows = await export_rows(cfg, criteria, transport=transport)
    return render_workbook(rows, cfg.export)


def source_names(cfg: AppConfig) -> list[str]:
    return list_source_names(cfg.sources)
