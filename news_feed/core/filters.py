"""
Date-range and source filtering followed by newest-first sorting.

Policy for articles without a parseable publication time:
- They never match an active date filter and are dropped from its result.
- When sorting they are placed after every dated article, keeping their
  original relative order.
"""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Iterable
from zoneinfo import ZoneInfo

from .types import Article, FilterCriteria


def filter_and_sort(
    articles: Iterable[Article],
    criteria: FilterCriteria,
    tz: tzinfo | str = "UTC",
) -> list[Article]:
    """Apply all active filters, then sort newest first."""
    return sort_articles(apply_filters(articles, criteria, tz))


def apply_filters(
    articles: Iterable[Article],
    criteria: FilterCriteria,
    tz: tzinfo | str = "UTC",
) -> list[Article]:
    """Keep articles matching every criterion that is set.

    Args:
        articles: Articles to filter
        criteria: Filter selection; unset criteria pass everything through
        tz: Timezone (or IANA name) whose calendar days the date range refers to

    Returns:
        Matching articles in their input order
    """
    zone = _resolve_tz(tz)
    kept = list(articles)

    if criteria.has_date_range:
        kept = [
            a for a in kept
            if _in_date_range(a.published_at, criteria.start_date, criteria.end_date, zone)
        ]

    if criteria.source_name:
        needle = criteria.source_name.casefold()
        kept = [a for a in kept if needle in a.source_name.casefold()]

    return kept


def sort_articles(articles: Iterable[Article]) -> list[Article]:
    """Stable sort by publication time, newest first, undated last."""
    dated: list[Article] = []
    undated: list[Article] = []
    for article in articles:
        if article.published_at is None:
            undated.append(article)
        else:
            dated.append(article)
    # sorted() stays stable with reverse=True
    dated = sorted(dated, key=lambda a: a.published_at, reverse=True)
    return dated + undated


def _in_date_range(
    published_at: datetime | None,
    start: date,
    end: date,
    zone: tzinfo,
) -> bool:
    if published_at is None:
        return False
    if start == end:
        return published_at.astimezone(zone).date() == start
    # Closed interval from the first instant of start to the last instant of end
    lower = datetime.combine(start, time.min, tzinfo=zone)
    upper = datetime.combine(end, time.max, tzinfo=zone)
    return lower <= published_at <= upper


def _resolve_tz(tz: tzinfo | str) -> tzinfo:
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz
