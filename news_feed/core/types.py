"""
Core data types for the news feed pipeline.

This module defines the records passed between pipeline stages:
- FeedSource: A configured feed URL and its derived short name
- Article: A normalized feed item tagged with its source
- FilterCriteria: Optional date-range, source and page selection
- ExportRow: The tabular projection of an Article used for download
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any


@dataclass(frozen=True)
class FeedSource:
    """A remote feed endpoint.

    Attributes:
        url: The feed URL as listed in the source workbook
        short_name: Identifier derived from the URL's hostname
                    (e.g. "https://www.bbc.co.uk/news/rss.xml" -> "bbc")
    """
    url: str
    short_name: str


@dataclass(frozen=True)
class Article:
    """A normalized feed item.

    Attributes:
        title: The item headline, empty if the feed omitted it
        link: URL of the article
        source_name: Short name of the FeedSource the item was fetched from
        published_at: Publication time in UTC, or None if missing/unparseable
        raw: JSON-safe passthrough of the original feed item fields
    """
    title: str
    link: str
    source_name: str
    published_at: datetime | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def iso_date(self) -> str | None:
        if self.published_at is None:
            return None
        return self.published_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON listing; normalized fields win over raw ones."""
        payload = dict(self.raw)
        payload.update(
            {
                "title": self.title,
                "link": self.link,
                "isoDate": self.iso_date,
                "sourceName": self.source_name,
            }
        )
        return payload


@dataclass(frozen=True)
class FilterCriteria:
    """Request-scoped selection applied to the aggregated articles.

    A date filter is only active when both start_date and end_date are set.

    Attributes:
        start_date: First calendar day to include
        end_date: Last calendar day to include
        source_name: Case-insensitive substring matched against Article.source_name
        page_number: 1-based page for the listing; ignored by the export
    """
    start_date: date | None = None
    end_date: date | None = None
    source_name: str | None = None
    page_number: int = 1

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None


@dataclass(frozen=True)
class ExportRow:
    """One row of the export workbook."""
    date: str
    article: str
    source: str
