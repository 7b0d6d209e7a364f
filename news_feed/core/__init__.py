"""
Core domain models and business logic.

This package contains data types and the pure filtering, sorting and
paging steps, independent of any network or file access.
"""

from .types import Article, ExportRow, FeedSource, FilterCriteria
from .filters import apply_filters, filter_and_sort, sort_articles
from .pager import DEFAULT_PAGE_SIZE, page_articles

__all__ = [
    "Article",
    "ExportRow",
    "FeedSource",
    "FilterCriteria",
    "apply_filters",
    "filter_and_sort",
    "sort_articles",
    "DEFAULT_PAGE_SIZE",
    "page_articles",
]
