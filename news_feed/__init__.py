"""
News Feed - aggregate syndication feeds into one filterable view.

This package reads a list of feed URLs from a spreadsheet, fetches every feed
concurrently, and serves the merged articles filtered by date range and source,
either one page at a time or as an xlsx export.

Main entry point is the CLI via `news-feed serve`.

Example:
    $ news-feed serve --config config.yaml
"""

__all__ = [
    "__version__",
    "Article",
    "FeedSource",
    "FilterCriteria",
    "aggregate",
    "filter_and_sort",
    "page_articles",
]
__version__ = "0.1.0"

from .aggregator import aggregate
from .core.filters import filter_and_sort
from .core.pager import page_articles
from .core.types import Article, FeedSource, FilterCriteria
