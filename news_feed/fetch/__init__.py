"""
Feed retrieval and normalization.

This package downloads feed documents, parses them and converts their
entries into Article records.
"""

from .fetcher import FeedParseError, FeedResult, build_client, fetch_feed, parse_feed
from .normalizer import parse_datetime_text, parse_published, to_article

__all__ = [
    "FeedParseError",
    "FeedResult",
    "build_client",
    "fetch_feed",
    "parse_feed",
    "parse_datetime_text",
    "parse_published",
    "to_article",
]
