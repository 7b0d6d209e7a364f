from __future__ import annotations

from typing import Sequence

from .types import Article


DEFAULT_PAGE_SIZE = 10


def page_articles(
    articles: Sequence[Article],
    page_number: int | None = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[Article]:
    """Return the 1-based page of an already sorted sequence.

    A missing or non-positive page number means page 1. Pages past the end
    are empty.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if not page_number or page_number < 1:
        page_number = 1
    start = (page_number - 1) * page_size
    return list(articles[start:start + page_size])
