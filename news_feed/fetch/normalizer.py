"""
Conversion of parsed feed entries into Article records.

feedparser exposes RSS and Atom items through the same dict-like interface,
so one conversion covers both. Publication times are resolved in order:
1. published_parsed / updated_parsed (struct_time in UTC, set by feedparser)
2. the raw published / updated string, as RFC 2822 or ISO 8601
Anything else leaves published_at as None.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
import time
from typing import Any, Mapping

from ..core.types import Article, FeedSource


_SKIP = object()


def to_article(entry: Mapping[str, Any], source: FeedSource) -> Article:
    """Normalize one feed entry and tag it with its source's short name."""
    return Article(
        title=str(entry.get("title") or "").strip(),
        link=str(entry.get("link") or "").strip(),
        source_name=source.short_name,
        published_at=parse_published(entry),
        raw=_raw_fields(entry),
    )


def parse_published(entry: Mapping[str, Any]) -> datetime | None:
    """Resolve an entry's publication time as an aware UTC datetime."""
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if isinstance(parsed, time.struct_time):
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except ValueError:
                continue

    for key in ("published", "updated", "pubDate", "isoDate"):
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            parsed_dt = parse_datetime_text(value)
            if parsed_dt is not None:
                return parsed_dt
    return None


def parse_datetime_text(value: str) -> datetime | None:
    """Parse an RFC 2822 or ISO 8601 timestamp; naive values are taken as UTC."""
    text = value.strip()
    result: datetime | None = None
    try:
        result = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        result = None

    if result is None:
        try:
            result = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result.astimezone(timezone.utc)


def _raw_fields(entry: Mapping[str, Any]) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for key, value in entry.items():
        if not isinstance(key, str) or key.endswith("_parsed"):
            continue
        safe = _json_safe(value)
        if safe is not _SKIP:
            raw[key] = safe
    return raw


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return _raw_fields(value)
    if isinstance(value, (list, tuple)):
        items = [_json_safe(item) for item in value]
        return [item for item in items if item is not _SKIP]
    return _SKIP
