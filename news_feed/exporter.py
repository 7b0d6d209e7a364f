"""
Tabular export of filtered articles.

Articles are projected to (Date, Article, Source) rows and written as an
xlsx workbook through pandas with the openpyxl engine.
"""

from __future__ import annotations

from datetime import tzinfo
from io import BytesIO
import logging
from pathlib import Path
from typing import IO, Iterable, Sequence
from zoneinfo import ZoneInfo

import pandas as pd

from .config import ExportConfig
from .core.types import Article, ExportRow
from .errors import ExportError
from .logging_utils import log_event


logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ("Date", "Article", "Source")


def to_export_rows(
    articles: Iterable[Article],
    tz: tzinfo | str = "UTC",
    date_format: str = "{d.month}/{d.day}/{d.year}",
) -> list[ExportRow]:
    """Project articles to export rows, keeping their order.

    The date is rendered in the given timezone through a str.format template
    receiving the datetime as d, so the default gives "1/25/2024" and
    "{d:%Y-%m-%d}" gives "2024-01-25". Undated articles get an empty Date cell.
    """
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    rows: list[ExportRow] = []
    for article in articles:
        if article.published_at is None:
            date_text = ""
        else:
            date_text = date_format.format(d=article.published_at.astimezone(zone))
        rows.append(ExportRow(date=date_text, article=article.link, source=article.source_name))
    return rows


def rows_to_frame(rows: Sequence[ExportRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [(row.date, row.article, row.source) for row in rows],
        columns=list(EXPORT_COLUMNS),
    )


def write_workbook(
    rows: Sequence[ExportRow],
    target: str | Path | IO[bytes],
    sheet_name: str = "Articles",
) -> None:
    """Write rows to an xlsx file path or binary buffer.

    Raises:
        ExportError: If the workbook cannot be generated or written
    """
    try:
        rows_to_frame(rows).to_excel(target, sheet_name=sheet_name, index=False, engine="openpyxl")
    except Exception as exc:  # noqa: BLE001
        raise ExportError(f"Could not write export workbook: {exc}") from exc


def render_workbook(rows: Sequence[ExportRow], cfg: ExportConfig) -> bytes:
    """Render rows to xlsx bytes for an HTTP attachment."""
    buffer = BytesIO()
    write_workbook(rows, buffer, sheet_name=cfg.sheet_name)
    data = buffer.getvalue()
    log_event(
        logger,
        f"Export workbook rendered with {len(rows)} rows",
        event="export_written",
        rows=len(rows),
        size=len(data),
    )
    return data


def save_workbook(rows: Sequence[ExportRow], path: Path, cfg: ExportConfig) -> Path:
    """Write rows to an xlsx file, creating parent directories as needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExportError(f"Could not create export directory {path.parent}: {exc}") from exc
    write_workbook(rows, path, sheet_name=cfg.sheet_name)
    log_event(
        logger,
        f"Export workbook written to {path}",
        event="export_written",
        rows=len(rows),
        path=str(path),
    )
    return path
