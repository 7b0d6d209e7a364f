"""
Command-line interface for the news feed aggregator.

Uses Typer to provide commands for serving the HTTP API and for running the
listing and export pipelines directly. Loads a .env file on start-up so PORT
and other settings can live there.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import NoReturn

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.table import Table

from . import pipeline
from .config import AppConfig, load_config
from .core.types import FilterCriteria
from .errors import NewsFeedError
from .exporter import save_workbook
from .logging_utils import setup_logging
from .server import run_server

app = typer.Typer(add_completion=False)
console = Console()

DATE_FORMATS = ["%Y-%m-%d"]


def _prepare(config: Path | None, log_level: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging)
    return cfg


def _criteria(
    start: datetime | None,
    end: datetime | None,
    source: str | None,
    page: int = 1,
) -> FilterCriteria:
    return FilterCriteria(
        start_date=start.date() if start else None,
        end_date=end.date() if end else None,
        source_name=source or None,
        page_number=page if page >= 1 else 1,
    )


def _fail(exc: NewsFeedError) -> NoReturn:
    console.print(f"[red]{exc.code}[/red]: {exc.message}")
    raise typer.Exit(code=1)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: $PORT or config)."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Serve the HTTP API."""
    cfg = _prepare(config, log_level)
    try:
        run_server(cfg, host=host, port=port)
    except NewsFeedError as exc:
        _fail(exc)


@app.command()
def sources(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Print the configured source short names."""
    cfg = _prepare(config, log_level)
    try:
        names = pipeline.source_names(cfg)
    except NewsFeedError as exc:
        _fail(exc)
    for name in names:
        console.print(name)


@app.command()
def articles(
    start: datetime | None = typer.Option(None, "--start", formats=DATE_FORMATS),
    end: datetime | None = typer.Option(None, "--end", formats=DATE_FORMATS),
    source: str | None = typer.Option(None, "--source", "-s", help="Source name substring."),
    page: int = typer.Option(1, "--page", help="1-based page number."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Print one page of aggregated articles, newest first."""
    cfg = _prepare(config, log_level)
    criteria = _criteria(start, end, source, page)
    try:
        page_items = asyncio.run(pipeline.list_articles(cfg, criteria))
    except NewsFeedError as exc:
        _fail(exc)

    table = Table(title=f"Articles (page {criteria.page_number})")
    table.add_column("Published")
    table.add_column("Source")
    table.add_column("Title")
    table.add_column("Link", overflow="fold")
    for item in page_items:
        table.add_row(item.iso_date or "-", item.source_name, item.title, item.link)
    console.print(table)


@app.command()
def export(
    start: datetime | None = typer.Option(None, "--start", formats=DATE_FORMATS),
    end: datetime | None = typer.Option(None, "--end", formats=DATE_FORMATS),
    source: str | None = typer.Option(None, "--source", "-s", help="Source name substring."),
    output: Path = typer.Option(Path("downloads/articles.xlsx"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Write every matching article to an xlsx workbook."""
    cfg = _prepare(config, log_level)
    criteria = _criteria(start, end, source)
    try:
        rows = asyncio.run(pipeline.export_rows(cfg, criteria))
        save_workbook(rows, output, cfg.export)
    except NewsFeedError as exc:
        _fail(exc)
    console.print(f"Exported {len(rows)} articles to {output}")


if __name__ == "__main__":
    app()
