"""
server.py - HTTP API for the news feed aggregator

Endpoints:
- GET /api/sourceNames        (de-duplicated source short names)
- GET /api/articles           (one page of filtered articles, newest first)
- GET /api/downloadArticles   (all filtered articles as an xlsx attachment)

Query parameters for articles/downloadArticles: startDate, endDate (YYYY-MM-DD),
sourceName (case-insensitive substring) and, for articles only, pageNumber.
"""

from __future__ import annotations

from datetime import date, datetime
import logging
from typing import Mapping, Optional

from aiohttp import web

from . import pipeline
from .config import AppConfig, get_server_port
from .core.types import FilterCriteria
from .errors import ExportError, InvalidRequestError, NewsFeedError, SourceConfigError


logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", AppConfig)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _parse_date(name: str, value: Optional[str]) -> Optional[date]:
    """
    Supported:
    - None/empty: absent
    - Date: "2024-01-31"
    - ISO8601 timestamp: "2024-01-31T10:30:00Z" (truncated to its date)
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as exc:
        raise InvalidRequestError(f"Invalid {name}: {value!r}") from exc


def _parse_page_number(value: Optional[str]) -> int:
    if not value or not value.strip():
        return 1
    try:
        number = int(value.strip())
    except ValueError as exc:
        raise InvalidRequestError(f"Invalid pageNumber: {value!r}") from exc
    return number if number >= 1 else 1


def parse_criteria(query: Mapping[str, str]) -> FilterCriteria:
    """Build FilterCriteria from request query parameters."""
    source_name = (query.get("sourceName") or "").strip() or None
    return FilterCriteria(
        start_date=_parse_date("startDate", query.get("startDate")),
        end_date=_parse_date("endDate", query.get("endDate")),
        source_name=source_name,
        page_number=_parse_page_number(query.get("pageNumber")),
    )


def _error_response(exc: NewsFeedError, status: int) -> web.Response:
    return web.json_response(exc.to_dict(), status=status, headers=CORS_HEADERS)


async def handle_options(request: web.Request) -> web.Response:
    return web.Response(headers=CORS_HEADERS)


async def get_source_names(request: web.Request) -> web.Response:
    cfg = request.app[CONFIG_KEY]
    try:
        names = pipeline.source_names(cfg)
    except SourceConfigError as exc:
        logger.error("Error fetching feed source names: %s", exc)
        return _error_response(exc, 500)
    except Exception:
        logger.exception("Error fetching feed source names")
        return _error_response(NewsFeedError("Error fetching feed source names"), 500)
    logger.info("Fetched %d feed source names", len(names))
    return web.json_response(names, headers=CORS_HEADERS)


async def get_articles(request: web.Request) -> web.Response:
    cfg = request.app[CONFIG_KEY]
    try:
        criteria = parse_criteria(request.query)
        page = await pipeline.list_articles(cfg, criteria)
    except InvalidRequestError as exc:
        return _error_response(exc, 400)
    except SourceConfigError as exc:
        logger.error("Error fetching articles: %s", exc)
        return _error_response(exc, 500)
    except Exception:
        logger.exception("Error fetching articles")
        return _error_response(NewsFeedError("Error fetching articles"), 500)
    return web.json_response([a.to_dict() for a in page], headers=CORS_HEADERS)


async def download_articles(request: web.Request) -> web.Response:
    cfg = request.app[CONFIG_KEY]
    try:
        criteria = parse_criteria(request.query)
        body = await pipeline.export_articles(cfg, criteria)
    except InvalidRequestError as exc:
        return _error_response(exc, 400)
    except SourceConfigError as exc:
        logger.error("Error fetching articles for download: %s", exc)
        return _error_response(exc, 500)
    except ExportError as exc:
        logger.error("Error creating download file: %s", exc)
        return _error_response(exc, 500)
    except Exception:
        logger.exception("Error fetching articles for download")
        return _error_response(NewsFeedError("Error fetching articles for download"), 500)

    headers = dict(CORS_HEADERS)
    headers["Content-Disposition"] = f'attachment; filename="{cfg.export.filename}"'
    return web.Response(body=body, content_type=XLSX_CONTENT_TYPE, headers=headers)


def create_app(cfg: AppConfig) -> web.Application:
    app = web.Application()
    app[CONFIG_KEY] = cfg

    app.router.add_get("/api/sourceNames", get_source_names)
    app.router.add_get("/api/articles", get_articles)
    app.router.add_get("/api/downloadArticles", download_articles)

    # CORS preflight (generic)
    app.router.add_options("/api/{path:.*}", handle_options)
    return app


def run_server(cfg: AppConfig, host: str | None = None, port: int | None = None) -> None:
    bind_host = host or cfg.server.host
    bind_port = port or get_server_port(cfg.server)
    logger.info("Server is running on http://%s:%s", bind_host, bind_port)
    web.run_app(create_app(cfg), host=bind_host, port=bind_port, print=None)
