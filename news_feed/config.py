"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- SourcesConfig: Location and layout of the feed-source workbook
- FetchConfig: HTTP fetching settings for feed retrieval
- ListingConfig: Pagination settings for the listing endpoint
- FilterConfig: Calendar used for day-granularity date filtering
- ExportConfig: Export workbook settings
- ServerConfig: HTTP server bind settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml

from .errors import ConfigError


@dataclass
class SourcesConfig:
    """Configuration for the feed-source registry.

    Attributes:
        path: Path to the workbook listing feed URLs
        url_column: Header of the column holding feed URLs
        sheet: Sheet index or name to read (0 is the first sheet)
    """

    path: str = "articles.xlsx"
    url_column: str = "RSSLink"
    sheet: int | str = 0


@dataclass
class FetchConfig:
    """Configuration for feed retrieval.

    Attributes:
        timeout_seconds: Upper bound for fetching and parsing one source
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings
        follow_redirects: Whether to follow HTTP redirects
    """

    timeout_seconds: float = 120.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    trust_env: bool = True
    follow_redirects: bool = True


@dataclass
class ListingConfig:
    """Configuration for the paged listing.

    Attributes:
        page_size: Maximum number of articles per page
    """

    page_size: int = 10


@dataclass
class FilterConfig:
    """Configuration for article filtering.

    Attributes:
        timezone: IANA timezone whose calendar days are used for date filters
                  and for the export date column
    """

    timezone: str = "UTC"


@dataclass
class ExportConfig:
    """Configuration for the export workbook.

    Attributes:
        filename: Attachment filename offered to the caller
        sheet_name: Name of the worksheet holding the rows
        date_format: str.format template for the Date column, given the
                     localized datetime as d (e.g. "{d:%Y-%m-%d}")
    """

    filename: str = "articles.xlsx"
    sheet_name: str = "Articles"
    date_format: str = "{d.month}/{d.day}/{d.year}"


@dataclass
class ServerConfig:
    """Configuration for the HTTP server.

    Attributes:
        host: Interface to bind
        port: TCP port; the PORT environment variable takes precedence
    """

    host: str = "0.0.0.0"
    port: int = 5000


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
        log_dir: Directory for the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "news_feed.jsonl"
    log_dir: str = "logs"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    sources: SourcesConfig = field(default_factory=SourcesConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    listing: ListingConfig = field(default_factory=ListingConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        sources=SourcesConfig(**data["sources"]),
        fetch=FetchConfig(**data["fetch"]),
        listing=ListingConfig(**data["listing"]),
        filters=FilterConfig(**data["filters"]),
        export=ExportConfig(**data["export"]),
        server=ServerConfig(**data["server"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_server_port(cfg: ServerConfig) -> int:
    """Get the listening port, preferring the PORT environment variable."""
    env_port = os.getenv("PORT")
    if not env_port:
        return cfg.port
    try:
        return int(env_port)
    except ValueError as exc:
        raise ConfigError(f"PORT must be an integer, got {env_port!r}") from exc
