"""
Request-level errors for the news feed pipeline.

Per-source fetch failures are deliberately absent here: they are captured in
``FeedResult.error`` and never raised. Everything below propagates to the
request boundary (HTTP handler or CLI command) and carries a machine-readable
``code`` for the error response.
"""

from __future__ import annotations


class NewsFeedError(Exception):
    """Base class for errors surfaced to the caller."""

    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class SourceConfigError(NewsFeedError):
    """The feed-source workbook is missing, unreadable, or malformed."""

    code = "source_config_error"


class ExportError(NewsFeedError):
    """The export workbook could not be generated or written."""

    code = "export_failed"


class InvalidRequestError(NewsFeedError):
    """Request parameters could not be parsed."""

    code = "invalid_request"


class ConfigError(NewsFeedError):
    """A configuration or environment setting has an unusable value."""

    code = "config_error"
