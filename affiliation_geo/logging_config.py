"""
Logging setup for the CLI and the HTTP service.
Production writes one JSON object per record, development writes readable
lines. Both go to stderr so CLI output on stdout stays machine-parseable.
"""

from __future__ import annotations

import logging
import sys

import json_log_formatter

from affiliation_geo.config import get_settings

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class ResolverJSONFormatter(json_log_formatter.JSONFormatter):
    """JSONFormatter that also records level and logger name."""

    def json_record(self, message: str, extra: dict, record: logging.LogRecord) -> dict:
        extra = super().json_record(message, extra, record)
        extra["level"] = record.levelname
        extra["logger"] = record.name
        return extra


def setup_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.env == "production":
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ResolverJSONFormatter())
        root = logging.getLogger()
        root.setLevel(level)
        root.handlers = [handler]
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
            handlers=[logging.StreamHandler(sys.stderr)],
        )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
