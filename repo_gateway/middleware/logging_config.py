"""
Logging setup for the gateway.

One stderr handler on the root logger. Every record passing through it is
stamped with the current request (id, caller, method, path) by
`RequestContextFilter`, so call sites never pass those as `extra=`.

Output:
    production   one JSON object per line
    otherwise    "12:00:01 INFO     repo_gateway.x [req=ab12 caller=fb-1]: msg"

LOG_LEVEL overrides the level (DEBUG outside production, INFO in production).
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import g, has_request_context, request

# Attributes stamped onto records by RequestContextFilter
REQUEST_FIELDS = ("request_id", "caller", "method", "path", "remote_addr")

# Attributes call sites may still pass via extra=
RESPONSE_FIELDS = ("status", "duration_ms")

_QUIET_LOGGERS = ("urllib3", "werkzeug", "sqlalchemy.engine")


class RequestContextFilter(logging.Filter):
    """Copy the active request's identifiers onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = g.get("request_id")
            record.caller = g.get("caller_identity")
            record.method = request.method
            record.path = request.path
            record.remote_addr = request.remote_addr
        else:
            for name in REQUEST_FIELDS:
                setattr(record, name, getattr(record, name, None))
        return True


def _context(record: logging.LogRecord) -> dict:
    fields = {}
    for name in REQUEST_FIELDS + RESPONSE_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            fields[name] = value
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for the log aggregator."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Single-line console format for development and tests."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        color = self.LEVEL_COLORS.get(record.levelno, "")

        tags = []
        if getattr(record, "request_id", None):
            tags.append(f"req={record.request_id}")
        if getattr(record, "caller", None):
            tags.append(f"caller={record.caller}")
        tag_str = f" [{' '.join(tags)}]" if tags else ""

        duration = getattr(record, "duration_ms", None)
        dur_str = f" ({duration:.0f}ms)" if duration is not None else ""

        line = (
            f"{color}{ts} {record.levelname:<8}{self.RESET} "
            f"{record.name}{tag_str}: {record.getMessage()}{dur_str}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """Install the gateway's root handler; returns that handler."""
    production = not app.debug and not app.testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if production else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if production else ReadableFormatter())
    handler.addFilter(RequestContextFilter())
    handler.setLevel(level)

    root = logging.getLogger()
    # create_app runs more than once under tests
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not app.testing:
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "json" if production else "readable")
    return handler
