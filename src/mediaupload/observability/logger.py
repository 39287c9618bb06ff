"""Structured JSON logger for mediaupload.

Every log record is emitted as a single-line JSON object so it can be
consumed by log aggregation pipelines (ELK, Datadog, CloudWatch, etc.)
without additional parsing.

Typical structured output::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "INFO",
     "logger": "mediaupload.upload", "message": "Media saved",
     "op": "save", "index": 0, "file": "a.jpg", "media_id": 5}

The package logs under three names:

* ``mediaupload.transport`` -- network failures of REST requests
* ``mediaupload.upload``    -- rejected files, saved and failed media,
  failing caller callbacks
* ``mediaupload.preload``   -- images that could not be preloaded

Usage::

    from mediaupload.observability import get_logger

    log = get_logger("mediaupload.upload")
    log.info("Media saved", extra={"extra_fields": {"media_id": 5}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    The formatter produces a JSON object with the following guaranteed keys:

    * ``ts`` -- ISO-8601 UTC timestamp
    * ``level`` -- Python log level name (``DEBUG``, ``INFO``, ...)
    * ``logger`` -- Logger name
    * ``message`` -- Formatted log message

    Structured fields passed via ``extra={"extra_fields": {...}}`` (``op``,
    ``index``, ``file``, ``url``, ...) are merged into the top-level JSON
    object.  ``exc_info`` and ``stack_info`` are serialised when present.
    Values JSON cannot encode fall back to ``str()``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        # Callback failures are logged with log.exception().
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str)


# Names that already carry a StructuredFormatter handler.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "mediaupload",
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"mediaupload"``; package modules use
        ``"mediaupload.<area>"``.
    level:
        Minimum log level.  Accepts an ``int`` (e.g. ``logging.INFO``) or a
        case-insensitive string (``"info"``).  Only applied the first time
        a name is configured.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A logger with a :class:`StructuredFormatter` handler attached and
        propagation disabled.  Repeated calls with the same *name* return
        the same logger and do **not** add duplicate handlers.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        resolved_level = (
            logging.getLevelName(level.upper())
            if isinstance(level, str)
            else level
        )
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)

        logger.propagate = False

        _configured_loggers.add(name)

    return logger
