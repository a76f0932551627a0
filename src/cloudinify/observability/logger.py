"""Structured JSON logger for cloudinify.

Every record is written as one JSON object per line.  Structured fields
go in ``extra={"extra_fields": {...}}`` and are passed through
:func:`cloudinify.utils.redact` before they are serialised, so an
``api_key`` or ``signature`` handed to the logger never reaches the
stream in clear text.

Typical output::

    {"ts": "2026-10-18T12:00:00.123456+00:00", "level": "DEBUG",
     "logger": "cloudinify.transport", "message": "Upload complete",
     "op": "upload", "cloud_name": "demo",
     "mode": "file", "status_code": 200}

Usage::

    from cloudinify.observability import get_logger

    log = get_logger("cloudinify.uploads")
    log.debug("queued", extra={"extra_fields": {"mode": "url"}})
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import IO, Any

from cloudinify.utils.redact import redact

_lock = threading.Lock()


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON line.

    Keys always present: ``ts`` (record creation time, ISO-8601 UTC),
    ``level``, ``logger`` and ``message``.  Redacted ``extra_fields`` are
    merged at the top level; ``exception`` and ``stack_info`` appear when
    the record carries them.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields = getattr(record, "extra_fields", None)
        if isinstance(fields, dict):
            entry.update(redact(fields))

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


def _has_structured_handler(logger: logging.Logger) -> bool:
    return any(isinstance(h.formatter, StructuredFormatter) for h in logger.handlers)


def get_logger(
    name: str = "cloudinify",
    *,
    level: int | str = logging.DEBUG,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return the logger *name* with a JSON handler attached.

    The handler (writing to *stream*, ``sys.stderr`` by default) and
    *level* are applied the first time a name is seen.  Later calls
    return the same logger untouched.  Records do not propagate to the
    root logger.
    """
    logger = logging.getLogger(name)
    with _lock:
        if _has_structured_handler(logger):
            return logger
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
        logger.setLevel(level)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger
