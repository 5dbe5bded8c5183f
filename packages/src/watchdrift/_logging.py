"""Log formatting and root-logger setup.

Two output formats are supported:

- ``text``: timestamped human-readable lines, the default for an
  operator sitting at a terminal.
- ``json``: one JSON object per line (NDJSON), for runs whose stderr
  is collected by a supervisor or shipped to a log aggregator.

Measurement context is attached with ``extra=`` on the logging call,
e.g. ``logger.info("recorded", extra={"watch": "main", "offset": -3})``.
:class:`JsonFormatter` copies the recognised keys into the JSON object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import Any

from watchdrift._settings import LoggingSettings

_MEGABYTE = 1024 * 1024

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

CONTEXT_FIELDS: tuple[str, ...] = ("watch", "offset", "error_type")
"""Record attributes copied into JSON lines when present."""


class JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects.

    Fields:

    - ``timestamp``: ISO 8601, always UTC
    - ``level``: log level name
    - ``logger``: dotted logger name
    - ``message``: formatted message
    - ``service``: application name
    - ``version``: application version (omitted when empty)
    - any of :data:`CONTEXT_FIELDS` passed through ``extra``
    - ``exception``: formatted traceback, when one is attached

    Args:
        service: Application name included in every line.
        version: Application version string.
    """

    def __init__(
        self,
        *,
        service: str = "",
        version: str = "",
    ) -> None:
        super().__init__()
        self._service = service
        self._version = version

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self._service,
        }

        if self._version:
            entry["version"] = self._version

        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


def configure_logging(
    settings: LoggingSettings,
    *,
    service: str,
    version: str = "",
) -> None:
    """Install handlers on the root logger according to *settings*.

    Existing root handlers are removed first, so calling this twice
    does not duplicate output.  A stderr handler is always present;
    a :class:`~logging.handlers.RotatingFileHandler` is added when
    ``settings.file`` is set.
    """
    root = logging.getLogger()

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if settings.format == "json":
        formatter: logging.Formatter = JsonFormatter(service=service, version=version)
    else:
        formatter = logging.Formatter(_TEXT_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if settings.file is not None:
        file_handler = RotatingFileHandler(
            settings.file,
            maxBytes=settings.max_file_size_mb * _MEGABYTE,
            backupCount=settings.backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(settings.level)
