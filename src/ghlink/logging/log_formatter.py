"""
Log formatters for structured and colored output.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from ..models import utc_timestamp


# Attributes every LogRecord has; anything else was passed via ``extra=``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime', 'taskName'}

# ``extra=`` keys lifted to the top level of structured records.
CONTEXT_FIELDS = ('slug', 'path', 'repository')


class StructuredFormatter(logging.Formatter):
    """
    JSON-lines formatter.

    Context passed as ``extra={'slug': ..., 'path': ...}`` by the registries
    becomes top-level keys, so a log file can be filtered per link.
    Remaining extras are grouped under ``extra``.
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "time": utc_timestamp(created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_FIELDS:
            if key in record.__dict__:
                payload[key] = record.__dict__[key]

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra = {
                key: value for key, value in record.__dict__.items()
                if key not in _RECORD_ATTRIBUTES
                and key not in CONTEXT_FIELDS
                and not key.startswith('_')
            }
            if extra:
                payload["extra"] = extra

        return json.dumps(payload, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the whole line by level."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[2m',       # dim
        logging.INFO: '\033[36m',       # cyan
        logging.WARNING: '\033[33m',    # yellow
        logging.ERROR: '\033[31m',      # red
        logging.CRITICAL: '\033[1;31m', # bold red
    }
    RESET = '\033[0m'

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{self.RESET}" if color else line
