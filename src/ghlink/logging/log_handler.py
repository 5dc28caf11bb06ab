"""
Log handlers used by the ghlink logging setup.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, TextIO


class RotatingFileHandler(logging.handlers.RotatingFileHandler):
    """
    Rotating file handler that creates its parent directory and counts
    the records it writes.
    """

    def __init__(
        self,
        filename: str,
        maxBytes: int = 0,
        backupCount: int = 0,
        encoding: Optional[str] = 'utf-8'
    ):
        Path(filename).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(filename, maxBytes=maxBytes, backupCount=backupCount, encoding=encoding)
        self.records_written = 0

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        self.records_written += 1


class ConsoleHandler(logging.StreamHandler):
    """
    Console handler bound to whatever ``sys.stderr`` is at emit time.

    Binding late keeps log output working when stderr is swapped after
    logging has been configured (click's test runner does this).
    """

    def __init__(self, stream: Optional[TextIO] = None):
        logging.Handler.__init__(self)
        self._fixed_stream = stream
        self.records_written = 0

    @property
    def stream(self) -> TextIO:
        return self._fixed_stream if self._fixed_stream is not None else sys.stderr

    @stream.setter
    def stream(self, value: Optional[TextIO]) -> None:
        self._fixed_stream = value

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        self.records_written += 1

    def is_tty(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())
