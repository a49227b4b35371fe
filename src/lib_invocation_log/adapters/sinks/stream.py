"""Record sinks.

Contents
--------
* :class:`StandardStreamSink` – prints to standard output, or standard error for
  failed invocations. Streams are looked up on every write so redirection
  (``contextlib.redirect_stdout``, pytest's ``capsys``) is honoured.
* :class:`LoggerSink` – forwards the rendered line to a :mod:`logging` logger at
  the record's severity, for hosts that route everything through handlers.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from ...domain.severity import Severity
from ...observability import get_record_logger


class StandardStreamSink:
    """Write one line per record to ``sys.stdout`` / ``sys.stderr``."""

    def __init__(self, *, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self._stdout = stdout
        self._stderr = stderr

    def emit(self, line: str, *, severity: Severity, failed: bool) -> None:
        if failed:
            stream = self._stderr or sys.stderr
        else:
            stream = self._stdout or sys.stdout
        stream.write(line + "\n")
        stream.flush()


class LoggerSink:
    """Send each record through *logger* as a pre-rendered message."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_record_logger()

    def emit(self, line: str, *, severity: Severity, failed: bool) -> None:
        level = severity.python_level
        if level is None:
            return
        self._logger.log(level, line)
